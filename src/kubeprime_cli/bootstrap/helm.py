"""Helm package-manager runtime.

This module initializes helm (client-only, with a tiller, or helm3) and
installs charts from ChartInstallOptions.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..errors import CommandError
from ..shared.logging import get_logger

if TYPE_CHECKING:
    from .cluster_config import ClusterConfig
    from .kubectl import KubectlClient

logger = get_logger(__name__)

TILLER_SERVICE_ACCOUNT = "tiller"
HELM_INSTALL_HINT = "helm not found. Install helm: https://helm.sh/docs/intro/install/"

# Chart repositories every install needs
DEFAULT_CHART_REPOSITORIES = {
    "stable": "https://charts.helm.sh/stable",
}


@dataclass
class ChartInstallOptions:
    """Parameters of one chart installation."""

    chart: str
    release_name: str
    namespace: str
    version: str = ""
    set_values: list[str] = field(default_factory=list)
    values_files: list[str] = field(default_factory=list)
    helm_update: bool = True


def helm_binary(helm3: bool, helm_bin: str = "") -> str:
    """Name of the helm binary to run."""
    if helm3:
        return "helm3"
    return helm_bin or "helm"


class HelmClient:
    """Run helm commands."""

    def __init__(
        self,
        binary: str = "helm",
        helm3: bool = False,
        repositories: dict[str, str] | None = None,
        timeout_seconds: int = 600,
    ):
        """Initialize client.

        Args:
            binary: helm executable name or path.
            helm3: Use helm3 command syntax (no tiller, no init).
            repositories: Chart repositories to add during init.
            timeout_seconds: Timeout for each helm invocation.
        """
        self.binary = binary
        self.helm3 = helm3
        self.repositories = DEFAULT_CHART_REPOSITORIES if repositories is None else repositories
        self.timeout_seconds = timeout_seconds

    def run(self, args: list[str]) -> str:
        """Run helm and return its stdout.

        Raises:
            CommandError: On a missing binary, a timeout or a non-zero exit.
        """
        cmd = [self.binary] + args
        logger.debug("running helm", args=args)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as e:
            raise CommandError(command=cmd, hint=HELM_INSTALL_HINT, retryable=False) from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(command=cmd, stderr="helm not responding (timeout)") from e

        if result.returncode != 0:
            raise CommandError(command=cmd, stderr=result.stderr or "")
        return result.stdout

    def init(self, config: ClusterConfig, kubectl: KubectlClient) -> None:
        """Initialize helm for the finalized cluster configuration.

        helm3 needs no init; helm2 runs client-only unless a tiller is set up,
        in which case the tiller service account and its cluster role binding
        are created first.
        """
        if self.helm3:
            logger.info("helm3 in use, skipping helm init")
        elif config.helm_client_only or config.skip_tiller:
            self.run(["init", "--client-only"])
        else:
            tiller_namespace = config.tiller_namespace if config.global_tiller else config.namespace
            kubectl.ensure_service_account(TILLER_SERVICE_ACCOUNT, tiller_namespace)
            kubectl.create_cluster_role_binding(
                f"{TILLER_SERVICE_ACCOUNT}-{tiller_namespace}",
                config.tiller_cluster_role,
                service_account=f"{tiller_namespace}:{TILLER_SERVICE_ACCOUNT}",
            )
            self.run(
                [
                    "init",
                    "--service-account",
                    TILLER_SERVICE_ACCOUNT,
                    "--tiller-namespace",
                    tiller_namespace,
                    "--upgrade",
                    "--wait",
                ]
            )

        for name, url in self.repositories.items():
            self.run(["repo", "add", name, url])
        if self.repositories:
            self.run(["repo", "update"])

    def install_args(self, options: ChartInstallOptions) -> list[str]:
        """Build the helm arguments for a chart installation."""
        if options.helm_update:
            args = ["upgrade", "--install", options.release_name, options.chart]
        elif self.helm3:
            args = ["install", options.release_name, options.chart]
        else:
            args = ["install", "--name", options.release_name, options.chart]

        args.extend(["--namespace", options.namespace])
        if options.version:
            args.extend(["--version", options.version])
        for value in options.set_values:
            args.extend(["--set", value])
        for values_file in options.values_files:
            args.extend(["--values", values_file])
        return args

    def install_chart(self, options: ChartInstallOptions) -> None:
        logger.info(
            "installing chart",
            chart=options.chart,
            release=options.release_name,
            namespace=options.namespace,
            version=options.version or "latest",
        )
        self.run(self.install_args(options))
