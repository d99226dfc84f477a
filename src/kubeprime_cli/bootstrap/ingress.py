"""Ingress controller provisioning.

Ensures the ingress namespace, detects an existing controller or installs the
nginx-ingress chart, waits for it to become ready, works out the external IP
and resolves the domain:

    Start -> NamespaceEnsured -> {Skipped | ControllerPresent | ControllerInstalling}
          -> DeploymentReady -> ExternalIPResolved -> DomainResolved -> Done
"""

from __future__ import annotations

import os
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

import click

from ..errors import CommandError, KubeprimeError, ValidationError
from ..kubeconfig import KubeConfig
from ..prompts import Prompter
from ..retry import RetryPolicy, retry
from ..shared.logging import get_logger
from .cluster_config import ClusterConfig
from .domain import DomainResolver
from .helm import ChartInstallOptions, HelmClient
from .kubectl import KubectlClient
from .providers import DEFAULT_INGRESS_SERVICE
from .versions import VersionStream
from .waits import ClusterWaiter

logger = get_logger(__name__)

INGRESS_CHART = "stable/nginx-ingress"
INGRESS_RELEASE = "jxing"
INGRESS_NAMESPACE_LABELS = {"jenkins.io/kind": "ingress"}
MY_VALUES_FILE = "myvalues.yaml"

# First attempt plus three retries, one second apart
CHART_INSTALL_POLICY = RetryPolicy(max_attempts=4, delay_seconds=1)


@dataclass
class IngressState:
    """What provisioning found and did; never persisted."""

    controller_present: bool = False
    installed: bool = False
    deployment_ready: bool = False
    external_ip: str | None = None
    domain: str | None = None
    skipped: bool = False


class IngressProvisioner:
    """Provision the ingress controller for a finalized cluster configuration."""

    def __init__(
        self,
        kubectl: KubectlClient,
        helm: HelmClient,
        waiter: ClusterWaiter,
        domain_resolver: DomainResolver,
        prompter: Prompter,
        versions: VersionStream,
        load_kubeconfig: Callable[[], KubeConfig],
        echo: Callable[[str], None] = click.echo,
        sleep: Callable[[float], None] = time.sleep,
        workdir: Path | None = None,
    ):
        self.kubectl = kubectl
        self.helm = helm
        self.waiter = waiter
        self.domain_resolver = domain_resolver
        self.prompter = prompter
        self.versions = versions
        self.load_kubeconfig = load_kubeconfig
        self.echo = echo
        self.sleep = sleep
        self.workdir = workdir or Path.cwd()

    def provision(self, config: ClusterConfig, requested_domain: str | None = None) -> IngressState:
        """Run the provisioning sequence.

        Args:
            config: Finalized cluster configuration.
            requested_domain: Domain collected after finalization (external DNS).

        Returns:
            IngressState; domain is set whenever the sequence reaches domain resolution.

        Raises:
            KubeprimeError: On namespace failure, wait timeouts or domain failure.
        """
        state = IngressState()
        namespace = config.ingress_namespace
        domain = requested_domain or config.domain

        self.ensure_namespace(namespace)

        if config.profile.skip_ingress:
            self.echo(
                "Not installing ingress as the platform uses Routes and its own ingress mechanism"
            )
            state.skipped = True
            state.domain = domain or None
            return state

        if self.controller_pod_count(config) > 0:
            self.echo("existing ingress controller found, no need to install a new one")
            state.controller_present = True
            state.deployment_ready = True
        else:
            if not self.should_install(config):
                self.echo("Not installing an ingress controller")
                return state
            state.installed = self.install_controller(config)
            self.waiter.wait_for_deployment_ready(config.ingress_deployment, namespace)
            state.deployment_ready = True

        if config.profile.load_balancer_note:
            self.echo(config.profile.load_balancer_note)

        state.external_ip = self.resolve_external_ip(config)
        state.domain = self.domain_resolver.resolve(
            domain, config.profile.provider, state.external_ip
        )

        self.echo("nginx ingress controller installed and configured")
        return state

    def ensure_namespace(self, namespace: str) -> None:
        try:
            self.kubectl.ensure_namespace(namespace, INGRESS_NAMESPACE_LABELS)
        except CommandError as e:
            raise KubeprimeError(
                f"Failed to ensure the ingress namespace {namespace} is created: {e.message}",
                hint="Is this an RBAC issue on your cluster?",
            ) from e

    def controller_pod_count(self, config: ClusterConfig) -> int:
        try:
            return self.kubectl.deployment_pod_count(
                config.ingress_deployment, config.ingress_namespace
            )
        except CommandError as e:
            logger.warning(
                "could not read ingress deployment",
                deployment=config.ingress_deployment,
                error=str(e),
            )
            return 0

    def should_install(self, config: ClusterConfig) -> bool:
        namespace = config.ingress_namespace
        if config.batch_mode:
            return True
        if config.advanced_mode:
            return self.prompter.confirm(
                f"No existing ingress controller found in the {namespace} namespace, "
                "shall we install one?",
                default=True,
            )
        self.echo(f"No existing ingress controller found in the {namespace} namespace, installing one")
        return True

    def chart_options(self, config: ClusterConfig, values_files: list[str]) -> ChartInstallOptions:
        namespace = config.ingress_namespace
        return ChartInstallOptions(
            chart=INGRESS_CHART,
            release_name=INGRESS_RELEASE,
            namespace=namespace,
            version=self.versions.chart_version(INGRESS_CHART),
            set_values=[
                "rbac.create=true",
                f"controller.extraArgs.publish-service={namespace}/{DEFAULT_INGRESS_SERVICE}",
            ],
            values_files=values_files,
            helm_update=True,
        )

    def install_controller(self, config: ClusterConfig) -> bool:
        """Install the ingress chart.

        A failed install is logged and the workflow continues: the controller
        can still be installed by the operator while we wait for it.

        Returns:
            True if the chart installed.
        """
        values_files: list[str] = []
        my_values = self.workdir / MY_VALUES_FILE
        if my_values.exists():
            values_files.append(str(my_values))

        provider_values: str | None = None
        if config.profile.ingress_values_yaml:
            fd, provider_values = tempfile.mkstemp(prefix="ing-values-", suffix=".yaml")
            with os.fdopen(fd, "w") as f:
                f.write(config.profile.ingress_values_yaml)
            self.echo(f"Using helm values file: {provider_values}")
            values_files.append(provider_values)

        try:
            options = self.chart_options(config, values_files)
            retry(
                CHART_INSTALL_POLICY,
                lambda: self.helm.install_chart(options),
                description="install ingress chart",
                sleep=self.sleep,
            )
            return True
        except CommandError as e:
            logger.error("Failed to install ingress chart", chart=INGRESS_CHART, error=str(e))
            return False
        finally:
            if provider_values:
                Path(provider_values).unlink(missing_ok=True)

    def api_server_host(self) -> str:
        """Host of the current context's API server, or "" when none is configured.

        Raises:
            ValidationError: If the server URL has no parsable host.
        """
        server = self.load_kubeconfig().current_server()
        if not server:
            logger.warning("No API server host is defined in the local kube config!")
            return ""
        try:
            host = urlparse(server).hostname
        except ValueError:
            host = None
        if not host:
            raise ValidationError(
                f"Could not parse Kubernetes master URI: {server}",
                hint="Try specifying the external IP address directly via: --external-ip",
            )
        return host

    def resolve_external_ip(self, config: ClusterConfig) -> str:
        external_ip = config.external_ip
        if not external_ip and config.on_premise:
            external_ip = self.api_server_host()

        if external_ip:
            self.echo(f"Using external IP: {click.style(external_ip, fg='cyan')}")
            return external_ip

        service = config.ingress_service
        namespace = config.ingress_namespace
        self.echo(
            f"Waiting for external loadbalancer to be created and update the {service} "
            f"service in {namespace} namespace"
        )
        address = self.waiter.wait_for_external_ip(service, namespace)
        self.echo("External loadbalancer created")
        return address
