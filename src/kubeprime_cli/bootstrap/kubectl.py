"""Kubernetes access through the kubectl binary.

This module wraps the handful of kubectl calls the bootstrap workflow needs:
namespaces, deployments, services, config maps, service accounts and cluster
role bindings.
"""

from __future__ import annotations

import json
import subprocess
from typing import Any

from ..errors import CommandError
from ..shared.logging import get_logger

logger = get_logger(__name__)

KUBECTL_INSTALL_HINT = "kubectl not found. Install kubectl: https://kubernetes.io/docs/tasks/tools/"


def ready_replicas(deployment: dict[str, Any] | None) -> int:
    """Number of ready pods reported by a deployment document."""
    if not deployment:
        return 0
    return int((deployment.get("status") or {}).get("readyReplicas") or 0)


def deployment_is_ready(deployment: dict[str, Any] | None) -> bool:
    """True when every desired replica is ready (and at least one is)."""
    if not deployment:
        return False
    desired = (deployment.get("spec") or {}).get("replicas")
    desired = 1 if desired is None else int(desired)
    ready = ready_replicas(deployment)
    return ready > 0 and ready >= desired


def load_balancer_address(service: dict[str, Any] | None) -> str:
    """External IP (or hostname) assigned to a LoadBalancer service."""
    if not service:
        return ""
    ingress = ((service.get("status") or {}).get("loadBalancer") or {}).get("ingress") or []
    for entry in ingress:
        if entry.get("ip"):
            return entry["ip"]
    for entry in ingress:
        if entry.get("hostname"):
            return entry["hostname"]
    return ""


class KubectlClient:
    """Run kubectl against the configured cluster."""

    def __init__(self, kubeconfig: str | None = None, timeout_seconds: int = 60):
        """Initialize client.

        Args:
            kubeconfig: Path to kubeconfig file.
            timeout_seconds: Timeout for each kubectl invocation.
        """
        self.kubeconfig = kubeconfig
        self.timeout_seconds = timeout_seconds

    def _kubectl_cmd(self) -> list[str]:
        """Build base kubectl command."""
        cmd = ["kubectl"]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])
        return cmd

    def run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a kubectl command.

        Args:
            args: Arguments after the kubectl binary.
            check: Raise CommandError on a non-zero exit status.

        Returns:
            The completed process.
        """
        cmd = self._kubectl_cmd() + args
        logger.debug("running kubectl", args=args)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as e:
            raise CommandError(command=cmd, hint=KUBECTL_INSTALL_HINT, retryable=False) from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(command=cmd, stderr="kubectl not responding (timeout)") from e

        if check and result.returncode != 0:
            raise CommandError(command=cmd, stderr=result.stderr or "")
        return result

    def get_json(self, kind: str, name: str, namespace: str | None = None) -> dict[str, Any] | None:
        """Fetch one resource as JSON.

        Returns:
            The resource document, or None when it does not exist.
        """
        args = ["get", kind, name, "-o", "json"]
        if namespace:
            args = ["-n", namespace] + args
        result = self.run(args, check=False)
        if result.returncode != 0:
            if "NotFound" in (result.stderr or "") or "not found" in (result.stderr or ""):
                return None
            raise CommandError(command=self._kubectl_cmd() + args, stderr=result.stderr or "")
        return json.loads(result.stdout or "{}")

    def namespace_exists(self, name: str) -> bool:
        return self.get_json("namespace", name) is not None

    def ensure_namespace(self, name: str, labels: dict[str, str] | None = None) -> bool:
        """Create a namespace if absent and apply labels.

        Returns:
            True if the namespace was created.
        """
        created = False
        if not self.namespace_exists(name):
            result = self.run(["create", "namespace", name], check=False)
            if result.returncode != 0 and "AlreadyExists" not in (result.stderr or ""):
                raise CommandError(
                    command=self._kubectl_cmd() + ["create", "namespace", name],
                    stderr=result.stderr or "",
                )
            created = result.returncode == 0
        if labels:
            pairs = [f"{key}={value}" for key, value in labels.items()]
            self.run(["label", "namespace", name, *pairs, "--overwrite"])
        return created

    def get_deployment(self, name: str, namespace: str) -> dict[str, Any] | None:
        return self.get_json("deployment", name, namespace)

    def deployment_pod_count(self, name: str, namespace: str) -> int:
        """Ready pod count of a deployment; 0 when it does not exist."""
        return ready_replicas(self.get_deployment(name, namespace))

    def get_service(self, name: str, namespace: str) -> dict[str, Any] | None:
        return self.get_json("service", name, namespace)

    def service_address(self, name: str, namespace: str) -> str:
        return load_balancer_address(self.get_service(name, namespace))

    def get_config_map_data(self, name: str, namespace: str) -> dict[str, str]:
        config_map = self.get_json("configmap", name, namespace)
        if not config_map:
            return {}
        return config_map.get("data") or {}

    def cluster_role_binding_exists(self, name: str) -> bool:
        return self.get_json("clusterrolebinding", name) is not None

    def create_cluster_role_binding(
        self,
        name: str,
        cluster_role: str,
        user: str | None = None,
        service_account: str | None = None,
    ) -> bool:
        """Create a cluster role binding for a user or a service account.

        Returns:
            True if created, False if it already existed.
        """
        args = ["create", "clusterrolebinding", name, f"--clusterrole={cluster_role}"]
        if user:
            args.append(f"--user={user}")
        if service_account:
            args.append(f"--serviceaccount={service_account}")
        result = self.run(args, check=False)
        if result.returncode == 0:
            return True
        if "AlreadyExists" in (result.stderr or ""):
            return False
        raise CommandError(command=self._kubectl_cmd() + args, stderr=result.stderr or "")

    def ensure_service_account(self, name: str, namespace: str) -> None:
        if self.get_json("serviceaccount", name, namespace) is not None:
            return
        args = ["-n", namespace, "create", "serviceaccount", name]
        result = self.run(args, check=False)
        if result.returncode != 0 and "AlreadyExists" not in (result.stderr or ""):
            raise CommandError(command=self._kubectl_cmd() + args, stderr=result.stderr or "")

    def current_context(self) -> str:
        """Name of the current context, or "" if kubectl has none."""
        result = self.run(["config", "current-context"], check=False)
        if result.returncode != 0:
            return ""
        return result.stdout.strip()
