"""Cloud provider lookups needed by the bootstrap workflow.

Only the IBM Kubernetes Service cluster id is needed: it names the ingress
controller the vendor injects into the cluster.
"""

from __future__ import annotations

import json
import subprocess

from ..errors import CommandError, KubeprimeError
from ..shared.logging import get_logger
from .kubectl import KubectlClient

logger = get_logger(__name__)

CLUSTER_INFO_CONFIG_MAP = "cluster-info"
CLUSTER_INFO_NAMESPACE = "kube-system"
CLUSTER_CONFIG_KEY = "cluster-config.json"


def kube_cluster_id(kubectl: KubectlClient) -> str:
    """Cluster id published inside the cluster, or "" if absent."""
    try:
        data = kubectl.get_config_map_data(CLUSTER_INFO_CONFIG_MAP, CLUSTER_INFO_NAMESPACE)
    except CommandError as e:
        logger.debug("cluster-info config map unavailable", error=str(e))
        return ""
    raw = data.get(CLUSTER_CONFIG_KEY)
    if not raw:
        return ""
    try:
        return str(json.loads(raw).get("cluster_id") or "")
    except (json.JSONDecodeError, AttributeError):
        return ""


def ibmcloud_cluster_id(cluster_name: str) -> str:
    """Ask the ibmcloud CLI for the id of a cluster.

    Raises:
        CommandError: If ibmcloud is missing or fails.
        KubeprimeError: If the response carries no id.
    """
    cmd = ["ibmcloud", "ks", "cluster", "get", "--cluster", cluster_name, "--output", "json"]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    except FileNotFoundError as e:
        raise CommandError(
            command=cmd,
            hint="ibmcloud not found. Install the IBM Cloud CLI or check your kube context",
            retryable=False,
        ) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(command=cmd, stderr="ibmcloud not responding (timeout)") from e
    if result.returncode != 0:
        raise CommandError(command=cmd, stderr=result.stderr or "")

    try:
        cluster_id = json.loads(result.stdout or "{}").get("id") or ""
    except json.JSONDecodeError as e:
        raise KubeprimeError(f"Could not parse ibmcloud output for cluster {cluster_name}") from e
    if not cluster_id:
        raise KubeprimeError(f"No cluster id found for IKS cluster {cluster_name}")
    return cluster_id


def iks_cluster_id(kubectl: KubectlClient, cluster_name: str) -> str:
    """Cluster id from the cluster itself, falling back to the provider API."""
    cluster_id = kube_cluster_id(kubectl)
    if cluster_id:
        return cluster_id
    logger.info("cluster id not published in cluster, asking ibmcloud", cluster=cluster_name)
    return ibmcloud_cluster_id(cluster_name)
