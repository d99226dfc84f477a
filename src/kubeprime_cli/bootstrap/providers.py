"""Provider policy: per-provider ingress defaults and special behaviors.

The supported providers form a closed enumeration. `resolve()` maps any
identifier to a ProviderProfile, returning the generic profile for anything
it does not know. After resolution the workflow consumes only the profile.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Ingress defaults shared by every provider that installs the chart
DEFAULT_INGRESS_NAMESPACE = "kube-system"
DEFAULT_INGRESS_SERVICE = "jxing-nginx-ingress-controller"
DEFAULT_INGRESS_DEPLOYMENT = DEFAULT_INGRESS_SERVICE

AWS_NLB_VALUES = """---
rbac:
  create: true

controller:
  service:
    annotations:
      service.beta.kubernetes.io/aws-load-balancer-type: nlb
    enableHttp: true
    enableHttps: true
"""


class Provider(str, Enum):
    """Kubernetes providers known to the bootstrap workflow."""

    AKS = "aks"
    ALIBABA = "alibaba"
    AWS = "aws"
    DOCKER = "docker"
    EKS = "eks"
    GKE = "gke"
    ICP = "icp"  # IBM Cloud Private
    IKS = "iks"  # IBM Kubernetes Service
    KUBERNETES = "kubernetes"
    MINIKUBE = "minikube"
    MINISHIFT = "minishift"
    OKE = "oke"
    OPENSHIFT = "openshift"
    PKS = "pks"

    @classmethod
    def names(cls) -> list[str]:
        return sorted(p.value for p in cls)

    @classmethod
    def parse(cls, provider_id: str) -> Provider | None:
        try:
            return cls(provider_id)
        except ValueError:
            return None


@dataclass(frozen=True)
class ProviderProfile:
    """Resolved ingress naming and behavior defaults for one provider."""

    provider: Provider = Provider.KUBERNETES
    ingress_namespace: str | None = None
    ingress_service: str | None = None
    ingress_deployment: str | None = None
    # Apply the ingress service/deployment names only over untouched defaults
    override_only_defaults: bool = False
    namespace: str | None = None
    tiller_namespace: str | None = None
    # The platform routes traffic itself; never install a controller
    skip_ingress: bool = False
    # The vendor injects the controller; wait for it instead of installing
    wait_for_injected_ingress: bool = False
    # Collect external IP and domain from the operator up front
    prompt_for_external_ip: bool = False
    ingress_values_yaml: str | None = None
    load_balancer_note: str | None = None
    notices: tuple[str, ...] = ()


GENERIC_PROFILE = ProviderProfile()

_PROFILES: dict[Provider, ProviderProfile] = {
    Provider.ICP: ProviderProfile(
        provider=Provider.ICP,
        ingress_namespace="kube-system",
        ingress_service="default-backend",
        ingress_deployment="default-backend",
        namespace="jx",
        tiller_namespace="default",
        prompt_for_external_ip=True,
        notices=(
            "IBM Cloud Private installation: ensure your Kubernetes context already points "
            "at the cluster to install into.",
            "If you have a clusterimagepolicy, it must permit pulling from docker.io, gcr.io, "
            "quay.io, k8s.gcr.io and <your ICP cluster name>:8500.",
            'By default the tiller namespace is "default" and resources are installed into "jx".',
        ),
    ),
    Provider.IKS: ProviderProfile(
        provider=Provider.IKS,
        wait_for_injected_ingress=True,
    ),
    Provider.OPENSHIFT: ProviderProfile(
        provider=Provider.OPENSHIFT,
        skip_ingress=True,
    ),
    Provider.ALIBABA: ProviderProfile(
        provider=Provider.ALIBABA,
        ingress_service="nginx-ingress-lb",
        ingress_deployment="nginx-ingress-controller",
        override_only_defaults=True,
    ),
    Provider.AWS: ProviderProfile(
        provider=Provider.AWS,
        ingress_values_yaml=AWS_NLB_VALUES,
    ),
    Provider.EKS: ProviderProfile(
        provider=Provider.EKS,
        ingress_values_yaml=AWS_NLB_VALUES,
    ),
    Provider.GKE: ProviderProfile(
        provider=Provider.GKE,
        load_balancer_note=(
            "Note: this loadbalancer will fail to be provisioned if you have insufficient "
            "quotas, this can happen easily on a GKE free account.\n"
            "To view quotas run: gcloud compute project-info describe"
        ),
    ),
    Provider.OKE: ProviderProfile(
        provider=Provider.OKE,
        load_balancer_note=(
            "Note: this loadbalancer will fail to be provisioned if you have insufficient "
            "quotas, this can happen easily on a OCI free account"
        ),
    ),
}


def resolve(provider_id: str | Provider | None) -> ProviderProfile:
    """Map a provider identifier to its profile.

    Total over all inputs: unknown or empty identifiers get the generic profile.
    """
    provider = provider_id if isinstance(provider_id, Provider) else Provider.parse(provider_id or "")
    if provider is None:
        return GENERIC_PROFILE
    return _PROFILES.get(provider, ProviderProfile(provider=provider))


def injected_ingress_name(cluster_id: str) -> str:
    """Deployment/service name of the vendor-injected IKS ingress."""
    return f"public-cr{cluster_id.lower()}-alb1"
