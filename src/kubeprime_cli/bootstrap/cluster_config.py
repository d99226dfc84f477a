"""Cluster configuration for the bootstrap workflow.

InitFlags is the mutable flag bag built from CLI input. The configuration
phases (flag normalization, provider resolution, provider pre-configuration)
write to it; `finalize()` validates it and returns the frozen ClusterConfig
that every later phase reads.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, fields

from ..errors import MissingOptionError
from ..shared.logging import get_logger
from .providers import (
    DEFAULT_INGRESS_DEPLOYMENT,
    DEFAULT_INGRESS_NAMESPACE,
    DEFAULT_INGRESS_SERVICE,
    GENERIC_PROFILE,
    ProviderProfile,
)

logger = get_logger(__name__)

DEFAULT_NAMESPACE = "jx"
DEFAULT_USER_CLUSTER_ROLE = "cluster-admin"
DEFAULT_TILLER_CLUSTER_ROLE = "cluster-admin"
DEFAULT_TILLER_NAMESPACE = "kube-system"

OPTION_NAMESPACE = "namespace"
OPTION_TILLER_NAMESPACE = "tiller-namespace"
OPTION_USERNAME = "username"


@dataclass
class InitFlags:
    """Mutable init options, written only during the configuration phases."""

    domain: str = ""
    provider: str = ""
    namespace: str = DEFAULT_NAMESPACE
    username: str = ""
    user_cluster_role: str = DEFAULT_USER_CLUSTER_ROLE
    tiller_cluster_role: str = DEFAULT_TILLER_CLUSTER_ROLE
    tiller_namespace: str = DEFAULT_TILLER_NAMESPACE
    ingress_namespace: str = DEFAULT_INGRESS_NAMESPACE
    ingress_service: str = DEFAULT_INGRESS_SERVICE
    ingress_deployment: str = DEFAULT_INGRESS_DEPLOYMENT
    external_ip: str = ""
    versions_dir: str = ""
    helm_bin: str = ""
    helm_client_only: bool = False
    helm3: bool = False
    no_tiller: bool = True
    remote_tiller: bool = True
    global_tiller: bool = True
    skip_tiller: bool = False
    skip_ingress: bool = False
    skip_cluster_role: bool = False
    on_premise: bool = False
    external_dns: bool = False
    no_git_validate: bool = False
    recreate_existing_draft_repos: bool = False
    advanced_mode: bool = False
    batch_mode: bool = False
    profile: ProviderProfile = field(default=GENERIC_PROFILE)

    def normalize_tiller_flags(self) -> None:
        """Use helm client-only mode whenever no remote tiller is wanted."""
        if not self.remote_tiller or self.no_tiller:
            self.helm_client_only = True
            self.skip_tiller = True
            self.global_tiller = False

    def apply_helm3(self) -> None:
        """helm3 has no tiller."""
        if self.helm3:
            self.skip_tiller = True
            self.no_tiller = True

    def apply_profile(self, profile: ProviderProfile) -> None:
        """Apply a provider profile's namespace and ingress overrides.

        Profiles marked override_only_defaults rename the ingress service and
        deployment only where the caller kept the generic names.
        """
        self.profile = profile

        if profile.ingress_namespace:
            self.ingress_namespace = profile.ingress_namespace
        if profile.ingress_deployment:
            if not profile.override_only_defaults or (
                self.ingress_deployment == DEFAULT_INGRESS_DEPLOYMENT
            ):
                self.ingress_deployment = profile.ingress_deployment
        if profile.ingress_service:
            if not profile.override_only_defaults or (
                self.ingress_service == DEFAULT_INGRESS_SERVICE
            ):
                self.ingress_service = profile.ingress_service
        if profile.tiller_namespace:
            self.tiller_namespace = profile.tiller_namespace
        if profile.namespace:
            self.namespace = profile.namespace

    def finalize(self, current_namespace: Callable[[], str] | None = None) -> ClusterConfig:
        """Validate the options and freeze them.

        Args:
            current_namespace: Returns the kube context's namespace; used when
                               no namespace was given.

        Raises:
            MissingOptionError: If a global tiller has no namespace, or no
                                namespace can be determined.
        """
        self.apply_helm3()
        if self.skip_tiller:
            self.global_tiller = False

        if not self.skip_tiller and self.global_tiller and not self.tiller_namespace:
            raise MissingOptionError(option=OPTION_TILLER_NAMESPACE)

        if not self.namespace and current_namespace is not None:
            self.namespace = current_namespace()
        if not self.namespace:
            raise MissingOptionError(option=OPTION_NAMESPACE)

        if self.skip_ingress and not self.external_ip:
            logger.warning(
                "expecting ingress controller to be installed",
                ingress=f"{self.ingress_namespace}/{self.ingress_deployment}",
            )

        return ClusterConfig(**{f.name: getattr(self, f.name) for f in fields(self)})


@dataclass(frozen=True)
class ClusterConfig:
    """Finalized init options; read-only for every provisioning phase."""

    domain: str
    provider: str
    namespace: str
    username: str
    user_cluster_role: str
    tiller_cluster_role: str
    tiller_namespace: str
    ingress_namespace: str
    ingress_service: str
    ingress_deployment: str
    external_ip: str
    versions_dir: str
    helm_bin: str
    helm_client_only: bool
    helm3: bool
    no_tiller: bool
    remote_tiller: bool
    global_tiller: bool
    skip_tiller: bool
    skip_ingress: bool
    skip_cluster_role: bool
    on_premise: bool
    external_dns: bool
    no_git_validate: bool
    recreate_existing_draft_repos: bool
    advanced_mode: bool
    batch_mode: bool
    profile: ProviderProfile
