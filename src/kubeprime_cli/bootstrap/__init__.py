"""Bootstrap package for preparing a cluster for the platform.

This package provides the `kubeprime init` workflow which:
1. Normalizes flags and checks kubectl/helm prerequisites
2. Resolves the provider and its profile
3. Grants the invoking user the cluster admin role
4. Initializes helm and installs build packs
5. Provisions the ingress controller and resolves the domain
"""

from .buildpacks import BuildPackInstaller
from .cluster_config import ClusterConfig, InitFlags
from .domain import DomainResolver
from .helm import ChartInstallOptions, HelmClient
from .ingress import IngressProvisioner, IngressState
from .kubectl import KubectlClient
from .orchestrator import BootstrapOrchestrator, BootstrapResult
from .prerequisites import GitIdentity, HelmDetector, KubectlDetector
from .providers import Provider, ProviderProfile, resolve
from .versions import VersionStream
from .waits import ClusterWaiter

__all__ = [
    # Configuration
    "InitFlags",
    "ClusterConfig",
    # Provider policy
    "Provider",
    "ProviderProfile",
    "resolve",
    # Cluster access
    "KubectlClient",
    "ClusterWaiter",
    "HelmClient",
    "ChartInstallOptions",
    "VersionStream",
    # Prerequisites
    "KubectlDetector",
    "HelmDetector",
    "GitIdentity",
    # Workflow
    "BuildPackInstaller",
    "DomainResolver",
    "IngressProvisioner",
    "IngressState",
    "BootstrapOrchestrator",
    "BootstrapResult",
]
