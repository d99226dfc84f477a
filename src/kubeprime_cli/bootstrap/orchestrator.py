"""Cluster bootstrap workflow behind `kubeprime init`.

Runs the fixed init sequence: normalize flags, check prerequisites, resolve
the provider, validate git, grant the cluster admin role, apply the provider
profile, wait for vendor-injected ingress, freeze the configuration,
initialize helm, install build packs, collect the external DNS domain and
provision ingress. The first fatal error aborts the remaining phases.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import click

from ..errors import CommandError, InvalidArgumentError, KubeprimeError, MissingOptionError
from ..kubeconfig import KubeConfig, load_kubeconfig
from ..prompts import Prompter
from ..retry import RetryPolicy, retry
from ..shared.logging import get_logger
from .buildpacks import BuildPackInstaller
from .cloud import iks_cluster_id
from .cluster_config import OPTION_USERNAME, ClusterConfig, InitFlags
from .domain import DomainResolver
from .helm import HelmClient, helm_binary
from .ingress import IngressProvisioner, IngressState
from .kubectl import KubectlClient
from .naming import to_valid_name
from .prerequisites import GitIdentity, HelmDetector, KubectlDetector
from .providers import Provider, ProviderProfile, injected_ingress_name, resolve
from .versions import VersionStream
from .waits import INJECTED_INGRESS_TIMEOUT, ClusterWaiter

logger = get_logger(__name__)

ROLE_BINDING_POLICY = RetryPolicy(max_attempts=3, delay_seconds=10)
HELM_INIT_POLICY = RetryPolicy(max_attempts=3, delay_seconds=2)

MINIKUBE_CONTEXT = "minikube"
DEFAULT_PROVIDER = Provider.KUBERNETES.value


@dataclass
class BootstrapResult:
    """Result of a completed init run."""

    config: ClusterConfig
    role_binding: str | None = None
    build_packs_dir: Path | None = None
    ingress: IngressState | None = None

    @property
    def domain(self) -> str | None:
        if self.ingress and self.ingress.domain:
            return self.ingress.domain
        return self.config.domain or None


class BootstrapOrchestrator:
    """Prepare a cluster for the platform installation."""

    def __init__(
        self,
        kubectl: KubectlClient,
        prompter: Prompter,
        kubeconfig: str | None = None,
        helm: HelmClient | None = None,
        waiter: ClusterWaiter | None = None,
        git: GitIdentity | None = None,
        build_packs: BuildPackInstaller | None = None,
        ingress: IngressProvisioner | None = None,
        cluster_id_lookup: Callable[[str], str] | None = None,
        build_packs_url: str | None = None,
        check_prerequisites: bool = True,
        echo: Callable[[str], None] = click.echo,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize orchestrator.

        Collaborators left as None are built from the finalized configuration.

        Args:
            kubectl: Client for the target cluster.
            prompter: Prompt capability (batch or interactive).
            kubeconfig: Path to kubeconfig file.
            helm: Helm client.
            waiter: Poller for cluster state.
            git: Git identity accessor.
            build_packs: Build pack installer.
            ingress: Ingress provisioner.
            cluster_id_lookup: Maps a cluster name to its IKS cluster id.
            build_packs_url: Build pack repository URL.
            check_prerequisites: Detect kubectl/helm before starting.
            echo: Output function for progress messages.
            sleep: Sleep function for retry delays.
        """
        self.kubectl = kubectl
        self.prompter = prompter
        self.kubeconfig = kubeconfig
        self.helm = helm
        self.waiter = waiter or ClusterWaiter(kubectl)
        self.git = git or GitIdentity()
        self.build_packs = build_packs
        self.ingress = ingress
        self.cluster_id_lookup = cluster_id_lookup or (lambda name: iks_cluster_id(kubectl, name))
        self.build_packs_url = build_packs_url
        self.check_prerequisites = check_prerequisites
        self.echo = echo
        self.sleep = sleep

    def _load_kubeconfig(self) -> KubeConfig:
        return load_kubeconfig(self.kubeconfig)

    def run(self, flags: InitFlags) -> BootstrapResult:
        """Execute the init sequence.

        Raises:
            KubeprimeError: The first fatal failure; later phases do not run.
        """
        flags.normalize_tiller_flags()
        if self.check_prerequisites:
            self.validate_prerequisites(flags)

        profile = self.resolve_provider(flags)

        if not flags.no_git_validate:
            self.git.ensure(self.prompter)

        role_binding = self.enable_cluster_admin_role(flags)

        self.configure_for_provider(flags, profile)
        if profile.wait_for_injected_ingress:
            self.wait_for_injected_ingress(flags)

        config = flags.finalize(current_namespace=lambda: self._load_kubeconfig().current_namespace())
        logger.info("configuration finalized", provider=config.provider, namespace=config.namespace)

        self.init_helm(config)
        build_packs_dir = self.install_build_packs(config)

        requested_domain = None
        if config.external_dns:
            requested_domain = self.prompter.text(
                "Provide the domain the platform should be available at:",
                default=config.domain,
            )

        ingress_state = None
        if not config.skip_ingress:
            ingress_state = self.ingress_provisioner(config).provision(config, requested_domain)

        return BootstrapResult(
            config=config,
            role_binding=role_binding,
            build_packs_dir=build_packs_dir,
            ingress=ingress_state,
        )

    def validate_prerequisites(self, flags: InitFlags) -> None:
        kubectl_info = KubectlDetector(self.kubeconfig).detect()
        if not kubectl_info.kubectl_available:
            raise KubeprimeError(kubectl_info.error or "kubectl not available")
        if not kubectl_info.cluster_reachable:
            raise KubeprimeError(
                "No Kubernetes cluster available",
                hint=kubectl_info.cluster_info,
            )
        self.echo(f"  ✓ kubectl: {kubectl_info.kubectl_version}")

        helm_info = HelmDetector(helm_binary(flags.helm3, flags.helm_bin), flags.helm3).detect()
        if not helm_info.helm_available:
            raise KubeprimeError(helm_info.error or "helm not available")
        self.echo(f"  ✓ helm: {helm_info.helm_version}")

    def resolve_provider(self, flags: InitFlags) -> ProviderProfile:
        """Validate or pick the provider and resolve its profile."""
        provider = flags.provider
        if not provider and self.kubectl.current_context() == MINIKUBE_CONTEXT:
            provider = Provider.MINIKUBE.value

        if provider:
            if Provider.parse(provider) is None:
                raise InvalidArgumentError(value=provider, choices=Provider.names())
        else:
            provider = self.prompter.select("Cloud Provider", Provider.names(), default=DEFAULT_PROVIDER)

        flags.provider = provider
        return resolve(provider)

    def cluster_user_name(self) -> str:
        try:
            return self._load_kubeconfig().current_user()
        except KubeprimeError as e:
            logger.warning("could not read kube config user", error=str(e))
            return ""

    def enable_cluster_admin_role(self, flags: InitFlags) -> str | None:
        """Bind the invoking user to the cluster admin role.

        Returns:
            The role binding name, or None when skipped.
        """
        if flags.skip_cluster_role:
            return None

        if not flags.username:
            flags.username = self.cluster_user_name()
        if not flags.username:
            flags.username = self.prompter.text(
                "The Kubernetes username used to initialise helm (usually your email address):"
            ).strip()
        if not flags.username:
            raise MissingOptionError(option=OPTION_USERNAME)

        user = to_valid_name(flags.username)
        binding = to_valid_name(f"{user}-{flags.user_cluster_role}-binding")

        def get_or_create() -> None:
            if self.kubectl.cluster_role_binding_exists(binding):
                return
            logger.debug(
                "creating ClusterRoleBinding",
                binding=binding,
                role=flags.user_cluster_role,
                user=flags.username,
            )
            if self.kubectl.create_cluster_role_binding(
                binding, flags.user_cluster_role, user=flags.username
            ):
                logger.debug("created ClusterRoleBinding", binding=binding)

        retry(ROLE_BINDING_POLICY, get_or_create, description="cluster role binding", sleep=self.sleep)
        self.echo(f"  ✓ Cluster role {flags.user_cluster_role} bound to {flags.username}")
        return binding

    def configure_for_provider(self, flags: InitFlags, profile: ProviderProfile) -> None:
        """Apply the provider profile and collect anything it needs up front."""
        for notice in profile.notices:
            self.echo(notice)
        flags.apply_profile(profile)

        if not profile.prompt_for_external_ip or not self.prompter.interactive:
            return
        if flags.external_ip:
            self.echo("An external IP has already been specified")
            return

        flags.external_ip = self.prompter.text(
            "Provide the external IP the platform should use: typically your proxy node IP address"
        ).strip()
        flags.domain = self.prompter.text(
            "Provide the domain the platform should be available at: typically the proxy "
            "node IP address with a domain added to the end",
            default=f"{flags.external_ip}.nip.io",
        ).strip()

    def wait_for_injected_ingress(self, flags: InitFlags) -> None:
        """Rename the ingress to the vendor's name and wait for it to appear."""
        self.echo("Waiting for the Ingress controller to be injected into the cluster")
        current = self._load_kubeconfig().current
        cluster_name = current.cluster if current else ""

        cluster_id = self.cluster_id_lookup(cluster_name)
        name = injected_ingress_name(cluster_id)
        flags.ingress_deployment = name
        flags.ingress_service = name

        self.waiter.wait_for_deployment_ready(
            name, flags.ingress_namespace, INJECTED_INGRESS_TIMEOUT
        )

    def helm_client(self, config: ClusterConfig) -> HelmClient:
        if self.helm is None:
            self.helm = HelmClient(helm_binary(config.helm3, config.helm_bin), helm3=config.helm3)
        return self.helm

    def init_helm(self, config: ClusterConfig) -> None:
        """Initialize helm; this fails intermittently on public clouds so it is retried."""
        helm = self.helm_client(config)
        try:
            retry(
                HELM_INIT_POLICY,
                lambda: helm.init(config, self.kubectl),
                on_failure=lambda attempt, attempts, error: self.echo(
                    f"  helm init attempt {attempt}/{attempts} failed: {error}"
                ),
                description="helm init",
                sleep=self.sleep,
            )
        except CommandError as e:
            raise KubeprimeError(f"helm init failed: {e.message}", hint=e.hint) from e
        self.echo("  ✓ helm initialized")

    def install_build_packs(self, config: ClusterConfig) -> Path:
        installer = self.build_packs
        if installer is None:
            kwargs = {"url": self.build_packs_url} if self.build_packs_url else {}
            installer = BuildPackInstaller(recreate=config.recreate_existing_draft_repos, **kwargs)
        try:
            path = installer.install()
        except CommandError as e:
            raise KubeprimeError(f"initialise build packs failed: {e.message}", hint=e.hint) from e
        self.echo(f"  ✓ Build packs installed: {path}")
        return path

    def ingress_provisioner(self, config: ClusterConfig) -> IngressProvisioner:
        if self.ingress is None:
            self.ingress = IngressProvisioner(
                kubectl=self.kubectl,
                helm=self.helm_client(config),
                waiter=self.waiter,
                domain_resolver=DomainResolver(self.prompter, sleep=self.sleep),
                prompter=self.prompter,
                versions=VersionStream(config.versions_dir or None),
                load_kubeconfig=self._load_kubeconfig,
                echo=self.echo,
                sleep=self.sleep,
            )
        return self.ingress
