"""Init command - prepare the connected cluster for the platform installation."""

from __future__ import annotations

import sys

import click

from ..bootstrap import BootstrapOrchestrator, BootstrapResult, InitFlags, KubectlClient, Provider
from ..bootstrap.cluster_config import (
    DEFAULT_NAMESPACE,
    DEFAULT_TILLER_CLUSTER_ROLE,
    DEFAULT_TILLER_NAMESPACE,
    DEFAULT_USER_CLUSTER_ROLE,
)
from ..bootstrap.providers import (
    DEFAULT_INGRESS_DEPLOYMENT,
    DEFAULT_INGRESS_NAMESPACE,
    DEFAULT_INGRESS_SERVICE,
)
from ..config import CLIConfig, load_config
from ..errors import KubeprimeError
from ..prompts import make_prompter
from ..shared.paths import ensure_dirs


@click.command("init")
@click.option(
    "--provider",
    default="",
    help=f"Cloud service providing the Kubernetes cluster. Supported: {', '.join(Provider.names())}",
)
@click.option(
    "--namespace",
    default=DEFAULT_NAMESPACE,
    help="The namespace the platform should be installed into",
)
@click.option(
    "--username",
    default="",
    help="The Kubernetes username used to initialise helm. Usually your email address",
)
@click.option(
    "--user-cluster-role",
    default=DEFAULT_USER_CLUSTER_ROLE,
    help="The cluster role for the current user to be able to administer helm",
)
@click.option(
    "--tiller-cluster-role",
    default=DEFAULT_TILLER_CLUSTER_ROLE,
    help="The cluster role for Helm's tiller",
)
@click.option(
    "--tiller-namespace",
    default=DEFAULT_TILLER_NAMESPACE,
    help="The namespace for the Tiller when using a global tiller",
)
@click.option("--helm-client-only", is_flag=True, help="Only install helm client")
@click.option("--helm3", is_flag=True, help="Use helm3 which does not use Tiller")
@click.option("--helm-bin", default="", help="The helm binary to use")
@click.option(
    "--no-tiller/--tiller",
    default=True,
    help="Disable the use of tiller with helm",
)
@click.option(
    "--remote-tiller/--local-tiller",
    default=True,
    help="Run tiller remotely in the cluster rather than as a local process",
)
@click.option(
    "--global-tiller/--no-global-tiller",
    default=True,
    help="Whether or not to use a cluster global tiller",
)
@click.option(
    "--skip-setup-tiller",
    is_flag=True,
    help="Don't set up the Helm Tiller service; use whatever tiller is already set up",
)
@click.option("--skip-cluster-role", is_flag=True, help="Don't enable cluster admin role for user")
@click.option(
    "--external-dns",
    is_flag=True,
    help="Collect the domain that ExternalDNS will manage records for",
)
@click.option("--advanced-mode", is_flag=True, help="Prompt for advanced install options")
@click.option("--no-git-validate", is_flag=True, help="Skip the git user.name/user.email check")
@click.option(
    "--recreate-existing-draft-repos",
    is_flag=True,
    help="Delete existing build pack checkouts and clone them again",
)
@click.option("--versions-dir", default=None, help="Local version stream checkout")
@click.option("--domain", default="", help="Domain to expose ingress endpoints. Example: example.io")
@click.option(
    "--ingress-namespace",
    default=DEFAULT_INGRESS_NAMESPACE,
    help="The namespace for the Ingress controller",
)
@click.option(
    "--ingress-service",
    default=DEFAULT_INGRESS_SERVICE,
    help="The name of the Ingress controller Service",
)
@click.option(
    "--ingress-deployment",
    default=DEFAULT_INGRESS_DEPLOYMENT,
    help="The name of the Ingress controller Deployment",
)
@click.option(
    "--external-ip",
    default="",
    help="The external IP used to access ingress endpoints from outside the cluster",
)
@click.option(
    "--skip-ingress",
    is_flag=True,
    help="Skip installing the ingress controller; one must already be installed",
)
@click.option(
    "--on-premise",
    is_flag=True,
    help="Default the external IP to the Kubernetes API server host",
)
@click.option("--batch-mode", "-b", is_flag=True, help="Never prompt; use flags and defaults")
@click.option("--kubeconfig", default=None, help="Kubeconfig path")
@click.pass_context
def init_command(ctx: click.Context, **options) -> None:
    """Initialize the connected Kubernetes cluster for the platform installation.

    \b
    Examples:
      kubeprime init
      kubeprime init --provider gke --batch-mode
      kubeprime init --provider kubernetes --on-premise --skip-cluster-role
    """
    cli_config: CLIConfig = (ctx.obj or {}).get("config") or load_config()
    kubeconfig = options.pop("kubeconfig") or cli_config.kubeconfig or None
    flags = build_flags(options, cli_config)

    click.echo("\n🚀 kubeprime init\n")
    ensure_dirs()

    orchestrator = BootstrapOrchestrator(
        kubectl=KubectlClient(kubeconfig),
        prompter=make_prompter(flags.batch_mode),
        kubeconfig=kubeconfig,
        build_packs_url=cli_config.build_packs_url,
    )
    try:
        result = orchestrator.run(flags)
    except KubeprimeError as e:
        click.echo(click.style(f"\n✗ {e}", fg="red"), err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nAborted.", err=True)
        sys.exit(1)

    print_summary(result)


def build_flags(options: dict, cli_config: CLIConfig) -> InitFlags:
    """Map command-line options onto InitFlags, filling gaps from CLI config."""
    return InitFlags(
        domain=options["domain"],
        provider=options["provider"] or cli_config.provider,
        namespace=options["namespace"],
        username=options["username"],
        user_cluster_role=options["user_cluster_role"],
        tiller_cluster_role=options["tiller_cluster_role"],
        tiller_namespace=options["tiller_namespace"],
        ingress_namespace=options["ingress_namespace"],
        ingress_service=options["ingress_service"],
        ingress_deployment=options["ingress_deployment"],
        external_ip=options["external_ip"],
        versions_dir=options["versions_dir"] or cli_config.versions_dir,
        helm_bin=options["helm_bin"] or cli_config.helm_bin,
        helm_client_only=options["helm_client_only"],
        helm3=options["helm3"],
        no_tiller=options["no_tiller"],
        remote_tiller=options["remote_tiller"],
        global_tiller=options["global_tiller"],
        skip_tiller=options["skip_setup_tiller"],
        skip_ingress=options["skip_ingress"],
        skip_cluster_role=options["skip_cluster_role"],
        on_premise=options["on_premise"],
        external_dns=options["external_dns"],
        no_git_validate=options["no_git_validate"],
        recreate_existing_draft_repos=options["recreate_existing_draft_repos"],
        advanced_mode=options["advanced_mode"],
        batch_mode=options["batch_mode"],
    )


def print_summary(result: BootstrapResult) -> None:
    config = result.config
    click.echo("\n" + "=" * 50)
    click.echo("✓ Cluster initialized!")
    click.echo(f"\n  Provider:  {config.provider}")
    click.echo(f"  Namespace: {config.namespace}")
    if result.ingress and result.ingress.external_ip:
        click.echo(f"  Ingress:   {result.ingress.external_ip}")
    if result.domain:
        click.echo(f"  Domain:    {result.domain}")
    click.echo("=" * 50 + "\n")
