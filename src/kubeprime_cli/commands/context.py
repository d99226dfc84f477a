"""Context command - view or change the current kubernetes context."""

from __future__ import annotations

import sys

import click

from ..context import ContextSwitcher
from ..errors import KubeprimeError
from ..prompts import make_prompter


@click.command("context")
@click.argument("name", required=False)
@click.option(
    "--filter",
    "-f",
    "filter_text",
    default="",
    help="Filter the list of contexts to switch between using the given text",
)
@click.option("--batch-mode", "-b", is_flag=True, help="Never prompt")
@click.option("--kubeconfig", default=None, help="Kubeconfig path")
@click.pass_context
def context_command(
    ctx: click.Context,
    name: str | None,
    filter_text: str,
    batch_mode: bool,
    kubeconfig: str | None,
) -> None:
    """View or change the current kubernetes context (kubernetes cluster).

    \b
    Examples:
      kubeprime context              # select the context to switch to
      kubeprime ctx                  # or the more concise alias
      kubeprime ctx -b               # view the current context
      kubeprime ctx minikube         # change the current context to 'minikube'
    """
    cli_config = (ctx.obj or {}).get("config")
    if kubeconfig is None and cli_config is not None and cli_config.kubeconfig:
        kubeconfig = cli_config.kubeconfig

    switcher = ContextSwitcher(kubeconfig=kubeconfig, prompter=make_prompter(batch_mode))
    try:
        result = switcher.run([name] if name else [], filter_text=filter_text, batch_mode=batch_mode)
    except KubeprimeError as e:
        click.echo(click.style(f"✗ {e}", fg="red"), err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nAborted.", err=True)
        sys.exit(1)

    click.echo(result.render(lambda value: click.style(value, fg="cyan")))
