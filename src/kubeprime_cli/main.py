"""CLI main entry point."""

import click

from . import __version__
from .commands import config_group, context_command, init_command
from .config import load_config
from .shared.logging import configure_logging, level_for_verbosity


@click.group()
@click.version_option(__version__, prog_name="kubeprime")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write logs to this file instead of stderr",
)
@click.option("--log-json", is_flag=True, help="Write logs as JSON lines")
@click.pass_context
def cli(ctx: click.Context, verbose: int, log_file: str | None, log_json: bool) -> None:
    """Prepare Kubernetes clusters for the platform and switch between them."""
    configure_logging(level_for_verbosity(verbose), log_file=log_file, json_output=log_json)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = load_config()


cli.add_command(init_command)
cli.add_command(context_command)
cli.add_command(context_command, name="ctx")
cli.add_command(config_group)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
