"""Config command - show and set persisted CLI defaults."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.table import Table

from ..config import CONFIG_KEYS, get_config_path, load_config, save_config

console = Console()


@click.group("config")
def config_group() -> None:
    """Show or change kubeprime defaults."""


@config_group.command("show")
def config_show() -> None:
    """Show current defaults and where each value came from."""
    config = load_config()

    table = Table(title=f"kubeprime config ({get_config_path()})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")
    for key in CONFIG_KEYS:
        table.add_row(key, str(getattr(config, key)) or "-", config.get_source(key))

    console.print(table)


@config_group.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Persist a default in ~/.kubeprime/config.yaml."""
    if key not in CONFIG_KEYS:
        click.echo(f"✗ Unknown config key: {key}. Valid keys: {', '.join(CONFIG_KEYS)}", err=True)
        sys.exit(1)
    save_config(key, value)
    click.echo(f"✓ {key} = {value}")
