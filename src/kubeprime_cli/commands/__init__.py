"""Click commands for kubeprime-cli."""

from .config import config_group
from .context import context_command
from .init import init_command

__all__ = ["config_group", "context_command", "init_command"]
