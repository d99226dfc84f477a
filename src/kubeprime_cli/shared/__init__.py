"""Shared modules for kubeprime-cli.

Path layout and logging setup used by every command.
"""

from .logging import configure_logging, get_logger, level_for_verbosity
from .paths import (
    CONFIG_FILE,
    DEFAULT_KUBECONFIG,
    DRAFT_PACKS_DIR,
    KUBEPRIME_DIR,
    VERSIONS_DIR,
    ensure_dirs,
    kubeconfig_path,
)

__all__ = [
    # Paths
    "KUBEPRIME_DIR",
    "CONFIG_FILE",
    "VERSIONS_DIR",
    "DRAFT_PACKS_DIR",
    "DEFAULT_KUBECONFIG",
    "ensure_dirs",
    "kubeconfig_path",
    # Logging
    "configure_logging",
    "get_logger",
    "level_for_verbosity",
]
