"""Path management for kubeprime-cli.

Manages the ~/.kubeprime/ directory structure and locates the kubeconfig.
"""

import os
from pathlib import Path

# Base directory for all kubeprime data
KUBEPRIME_DIR = Path.home() / ".kubeprime"

# CLI defaults file
CONFIG_FILE = KUBEPRIME_DIR / "config.yaml"

# Local version stream checkout (charts/<repo>/<chart>.yml)
VERSIONS_DIR = KUBEPRIME_DIR / "versions"

# Build pack checkouts
DRAFT_PACKS_DIR = KUBEPRIME_DIR / "draft" / "packs"

# Default kubeconfig location when $KUBECONFIG is unset
DEFAULT_KUBECONFIG = Path.home() / ".kube" / "config"


def ensure_dirs() -> None:
    """Create directory structure if missing.

    Creates ~/.kubeprime/ (mode 0o700) and the build pack directory.
    No wizard, no prompts - silent creation.
    """
    KUBEPRIME_DIR.mkdir(mode=0o700, exist_ok=True)
    DRAFT_PACKS_DIR.mkdir(parents=True, exist_ok=True)


def kubeconfig_path(explicit: str | Path | None = None) -> Path:
    """Resolve the kubeconfig file to read and rewrite.

    Args:
        explicit: Path given on the command line, if any.

    Returns:
        The explicit path, else the first entry of $KUBECONFIG, else ~/.kube/config.
    """
    if explicit:
        return Path(explicit).expanduser()

    env_value = os.environ.get("KUBECONFIG", "")
    for entry in env_value.split(os.pathsep):
        if entry.strip():
            return Path(entry.strip()).expanduser()

    return DEFAULT_KUBECONFIG
