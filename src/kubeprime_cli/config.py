"""CLI configuration management.

Handles persistent CLI defaults stored in ~/.kubeprime/config.yaml.
Supports environment variable overrides; command-line flags take precedence
over both.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .bootstrap.buildpacks import DEFAULT_BUILD_PACKS_URL
from .shared.logging import get_logger
from .shared.paths import CONFIG_FILE, VERSIONS_DIR

logger = get_logger(__name__)

CONFIG_KEYS = ["provider", "helm_bin", "versions_dir", "build_packs_url", "kubeconfig"]

# Environment variable mappings
ENV_VARS = {
    "provider": "KUBEPRIME_PROVIDER",
    "helm_bin": "KUBEPRIME_HELM_BIN",
    "versions_dir": "KUBEPRIME_VERSIONS_DIR",
    "build_packs_url": "KUBEPRIME_BUILD_PACKS_URL",
    "kubeconfig": "KUBEPRIME_KUBECONFIG",
}


@dataclass
class CLIConfig:
    """CLI configuration."""

    provider: str = ""
    helm_bin: str = ""
    versions_dir: str = str(VERSIONS_DIR)
    build_packs_url: str = DEFAULT_BUILD_PACKS_URL
    kubeconfig: str = ""

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")


def get_config_path() -> Path:
    """Get the CLI config file path.

    Returns:
        Path to ~/.kubeprime/config.yaml
    """
    return CONFIG_FILE


def _read_config_file(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("ignoring unreadable config file", path=str(config_path), error=str(e))
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring config file that is not a mapping", path=str(config_path))
        return {}
    return data


def load_config() -> CLIConfig:
    """Load CLI configuration.

    Precedence (highest to lowest):
    1. Environment variables
    2. Config file (~/.kubeprime/config.yaml)
    3. Defaults

    Returns:
        CLIConfig with values and sources
    """
    config = CLIConfig()
    sources: dict[str, str] = {key: "default" for key in CONFIG_KEYS}

    file_config = _read_config_file(get_config_path())
    for key in CONFIG_KEYS:
        if key in file_config and file_config[key] is not None:
            setattr(config, key, str(file_config[key]))
            sources[key] = "config file"

    for key, env_var in ENV_VARS.items():
        if os.environ.get(env_var):
            setattr(config, key, os.environ[env_var])
            sources[key] = "environment"

    config._sources = sources
    return config


def save_config(key: str, value: Any) -> None:
    """Save a config value to the config file.

    Args:
        key: Config key (one of CONFIG_KEYS)
        value: Value to save

    Raises:
        KeyError: If key is not a known config key.
    """
    if key not in CONFIG_KEYS:
        raise KeyError(key)

    config_path = get_config_path()
    existing = _read_config_file(config_path)
    existing[key] = value

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(existing, f, default_flow_style=False)
