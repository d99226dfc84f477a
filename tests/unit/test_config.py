"""Unit tests for CLI configuration."""

from unittest.mock import patch

import pytest
import yaml

from kubeprime_cli.bootstrap.buildpacks import DEFAULT_BUILD_PACKS_URL
from kubeprime_cli.config import ENV_VARS, load_config, save_config


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / ".kubeprime" / "config.yaml"
    with patch("kubeprime_cli.config.get_config_path", return_value=path):
        yield path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS.values():
        monkeypatch.delenv(name, raising=False)


@pytest.mark.cli_unit
class TestLoadConfig:
    """Tests for load_config() precedence."""

    def test_defaults(self, config_file):
        config = load_config()
        assert config.provider == ""
        assert config.build_packs_url == DEFAULT_BUILD_PACKS_URL
        assert config.get_source("provider") == "default"

    def test_file_overrides_defaults(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("provider: gke\nhelm_bin: /opt/helm\n")

        config = load_config()

        assert config.provider == "gke"
        assert config.helm_bin == "/opt/helm"
        assert config.get_source("provider") == "config file"

    def test_env_overrides_file(self, config_file, monkeypatch):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("provider: gke\n")
        monkeypatch.setenv("KUBEPRIME_PROVIDER", "eks")

        config = load_config()

        assert config.provider == "eks"
        assert config.get_source("provider") == "environment"

    def test_unreadable_file_ignored(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("provider: [gke\n")
        assert load_config().provider == ""


@pytest.mark.cli_unit
class TestSaveConfig:
    """Tests for save_config()."""

    def test_save_creates_file(self, config_file):
        save_config("provider", "aks")
        assert yaml.safe_load(config_file.read_text()) == {"provider": "aks"}

    def test_save_keeps_other_keys(self, config_file):
        save_config("provider", "aks")
        save_config("helm_bin", "helm2")
        assert yaml.safe_load(config_file.read_text()) == {"provider": "aks", "helm_bin": "helm2"}

    def test_unknown_key(self, config_file):
        with pytest.raises(KeyError):
            save_config("server", "x")
