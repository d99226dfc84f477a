"""Shared test fixtures for kubeprime-cli tests.

- kubeconfig_file: a kubeconfig with prod and staging contexts
- FakeClock: a monotonic clock advanced by the sleep it hands out
- make_cluster_config: a finalized ClusterConfig built from InitFlags overrides
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from kubeprime_cli.bootstrap.cluster_config import ClusterConfig, InitFlags
from kubeprime_cli.bootstrap.providers import resolve

KUBECONFIG_DOCUMENT = {
    "apiVersion": "v1",
    "kind": "Config",
    "clusters": [
        {"name": "prod-cluster", "cluster": {"server": "https://prod.example.com:6443"}},
        {"name": "staging-cluster", "cluster": {"server": "https://10.0.0.5:6443"}},
    ],
    "contexts": [
        {
            "name": "prod",
            "context": {"cluster": "prod-cluster", "namespace": "apps", "user": "admin@example.com"},
        },
        {
            "name": "staging",
            "context": {"cluster": "staging-cluster", "namespace": "qa", "user": "dev"},
        },
    ],
    "current-context": "prod",
    "users": [{"name": "admin@example.com", "user": {"token": "secret"}}],
}


def write_kubeconfig(path: Path, document: dict) -> Path:
    path.write_text(yaml.safe_dump(document, sort_keys=False))
    return path


@pytest.fixture
def kubeconfig_file(tmp_path: Path) -> Path:
    """Kubeconfig with prod (current) and staging contexts."""
    return write_kubeconfig(tmp_path / "config", KUBECONFIG_DOCUMENT)


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


def make_cluster_config(provider: str = "kubernetes", **overrides) -> ClusterConfig:
    """Finalize InitFlags for a provider with field overrides applied first."""
    flags = InitFlags(provider=provider, batch_mode=True)
    flags.apply_profile(resolve(provider))
    for key, value in overrides.items():
        setattr(flags, key, value)
    return flags.finalize()


@pytest.fixture
def cluster_config_factory():
    """Factory fixture for finalized cluster configurations."""
    return make_cluster_config
