"""Kubeconfig access for kubeprime-cli.

Reads the context map and cluster servers from the kubeconfig file and
rewrites its current-context pointer atomically.
"""

from __future__ import annotations

import os
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import KubeconfigError
from .shared.paths import kubeconfig_path

DEFAULT_NAMESPACE = "default"


@dataclass(frozen=True)
class KubeContext:
    """A named cluster/user/namespace reference."""

    name: str
    cluster: str = ""
    namespace: str = ""
    user: str = ""


@dataclass
class KubeConfig:
    """Parsed view of a kubeconfig file."""

    path: Path
    contexts: dict[str, KubeContext] = field(default_factory=dict)
    servers: dict[str, str] = field(default_factory=dict)
    current_context: str = ""

    def server_for(self, context: KubeContext | None) -> str:
        """API server URL of the cluster a context points at."""
        if context is None:
            return ""
        return self.servers.get(context.cluster, "")

    @property
    def current(self) -> KubeContext | None:
        return self.contexts.get(self.current_context)

    def current_server(self) -> str:
        return self.server_for(self.current)

    def current_namespace(self) -> str:
        context = self.current
        if context is None or not context.namespace:
            return DEFAULT_NAMESPACE
        return context.namespace

    def current_user(self) -> str:
        context = self.current
        return context.user if context else ""


def _read_document(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            document = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise KubeconfigError(f"Failed to read kube config {path}: {e}") from e
    if not isinstance(document, dict):
        raise KubeconfigError(f"Kube config {path} is not a mapping")
    return document


def load_kubeconfig(path: str | Path | None = None) -> KubeConfig:
    """Load the kubeconfig.

    Args:
        path: Explicit kubeconfig path; defaults to $KUBECONFIG or ~/.kube/config.

    Returns:
        KubeConfig; empty (no contexts) when the file does not exist.

    Raises:
        KubeconfigError: If the file is unreadable or defines a context twice.
    """
    resolved = kubeconfig_path(path)
    document = _read_document(resolved)

    contexts: dict[str, KubeContext] = {}
    for entry in document.get("contexts") or []:
        name = (entry or {}).get("name") or ""
        if not name:
            continue
        if name in contexts:
            raise KubeconfigError(f"Kube config {resolved} defines context '{name}' more than once")
        body = entry.get("context") or {}
        contexts[name] = KubeContext(
            name=name,
            cluster=body.get("cluster") or "",
            namespace=body.get("namespace") or "",
            user=body.get("user") or "",
        )

    servers: dict[str, str] = {}
    for entry in document.get("clusters") or []:
        name = (entry or {}).get("name") or ""
        if name:
            servers[name] = (entry.get("cluster") or {}).get("server") or ""

    return KubeConfig(
        path=resolved,
        contexts=contexts,
        servers=servers,
        current_context=document.get("current-context") or "",
    )


def set_current_context(config: KubeConfig, name: str) -> None:
    """Point current-context at name and write the file atomically.

    Only the current-context field changes; the rest of the document is kept.
    A symlinked kubeconfig is written through the link.

    Raises:
        KubeconfigError: If name is not a known context or the write fails.
    """
    if name not in config.contexts:
        raise KubeconfigError(f"Could not find kubernetes context {name}")

    path = config.path.resolve()
    document = _read_document(path)
    document["current-context"] = name
    payload = yaml.safe_dump(document, default_flow_style=False, sort_keys=False)

    mode = path.stat().st_mode & 0o777 if path.exists() else 0o600
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    try:
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        tmp_path.replace(path)
    except OSError as e:
        with suppress(FileNotFoundError):
            os.unlink(tmp_path)
        raise KubeconfigError(f"Failed to update the kube config {path}: {e}") from e

    config.current_context = name
