"""Chart version lookup from a local version stream checkout.

A version stream pins chart versions in files laid out as
``charts/<repository>/<chart>.yml`` with a top-level ``version`` key.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from ..errors import KubeprimeError
from ..shared.logging import get_logger

logger = get_logger(__name__)


class VersionStream:
    """Resolve pinned chart versions."""

    def __init__(self, base_dir: str | Path | None = None):
        """Initialize version stream.

        Args:
            base_dir: Root of the version stream checkout. Without one every
                      lookup returns "" and helm installs the latest chart.
        """
        self.base_dir = Path(base_dir).expanduser() if base_dir else None

    def chart_version(self, chart: str) -> str:
        """Pinned version of chart (e.g. "stable/nginx-ingress"), or "" if unpinned.

        Raises:
            KubeprimeError: If the pin file exists but cannot be parsed.
        """
        if self.base_dir is None:
            return ""

        path = self.base_dir / "charts" / f"{chart}.yml"
        if not path.exists():
            logger.debug("no pinned chart version", chart=chart, path=str(path))
            return ""

        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise KubeprimeError(f"failed to load version of chart {chart}: {e}") from e
        if not isinstance(data, dict):
            raise KubeprimeError(f"failed to load version of chart {chart}: {path} is not a mapping")

        return str(data.get("version") or "")
