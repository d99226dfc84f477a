"""Build pack installation.

Clones (or refreshes) the build pack repository used to generate
Dockerfiles, Jenkinsfiles and charts for applications.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from urllib.parse import urlparse

from ..errors import CommandError
from ..shared.logging import get_logger
from ..shared.paths import DRAFT_PACKS_DIR

logger = get_logger(__name__)

DEFAULT_BUILD_PACKS_URL = "https://github.com/jenkins-x/draft-packs.git"


def pack_directory(packs_dir: Path, url: str) -> Path:
    """Checkout directory for a repository URL (host/owner/name)."""
    parsed = urlparse(url)
    path = parsed.path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return packs_dir / parsed.netloc / path


class BuildPackInstaller:
    """Install the default build pack repository."""

    def __init__(
        self,
        url: str = DEFAULT_BUILD_PACKS_URL,
        packs_dir: Path | None = None,
        recreate: bool = False,
    ):
        """Initialize installer.

        Args:
            url: Git URL of the build pack repository.
            packs_dir: Root of the build pack checkouts (default: ~/.kubeprime/draft/packs)
            recreate: Delete an existing checkout and clone again.
        """
        self.url = url
        self.packs_dir = packs_dir or DRAFT_PACKS_DIR
        self.recreate = recreate

    def _git(self, args: list[str], cwd: Path | None = None) -> None:
        cmd = ["git"] + args
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, cwd=cwd, timeout=300)
        except FileNotFoundError as e:
            raise CommandError(command=cmd, hint="git not found. Install git", retryable=False) from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(command=cmd, stderr="git not responding (timeout)") from e
        if result.returncode != 0:
            raise CommandError(command=cmd, stderr=result.stderr or "")

    def install(self) -> Path:
        """Clone or update the build packs.

        Returns:
            Path of the build pack checkout.
        """
        target = pack_directory(self.packs_dir, self.url)

        if target.exists() and self.recreate:
            logger.info("removing existing build packs", path=str(target))
            shutil.rmtree(target)

        if (target / ".git").exists():
            logger.info("updating build packs", path=str(target))
            self._git(["pull", "--ff-only"], cwd=target)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            logger.info("cloning build packs", url=self.url, path=str(target))
            self._git(["clone", self.url, str(target)])

        return target
