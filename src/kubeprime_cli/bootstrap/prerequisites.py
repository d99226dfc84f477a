"""Prerequisite detection for the init command.

This module detects kubectl, cluster connectivity and helm, and validates
that a git identity is configured.
"""

from __future__ import annotations

import json
import shutil
import subprocess
from dataclasses import dataclass

from ..errors import CommandError, ValidationError
from ..prompts import Prompter
from ..shared.logging import get_logger

logger = get_logger(__name__)


@dataclass
class KubectlInfo:
    """kubectl and cluster detection result."""

    kubectl_available: bool
    kubectl_version: str | None = None
    cluster_reachable: bool = False
    cluster_info: str | None = None
    error: str | None = None


class KubectlDetector:
    """Detect kubectl and Kubernetes cluster availability."""

    def __init__(self, kubeconfig: str | None = None):
        self.kubeconfig = kubeconfig

    def _kubectl_cmd(self) -> list[str]:
        cmd = ["kubectl"]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])
        return cmd

    def detect(self) -> KubectlInfo:
        """Check for kubectl and cluster connectivity."""
        kubectl_path = shutil.which("kubectl")
        if not kubectl_path:
            return KubectlInfo(
                kubectl_available=False,
                error="kubectl not found. Install kubectl: https://kubernetes.io/docs/tasks/tools/",
            )

        try:
            result = subprocess.run(
                self._kubectl_cmd() + ["version", "--client", "-o", "json"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            if result.returncode != 0:
                return KubectlInfo(
                    kubectl_available=False,
                    error=f"kubectl error: {result.stderr.strip()}",
                )
            try:
                client_version = json.loads(result.stdout).get("clientVersion", {})
                kubectl_version = client_version.get("gitVersion") or result.stdout.strip()
            except json.JSONDecodeError:
                kubectl_version = result.stdout.strip()
        except subprocess.TimeoutExpired:
            return KubectlInfo(
                kubectl_available=False,
                error="kubectl not responding (timeout)",
            )

        # Check cluster connectivity
        try:
            result = subprocess.run(
                self._kubectl_cmd() + ["cluster-info"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            cluster_reachable = result.returncode == 0
            cluster_info = result.stdout.strip() if cluster_reachable else result.stderr.strip()
        except subprocess.TimeoutExpired:
            cluster_reachable = False
            cluster_info = "Cluster check timed out"

        return KubectlInfo(
            kubectl_available=True,
            kubectl_version=kubectl_version,
            cluster_reachable=cluster_reachable,
            cluster_info=cluster_info,
        )


@dataclass
class HelmInfo:
    """helm detection result."""

    helm_available: bool
    helm_version: str | None = None
    error: str | None = None


class HelmDetector:
    """Detect the helm client."""

    def __init__(self, binary: str = "helm", helm3: bool = False):
        self.binary = binary
        self.helm3 = helm3

    def detect(self) -> HelmInfo:
        if not shutil.which(self.binary):
            return HelmInfo(
                helm_available=False,
                error=f"{self.binary} not found. Install helm: https://helm.sh/docs/intro/install/",
            )

        # helm2 needs --client or it tries to reach tiller
        args = [self.binary, "version", "--short"]
        if not self.helm3:
            args.append("--client")
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=10)
        except subprocess.TimeoutExpired:
            return HelmInfo(helm_available=False, error="helm not responding (timeout)")
        if result.returncode != 0:
            return HelmInfo(helm_available=False, error=f"helm error: {result.stderr.strip()}")
        return HelmInfo(helm_available=True, helm_version=result.stdout.strip())


class GitIdentity:
    """Read and persist the global git user.name / user.email."""

    def _git(self, args: list[str]) -> subprocess.CompletedProcess:
        cmd = ["git", "config", "--global"] + args
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=10)
        except FileNotFoundError as e:
            raise CommandError(command=cmd, hint="git not found. Install git", retryable=False) from e

    def get(self, key: str) -> str:
        """Configured value, or "" when unset."""
        result = self._git(["--get", key])
        if result.returncode != 0:
            return ""
        return result.stdout.strip()

    def set(self, key: str, value: str) -> None:
        result = self._git([key, value])
        if result.returncode != 0:
            raise CommandError(command=["git", "config", "--global", key, value], stderr=result.stderr)

    def ensure(self, prompter: Prompter) -> tuple[str, str]:
        """Make sure user.name and user.email are set, prompting when allowed.

        Returns:
            Tuple of (user name, email).

        Raises:
            ValidationError: If a value is missing and cannot be collected.
        """
        user_name = self.get("user.name")
        if not user_name:
            user_name = prompter.text("Please enter the name you wish to use with git:").strip()
            if not user_name:
                raise ValidationError(
                    "No Git user.name is defined. Please run the command: "
                    'git config --global --add user.name "MyName"'
                )
            self.set("user.name", user_name)

        user_email = self.get("user.email")
        if not user_email:
            user_email = prompter.text(
                "Please enter the email address you wish to use with git:"
            ).strip()
            if not user_email:
                raise ValidationError(
                    "No Git user.email is defined. Please run the command: "
                    'git config --global --add user.email "me@acme.com"'
                )
            self.set("user.email", user_email)

        logger.info("git configured", user=user_name, email=user_email)
        return user_name, user_email
