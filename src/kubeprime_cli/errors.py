"""Error taxonomy for kubeprime-cli.

Validation errors are reported immediately, command errors are candidates for
retry at the call site, and wait timeouts are always fatal to the phase that
owns them.
"""

from dataclasses import dataclass, field

NO_CONTEXTS_MESSAGE = "No kubernetes contexts available! Try create or connect to cluster?"


@dataclass
class KubeprimeError(Exception):
    """Base error class for kubeprime errors."""

    message: str
    hint: str | None = None
    retryable: bool = False

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n{self.hint}"
        return self.message


@dataclass
class ValidationError(KubeprimeError):
    """User input or configuration is invalid; never retried."""


@dataclass
class MissingOptionError(ValidationError):
    """A required option has no value."""

    message: str = ""
    option: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Missing option: --{self.option}"


@dataclass
class InvalidArgumentError(ValidationError):
    """A value is not one of the allowed choices."""

    message: str = ""
    value: str = ""
    choices: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.message:
            self.message = (
                f"Invalid option: {self.value}\nPossible values: {', '.join(self.choices)}"
            )


@dataclass
class NoContextsError(KubeprimeError):
    """The kubeconfig defines no contexts."""

    message: str = NO_CONTEXTS_MESSAGE


@dataclass
class KubeconfigError(KubeprimeError):
    """The kubeconfig could not be read or written."""


@dataclass
class CommandError(KubeprimeError):
    """An external command (kubectl, helm, git) failed."""

    message: str = ""
    command: list[str] = field(default_factory=list)
    stderr: str = ""
    retryable: bool = True

    def __post_init__(self) -> None:
        if not self.message:
            detail = self.stderr.strip() or "exit status non-zero"
            self.message = f"{' '.join(self.command)} failed: {detail}"


@dataclass
class WaitTimeoutError(KubeprimeError):
    """A bounded wait expired before the awaited condition held."""

    message: str = ""
    what: str = ""
    timeout_seconds: float = 0.0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = (
                f"Timed out after {format_duration(self.timeout_seconds)} waiting for {self.what}"
            )


def format_duration(seconds: float) -> str:
    """Render a duration the way operators read it (e.g. 10m0s, 45s)."""
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"
