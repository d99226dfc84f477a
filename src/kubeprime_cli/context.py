"""Context switching for kubeprime-cli.

Lists the contexts in the kubeconfig, optionally filters them, lets the
operator pick one and persists it as the current context.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidArgumentError, NoContextsError
from .kubeconfig import KubeConfig, load_kubeconfig, set_current_context
from .prompts import Prompter, QuestionaryPrompter
from .shared.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ContextSwitchResult:
    """Outcome of a context switch."""

    changed: bool
    context: str
    namespace: str
    server: str

    def render(self, style: Callable[[str], str] = str) -> str:
        """Report line; style decorates the namespace, context and server."""
        prefix = "Now using" if self.changed else "Using"
        return (
            f"{prefix} namespace '{style(self.namespace)}' from context named "
            f"'{style(self.context)}' on server '{style(self.server)}'."
        )


class ContextSwitcher:
    """View or change the current kubernetes context."""

    def __init__(
        self,
        kubeconfig: str | Path | None = None,
        prompter: Prompter | None = None,
    ):
        """Initialize switcher.

        Args:
            kubeconfig: Path to kubeconfig file.
            prompter: Prompter used when no context name is given.
        """
        self.kubeconfig = kubeconfig
        self.prompter = prompter or QuestionaryPrompter()

    def run(
        self,
        args: list[str] | tuple[str, ...],
        filter_text: str = "",
        batch_mode: bool = False,
    ) -> ContextSwitchResult:
        """Resolve the target context and make it current.

        Args:
            args: Positional arguments; the first one names the context.
            filter_text: Only consider contexts whose name contains this text.
            batch_mode: Never prompt.

        Returns:
            ContextSwitchResult describing the context now in use.

        Raises:
            NoContextsError: If the kubeconfig defines no contexts.
            InvalidArgumentError: If the named context is not a candidate.
        """
        config = load_kubeconfig(self.kubeconfig)
        if not config.contexts:
            raise NoContextsError()

        names = self.candidate_names(config, filter_text)

        name = ""
        if args:
            name = args[0]
            if name not in names:
                raise InvalidArgumentError(value=name, choices=names)

        if not name and not batch_mode:
            name = self.pick_context(names, config.current_context)

        if name and name != config.current_context:
            context = config.contexts[name]
            set_current_context(config, name)
            logger.info("switched context", context=name, kubeconfig=str(config.path))
            return ContextSwitchResult(
                changed=True,
                context=name,
                namespace=context.namespace,
                server=config.server_for(context),
            )

        return ContextSwitchResult(
            changed=False,
            context=config.current_context,
            namespace=config.current_namespace(),
            server=config.current_server(),
        )

    @staticmethod
    def candidate_names(config: KubeConfig, filter_text: str = "") -> list[str]:
        """Sorted context names containing filter_text."""
        return sorted(name for name in config.contexts if not filter_text or filter_text in name)

    def pick_context(self, names: list[str], default: str) -> str:
        """Prompt for a context; zero candidates pick nothing, one is taken as is."""
        if not names:
            return ""
        if len(names) == 1:
            return names[0]
        return self.prompter.select("Change kubernetes context:", names, default=default)
