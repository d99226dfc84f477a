"""Prompt capability used by the bootstrap workflow and context switcher.

Workflow code asks a Prompter for a selection, free text or a confirmation.
Interactive runs are backed by questionary; batch runs answer every question
with its default, so the calling logic is the same either way.
"""

from __future__ import annotations

from typing import Protocol

import questionary


class Prompter(Protocol):
    """Minimal prompt capability."""

    interactive: bool

    def select(self, message: str, choices: list[str], default: str | None = None) -> str:
        """Pick one of choices."""
        ...

    def text(self, message: str, default: str = "") -> str:
        """Read free text."""
        ...

    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask a yes/no question."""
        ...


class QuestionaryPrompter:
    """Interactive prompts with keyboard navigation."""

    interactive = True

    def select(self, message: str, choices: list[str], default: str | None = None) -> str:
        """Show a single-select list.

        Raises:
            KeyboardInterrupt: If user cancels (Ctrl+C)
        """
        if default not in choices:
            default = None
        answer = questionary.select(message, choices=choices, default=default).ask()
        if answer is None:
            raise KeyboardInterrupt("Selection cancelled by user")
        return answer

    def text(self, message: str, default: str = "") -> str:
        answer = questionary.text(message, default=default).ask()
        if answer is None:
            raise KeyboardInterrupt("Input cancelled by user")
        return answer.strip()

    def confirm(self, message: str, default: bool = True) -> bool:
        answer = questionary.confirm(message, default=default).ask()
        if answer is None:
            raise KeyboardInterrupt("Confirmation cancelled by user")
        return answer


class BatchPrompter:
    """Non-interactive mode: every question takes its default."""

    interactive = False

    def select(self, message: str, choices: list[str], default: str | None = None) -> str:
        if default is not None:
            return default
        return choices[0] if choices else ""

    def text(self, message: str, default: str = "") -> str:
        return default

    def confirm(self, message: str, default: bool = True) -> bool:
        return default


def make_prompter(batch_mode: bool) -> Prompter:
    """Return the prompter matching the execution mode."""
    if batch_mode:
        return BatchPrompter()
    return QuestionaryPrompter()
