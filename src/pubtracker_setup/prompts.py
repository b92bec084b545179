"""Interactive prompts.

Prompter is the seam between the wizard and the terminal. The production
implementation uses questionary; tests substitute queued answers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import questionary

from pubtracker_setup.errors import SetupCancelled

T = TypeVar("T")

# True when valid, otherwise the message shown before re-prompting
Validator = Callable[[str], bool | str]


def require_non_empty(message: str) -> Validator:
    """Validator rejecting empty and whitespace-only answers."""

    def _validate(value: str) -> bool | str:
        if value and value.strip():
            return True
        return message

    return _validate


class Prompter(ABC):
    """Asks the user questions."""

    @abstractmethod
    def confirm(self, message: str, *, default: bool) -> bool:
        """Yes/no question."""
        ...

    @abstractmethod
    def select(self, message: str, choices: Sequence[tuple[str, T]]) -> T:
        """Single choice from (title, value) pairs. The first is preselected."""
        ...

    @abstractmethod
    def text(
        self,
        message: str,
        *,
        default: str = "",
        validate: Validator | None = None,
    ) -> str:
        """Free text. Re-asks until validate returns True."""
        ...


class QuestionaryPrompter(Prompter):
    """Terminal prompts rendered by questionary.

    Ctrl-C raises KeyboardInterrupt rather than returning None.
    """

    def confirm(self, message: str, *, default: bool) -> bool:
        answer: bool = questionary.confirm(message, default=default).unsafe_ask()
        return answer

    def select(self, message: str, choices: Sequence[tuple[str, T]]) -> T:
        answer: T = questionary.select(
            message,
            choices=[questionary.Choice(title=title, value=value) for title, value in choices],
        ).unsafe_ask()
        return answer

    def text(
        self,
        message: str,
        *,
        default: str = "",
        validate: Validator | None = None,
    ) -> str:
        kwargs: dict[str, Any] = {"default": default}
        if validate is not None:
            kwargs["validate"] = validate
        answer: str = questionary.text(message, **kwargs).unsafe_ask()
        return answer


def confirm_or_exit(
    prompter: Prompter,
    question: str,
    *,
    default: bool,
    on_decline: str,
) -> None:
    """Ask a yes/no question and stop the wizard on "no".

    Raises:
        SetupCancelled: With on_decline as its message, if the user declines.
    """
    if not prompter.confirm(question, default=default):
        raise SetupCancelled(on_decline)
