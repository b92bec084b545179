"""Shared test fixtures for pubtracker_setup."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

import pytest

from pubtracker_setup.config import SetupSettings
from pubtracker_setup.errors import ToolNotFoundError
from pubtracker_setup.prompts import Prompter, Validator
from pubtracker_setup.runner import CommandResult, CommandRunner, OutputMode
from pubtracker_setup.wizard import SetupWizard

T = TypeVar("T")

# Answer meaning "press enter": take the prompt's default
DEFAULT = object()


class FakeRunner(CommandRunner):
    """Records commands instead of executing them.

    Unscripted commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[tuple[str, ...], Path | None, OutputMode]] = []
        self._responses: dict[tuple[str, ...], tuple[int, str, Callable[[Path | None], None] | None]] = {}
        self._missing: set[str] = set()

    def respond(
        self,
        *args: str,
        returncode: int = 0,
        output: str = "",
        on_run: Callable[[Path | None], None] | None = None,
    ) -> None:
        self._responses[args] = (returncode, output, on_run)

    def missing(self, program: str) -> None:
        """Pretend program is not on PATH."""
        self._missing.add(program)

    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        mode: OutputMode = OutputMode.INHERIT,
    ) -> CommandResult:
        key = tuple(args)
        self.calls.append((key, cwd, mode))
        if args[0] in self._missing:
            raise ToolNotFoundError(list(args))
        returncode, output, on_run = self._responses.get(key, (0, "", None))
        if on_run is not None:
            on_run(cwd)
        return CommandResult(args=key, returncode=returncode, output=output)

    def ran(self, *args: str) -> bool:
        return any(call[0] == args for call in self.calls)

    def mode_of(self, *args: str) -> OutputMode:
        for call_args, _cwd, mode in self.calls:
            if call_args == args:
                return mode
        raise AssertionError(f"{args} was not run")


class ScriptedPrompter(Prompter):
    """Answers prompts from a queue.

    Text answers go through the validator like a real prompt would, so a
    rejected answer consumes the next queued one.
    """

    def __init__(self, *answers: Any) -> None:
        self.answers = list(answers)
        self.asked: list[str] = []
        self.rejections: list[str] = []

    def _next(self, message: str) -> Any:
        self.asked.append(message)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        return self.answers.pop(0)

    def confirm(self, message: str, *, default: bool) -> bool:
        answer = self._next(message)
        return default if answer is DEFAULT else bool(answer)

    def select(self, message: str, choices: Sequence[tuple[str, T]]) -> T:
        answer = self._next(message)
        if answer is DEFAULT:
            return choices[0][1]
        values = [value for _title, value in choices]
        assert answer in values, f"{answer!r} is not one of {values!r}"
        return answer  # type: ignore[no-any-return]

    def text(
        self,
        message: str,
        *,
        default: str = "",
        validate: Validator | None = None,
    ) -> str:
        while True:
            answer = self._next(message)
            if answer is DEFAULT:
                answer = default
            if validate is not None:
                verdict = validate(answer)
                if verdict is not True:
                    self.rejections.append(str(verdict))
                    continue
            return str(answer)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def settings(project_dir: Path) -> SetupSettings:
    return SetupSettings(project_dir=project_dir)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def output() -> list[str]:
    return []


@pytest.fixture
def make_wizard(
    settings: SetupSettings, runner: FakeRunner, output: list[str]
) -> Callable[..., SetupWizard]:
    """Build a wizard answering prompts with the given answers."""

    def _make(*answers: Any) -> SetupWizard:
        return SetupWizard(
            settings,
            ScriptedPrompter(*answers),
            runner=runner,
            echo=output.append,
        )

    return _make
