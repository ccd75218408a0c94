"""
L4 Execution — Operator interaction.

The installer steps never read stdin.  They ask an Operator, which is
either the real terminal (ConsoleOperator) or a script of answers
(ScriptedOperator, used by tests and by ``--yes``).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import click

logger = logging.getLogger(__name__)

_YES = {"y", "yes"}
_NO = {"n", "no"}


class OperatorError(Exception):
    """The operator could not supply a required answer."""


class Operator(ABC):
    """Blocking prompts used by the installer steps."""

    @abstractmethod
    def pause(self, message: str) -> None:
        """Block until the operator acknowledges *message*."""

    @abstractmethod
    def confirm(self, prompt: str, default: bool = False) -> bool:
        """Yes/no question."""

    @abstractmethod
    def ask(self, prompt: str, default: str | None = None) -> str:
        """Free-text question; an empty reply returns *default* (or "")."""


class ConsoleOperator(Operator):
    """Interactive terminal prompts via click."""

    def pause(self, message: str) -> None:
        click.prompt(
            click.style(message, fg="yellow"),
            default="",
            show_default=False,
            prompt_suffix=" ",
        )

    def confirm(self, prompt: str, default: bool = False) -> bool:
        return click.confirm(prompt, default=default)

    def ask(self, prompt: str, default: str | None = None) -> str:
        if default:
            text = f"{prompt} (or press Enter for '{default}')"
        else:
            text = prompt
        reply = click.prompt(text, default="", show_default=False)
        reply = reply.strip()
        return reply or (default or "")


class ScriptedOperator(Operator):
    """Answers from a fixed list; an exhausted script presses Enter.

    Every prompt is recorded in ``prompts`` so tests can assert on the
    conversation.  An ``ask`` with no scripted answer and no default
    raises OperatorError instead of looping forever.
    """

    def __init__(self, answers: list[str] | None = None):
        self._answers = list(answers or [])
        self.prompts: list[str] = []

    def _next(self) -> str | None:
        if self._answers:
            return self._answers.pop(0)
        return None

    @property
    def remaining(self) -> int:
        return len(self._answers)

    def pause(self, message: str) -> None:
        self.prompts.append(message)
        self._next()

    def confirm(self, prompt: str, default: bool = False) -> bool:
        self.prompts.append(prompt)
        answer = (self._next() or "").strip().lower()
        if answer in _YES:
            return True
        if answer in _NO:
            return False
        return default

    def ask(self, prompt: str, default: str | None = None) -> str:
        self.prompts.append(prompt)
        answer = self._next()
        if answer is None and not default:
            raise OperatorError(f"No answer available for: {prompt}")
        answer = (answer or "").strip()
        return answer or (default or "")
