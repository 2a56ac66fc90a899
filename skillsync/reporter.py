"""Reporters — how the core shows progress and asks for confirmation."""

from __future__ import annotations

from typing import Protocol

import click
from rich.console import Console
from rich.markup import escape
from rich.status import Status


class Reporter(Protocol):
    """Status, messages, and yes/no prompts for a running command."""

    def start(self, message: str) -> None: ...

    def stop(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def confirm(self, message: str, default: bool = True) -> bool | None:
        """Return the answer, or None if the user cancelled."""
        ...


class ConsoleReporter:
    """Rich console output with a spinner around long phases.

    With ``assume_yes`` every prompt answers "proceed" without asking.
    """

    def __init__(self, console: Console | None = None, assume_yes: bool = False):
        self.console = console or Console()
        self.assume_yes = assume_yes
        self._status: Status | None = None

    def start(self, message: str) -> None:
        self._end_status()
        self._status = self.console.status(escape(message))
        self._status.start()

    def stop(self, message: str) -> None:
        self._end_status()
        self.console.print(f"  {escape(message)}")

    def info(self, message: str) -> None:
        self.console.print(escape(message))

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]![/] {escape(message)}")

    def success(self, message: str) -> None:
        self.console.print(f"[green]v[/] {escape(message)}")

    def confirm(self, message: str, default: bool = True) -> bool | None:
        if self.assume_yes:
            return True
        self._end_status()
        try:
            return click.confirm(message, default=default)
        except click.Abort:
            return None

    def _end_status(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


class RecordingReporter:
    """Collects messages instead of printing them.

    ``answers`` are returned by ``confirm`` in order; once exhausted, the
    prompt's default is used.
    """

    def __init__(self, answers: list[bool | None] | None = None):
        self.answers = list(answers or [])
        self.messages: list[tuple[str, str]] = []

    def start(self, message: str) -> None:
        self.messages.append(("start", message))

    def stop(self, message: str) -> None:
        self.messages.append(("stop", message))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warn(self, message: str) -> None:
        self.messages.append(("warn", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def confirm(self, message: str, default: bool = True) -> bool | None:
        self.messages.append(("confirm", message))
        if self.answers:
            return self.answers.pop(0)
        return default

    def of(self, level: str) -> list[str]:
        return [message for kind, message in self.messages if kind == level]
