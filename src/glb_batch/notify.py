"""Progress and HUD-style notifications rendered on a rich console."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from rich.console import Console
from rich.markup import escape


class Status(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    WARNING = "warning"


_STATUS_STYLE: dict[Status, tuple[str, str]] = {
    Status.SUCCESS: ("bold green", "✔"),
    Status.FAILURE: ("bold red", "✖"),
    Status.WARNING: ("bold yellow", "⚠"),
}


class ProgressHandle(Protocol):
    def update(self, message: str) -> None: ...

    def finish(self, status: Status, message: str) -> None: ...


class Notifier(Protocol):
    def start(self, title: str, message: str) -> ProgressHandle: ...

    def hud(self, message: str, status: Status = Status.FAILURE) -> None: ...


def _styled(status: Status, message: str) -> str:
    style, icon = _STATUS_STYLE[status]
    return f"[{style}]{icon}[/] {escape(message)}"


class ConsoleProgress:
    """Progress handle printing one line per update."""

    def __init__(self, console: Console, title: str) -> None:
        self._console = console
        self.title = title
        self.finished = False

    def update(self, message: str) -> None:
        self._console.print(f"  [cyan]…[/] {escape(message)}")

    def finish(self, status: Status, message: str) -> None:
        if self.finished:
            raise RuntimeError(f"Progress '{self.title}' already finished")
        self.finished = True
        self._console.print(_styled(status, message))


class ConsoleNotifier:
    """Notifier writing to a rich Console (stdout by default)."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def start(self, title: str, message: str) -> ConsoleProgress:
        self.console.print(f"[bold]{escape(title)}[/] [dim]{escape(message)}[/]")
        return ConsoleProgress(self.console, title)

    def hud(self, message: str, status: Status = Status.FAILURE) -> None:
        self.console.print(_styled(status, message))
