"""Rich output helpers for the gatestore-db CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape


def get_console(stderr: bool = False) -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=stderr)


class Logger:
    """Operator-facing messages. Prints nothing when silent.

    Messages may contain Rich markup; pass untrusted text through
    ``rich.markup.escape`` first.
    """

    def __init__(self, silent: bool = False, console: Console | None = None, err_console: Console | None = None) -> None:
        self.silent = silent
        self._console = console or get_console()
        self._err_console = err_console or get_console(stderr=True)

    def log(self, message: str) -> None:
        self._print(self._console, message)

    def success(self, message: str) -> None:
        self._print(self._console, f"[green]Success:[/green] {message}")

    def error(self, message: str) -> None:
        self._print(self._err_console, f"[red]Error:[/red] {message}")

    def _print(self, console: Console, message: str) -> None:
        if not self.silent:
            console.print(message, highlight=False, soft_wrap=True)


def yellow(text: object) -> str:
    return f"[yellow]{escape(str(text))}[/yellow]"
