"""
Transient notifications for write results.

The terminal UI prints them; tests collect them in a list.
"""

from __future__ import annotations

from rich.console import Console


class Notifier:
    def success(self, message: str) -> None:
        raise NotImplementedError

    def error(self, message: str) -> None:
        raise NotImplementedError


class ConsoleNotifier(Notifier):
    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else Console()

    def success(self, message: str) -> None:
        self.console.print(f"[green]✔ {message}[/]")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]✖ {message}[/]")
