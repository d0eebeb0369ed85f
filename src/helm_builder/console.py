"""Console output and error handling for the CLI.

This module provides the rich console wrapper used for per-stage progress
output, and the decorator that turns builder errors into a readable
diagnostic and a non-zero exit status.
"""

from collections.abc import Callable
from functools import wraps

import typer
from rich.console import Console, ConsoleRenderable
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .errors import HelmBuilderError


class CLIConsole:
    """Progress and diagnostics output for a build run.

    Args:
        console: Rich console to write to; tests pass a recording console
    """

    # Status prefixes, rendered before each progress line
    PREFIXES = {
        "info": "[cyan]ℹ[/cyan] ",
        "ok": "[green]✅[/green]",
        "warn": "[yellow]⚠️[/yellow] ",
        "error": "[red]❌[/red]",
    }

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        self.console.print(msg)

    def _status(self, kind: str, msg: str) -> None:
        self.console.print(f"{self.PREFIXES[kind]} {msg}")

    def info(self, msg: str) -> None:
        """Announce a stage that is starting."""
        self._status("info", msg)

    def ok(self, msg: str) -> None:
        """Report a stage that finished."""
        self._status("ok", msg)

    def warn(self, msg: str) -> None:
        self._status("warn", msg)

    def error(self, msg: str) -> None:
        self._status("error", msg)

    def print_header(self, title: str) -> None:
        """Print a section title in a boxed panel."""
        panel = Panel.fit(f"[bold]{escape(title)}[/bold]", border_style="blue")
        self.console.print(panel)

    def print_settings(self, items: list[tuple[str, str]], title: str) -> None:
        """Print key/value settings as a table."""
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Key")
        table.add_column("Value")
        for key, value in items:
            table.add_row(key, value or "[dim]-[/dim]")
        self.console.print(table)

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> None:
        """Handle an error by printing a message and exiting.

        Args:
            message: Error message to display
            details: Optional additional details
            exit_code: Exit code to use
        """
        self.error(f"[bold red]{escape(message)}[/bold red]")
        if details:
            self.console.print(
                Panel(escape(details), title="Details", border_style="red")
            )
        raise typer.Exit(exit_code)


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator to wrap command functions with standard error handling.

    Catches builder errors and interrupts and formats them consistently.

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function with error handling
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except HelmBuilderError as e:
            console.handle_error(e.message, e.details)
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper


# Shared console instance for consistent output
console = CLIConsole()
