"""Console output and error handling for CLI commands."""

from collections.abc import Callable
from functools import wraps
from typing import NoReturn

import typer
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel
from rich.status import Status

from gitops_promoter.errors import PromotionError


class CLIConsole:
    """Rich console wrapper for consistent CLI output."""

    def __init__(self, stderr: bool = False) -> None:
        """Initialize the CLI console."""
        self.console = Console(stderr=stderr)

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        self.console.print(msg)

    def status(self, status: str) -> Status:
        return self.console.status(status)

    def ok(self, msg: str) -> None:
        self.console.print(f"[green]✅[/green] {msg}")

    def error(self, msg: str) -> None:
        self.console.print(f"[red]❌[/red] {msg}")

    def warn(self, msg: str) -> None:
        self.console.print(f"[yellow]⚠️[/yellow]  {msg}")

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> NoReturn:
        """Handle an error by printing a message and exiting.

        Args:
            message: Error message to display
            details: Optional additional details
            exit_code: Exit code to use
        """
        self.error(f"[bold red]{message}[/bold red]")
        if details:
            self.console.print(Panel(details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)


def format_error(error: PromotionError) -> str:
    """One-line summary of a promotion error with its context."""
    where = ", ".join(f"{key}={value}" for key, value in error.context.items())
    return f"{error.message} ({where})" if where else error.message


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator to wrap command functions with standard error handling.

    Catches promotion errors and formats them consistently.

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function with error handling
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except PromotionError as e:
            err_console.handle_error(format_error(e), e.details)
        except KeyboardInterrupt:
            err_console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper


# Shared console instances; results go to stdout, diagnostics to stderr
console = CLIConsole()
err_console = CLIConsole(stderr=True)
