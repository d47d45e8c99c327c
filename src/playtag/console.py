"""Shared Rich console utilities for playtag.

Diagnostics meant for the user go to stderr through a global Rich console so
that stdout carries nothing but tag values.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

# Global console instance (initialized in CLI)
_console: Console | None = None


def get_console() -> Console:
    """Get the global Rich console instance, creating a stderr console on first use."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def set_console(console: Console) -> None:
    """Set the global Rich console instance.

    Args:
        console: The Console instance to use globally
    """
    global _console
    _console = console


def print_error(message: str) -> None:
    """Print an error message in red.

    Args:
        message: Error message to display
    """
    get_console().print(f"[red]Error: {escape(message)}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message in yellow.

    Args:
        message: Warning message to display
    """
    get_console().print(f"[yellow]Warning: {escape(message)}[/yellow]")


def print_success(message: str) -> None:
    """Print a success message in green.

    Args:
        message: Success message to display
    """
    get_console().print(f"[green]{escape(message)}[/green]")
