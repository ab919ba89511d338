"""Rich console output utilities for the extcli command line."""

from rich.console import Console


console = Console()
error_console = Console(stderr=True)


def print_line(message: str) -> None:
    """Print a plain line to stdout.

    Extension names come from the gallery, so no markup or highlighting
    is applied.
    """
    console.print(message, markup=False, highlight=False, emoji=False, soft_wrap=True)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print("[red]✗[/red] ", end="")
    error_console.print(message, markup=False, highlight=False, emoji=False, soft_wrap=True)
