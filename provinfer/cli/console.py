"""Console output for the CLI.

Provides a Console class that wraps rich for consistent output. Diagnostics
and status go to stderr so stdout can carry the schema document.
"""

from collections.abc import Sequence
from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table

from provinfer.errors import InferenceError


class Console:
    """CLI output manager wrapping rich."""

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        """Initialize the console.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None).
            quiet: Suppress non-essential output.
        """
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        """Print a success message."""
        self._err_console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._err_console.print(f"[dim]{message}[/dim]")

    # -------------------------------------------------------------------------
    # Structured output
    # -------------------------------------------------------------------------

    def document(self, text: str) -> None:
        """Write a document to stdout without markup or wrapping."""
        self._console.print(text, markup=False, highlight=False, soft_wrap=True)

    def diagnostics(self, errors: Sequence[InferenceError], *, title: str | None = None) -> None:
        """Print one row per inference error, with its location notes."""
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("#", style="dim", width=3)
        table.add_column("Code", style="red")
        table.add_column("Error")
        table.add_column("Where", style="dim")

        for i, error in enumerate(errors, 1):
            notes: list[Any] = getattr(error, "__notes__", [])
            table.add_row(str(i), error.code, error.message, "\n".join(notes))

        self._err_console.print(table)
