"""
Output utility for the ztp CLI with colors and verbosity control.

Provides a centralized output manager using the Rich library, and the logging
setup used by the CLI.
"""

import logging
from enum import IntEnum
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table


class Verbosity(IntEnum):
    """Verbosity levels for output."""

    QUIET = 0  # Only errors and final results
    NORMAL = 1  # Standard output with colors
    VERBOSE = 2  # Detailed output including template names and paths


class OutputManager:
    """
    Centralized output manager for the ztp CLI.

    Provides methods for formatted output with colors and verbosity control.
    Messages go to stderr so that rendered templates can be written to stdout.
    """

    def __init__(self, verbosity: Verbosity = Verbosity.NORMAL):
        """
        Initialize the output manager.

        Args:
            verbosity: Verbosity level for output
        """
        self.verbosity = verbosity
        self.console = Console(stderr=True)
        self.error_console = Console(stderr=True)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        if self.verbosity != Verbosity.QUIET:
            self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, suggestion: Optional[str] = None) -> None:
        """Print an error message in red to stderr."""
        self.error_console.print(f"[red]✗ {escape(message)}[/red]")
        if suggestion and self.verbosity >= Verbosity.NORMAL:
            self.error_console.print(f"[yellow]💡 {escape(suggestion)}[/yellow]", style="yellow")

    def verbose(self, message: str) -> None:
        """Print a verbose message (only shown in VERBOSE mode)."""
        if self.verbosity >= Verbosity.VERBOSE:
            self.console.print(f"[dim]{message}[/dim]", style="dim")

    def table(
        self,
        title: str,
        columns: List[str],
        rows: List[List[str]],
        show_header: bool = True,
    ) -> None:
        """Print a table."""
        if self.verbosity != Verbosity.QUIET:
            table = Table(title=title, show_header=show_header, box=box.ROUNDED)
            for col in columns:
                table.add_column(col)
            for row in rows:
                table.add_row(*row)
            self.console.print(table)


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """
    Configure the 'ztp' logger for the CLI.

    Log levels:
    - Normal: only warnings and errors
    - Verbose (--verbose): INFO
    - Debug (ZTP_DEBUG=1): DEBUG, includes the text of parsed and executed templates

    Returns:
        The configured logger
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose or debug,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("ztp")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False
    return logger


# Global output manager instance
_output_manager: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """
    Get the global output manager instance.

    Returns:
        OutputManager instance
    """
    global _output_manager
    if _output_manager is None:
        _output_manager = OutputManager()
    return _output_manager


def set_output(manager: OutputManager) -> None:
    """Set the global output manager instance."""
    global _output_manager
    _output_manager = manager
