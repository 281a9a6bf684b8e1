"""Console output formatting utilities for crossbuild."""

from __future__ import annotations

import sys
from typing import Optional

import click


class Console:
    """Centralized console output formatting (everything except live progress)."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(
        self,
        module: str,
        job_count: int,
        skipped_count: int,
        parallelism: int,
    ) -> None:
        """Print run start information."""
        print(f"Module: {module}")
        print(f"Builds: {job_count} ({skipped_count} skipped)")
        print(f"running {parallelism} build(s) in parallel...")
        print()

    def print_plan_job(self, name: str, platform: str) -> None:
        """Print one planned build."""
        print(f"  {platform:>15}: {name}")

    def print_plan_job_skipped(self, name: str, platform: str, reason: str) -> None:
        """Print one planned build that will be skipped."""
        print(f"  {platform:>15}: {name} " + click.style(f"(skipped: {reason})", fg="yellow"))

    def print_artifacts(self, output_dir: str) -> None:
        """Print where build output went."""
        print(f"\nArtifacts: {output_dir}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print("\n" + click.style(f"ERROR: {title}", fg="red", bold=True), file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
