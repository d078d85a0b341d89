"""Console output formatting utilities for wacgen."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces and diffs
        """
        self.debug = debug

    def print_run_started(self, mode: str, sources: list[str], workflow_count: int) -> None:
        """Print run start information."""
        print(f"\n{mode.upper()} STARTED")
        print(f"Sources: {', '.join(sources) if sources else '(none)'}")
        print(f"Workflows: {workflow_count}")
        print()

    def print_generated(self, slug: str, path: str) -> None:
        print(f"GENERATED: {slug} -> {path}")

    def print_in_sync(self, slug: str, path: str) -> None:
        print(f"OK: {slug} ({path})")

    def print_failure(self, slug: str, reason: str, hint: Optional[str] = None) -> None:
        """
        Print a per-workflow failure.

        Args:
            slug: Workflow slug
            reason: Failure reason/error message
            hint: Optional remediation hint
        """
        print(f"FAILED: {slug}", file=sys.stderr)
        print(f"Error: {reason}", file=sys.stderr)
        if hint:
            print(f"Hint: {hint}", file=sys.stderr)

    def print_diff(self, diff: str) -> None:
        """Print a unified diff (debug mode only)."""
        if self.debug and diff:
            print(diff, file=sys.stderr, end="" if diff.endswith("\n") else "\n")

    def print_results(self, results: dict[str, str]) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for slug, status in results.items():
            print(f"  {slug}: {status.upper()}")

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
        print(f"\nERROR: {title}", file=sys.stderr)
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
