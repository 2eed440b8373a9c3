"""Console output formatting utilities for betterbuild."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

if TYPE_CHECKING:
    from betterbuild.model import RunResult, Target
    from betterbuild.params import Parameter


def _fmt_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(seconds, 60)
    return f"{int(minutes)}m{secs:04.1f}s"


class Console:
    """Centralized console output formatting."""

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

    def print_run_started(self, workflow: str, targets: Sequence[str], sequence: Sequence[str]) -> None:
        """Print run start information."""
        print("\nBUILD STARTED")
        print(f"Workflow: {workflow}")
        print(f"Requested: {', '.join(targets)}")
        print(f"Targets to run: {len(sequence)}")
        print()

    def print_plan(self, sequence: Sequence["Target"], skip: Iterable[str] = ()) -> None:
        """Print the resolved execution sequence."""
        skip = set(skip)
        self.print_header("PLAN")
        for idx, t in enumerate(sequence, start=1):
            suffix = " (skipped by request)" if t.name in skip else ""
            print(f"  {idx}. {t.name}{suffix}")

    def print_target_start(self, name: str) -> None:
        print(f"\nTARGET STARTED: {name}")

    def print_target_success(self, name: str, duration: float) -> None:
        print(f"STATUS: success ({_fmt_duration(duration)})")

    def print_target_skipped(self, name: str, reason: str) -> None:
        print(f"\nTARGET SKIPPED: {name} ({reason})")

    def print_target_failure(self, name: str, kind: str, reason: str) -> None:
        """
        Print failure message.

        Args:
            name: Target name
            kind: Error kind (e.g. StepFailure, ProducesViolation)
            reason: Failure reason/error message
        """
        print(f"TARGET FAILED: {name}")
        print(f"Kind: {kind}")
        if self.debug:
            print(f"Error details: {reason}")
        else:
            # First line only outside debug mode
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            print(f"Error: {error_line}")

    def print_results(self, run: "RunResult") -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        width = max([len(n) for n in run.sequence] + [6])
        for r in run.results:
            print(f"  {r.name:<{width}}  {r.outcome.value.upper():<20} {_fmt_duration(r.duration)}")
        ran = {r.name for r in run.results}
        for name in run.sequence:
            if name not in ran:
                print(f"  {name:<{width}}  {'NOT RUN':<20}")
        print("-" * 40)
        print(f"  {'Total':<{width}}  {run.status.value.upper():<20} {_fmt_duration(run.duration)}")
        if not run.succeeded:
            if run.failed_target:
                print(f"\nFailed target: {run.failed_target} ({run.error_kind})")
            elif run.interrupted:
                print("\nBuild interrupted")
            print(f"Completed before stop: {', '.join(run.completed) or '(none)'}")

    def print_targets(
        self,
        targets: Iterable["Target"],
        default: Optional[str],
        parameters: Iterable["Parameter"] = (),
    ) -> None:
        """Print available targets and declared parameters."""
        self.print_header("TARGETS")
        for t in targets:
            marker = " (default)" if t.name == default else ""
            line = f"  {t.name}{marker}"
            if t.depends_on:
                line += f" -> {', '.join(t.depends_on)}"
            print(line)
            if t.description:
                print(f"      {t.description}")
        params = list(parameters)
        if params:
            self.print_header("PARAMETERS")
            for p in params:
                desc = f"  {p.description}" if p.description else ""
                print(f"  --{p.name}{desc}")

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

    def print_exception(self, exc: BaseException) -> None:
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
