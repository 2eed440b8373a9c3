# executor.py
from __future__ import annotations

import glob
import time
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from .errors import BuildError, ExecutionError, ProducesViolation
from .model import Outcome, RunResult, RunStatus, Target, TargetResult
from .ui.console import Console, get_console


def _artifacts(returned: Any) -> Tuple[str, ...]:
    """Normalize an action's return value into a tuple of artifact paths."""
    if returned is None or returned is True:
        return ()
    if isinstance(returned, (str, Path)):
        return (str(returned),)
    return tuple(str(p) for p in returned)


def _pattern_matches(pattern: str, root: Path) -> bool:
    full = pattern if Path(pattern).is_absolute() else str(Path(glob.escape(str(root))) / pattern)
    return any(Path(p).is_file() for p in glob.iglob(full, recursive=True))


def verify_produces(target: Target, root: Path) -> List[str]:
    """
    Return the produces patterns that matched no file.

    Only files on disk count. A path the action returned but never wrote is
    not an artifact, and `*` does not cross directory separators.
    """
    return [p for p in target.produces if not _pattern_matches(p, root)]


class Executor:
    """
    Runs a resolved target sequence strictly in order, one target at a time.

    Fail-fast: the first failing target (action error, action returning False,
    or a produces violation) stops the run; nothing after it executes.
    """

    def __init__(self, console: Optional[Console] = None, clock: Callable[[], float] = time.perf_counter):
        self.console = console or get_console()
        self.clock = clock
        self._cancelled = False

    def cancel(self) -> None:
        """Stop before the next target starts. A running action is not interrupted."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def run(self, sequence: Sequence[Target], params: Any, *, skip: Iterable[str] = ()) -> RunResult:
        skip = set(skip)
        self._cancelled = False
        run = RunResult(sequence=[t.name for t in sequence])
        started = self.clock()
        root = Path(getattr(params, "root", None) or ".").resolve()

        try:
            for t in sequence:
                if self._cancelled:
                    self._abort(run, interrupted=True)
                    break

                result = TargetResult(name=t.name)
                self._run_target(t, params, root, result, run, skip)
                run.results.append(result)

                if result.outcome.is_failure:
                    run.status = RunStatus.ABORTED
                    run.failed_target = t.name
                    run.error_kind = result.error_kind
                    break
        except KeyboardInterrupt:
            # arrived between targets
            self._abort(run, interrupted=True)
        finally:
            run.duration = self.clock() - started

        return run

    # ------------------------------------------------------------------

    def _abort(self, run: RunResult, *, interrupted: bool) -> None:
        run.status = RunStatus.ABORTED
        run.interrupted = interrupted
        run.error_kind = run.error_kind or "Interrupted"

    def _run_target(
        self,
        t: Target,
        params: Any,
        root: Path,
        result: TargetResult,
        run: RunResult,
        skip: set,
    ) -> None:
        if t.name in skip:
            result.outcome = Outcome.SKIPPED
            result.reason = "skipped by request"
            self.console.print_target_skipped(t.name, result.reason)
            return

        t0 = self.clock()
        try:
            if t.guard is not None and not t.guard(params):
                result.outcome = Outcome.SKIPPED
                result.reason = "condition is false"
                self.console.print_target_skipped(t.name, result.reason)
                return

            self.console.print_target_start(t.name)
            returned = t.action(params)
            if returned is False:
                raise ExecutionError(kind="ActionFailed", target=t.name, message="action reported failure")

            result.artifacts = _artifacts(returned)
            missing = verify_produces(t, root)
            if missing:
                raise ProducesViolation(
                    target=t.name,
                    message=f"no artifact matches {missing}",
                    details={"missing": ", ".join(missing), "root": str(root)},
                    missing=missing,
                )

            result.outcome = Outcome.SUCCEEDED
            result.duration = self.clock() - t0
            self.console.print_target_success(t.name, result.duration)

        except KeyboardInterrupt as e:
            err = ExecutionError(kind="Interrupted", target=t.name, message="interrupted while running")
            err.__cause__ = e
            self._fail(result, run, Outcome.FAILED, err, t0)
            run.interrupted = True

        except ProducesViolation as e:
            self._fail(result, run, Outcome.PRODUCES_VIOLATION, e, t0)

        except ExecutionError as e:
            if not e.target:
                e.target = t.name
            self._fail(result, run, Outcome.FAILED, e, t0)

        except Exception as e:
            # p.name attribute reads surface a missing parameter as AttributeError
            if isinstance(e, AttributeError) and isinstance(e.__cause__, BuildError):
                e = e.__cause__
            err = ExecutionError(kind=type(e).__name__, target=t.name, message=str(e))
            err.__cause__ = e
            self._fail(result, run, Outcome.FAILED, err, t0)

    def _fail(self, result: TargetResult, run: RunResult, outcome: Outcome, err: ExecutionError, t0: float) -> None:
        result.outcome = outcome
        result.duration = self.clock() - t0
        result.error_kind = err.kind
        result.reason = err.message
        run.error = err
        self.console.print_target_failure(result.name, err.kind, str(err))
