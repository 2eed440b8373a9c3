# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Tuple

# action(params) -> None | bool | Iterable[path]
Action = Callable[[Any], Any]
Guard = Callable[[Any], bool]


def _noop(params: Any) -> None:
    return None


@dataclass(frozen=True)
class Target:
    """
    A named unit of build work: dependencies + ordering hints + an action.

    `depends_on` is hard precedence (pulled into the run, must succeed first).
    `before` / `after` only order targets that are already part of the same run.
    """
    name: str
    depends_on: Tuple[str, ...] = ()
    before: Tuple[str, ...] = ()
    after: Tuple[str, ...] = ()
    action: Action = _noop
    produces: Tuple[str, ...] = ()
    guard: Optional[Guard] = None
    requires: Tuple[str, ...] = ()
    description: str = ""


class Outcome(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"
    PRODUCES_VIOLATION = "produces_violation"

    @property
    def is_failure(self) -> bool:
        return self in (Outcome.FAILED, Outcome.PRODUCES_VIOLATION)


class RunStatus(str, Enum):
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"


@dataclass
class TargetResult:
    name: str
    outcome: Outcome = Outcome.PENDING
    duration: float = 0.0
    reason: str | None = None           # skip reason or error message
    error_kind: str | None = None
    artifacts: Tuple[str, ...] = ()


@dataclass
class RunResult:
    """Per-target outcomes of one invocation, in execution order."""
    sequence: list[str]
    results: list[TargetResult] = field(default_factory=list)
    status: RunStatus = RunStatus.SUCCEEDED
    duration: float = 0.0
    failed_target: str | None = None
    error_kind: str | None = None
    error: BaseException | None = None
    interrupted: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCEEDED

    @property
    def completed(self) -> list[str]:
        """Targets that finished (succeeded or skipped) before the run stopped."""
        return [r.name for r in self.results if r.outcome in (Outcome.SUCCEEDED, Outcome.SKIPPED)]

    def outcome_of(self, name: str) -> Outcome:
        for r in self.results:
            if r.name == name:
                return r.outcome
        return Outcome.PENDING

    def outcomes(self) -> dict[str, Outcome]:
        return {r.name: r.outcome for r in self.results}
