# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List


class BuildError(Exception):
    """Base class for everything the engine raises on purpose."""


# ----------------------------------------------------------------------
# Configuration errors (detected before any action runs)
# ----------------------------------------------------------------------

class ConfigurationError(BuildError):
    """The build definition or the request is invalid."""


class DuplicateTargetError(ConfigurationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Target '{name}' is already registered")


class UnknownTargetError(ConfigurationError):
    def __init__(self, name: str, known: Iterable[str], referenced_by: str | None = None):
        self.name = name
        self.known = sorted(known)
        self.referenced_by = referenced_by
        if referenced_by:
            msg = f"Target '{referenced_by}' references missing target '{name}'"
        else:
            msg = f"Unknown target '{name}'"
        super().__init__(f"{msg}. Known targets: {self.known}")


class CycleError(ConfigurationError):
    """
    Raised when ordering edges form a cycle.

    `cycle` lists the participating targets in traversal order, with the
    first node repeated at the end (e.g. ["a", "b", "a"]).
    """

    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        super().__init__(f"Dependency cycle detected: {' -> '.join(self.cycle)}")

    @property
    def targets(self) -> set[str]:
        return set(self.cycle)


class MissingParameterError(ConfigurationError):
    def __init__(self, name: str, env_var: str | None = None):
        self.name = name
        self.env_var = env_var
        hint = f" (set it with -p {name}=... or ${env_var})" if env_var else ""
        super().__init__(f"Parameter '{name}' has no value{hint}")


class NoTargetError(ConfigurationError):
    def __init__(self):
        super().__init__("No target requested and no default target configured")


class WorkflowError(ConfigurationError):
    """The workflow file could not be loaded or did not define a build."""


# ----------------------------------------------------------------------
# Execution errors (raised while a target runs)
# ----------------------------------------------------------------------

@dataclass
class ExecutionError(BuildError):
    """
    Structured failure of a single target, with enough context for:
      - clean CLI output
      - the run report
      - debugging without full tracebacks
    """
    kind: str
    target: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}", f"target={self.target}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class ProducesViolation(ExecutionError):
    kind: str = "ProducesViolation"
    target: str = ""
    message: str = ""
    details: dict = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)


@dataclass
class StepFailure(ExecutionError):
    """A shell command started by `sh()` exited non-zero."""
    kind: str = "StepFailure"
    target: str = ""
    message: str = ""
    details: dict = field(default_factory=dict)
    cmd: str = ""
    exit_code: int = 1
