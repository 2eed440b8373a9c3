from .build import Build
from .dag import DependencyGraph
from .dsl import TargetBuilder, sh, target
from .errors import (
    BuildError,
    ConfigurationError,
    CycleError,
    DuplicateTargetError,
    ExecutionError,
    MissingParameterError,
    NoTargetError,
    ProducesViolation,
    StepFailure,
    UnknownTargetError,
)
from .executor import Executor
from .model import Outcome, RunResult, RunStatus, Target, TargetResult
from .params import Parameter, ParameterSource, ParameterStore, as_bool, parameter
from .resolve import OrderingMode, Resolver

__all__ = [
    "Build", "DependencyGraph", "TargetBuilder", "sh", "target",
    "BuildError", "ConfigurationError", "CycleError", "DuplicateTargetError", "ExecutionError",
    "MissingParameterError", "NoTargetError", "ProducesViolation", "StepFailure", "UnknownTargetError",
    "Executor", "Outcome", "RunResult", "RunStatus", "Target", "TargetResult",
    "Parameter", "ParameterSource", "ParameterStore", "as_bool", "parameter",
    "OrderingMode", "Resolver",
]
