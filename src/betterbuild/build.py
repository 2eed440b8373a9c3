"""Build: the entry point tying graph, parameters, resolver and executor together."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .dag import DependencyGraph
from .errors import ConfigurationError, NoTargetError, UnknownTargetError
from .executor import Executor
from .model import RunResult, Target
from .params import Parameter, ParameterStore
from .resolve import OrderingMode, Resolver
from .ui.console import Console, get_console

EXIT_OK = 0
EXIT_EXECUTION_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_INTERRUPTED = 130


def _as_names(targets: str | Sequence[str] | None) -> List[str]:
    if targets is None:
        return []
    if isinstance(targets, str):
        return [targets]
    return list(targets)


def exit_status(run: RunResult) -> int:
    if run.succeeded:
        return EXIT_OK
    if run.interrupted:
        return EXIT_INTERRUPTED
    return EXIT_EXECUTION_ERROR


class Build:
    """
    One build definition: targets, parameters and a default target.

        build = Build(default="publish")
        build.parameter("configuration", default=lambda p: "Debug" if p.is_local_build else "Release")
        build.register(
            target("restore").executes(sh("pip install -r requirements.txt")),
            target("compile").depends_on("restore").executes(...),
        )
        raise SystemExit(build.run())
    """

    def __init__(
        self,
        default: Optional[str] = None,
        *,
        name: str = "build",
        root: str | Path | None = None,
        env_prefix: str = "",
        ordering: OrderingMode = OrderingMode.SOFT,
    ):
        self.name = name
        self.default = default
        self.root = Path(root) if root is not None else None
        self.env_prefix = env_prefix
        self.ordering = ordering
        self.graph = DependencyGraph()
        self._parameters: dict[str, Parameter] = {}

    # ---- definition ----

    def parameter(self, name: str, description: str = "", **kwargs: Any) -> Parameter:
        return self.add_parameter(Parameter(name=name, description=description, **kwargs))

    def add_parameter(self, param: Parameter) -> Parameter:
        if param.name in self._parameters:
            raise ConfigurationError(f"Parameter '{param.name}' is already declared")
        self._parameters[param.name] = param
        return param

    def register(self, *targets) -> "Build":
        for t in targets:
            self.graph.register(t)
        return self

    @property
    def parameters(self) -> List[Parameter]:
        return list(self._parameters.values())

    @property
    def targets(self) -> List[Target]:
        return list(self.graph)

    # ---- resolution ----

    def requested(self, targets: str | Sequence[str] | None = None) -> List[str]:
        """Explicit target names, or the default; NoTargetError if neither."""
        names = _as_names(targets)
        if names:
            return names
        if not self.default:
            raise NoTargetError()
        return [self.default]

    def plan(self, targets: str | Sequence[str] | None = None) -> List[Target]:
        names = self.requested(targets)
        self.graph.build()
        return Resolver(self.graph, self.ordering).resolve(*names)

    def parameter_store(
        self,
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> ParameterStore:
        return ParameterStore(
            self.parameters,
            overrides=overrides,
            environ=environ,
            env_prefix=self.env_prefix,
            root=self.root,
        )

    def _check_skip(self, skip: Iterable[str]) -> List[str]:
        skip = list(skip)
        for name in skip:
            if name not in self.graph:
                raise UnknownTargetError(name, self.graph.names())
        return skip

    # ---- execution ----

    def execute(
        self,
        targets: str | Sequence[str] | None = None,
        overrides: Optional[Mapping[str, Any]] = None,
        *,
        skip: Iterable[str] = (),
        environ: Optional[Mapping[str, str]] = None,
        executor: Optional[Executor] = None,
    ) -> RunResult:
        """
        Resolve and run. Configuration problems raise before any action runs;
        execution problems are reported in the returned RunResult.
        """
        sequence = self.plan(targets)
        skip = self._check_skip(skip)
        params = self.parameter_store(overrides, environ)

        # required parameters must resolve up front
        for t in sequence:
            if t.name in skip:
                continue
            for name in t.requires:
                params.get(name)

        return (executor or Executor()).run(sequence, params, skip=skip)

    def run(
        self,
        targets: str | Sequence[str] | None = None,
        overrides: Optional[Mapping[str, Any]] = None,
        *,
        skip: Iterable[str] = (),
        environ: Optional[Mapping[str, str]] = None,
        console: Optional[Console] = None,
    ) -> int:
        """Run and report; returns the process exit status."""
        console = console or get_console()
        try:
            sequence = self.plan(targets)
            console.print_run_started(self.name, self.requested(targets), [t.name for t in sequence])
            result = self.execute(targets, overrides, skip=skip, environ=environ, executor=Executor(console))
        except ConfigurationError as e:
            console.print_error("Configuration error", str(e), details=[f"kind={type(e).__name__}"])
            return EXIT_CONFIGURATION_ERROR

        console.print_results(result)
        return exit_status(result)
