# src/betterbuild/dsl.py
from __future__ import annotations

import string
from pathlib import Path
from typing import Any, Dict, List, Optional

from .model import Action, Guard, Target, _noop
from .runner import run_shell


# ---------------------------------------------------------------------
# Shell action helper
# ---------------------------------------------------------------------

def _interpolate(text: str, params: Any) -> str:
    """Fill `{name}` placeholders from the parameter store."""
    names = {field for _, field, _, _ in string.Formatter().parse(text) if field}
    if not names:
        return text
    return text.format(**{n: params.get(n) for n in names})


def sh(cmd: str, *, cwd: str | None = None, env: Optional[Dict[str, str]] = None) -> Action:
    """
    Create an action that runs a shell command in the build root (or `cwd`
    relative to it). `{param}` placeholders are filled from the parameters;
    write `{{` / `}}` for literal braces.
    """

    def action(params: Any) -> None:
        root = Path(getattr(params, "root", None) or ".")
        command = _interpolate(cmd, params)
        workdir = (root / _interpolate(cwd, params)).resolve() if cwd else root
        run_shell(
            command,
            cwd=workdir,
            env={k: _interpolate(str(v), params) for k, v in (env or {}).items()},
        )

    action.__name__ = f"sh({cmd!r})"
    return action


def _chain(actions: List[Action]) -> Action:
    if not actions:
        return _noop
    if len(actions) == 1:
        return actions[0]

    def action(params: Any):
        produced: List[str] = []
        for a in actions:
            result = a(params)
            if result is False:
                return False
            if isinstance(result, (str, Path)):
                produced.append(str(result))
            elif result is not None and result is not True:
                produced.extend(str(p) for p in result)
        return produced or None

    return action


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class TargetBuilder:
    """
    Fluent target definition, frozen into an immutable Target by build().

        compile = (
            target("compile")
            .depends_on("restore")
            .executes(sh("python -m build --outdir {output}"))
            .produces("dist/*.whl")
        )
    """

    def __init__(self, name: str):
        if not name or not name.strip():
            raise ValueError("Target name must be a non-empty string")
        self.name = name
        self._depends_on: list[str] = []
        self._before: list[str] = []
        self._after: list[str] = []
        self._actions: list[Action] = []
        self._produces: list[str] = []
        self._guard: Optional[Guard] = None
        self._requires: list[str] = []
        self._description: str = ""

    def depends_on(self, *target_names: str):
        for n in target_names:
            if n not in self._depends_on:
                self._depends_on.append(n)
        return self

    def before(self, *target_names: str):
        self._before.extend(n for n in target_names if n not in self._before)
        return self

    def after(self, *target_names: str):
        self._after.extend(n for n in target_names if n not in self._after)
        return self

    def executes(self, *actions: Action):
        self._actions.extend(actions)
        return self

    def produces(self, *patterns: str):
        self._produces.extend(str(p) for p in patterns)
        return self

    def only_when(self, guard: Guard):
        if self._guard is None:
            self._guard = guard
        else:
            first = self._guard
            self._guard = lambda params: bool(first(params)) and bool(guard(params))
        return self

    def requires(self, *parameter_names: str):
        self._requires.extend(parameter_names)
        return self

    def describe(self, text: str):
        self._description = text
        return self

    def build(self) -> Target:
        return Target(
            name=self.name,
            depends_on=tuple(self._depends_on),
            before=tuple(self._before),
            after=tuple(self._after),
            action=_chain(self._actions),
            produces=tuple(self._produces),
            guard=self._guard,
            requires=tuple(self._requires),
            description=self._description,
        )


def target(name: str, description: str = "") -> TargetBuilder:
    """Convenience: target('test').depends_on('compile').executes(...)"""
    builder = TargetBuilder(name)
    if description:
        builder.describe(description)
    return builder
