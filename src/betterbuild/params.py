# params.py
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from .env import env_var_name, is_local_build
from .errors import ConfigurationError, MissingParameterError

# ---------------------------------------------------------------------
# Layered parameter resolution:
#
#   explicit override (-p name=value / Build.run(overrides=...))
#     -> environment variable (NAME, or PREFIX_NAME)
#       -> computed default (value, or callable(store))
#
# Values are resolved lazily on first read and memoized for the run, so a
# default is computed at most once no matter how many targets read it.
# ---------------------------------------------------------------------


class ParameterSource(str, Enum):
    EXPLICIT = "explicit"
    ENVIRONMENT = "environment"
    DEFAULT = "default"


# Tried in this order; first hit wins.
RESOLUTION_ORDER = (ParameterSource.EXPLICIT, ParameterSource.ENVIRONMENT, ParameterSource.DEFAULT)

_UNSET: Any = object()

_TRUE = {"1", "true", "yes", "on", "y"}
_FALSE = {"0", "false", "no", "off", "n", ""}


def as_bool(value: Any) -> bool:
    """Converter for flag-like parameters (`-p publish=yes`, `PUBLISH=0`)."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


@dataclass(frozen=True)
class Parameter:
    """
    A named build input.

    `default` may be a plain value or a callable taking the ParameterStore,
    e.g. ``lambda p: "Debug" if p.is_local_build else "Release"``.
    `convert` turns string values (overrides, environment) into the real type;
    an Enum subclass is accepted and matched by value or name.
    """
    name: str
    description: str = ""
    default: Any = _UNSET
    required: bool = True
    convert: Optional[Callable[[str], Any]] = None
    env: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self.default is not _UNSET


def parameter(name: str, description: str = "", **kwargs: Any) -> Parameter:
    return Parameter(name=name, description=description, **kwargs)


def _convert(param: Parameter, raw: Any) -> Any:
    conv = param.convert
    if conv is None or not isinstance(raw, str):
        return raw
    try:
        if isinstance(conv, type) and issubclass(conv, Enum):
            for member in conv:
                if raw == str(member.value) or raw.lower() == member.name.lower():
                    return member
            raise ValueError(f"expected one of {[m.name for m in conv]}")
        return conv(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for parameter '{param.name}': {raw!r} ({e})") from e


class ParameterStore:
    """Resolves parameter values for a single run."""

    def __init__(
        self,
        parameters: Iterable[Parameter] = (),
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        env_prefix: str = "",
        root: str | Path | None = None,
    ):
        # Build root directory; relative paths in sh() and produces resolve against it.
        self.root = Path(root).resolve() if root is not None else Path.cwd()
        self._params: Dict[str, Parameter] = {p.name: p for p in parameters}
        self._overrides: Dict[str, Any] = dict(overrides or {})
        self._environ: Mapping[str, str] = os.environ if environ is None else environ
        self._env_prefix = env_prefix

        self._values: Dict[str, Any] = {}
        self._sources: Dict[str, ParameterSource] = {}
        self._resolving: set[str] = set()

    # ---- lookup ----

    def get(self, name: str, default: Any = _UNSET) -> Any:
        if name in self._values:
            return self._values[name]
        try:
            value, source = self._resolve(name)
        except MissingParameterError:
            if default is not _UNSET:
                return default
            raise
        self._values[name] = value
        self._sources[name] = source
        return value

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __getattr__(self, name: str) -> Any:
        # params.configuration reads like the original declarative fields
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.get(name)
        except MissingParameterError as e:
            raise AttributeError(str(e)) from e

    def source_of(self, name: str) -> Optional[ParameterSource]:
        """Which source supplied `name` (None if it has not been read yet)."""
        return self._sources.get(name)

    def env_var(self, name: str) -> str:
        param = self._params.get(name)
        if param is not None and param.env:
            return param.env
        return env_var_name(name, self._env_prefix)

    @property
    def declared(self) -> list[Parameter]:
        return list(self._params.values())

    @property
    def resolved(self) -> Dict[str, Any]:
        return dict(self._values)

    @property
    def is_local_build(self) -> bool:
        return is_local_build(self._environ)

    # ---- resolution ----

    def _resolve(self, name: str):
        param = self._params.get(name) or Parameter(name=name)

        for source in RESOLUTION_ORDER:
            if source is ParameterSource.EXPLICIT:
                if name in self._overrides:
                    return _convert(param, self._overrides[name]), source

            elif source is ParameterSource.ENVIRONMENT:
                var = self.env_var(name)
                if var in self._environ:
                    return _convert(param, self._environ[var]), source

            elif source is ParameterSource.DEFAULT:
                if param.has_default:
                    return self._compute_default(param), source

        if not param.required:
            return None, ParameterSource.DEFAULT
        raise MissingParameterError(name, env_var=self.env_var(name))

    def _compute_default(self, param: Parameter) -> Any:
        if not callable(param.default):
            return param.default
        if param.name in self._resolving:
            raise ConfigurationError(f"Parameter '{param.name}' default refers to itself")
        self._resolving.add(param.name)
        try:
            return param.default(self)
        finally:
            self._resolving.discard(param.name)
