# env.py
# Facts about the environment a build runs in.

from __future__ import annotations

import os
from typing import Mapping, Optional

# Variables set by common CI hosts. Presence of any of them means "server build".
CI_VARIABLES = (
    "CI",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "TF_BUILD",             # Azure Pipelines
    "TEAMCITY_VERSION",
    "JENKINS_URL",
    "BUILDKITE",
    "CIRCLECI",
    "TRAVIS",
    "APPVEYOR",
    "BITBUCKET_BUILD_NUMBER",
)

_FALSE_VALUES = {"", "0", "false", "no", "off"}


def is_server_build(environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    for var in CI_VARIABLES:
        value = env.get(var)
        if value is not None and value.strip().lower() not in _FALSE_VALUES:
            return True
    return False


def is_local_build(environ: Optional[Mapping[str, str]] = None) -> bool:
    """True unless a known CI host variable is set."""
    return not is_server_build(environ)


def env_var_name(name: str, prefix: str = "") -> str:
    """`configuration` -> `CONFIGURATION`, `out-dir` -> `OUT_DIR` (with optional prefix)."""
    return f"{prefix}{name}".upper().replace("-", "_").replace(".", "_")
