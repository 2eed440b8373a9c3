# runner.py
from __future__ import annotations

import os
import runpy
import subprocess
from pathlib import Path
from typing import Dict, Optional

from .errors import StepFailure, WorkflowError

# Output kept on failure so long logs don't flood the report
OUTPUT_TAIL = 4000


# ----------------------------------------------------------------------
# Workflow loading (local file)
# ----------------------------------------------------------------------

def load_workflow(path: str | Path):
    """
    Load a Build from a python file path.

    The file must define either:
      - workflow() -> Build
      - BUILD = Build(...)

    Returns:
      Build (with its root defaulting to the workflow file's directory)
    """
    from .build import Build

    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise WorkflowError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix != ".py":
        raise WorkflowError(f"Workflow must be a .py file, got: {wf_path.name}")

    module_name = f"betterbuild_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    build = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        build = globals_dict["workflow"]()
    elif "BUILD" in globals_dict:
        build = globals_dict["BUILD"]

    if not isinstance(build, Build):
        raise WorkflowError(
            f"{wf_path.name} must return/define a Build. "
            "Define workflow() -> Build or BUILD = Build(...)."
        )

    if build.root is None:
        build.root = wf_path.parent
    return build


# ----------------------------------------------------------------------
# Shell execution primitive
# ----------------------------------------------------------------------

def run_shell(
    cmd: str,
    *,
    cwd: Path,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.CompletedProcess:
    """Run `cmd` through the shell; raise StepFailure on non-zero exit."""
    if not cwd.exists():
        raise StepFailure(
            kind="StepFailure",
            message=f"working directory not found: {cwd}",
            cmd=cmd,
            exit_code=-1,
            details={"cwd": str(cwd)},
        )

    full_env = os.environ.copy()
    full_env.update(env or {})

    proc = subprocess.run(
        cmd,
        shell=True,
        cwd=str(cwd),
        env=full_env,
        text=True,
        capture_output=True,
    )

    if proc.returncode != 0:
        details = {"cmd": cmd, "exit_code": proc.returncode}
        if proc.stderr:
            details["stderr"] = proc.stderr[-OUTPUT_TAIL:]
        elif proc.stdout:
            details["stdout"] = proc.stdout[-OUTPUT_TAIL:]
        raise StepFailure(
            message=f"command failed (exit={proc.returncode}): {cmd}",
            details=details,
            cmd=cmd,
            exit_code=proc.returncode,
        )
    return proc
