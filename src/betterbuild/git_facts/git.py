# git.py
# Small wrapper around the Git CLI, used for computed parameter defaults
# (commit sha, branch, dirty flag) so workflows never shell out to git directly.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


def _git(args: list[str], cwd: Optional[str | Path] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    Raises subprocess.CalledProcessError on non-zero exit and
    FileNotFoundError if git is not installed.
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=str(cwd) if cwd is not None else None,
        text=True,
        stderr=subprocess.DEVNULL,
    )
    return out.strip()


def repo_root(cwd: Optional[str | Path] = None) -> Path:
    """Absolute path to the root of the enclosing Git repository."""
    return Path(_git(["rev-parse", "--show-toplevel"], cwd=cwd))


def head_sha(cwd: Optional[str | Path] = None) -> str:
    """Full SHA of HEAD."""
    return _git(["rev-parse", "HEAD"], cwd=cwd)


def short_sha(cwd: Optional[str | Path] = None) -> str:
    return _git(["rev-parse", "--short", "HEAD"], cwd=cwd)


def current_branch(cwd: Optional[str | Path] = None) -> str:
    """
    Current branch name, or the short SHA on a detached HEAD.
    """
    branch = _git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd)
    if branch == "HEAD":
        return short_sha(cwd=cwd)
    return branch


def is_dirty(cwd: Optional[str | Path] = None) -> bool:
    """True if the working tree has modified, staged or untracked files."""
    return _git(["status", "--porcelain"], cwd=cwd) != ""


def or_default(default: str, fn, *args, **kwargs) -> str:
    """
    Call one of the helpers above, falling back to `default` outside a
    repository or without git. Meant for parameter defaults:

        build.parameter("commit", default=lambda p: or_default("unknown", head_sha, p.root))
    """
    try:
        return fn(*args, **kwargs)
    except (subprocess.CalledProcessError, FileNotFoundError):
        return default
