# tasks/filesystem.py
# Filesystem helpers for target actions (clean steps, output folders).

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List


def glob_directories(root: str | Path, *patterns: str) -> List[Path]:
    """
    Directories under `root` matching any of the glob patterns.

    Example:
        glob_directories("src", "**/bin", "**/obj")
    """
    base = Path(root)
    if not base.exists():
        return []

    out: List[Path] = []
    seen = set()
    for pat in patterns:
        for p in sorted(base.glob(pat)):
            if p.is_dir() and p not in seen:
                seen.add(p)
                out.append(p)
    return out


def delete_directory(path: str | Path) -> None:
    """Remove a directory tree; missing directories are fine."""
    p = Path(path)
    if p.is_dir():
        shutil.rmtree(p)


def ensure_clean_directory(path: str | Path) -> Path:
    """Make `path` an existing, empty directory."""
    p = Path(path)
    if p.exists():
        for child in p.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
    else:
        p.mkdir(parents=True)
    return p
