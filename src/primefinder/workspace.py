# src/primefinder/workspace.py
"""
Per-user workspace holding the editable profiles.

The package ships sample profiles; on first run they are copied into
<workspace>/profiles so users can edit them without touching the install.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from importlib.resources import files as pkg_files
from importlib.resources.abc import Traversable
from pathlib import Path

PROFILES = "profiles"


def workspace_dir() -> Path:
    env = os.environ.get("PRIMEFINDER_HOME")
    if env:
        return Path(env).expanduser().resolve()
    return (Path.home() / "Documents" / "PrimeFinder").resolve()


def profiles_dir() -> Path:
    return workspace_dir() / PROFILES


def _packaged_profiles() -> Iterator[Traversable]:
    for entry in pkg_files("primefinder").joinpath(PROFILES).iterdir():
        name = entry.name
        # editor leftovers and dotfiles never ship
        if entry.is_file() and name.endswith(".toml") and not name.startswith("."):
            yield entry


def seed_workspace(*, overwrite: bool = False) -> tuple[Path, int]:
    """
    Copy the packaged sample profiles into the workspace.

    overwrite=False → copy-if-missing (normal users)
    overwrite=True  → replace edited samples (dev use, guarded in CLI)

    Returns: (workspace_path, profiles_copied)
    """
    target = profiles_dir()
    target.mkdir(parents=True, exist_ok=True)
    copied = 0
    for entry in _packaged_profiles():
        dest = target / entry.name
        if dest.exists() and not overwrite:
            continue
        dest.write_bytes(entry.read_bytes())
        copied += 1
    return workspace_dir(), copied


def ensure_workspace_seeded() -> tuple[Path, int]:
    """Seed missing sample profiles; returns (workspace_path, profiles_copied)."""
    return seed_workspace(overwrite=False)
