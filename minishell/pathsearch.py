"""Locate executables through the ``PATH`` variable."""

from __future__ import annotations

import os
from collections.abc import Iterable

from .env import Environment


def search_paths(directories: Iterable[str], name: str) -> str | None:
    """Return the first ``directory/name`` that is executable, else None."""
    for directory in directories:
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def find_command_path(name: str, env: Environment) -> str | None:
    """Look ``name`` up in the directories of ``PATH``; empty entries are skipped."""
    path_var = env.get("PATH")
    if path_var is None:
        return None
    directories = [entry for entry in path_var.split(":") if entry]
    return search_paths(directories, name)


def full_command_path(name: str, env: Environment) -> str | None:
    """Return ``name`` itself when it holds a slash, else search ``PATH``."""
    if "/" in name:
        return name
    return find_command_path(name, env)