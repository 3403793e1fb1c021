"""The ``export`` builtin."""

from __future__ import annotations

import sys
from typing import TextIO

from .env import Environment


def _is_ascii_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_ascii_alnum(char: str) -> bool:
    return char.isascii() and char.isalnum()


def is_valid_export_identifier(text: str | None) -> bool:
    """Return whether the part of ``text`` before any ``=`` is a valid name."""
    if not text:
        return False
    if not (_is_ascii_alpha(text[0]) or text[0] == "_"):
        return False
    name = text.partition("=")[0]
    return all(_is_ascii_alnum(char) or char == "_" for char in name)


def export_lines(env: Environment) -> list[str]:
    """Return ``declare -x`` lines sorted by key, leaving out ``_``."""
    lines = []
    for var in sorted(env, key=lambda var: var.key):
        if var.key == "_":
            continue
        if var.has_value:
            lines.append(f'declare -x {var.key}="{var.value}"')
        else:
            lines.append(f"declare -x {var.key}")
    return lines


def _export_one(arg: str, env: Environment) -> None:
    key, sep, value = arg.partition("=")
    if sep:
        env.add_or_update(key, value, True)
    elif arg not in env:
        env.add_or_update(arg, "", False)


def export_builtin(args: list[str], env: Environment, out: TextIO | None = None) -> int:
    """Run ``export``; ``args[0]`` is the command name. Returns the exit status."""
    out = out if out is not None else sys.stdout
    if len(args) < 2:
        for line in export_lines(env):
            out.write(line + "\n")
        return 0
    status = 0
    for arg in args[1:]:
        if not is_valid_export_identifier(arg):
            out.write(f"minishell: export: `{arg}`: not a valid identifier\n")
            status = 1
        else:
            _export_one(arg, env)
    return status