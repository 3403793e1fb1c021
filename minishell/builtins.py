"""Commands that run inside the shell: echo, pwd, exit, env, unset, cd, export."""

from __future__ import annotations

import os
import sys
from typing import TextIO

from .env import Environment, is_valid_identifier
from .export import export_builtin

_SPACES = " \t\n\v\f\r"
_LONG_MIN = -(1 << 63)
_LONG_MAX = (1 << 63) - 1


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def is_echo_n_flag(arg: str) -> bool:
    """Return whether ``arg`` is ``-n``, ``-nn``, ``-nnn`` and so on."""
    return len(arg) > 1 and arg[0] == "-" and set(arg[1:]) == {"n"}


def _parse_integer(arg: str) -> int | None:
    text = arg.strip(_SPACES)
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not digits or not all("0" <= char <= "9" for char in digits):
        return None
    return int(text)


def is_numeric(arg: str) -> bool:
    """Return whether ``arg`` is an integer that fits in a signed 64-bit value."""
    value = _parse_integer(arg)
    return value is not None and _LONG_MIN <= value <= _LONG_MAX


def _stream(stream: TextIO | None, default: TextIO) -> TextIO:
    return stream if stream is not None else default


def echo(args: list[str], out: TextIO | None = None) -> int:
    """Print the arguments separated by spaces; ``-n`` flags drop the newline."""
    out = _stream(out, sys.stdout)
    words = args[1:]
    newline = True
    while words and is_echo_n_flag(words[0]):
        newline = False
        words = words[1:]
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    return 0


def pwd(out: TextIO | None = None, err: TextIO | None = None) -> int:
    """Print the current working directory."""
    out = _stream(out, sys.stdout)
    err = _stream(err, sys.stderr)
    try:
        cwd = os.getcwd()
    except OSError as exc:
        err.write(f"pwd: {exc.strerror}\n")
        return 1
    out.write(cwd + "\n")
    return 0


def exit_builtin(args: list[str], out: TextIO | None = None) -> int:
    """Raise ShellExit with the requested status.

    Returns 1 without exiting when given more than one numeric argument.
    """
    out = _stream(out, sys.stdout)
    if len(args) < 2:
        raise ShellExit(0)
    if not is_numeric(args[1]):
        out.write(f"minishell: exit: {args[1]}: numeric argument required\n")
        raise ShellExit(2)
    if len(args) > 2:
        out.write("minishell: exit: too many arguments\n")
        return 1
    value = _parse_integer(args[1]) or 0
    raise ShellExit(value & 0xFF)


def unset(args: list[str], env: Environment, out: TextIO | None = None) -> int:
    """Remove each named variable; invalid names are reported and skipped."""
    out = _stream(out, sys.stdout)
    for name in args[1:]:
        if not is_valid_identifier(name):
            out.write(f"minishell: unset: `{name}': not a valid identifier\n")
        else:
            env.remove(name)
    return 0


def env_builtin(env: Environment, out: TextIO | None = None) -> int:
    """Print every variable that has a value as ``KEY=VALUE``."""
    out = _stream(out, sys.stdout)
    for var in env:
        if var.has_value:
            out.write(f"{var.key}={var.value}\n")
    return 0


def cd_target(args: list[str], env: Environment, out: TextIO | None = None) -> str | None:
    """Return the directory ``cd`` should move to, or None when it cannot tell."""
    out = _stream(out, sys.stdout)
    if len(args) < 2:
        target = env.get("HOME")
        if target is None:
            out.write("minishell: cd: HOME not set\n")
        return target
    if args[1] == "-":
        target = env.get("OLDPWD")
        if target is None:
            out.write("minishell: cd: OLDPWD not set\n")
        else:
            out.write(target + "\n")
        return target
    return args[1]


def _getcwd() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def cd(
    args: list[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Change directory and update ``OLDPWD`` and ``PWD``."""
    err = _stream(err, sys.stderr)
    if len(args) > 2:
        err.write("cd: too many arguments\n")
        return 1
    oldpwd = _getcwd()
    target = cd_target(args, env, out)
    if target is None:
        return 1
    try:
        os.chdir(target)
    except OSError as exc:
        err.write(f"cd: {exc.strerror}\n")
        return 1
    if oldpwd is not None:
        env.set("OLDPWD", oldpwd)
    cwd = _getcwd()
    if cwd is not None:
        env.set("PWD", cwd)
    return 0


def run_builtin(
    args: list[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int | None:
    """Run the builtin named by ``args[0]``; None when it is not a builtin."""
    if not args:
        return None
    name = args[0]
    if name == "echo":
        return echo(args, out)
    if name == "pwd":
        return pwd(out, err)
    if name == "exit":
        return exit_builtin(args, out)
    if name == "env":
        if len(args) > 1:
            _stream(out, sys.stdout).write(
                f"env: '{args[1]}': No such file or directory\n"
            )
            return 127
        return env_builtin(env, out)
    if name == "unset":
        return unset(args, env, out)
    if name == "cd":
        return cd(args, env, out, err)
    if name == "export":
        return export_builtin(args, env, out)
    return None