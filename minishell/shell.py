"""The interactive shell: read lines, parse them and run the commands."""

from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator, Mapping
from typing import TextIO

from .builtins import ShellExit
from .commands import Command, parse_commands
from .env import Environment
from .executor import execute
from .expand import expand_token
from .heredoc import HeredocInterrupted, clear_heredocs, process_heredocs
from .tokenizer import ShellSyntaxError, tokenize_input

PROMPT = "minishell$ "


class Shell:
    """Holds the environment and last exit status across input lines."""

    def __init__(
        self,
        envp: Iterable[str] | Mapping[str, str] = (),
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.env = Environment.from_envp(envp)
        self.env.update_shlvl()
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.last_status = 0
        self.history: list[str] = []
        self.heredoc_input: TextIO | None = None

    def _execute_with_heredocs(self, commands: list[Command]) -> int:
        try:
            process_heredocs(commands, self.env, self.heredoc_input, self.out)
        except HeredocInterrupted as exc:
            self.out.write("\n")
            clear_heredocs(commands)
            return exc.status
        return execute(commands, self.env, self.out, self.err)

    def handle_line(self, line: str) -> int:
        """Tokenize, expand, parse and run one line; return the new status.

        A syntax error found while tokenizing leaves the status unchanged;
        one found while grouping commands sets it to 2. ``exit`` raises
        ShellExit.
        """
        if not line:
            return self.last_status
        self.history.append(line)
        try:
            tokens = tokenize_input(line)
        except ShellSyntaxError as exc:
            self.out.write(exc.message + "\n")
            return self.last_status
        expanded = [expand_token(token, self.last_status, self.env) for token in tokens]
        try:
            commands = parse_commands(expanded)
        except ShellSyntaxError as exc:
            self.out.write(exc.message + "\n")
            self.last_status = exc.status
            return self.last_status
        if commands:
            self.last_status = self._execute_with_heredocs(commands)
        return self.last_status

    def run(self, lines: Iterable[str | None]) -> int:
        """Handle each line until input ends or ``exit`` runs; return the exit code.

        A ``None`` item ends the input like end of file does.
        """
        for raw in lines:
            if raw is None:
                break
            line = raw[:-1] if raw.endswith("\n") else raw
            try:
                self.handle_line(line)
            except ShellExit as exc:
                self.out.flush()
                return exc.status
        self.out.write("exit\n")
        self.out.flush()
        return 0


def _interactive_lines(shell: Shell) -> Iterator[str]:
    try:
        import readline  # noqa: F401  (enables line editing and history for input())
    except ImportError:
        pass
    while True:
        try:
            yield input(PROMPT)
        except EOFError:
            return
        except KeyboardInterrupt:
            shell.out.write("\n")
            shell.last_status = 130


def _piped_lines() -> Iterator[str]:
    while True:
        line = sys.stdin.readline()
        if not line:
            return
        yield line


def main(argv: list[str] | None = None) -> int:
    """Start the shell on the process environment and standard streams."""
    import os

    shell = Shell(os.environ, sys.stdout, sys.stderr)
    lines = _interactive_lines(shell) if sys.stdin.isatty() else _piped_lines()
    return shell.run(lines)


if __name__ == "__main__":
    sys.exit(main())