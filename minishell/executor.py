"""Run parsed commands: simple builtins in the shell, everything else as a pipeline."""

from __future__ import annotations

import errno
import io
import os
import signal
import stat
import subprocess
import sys
import tempfile
from contextlib import ExitStack
from dataclasses import dataclass
from typing import IO, Any, TextIO

from .builtins import ShellExit, run_builtin
from .commands import Command, Redirection, RedirType, is_builtin
from .env import Environment, EnvVar
from .heredoc import clear_heredocs
from .pathsearch import full_command_path
from .tokenizer import ShellSyntaxError

_PIPE_ERROR = "minishell: syntax error near unexpected token `|'"
_FILE_MODE = 0o644
_FALLBACK_SHELL = "/bin/sh"


def status_from_returncode(returncode: int) -> int:
    """Turn a child's return code into a shell status; a signal ``n`` gives ``128 + n``."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def check_pipe_syntax(commands: list[Command]) -> None:
    """Raise ShellSyntaxError when a command has neither arguments nor redirections."""
    for command in commands:
        if not command.args and not command.redirs:
            raise ShellSyntaxError(_PIPE_ERROR)


class _StageFailed(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


@dataclass
class _Stage:
    process: subprocess.Popen | None = None
    status: int = 0
    output: bytes | None = None


def _fileno(stream: Any) -> int | None:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        return None


def _write_all(fd: int, data: bytes) -> None:
    while data:
        written = os.write(fd, data)
        data = data[written:]


def _getcwd() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def _copy_env(env: Environment) -> Environment:
    return Environment(EnvVar(var.key, var.value, var.has_value) for var in env)


def _env_mapping(env: Environment) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in env.to_envp():
        key, _, value = entry.partition("=")
        mapping[key] = value
    return mapping


class _Pipeline:
    """Starts every stage of a pipeline, then waits for all of them in order."""

    def __init__(self, env: Environment, out: TextIO, err: TextIO) -> None:
        self.env = env
        self.out = out
        self.err = err
        self.stack = ExitStack()
        self.out_capture: IO[bytes] | None = None
        self.err_capture: IO[bytes] | None = None

    def __enter__(self) -> "_Pipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stack.close()

    def run(self, commands: list[Command]) -> int:
        stages: list[_Stage] = []
        previous: _Stage | None = None
        for index, command in enumerate(commands):
            has_next = index + 1 < len(commands)
            stdin = self._stdin_after(previous)
            stage = self._run_stage(command, stdin, has_next)
            if previous is not None and previous.process is not None:
                if previous.process.stdout is not None:
                    previous.process.stdout.close()
            stages.append(stage)
            previous = stage
        status = 0
        for stage in stages:
            status = self._wait(stage)
        self._flush_captures()
        return status

    def _stdin_after(self, previous: _Stage | None) -> Any:
        if previous is None:
            return None
        if previous.process is not None and previous.process.stdout is not None:
            return previous.process.stdout
        if previous.output is not None:
            return self._temp_with(previous.output)
        return subprocess.DEVNULL

    def _temp_with(self, data: bytes) -> IO[bytes]:
        handle = self.stack.enter_context(tempfile.TemporaryFile())
        handle.write(data)
        handle.seek(0)
        return handle

    def _open_one(self, redir: Redirection, stack: ExitStack) -> int | None:
        if redir.type is RedirType.OUT:
            flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
        elif redir.type is RedirType.APPEND:
            flags = os.O_WRONLY | os.O_CREAT | os.O_APPEND
        elif redir.type is RedirType.IN:
            flags = os.O_RDONLY
        else:
            if redir.heredoc is None:
                return None
            handle = stack.enter_context(tempfile.TemporaryFile())
            handle.write(redir.heredoc.encode())
            handle.seek(0)
            return handle.fileno()
        fd = os.open(redir.file, flags, _FILE_MODE)
        stack.callback(os.close, fd)
        return fd

    def _open_redirections(
        self, redirs: list[Redirection], stack: ExitStack
    ) -> tuple[int | None, int | None]:
        in_fd = out_fd = None
        for redir in redirs:
            try:
                fd = self._open_one(redir, stack)
            except OSError as exc:
                self.err.write(f"minishell: redirection: {exc.strerror}\n")
                raise _StageFailed(1) from exc
            if fd is None:
                self.err.write("minishell: redirection error\n")
                raise _StageFailed(1)
            if redir.type in (RedirType.OUT, RedirType.APPEND):
                out_fd = fd
            else:
                in_fd = fd
        return in_fd, out_fd

    def _run_stage(self, command: Command, stdin: Any, has_next: bool) -> _Stage:
        with ExitStack() as stack:
            try:
                in_fd, out_fd = self._open_redirections(command.redirs, stack)
            except _StageFailed as failure:
                return _Stage(status=failure.status)
            if in_fd is not None:
                stdin = in_fd
            if not command.args:
                return _Stage(status=0)
            if is_builtin(command.name):
                return self._run_builtin(command, out_fd, has_next)
            return self._spawn(command, stdin, out_fd, has_next)

    def _run_builtin(self, command: Command, out_fd: int | None, has_next: bool) -> _Stage:
        buffer = io.StringIO()
        cwd = _getcwd()
        try:
            status = run_builtin(command.args, _copy_env(self.env), buffer, self.err)
        except ShellExit as exc:
            status = exc.status
        finally:
            if cwd is not None:
                try:
                    os.chdir(cwd)
                except OSError:
                    pass
        text = buffer.getvalue()
        output = None
        if out_fd is not None:
            _write_all(out_fd, text.encode())
        elif has_next:
            output = text.encode()
        else:
            self.out.write(text)
        return _Stage(status=status if status is not None else 0, output=output)

    def _check_executable(self, path: str) -> int:
        if not os.access(path, os.F_OK):
            self.err.write("minishell: no such file or directory\n")
            return 127
        if not os.access(path, os.X_OK):
            self.err.write("minishell: permission denied\n")
            return 126
        try:
            is_dir = stat.S_ISDIR(os.stat(path).st_mode)
        except OSError:
            is_dir = False
        if is_dir:
            self.err.write(f"minishell: {path}: Is a directory\n")
            return 126
        return 0

    def _final_stdout(self) -> Any:
        fd = _fileno(self.out)
        if fd is not None:
            self.out.flush()
            return fd
        if self.out_capture is None:
            self.out_capture = self.stack.enter_context(tempfile.TemporaryFile())
        return self.out_capture

    def _stderr_target(self) -> Any:
        fd = _fileno(self.err)
        if fd is not None:
            self.err.flush()
            return fd
        if self.err_capture is None:
            self.err_capture = self.stack.enter_context(tempfile.TemporaryFile())
        return self.err_capture

    def _spawn(self, command: Command, stdin: Any, out_fd: int | None, has_next: bool) -> _Stage:
        name = command.args[0]
        path = full_command_path(name, self.env)
        if path is None:
            self.err.write(f"minishell: {name}: command not found\n")
            return _Stage(status=127)
        failure = self._check_executable(path)
        if failure:
            return _Stage(status=failure)
        if out_fd is not None:
            stdout: Any = out_fd
        elif has_next:
            stdout = subprocess.PIPE
        else:
            stdout = self._final_stdout()
        options = {
            "stdin": stdin,
            "stdout": stdout,
            "stderr": self._stderr_target(),
            "env": _env_mapping(self.env),
        }
        try:
            try:
                process = subprocess.Popen(command.args, executable=path, **options)
            except OSError as exc:
                if exc.errno != errno.ENOEXEC:
                    raise
                process = subprocess.Popen(
                    [_FALLBACK_SHELL, path], executable=_FALLBACK_SHELL, **options
                )
        except OSError:
            self.err.write("minishell: execution error\n")
            return _Stage(status=127)
        return _Stage(process=process)

    def _wait(self, stage: _Stage) -> int:
        if stage.process is None:
            return stage.status
        while True:
            try:
                returncode = stage.process.wait()
                break
            except KeyboardInterrupt:
                continue
        if returncode == -signal.SIGINT:
            self.out.write("\n")
        elif returncode == -signal.SIGQUIT:
            self.out.write("Quit (core dumped)\n")
        return status_from_returncode(returncode)

    def _flush_captures(self) -> None:
        for capture, stream in ((self.out_capture, self.out), (self.err_capture, self.err)):
            if capture is None:
                continue
            capture.seek(0)
            data = capture.read()
            if data:
                stream.write(data.decode(errors="replace"))


def _run_in_shell(command: Command, env: Environment, out: TextIO, err: TextIO) -> int:
    if command.name == "exit":
        out.write("exit\n")
    status = run_builtin(command.args, env, out, err)
    return status if status is not None else 0


def execute(
    commands: list[Command],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run ``commands`` as a pipeline and return the status of the last one.

    A lone builtin without redirections runs in the shell itself and may
    change ``env``; ``exit`` there raises ShellExit. Any other command runs
    apart, so builtins inside pipelines leave ``env`` and the directory alone.
    """
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr
    commands = list(commands)
    if not commands:
        return 0
    try:
        check_pipe_syntax(commands)
    except ShellSyntaxError as exc:
        err.write(exc.message + "\n")
        return exc.status
    try:
        first = commands[0]
        if len(commands) == 1 and is_builtin(first.name) and not first.redirs:
            return _run_in_shell(first, env, out, err)
        with _Pipeline(env, out, err) as pipeline:
            return pipeline.run(commands)
    finally:
        clear_heredocs(commands)