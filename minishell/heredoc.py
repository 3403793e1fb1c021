"""Collect here-document text for ``<<`` redirections."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from .commands import Command, RedirType
from .env import Environment
from .expand import expand_token

_PROMPT = "> "


class HeredocInterrupted(Exception):
    """Raised when reading a here-document is interrupted."""

    status = 130


def _read_line(stream: TextIO) -> str | None:
    """Read one line without its newline; None at end of input or on an empty line."""
    line = stream.readline()
    if line.endswith("\n"):
        line = line[:-1]
    return line or None


def read_heredoc(
    delimiter: str,
    env: Environment | None,
    stream: TextIO | None = None,
    prompt_out: TextIO | None = None,
) -> str:
    """Read lines until ``delimiter``, an empty line or end of input.

    Each line is expanded as a token would be and kept with a trailing
    newline. Raises HeredocInterrupted on a keyboard interrupt.
    """
    stream = stream if stream is not None else sys.stdin
    prompt_out = prompt_out if prompt_out is not None else sys.stdout
    pieces: list[str] = []
    try:
        while True:
            prompt_out.write(_PROMPT)
            prompt_out.flush()
            line = _read_line(stream)
            if line is None or line == delimiter:
                break
            pieces.append(expand_token(line, 0, env) + "\n")
    except KeyboardInterrupt as exc:
        raise HeredocInterrupted() from exc
    return "".join(pieces)


def process_heredocs(
    commands: Iterable[Command],
    env: Environment | None,
    stream: TextIO | None = None,
    prompt_out: TextIO | None = None,
) -> None:
    """Read every here-document of ``commands`` in order, storing the text."""
    for command in commands:
        for redir in command.redirs:
            if redir.type is RedirType.HEREDOC:
                redir.heredoc = read_heredoc(redir.file, env, stream, prompt_out)


def clear_heredocs(commands: Iterable[Command]) -> None:
    """Drop collected here-document text from ``commands``."""
    for command in commands:
        for redir in command.redirs:
            if redir.type is RedirType.HEREDOC:
                redir.heredoc = None