"""Group raw tokens into commands with their arguments and redirections."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .tokenizer import HEREDOC_MARK, ShellSyntaxError

_PIPE = "|"
_BUILTINS = frozenset({"echo", "pwd", "exit", "env", "cd", "export", "unset"})
_NEWLINE_ERROR = "minishell: syntax error near unexpected token 'newline'"


class RedirType(Enum):
    """Kinds of redirection a command may carry."""

    IN = "<"
    OUT = ">"
    APPEND = ">>"
    HEREDOC = "<<"


@dataclass
class Redirection:
    """A redirection; ``heredoc`` holds collected here-document text."""

    type: RedirType
    file: str
    heredoc: str | None = None


@dataclass
class Command:
    """One stage of a pipeline."""

    args: list[str] = field(default_factory=list)
    redirs: list[Redirection] = field(default_factory=list)

    @property
    def name(self) -> str | None:
        return self.args[0] if self.args else None


def redir_type(token: str) -> RedirType:
    """Return the redirection kind for an operator; anything unknown is a heredoc."""
    if token == "<":
        return RedirType.IN
    if token == ">":
        return RedirType.OUT
    if token == ">>":
        return RedirType.APPEND
    return RedirType.HEREDOC


def actual_token(token: str) -> str:
    """Strip the literal marker from the front of ``token``, if present."""
    return token[1:] if token.startswith(HEREDOC_MARK) else token


def is_redirection_operator(token: str) -> bool:
    """Return whether ``token`` is one of ``<``, ``>``, ``>>``, ``<<``."""
    return token in ("<", ">", ">>", "<<")


def is_builtin(name: str | None) -> bool:
    """Return whether ``name`` runs inside the shell; a missing name counts as one."""
    if name is None:
        return True
    return name in _BUILTINS


def _parse_one(tokens: list[str], pos: int) -> tuple[Command, int]:
    command = Command()
    while pos < len(tokens) and tokens[pos] != _PIPE:
        raw = tokens[pos]
        token = actual_token(raw)
        if not raw.startswith(HEREDOC_MARK) and is_redirection_operator(token):
            if pos + 1 >= len(tokens):
                raise ShellSyntaxError(_NEWLINE_ERROR)
            target = actual_token(tokens[pos + 1])
            command.redirs.append(Redirection(redir_type(token), target))
            pos += 2
        else:
            command.args.append(token)
            pos += 1
    return command, pos


def parse_commands(tokens: list[str]) -> list[Command]:
    """Split expanded tokens at unmarked pipes into a list of commands.

    Raises ShellSyntaxError when a redirection has no target.
    """
    commands: list[Command] = []
    pos = 0
    while pos < len(tokens):
        command, pos = _parse_one(tokens, pos)
        commands.append(command)
        if pos < len(tokens) and tokens[pos] == _PIPE:
            pos += 1
    return commands