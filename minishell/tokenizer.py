"""Split an input line into raw shell tokens and check their syntax."""

from __future__ import annotations

from dataclasses import dataclass

_SPACES = " \t\n\v\f\r"
_OPERATOR_CHARS = "|<>"
_QUOTES = "'\""
_DELIMITER_STOP = " |<>"
_REDIRECTIONS = frozenset({"<", ">", ">>", "<<"})

HEREDOC_MARK = "\x01"
UNCLOSED_QUOTES = "minishell: syntax error: unclosed quotes"
_UNEXPECTED = "minishell: syntax error near unexpected token"


@dataclass(frozen=True)
class QuoteState:
    """Which kind of quote is still open at some point of a line."""

    in_single: bool = False
    in_double: bool = False

    @property
    def open(self) -> bool:
        return self.in_single or self.in_double


class ShellSyntaxError(ValueError):
    """A line that cannot be parsed; ``status`` is the shell's exit status."""

    status = 2

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnclosedQuotesError(ShellSyntaxError):
    """A line ends while a quote is still open."""


def quote_state(text: str, up_to: int | None = None) -> QuoteState:
    """Return the quote state after the first ``up_to`` characters (all if None)."""
    end = len(text) if up_to is None or up_to < 0 else min(up_to, len(text))
    in_single = in_double = False
    for char in text[:end]:
        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
    return QuoteState(in_single, in_double)


def skip_spaces(text: str, pos: int) -> int:
    """Return the first position at or after ``pos`` that is not whitespace."""
    while pos < len(text) and text[pos] in _SPACES:
        pos += 1
    return pos


def read_token(text: str, pos: int) -> int:
    """Return the end of the token that starts at ``pos``.

    A token ends at an unquoted space or before an unquoted operator; an
    operator at ``pos`` is a token of its own (``<<`` and ``>>`` included).
    """
    start = pos
    quote: str | None = None
    while pos < len(text) and (text[pos] != " " or quote is not None):
        char = text[pos]
        if quote is None and char in _QUOTES:
            quote = char
            pos += 1
            continue
        if quote is not None and char == quote:
            quote = None
            pos += 1
            continue
        if quote is None and char in _OPERATOR_CHARS:
            if pos == start:
                if char in "<>" and text[pos + 1:pos + 2] == char:
                    pos += 2
                else:
                    pos += 1
            break
        pos += 1
    return pos


def _read_heredoc_delimiter(text: str, pos: int) -> tuple[str | None, int]:
    pos = skip_spaces(text, pos)
    if pos >= len(text):
        return None, pos
    end = pos
    while end < len(text) and text[end] not in _DELIMITER_STOP:
        end += 1
    return HEREDOC_MARK + text[pos:end], end


def _check_invalid_operator(token: str) -> None:
    if token.startswith(">>>"):
        raise ShellSyntaxError(f"{_UNEXPECTED} `>'")
    if token.startswith("<<<<"):
        raise ShellSyntaxError(f"{_UNEXPECTED} `<'")
    if token.startswith("><") or token.startswith("<>"):
        raise ShellSyntaxError(f"{_UNEXPECTED}`{token[1]}'")


def validate_syntax(tokens: list[str]) -> None:
    """Raise ShellSyntaxError for misplaced pipes and redirections."""
    for index, token in enumerate(tokens):
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        if token == "|" and (following is None or following == "|"):
            raise ShellSyntaxError(f"{_UNEXPECTED} `|'")
        if token in _REDIRECTIONS:
            if following is None:
                raise ShellSyntaxError(f"{_UNEXPECTED} 'newline'")
            if following in _REDIRECTIONS or following == "|":
                raise ShellSyntaxError(f"{_UNEXPECTED} `{following}'")
        _check_invalid_operator(token)


def tokenize_input(line: str) -> list[str]:
    """Split ``line`` into raw tokens, quotes kept.

    The word after ``<<`` is taken literally and marked with a leading
    ``HEREDOC_MARK``.
    """
    if quote_state(line).open:
        raise UnclosedQuotesError(UNCLOSED_QUOTES)
    tokens: list[str] = []
    pos = 0
    while pos < len(line):
        pos = skip_spaces(line, pos)
        if pos >= len(line):
            break
        start = pos
        pos = read_token(line, pos)
        if pos > start:
            tokens.append(line[start:pos])
        if tokens and tokens[-1] == "<<":
            delimiter, pos = _read_heredoc_delimiter(line, pos)
            if delimiter is not None:
                tokens.append(delimiter)
    validate_syntax(tokens)
    return tokens