"""Variable expansion and quote removal for single tokens."""

from __future__ import annotations

from .env import Environment

_QUOTED_OPERATORS = "<>|"
_DOUBLE_QUOTE_ESCAPES = '$"\\\n'
OPERATOR_MARK = "\x01"


def _is_name_start(char: str) -> bool:
    return char.isascii() and (char.isalpha() or char == "_")


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def expand_variable(
    text: str, pos: int, last_status: int, env: Environment | None
) -> tuple[str, int]:
    """Expand the variable whose name starts at ``pos`` (just after ``$``).

    Returns the expansion and the position after what was consumed. An
    unset variable expands to nothing; a ``$`` not followed by a name or
    ``?`` stays a ``$``.
    """
    char = text[pos:pos + 1]
    if char == "?":
        return str(last_status), pos + 1
    if char and _is_name_start(char):
        end = pos
        while end < len(text) and _is_name_char(text[end]):
            end += 1
        value = env.get(text[pos:end]) if env is not None else None
        return value or "", end
    return "$", pos


def expand_token(token: str, last_status: int, env: Environment | None) -> str:
    """Expand variables, handle backslashes and strip quotes from ``token``.

    A token that started with a quote and reduces to a lone ``<``, ``>``
    or ``|`` is marked with ``OPERATOR_MARK`` so it is not read as an
    operator.
    """
    pieces: list[str] = []
    in_single = in_double = escaped = False
    had_quotes = token[:1] in ("'", '"')
    pos = 0
    while pos < len(token):
        char = token[pos]
        if escaped:
            if in_double and char in _DOUBLE_QUOTE_ESCAPES:
                pieces.append(char)
            elif not in_single and not in_double:
                pieces.append(char)
            else:
                pieces.append("\\" + char)
            escaped = False
            pos += 1
        elif char == "\\" and not in_single:
            escaped = True
            pos += 1
        elif char == "'" and not in_double:
            in_single = not in_single
            pos += 1
        elif char == '"' and not in_single:
            in_double = not in_double
            pos += 1
        elif char == "$" and not in_single:
            expansion, pos = expand_variable(token, pos + 1, last_status, env)
            pieces.append(expansion)
        else:
            pieces.append(char)
            pos += 1
    result = "".join(pieces)
    if had_quotes and len(result) == 1 and result in _QUOTED_OPERATORS:
        return OPERATOR_MARK + result
    return result