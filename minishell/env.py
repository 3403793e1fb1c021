"""Shell environment variables kept in insertion order."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

_SPACES = " \t\n\v\f\r"


@dataclass
class EnvVar:
    """One environment variable; ``has_value`` is false for bare exports."""

    key: str
    value: str = ""
    has_value: bool = True

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


def _is_ascii_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_ascii_alnum(char: str) -> bool:
    return char.isascii() and char.isalnum()


def _atoi(text: str) -> int:
    """Parse a leading integer the way the C library does, ignoring trailing junk."""
    stripped = text.lstrip(_SPACES)
    sign = 1
    if stripped[:1] in ("+", "-"):
        if stripped[0] == "-":
            sign = -1
        stripped = stripped[1:]
    digits = ""
    for char in stripped:
        if not ("0" <= char <= "9"):
            break
        digits += char
    return sign * int(digits) if digits else 0


def parse_env_entry(entry: str) -> EnvVar:
    """Split ``KEY=VALUE`` at the first ``=``; without one the variable has no value."""
    key, sep, value = entry.partition("=")
    if sep:
        return EnvVar(key, value, True)
    return EnvVar(entry, "", False)


def is_valid_identifier(text: str | None) -> bool:
    """Return whether ``text`` is a valid variable name."""
    if not text:
        return False
    first, rest = text[0], text[1:]
    if not (_is_ascii_alpha(first) or first == "_"):
        return False
    return all(_is_ascii_alnum(char) or char == "_" for char in rest)


class Environment:
    """Ordered collection of environment variables."""

    def __init__(self, variables: Iterable[EnvVar] | None = None) -> None:
        self._vars: list[EnvVar] = list(variables or ())

    @classmethod
    def from_envp(cls, envp: Iterable[str] | Mapping[str, str]) -> "Environment":
        """Build an environment from ``KEY=VALUE`` strings.

        Each entry is placed in front of the previous ones, and every
        variable counts as having a value.
        """
        if isinstance(envp, Mapping):
            entries = [f"{key}={value}" for key, value in envp.items()]
        else:
            entries = list(envp)
        env = cls()
        for entry in entries:
            var = parse_env_entry(entry)
            var.has_value = True
            env._vars.insert(0, var)
        return env

    def _find(self, key: str) -> EnvVar | None:
        return next((var for var in self._vars if var.key == key), None)

    def get(self, key: str) -> str | None:
        """Return the value of ``key`` or ``None`` when it is not set."""
        var = self._find(key)
        return var.value if var is not None else None

    def set(self, key: str, value: str) -> None:
        """Replace the value of ``key``, or append it with a value when absent."""
        var = self._find(key)
        if var is not None:
            var.value = value
        else:
            self._vars.append(EnvVar(key, value, True))

    def add_or_update(self, key: str, value: str | None, has_value: bool) -> None:
        """Update ``key`` in place, or insert it at the front when absent."""
        if not key:
            return
        var = self._find(key)
        if var is not None:
            var.value = value or ""
            var.has_value = has_value
        else:
            self._vars.insert(0, EnvVar(key, value or "", has_value))

    def remove(self, key: str) -> None:
        """Remove ``key`` if present."""
        var = self._find(key)
        if var is not None:
            self._vars.remove(var)

    def to_envp(self) -> list[str]:
        """Return ``KEY=VALUE`` strings for variables that have a value."""
        return [str(var) for var in self._vars if var.has_value]

    def update_shlvl(self) -> None:
        """Increment ``SHLVL``, or add ``SHLVL=1`` at the front when missing."""
        var = self._find("SHLVL")
        if var is None:
            self._vars.insert(0, EnvVar("SHLVL", "1", True))
            return
        level = _atoi(var.value) + 1 if var.value else 1
        var.value = str(level)
        var.has_value = True

    def __iter__(self) -> Iterator[EnvVar]:
        return iter(list(self._vars))

    def __len__(self) -> int:
        return len(self._vars)

    def __contains__(self, key: object) -> bool:
        return any(var.key == key for var in self._vars)