"""Table name pattern filtering.

Patterns use the wildcard syntax of the SQL LIKE operator: `%` matches any
run of characters (including none) and `_` matches exactly one character.
There is no escape character.

As with the engine's own LIKE, only ASCII letters compare case-insensitively.
Every other character of the pattern is compared verbatim, so a non-ASCII
pattern can fail to match a name that differs only in non-ASCII case or in
Unicode normalization. That is accepted behaviour and never an error.

Reserved catalog names (the engine's internal `sqlite_` objects) never match,
with or without a pattern.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

_RESERVED_PREFIX = re.compile(r"sqlite_", re.IGNORECASE | re.ASCII)


def is_reserved_name(name: str) -> bool:
    """Return True for internal catalog names that are never hashed."""
    return bool(_RESERVED_PREFIX.match(name))


class NameFilter(ABC):
    """Decides whether a table (or an object owned by it) takes part in a digest."""

    @abstractmethod
    def matches(self, name: str) -> bool:
        """
        Determine whether the given table name is selected.

        Args:
            name: Table name to evaluate.

        Returns:
            True if the name is selected, False otherwise.
        """
        ...


class MatchAll(NameFilter):
    """Filter selecting every non-reserved name."""

    def matches(self, name: str) -> bool:
        return not is_reserved_name(name)


class LikePattern(NameFilter):
    """Filter selecting names matching a LIKE pattern."""

    def __init__(self, pattern: str):
        """
        Compile a LIKE pattern.

        Args:
            pattern: Pattern using `%` and `_` wildcards.
        """
        self.pattern = pattern
        self.regex = re.compile(_like_to_regex(pattern), re.DOTALL)

    def matches(self, name: str) -> bool:
        if is_reserved_name(name):
            return False
        return self.regex.fullmatch(name) is not None

    def __repr__(self) -> str:
        return f"LikePattern({self.pattern!r})"


def _like_to_regex(pattern: str) -> str:
    """Translate a LIKE pattern into an anchored-by-fullmatch regex."""
    parts: list[str] = []
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        elif ch.isascii() and ch.isalpha():
            parts.append(f"[{ch.lower()}{ch.upper()}]")
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


def build_filter(pattern: str | None) -> NameFilter:
    """Return the filter for an optional pattern (None selects everything)."""
    if pattern is None:
        return MatchAll()
    return LikePattern(pattern)


def match(name: str, pattern: str | None) -> bool:
    """Return True when `name` is selected by the optional `pattern`."""
    return build_filter(pattern).matches(name)
