"""
Search pattern compilation.

A pattern is either literal text or a delimited regular expression:

- "budget"              → literal, case-insensitive, all occurrences
- "/budget|forecast/gi" → regex body "budget|forecast" with flags "gi"

A pattern is delimited only if it starts with "/" and contains a later
"/"; the flags are whatever follows the last one. Delimited patterns get
exactly the flags written, nothing implied.

Compiled patterns are plain values (source text plus flags), so they can
be logged, compared and serialized; the executable `re.Pattern` is built
lazily from them.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import cached_property
from typing import Any

from pdfscout.exceptions import InvalidPatternError

DELIMITER = "/"

# Flag letter → re flag (0 for flags that only change how matches are walked)
SUPPORTED_FLAGS: dict[str, int] = {
    "g": 0,  # Every match, not just the first
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,  # str patterns are always Unicode
    "v": 0,
    "y": 0,  # Sticky: each match must start where the previous ended
}


class CompiledPattern(ABC):
    """A validated search pattern."""

    is_regex: bool = False

    @property
    @abstractmethod
    def source(self) -> str:
        """Regular expression source handed to `re`."""

    @property
    @abstractmethod
    def re_flags(self) -> int:
        """Combined `re` flags."""

    @property
    def find_all(self) -> bool:
        """Whether every match is wanted (otherwise only the first)."""
        return True

    @property
    def sticky(self) -> bool:
        """Whether matches must be contiguous from the start of the text."""
        return False

    @cached_property
    def regex(self) -> re.Pattern[str]:
        """The executable matcher."""
        return re.compile(self.source, self.re_flags)

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Serializable form for logs and responses."""


@dataclass(frozen=True)
class LiteralPattern(CompiledPattern):
    """Exact substring search; metacharacters in `text` have no meaning."""

    text: str
    case_insensitive: bool = True

    is_regex = False

    @property
    def source(self) -> str:
        return re.escape(self.text)

    @property
    def re_flags(self) -> int:
        return re.IGNORECASE if self.case_insensitive else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "literal",
            "text": self.text,
            "escaped": self.source,
            "case_insensitive": self.case_insensitive,
        }


@dataclass(frozen=True)
class RegexPattern(CompiledPattern):
    """Regular expression search with explicit flags."""

    body: str
    flags: str = ""

    is_regex = True

    @property
    def source(self) -> str:
        return self.body

    @property
    def re_flags(self) -> int:
        combined = 0
        for flag in self.flags:
            combined |= SUPPORTED_FLAGS[flag]
        return combined

    @property
    def find_all(self) -> bool:
        return "g" in self.flags

    @property
    def sticky(self) -> bool:
        return "y" in self.flags

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "regex", "source": self.body, "flags": self.flags}


def _validate_flags(flags: str, pattern: str) -> None:
    valid = "".join(SUPPORTED_FLAGS)
    unknown = [f for f in flags if f not in SUPPORTED_FLAGS]
    if unknown:
        raise InvalidPatternError(
            f"Invalid regex flags: {flags}. Valid flags are {', '.join(valid)}",
            pattern=pattern,
        )
    if len(set(flags)) != len(flags):
        raise InvalidPatternError(f"Invalid regex flags: {flags}. Duplicate flag", pattern=pattern)


def is_delimited(pattern: str) -> bool:
    """Whether the pattern uses the /body/flags form."""
    return pattern.startswith(DELIMITER) and pattern.rfind(DELIMITER) > 0


def compile_pattern(pattern: str) -> CompiledPattern:
    """
    Compile a search pattern.

    Args:
        pattern: Literal text, or "/body/flags" for a regular expression

    Returns:
        LiteralPattern or RegexPattern; its regex is already known to compile

    Raises:
        InvalidPatternError: Empty pattern, unsupported flags, or a body
            that is not a valid regular expression

    Example:
        >>> compile_pattern("/budget|forecast/gi")
        RegexPattern(body='budget|forecast', flags='gi')
        >>> compile_pattern("3.5%").source
        '3\\\\.5%'
    """
    if not pattern:
        raise InvalidPatternError("Search pattern cannot be empty", pattern=pattern)

    compiled: CompiledPattern
    if is_delimited(pattern):
        last = pattern.rfind(DELIMITER)
        body = pattern[1:last]
        flags = pattern[last + 1 :]
        _validate_flags(flags, pattern)
        compiled = RegexPattern(body=body, flags=flags)
    else:
        compiled = LiteralPattern(text=pattern)

    try:
        compiled.regex  # noqa: B018 - compile eagerly so errors surface here
    except re.error as e:
        raise InvalidPatternError(f"Invalid regex pattern: {e}", pattern=pattern) from e

    return compiled


class PatternCompiler:
    """
    Compiles search patterns, remembering the ones already seen.

    A compiler lives for one query call; it exists so a coordinator
    can compile once and reuse the result for every page.
    """

    def __init__(self) -> None:
        self._cache: dict[str, CompiledPattern] = {}

    def compile(self, pattern: str) -> CompiledPattern:
        if pattern not in self._cache:
            self._cache[pattern] = compile_pattern(pattern)
        return self._cache[pattern]
