"""Ignore rules deciding which resolved files are skipped."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Union

from .errors import ConfigurationError

# Conventional dependency directory skipped by default
DEFAULT_IGNORE_PATTERN = r"node_modules"


@dataclass(frozen=True)
class PatternRule:
    """Ignore paths whose string form matches a regular expression."""

    regex: re.Pattern[str]

    @classmethod
    def compile(cls, pattern: str) -> PatternRule:
        """Build a rule from a regex string.

        Args:
            pattern: Regular expression searched anywhere in the path.

        Returns:
            Compiled pattern rule.

        Raises:
            ConfigurationError: If the pattern is not a valid regex.

        """
        try:
            return cls(re.compile(pattern))
        except re.error as e:
            raise ConfigurationError(f"Invalid ignore pattern {pattern!r}: {e}") from e

    def __str__(self) -> str:
        return self.regex.pattern


@dataclass(frozen=True)
class PredicateRule:
    """Ignore paths for which a user callback returns True."""

    predicate: Callable[[Path], bool]

    def __str__(self) -> str:
        name = getattr(self.predicate, "__qualname__", repr(self.predicate))
        return f"<predicate {name}>"


IgnoreRule = Union[PatternRule, PredicateRule]

NEVER_IGNORE: IgnoreRule = PredicateRule(lambda _path: False)


def default_ignore() -> IgnoreRule:
    """Return the default rule, which skips dependency directories."""
    return PatternRule.compile(DEFAULT_IGNORE_PATTERN)


def should_ignore(rule: IgnoreRule, path: Path) -> bool:
    """Check whether a path is excluded by an ignore rule.

    Args:
        rule: Pattern or predicate rule.
        path: Resolved file path.

    Returns:
        True if the file must not be processed.

    """
    match rule:
        case PatternRule(regex=regex):
            return regex.search(str(path)) is not None
        case PredicateRule(predicate=predicate):
            return bool(predicate(path))
    raise ConfigurationError(f"Unsupported ignore rule: {rule!r}")


def coerce_ignore(value: object) -> IgnoreRule:
    """Convert user input into an ignore rule.

    Accepts an existing rule, a regex string, a compiled pattern, a callable
    or None (ignore nothing).
    """
    if isinstance(value, (PatternRule, PredicateRule)):
        return value
    if value is None:
        return NEVER_IGNORE
    if isinstance(value, str):
        return PatternRule.compile(value)
    if isinstance(value, re.Pattern):
        return PatternRule(value)
    if callable(value):
        return PredicateRule(value)
    raise ConfigurationError(f"ignore must be a regex or a callable, got {type(value).__name__}")
