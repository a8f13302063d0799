"""Tests for ignore rules."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from filewalk.errors import ConfigurationError
from filewalk.ignore import (
    NEVER_IGNORE,
    PatternRule,
    PredicateRule,
    coerce_ignore,
    default_ignore,
    should_ignore,
)


class TestShouldIgnore:
    """Tests for evaluating ignore rules."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/project/node_modules/lib/index.js", True),
            ("/project/src/node_modules.txt", True),
            ("/project/src/index.js", False),
            ("/project/modules/index.js", False),
        ],
    )
    def test_default_rule(self, path: str, expected: bool) -> None:
        """Test that the default rule matches dependency directories."""
        assert should_ignore(default_ignore(), Path(path)) is expected

    def test_pattern_searches_anywhere(self) -> None:
        """Test that pattern rules search the whole path string."""
        rule = PatternRule.compile(r"\.git/")

        assert should_ignore(rule, Path("/repo/.git/config"))
        assert not should_ignore(rule, Path("/repo/.gitignore"))

    def test_predicate_receives_path(self) -> None:
        """Test that predicate rules are called with the path."""
        seen: list[Path] = []

        def predicate(path: Path) -> bool:
            seen.append(path)
            return path.suffix == ".log"

        rule = PredicateRule(predicate)

        assert should_ignore(rule, Path("/tmp/app.log"))
        assert not should_ignore(rule, Path("/tmp/app.txt"))
        assert seen == [Path("/tmp/app.log"), Path("/tmp/app.txt")]

    def test_predicate_result_coerced_to_bool(self) -> None:
        """Test that truthy predicate results count as ignored."""
        rule = PredicateRule(lambda path: "yes")  # type: ignore[arg-type,return-value]

        assert should_ignore(rule, Path("/a")) is True

    def test_never_ignore(self) -> None:
        """Test the rule that ignores nothing."""
        assert not should_ignore(NEVER_IGNORE, Path("/project/node_modules/x"))


class TestCoerceIgnore:
    """Tests for converting user input into rules."""

    def test_string_becomes_pattern(self) -> None:
        """Test that strings are compiled into pattern rules."""
        rule = coerce_ignore(r"build/")

        assert isinstance(rule, PatternRule)
        assert rule.regex.pattern == "build/"

    def test_compiled_pattern(self) -> None:
        """Test that compiled patterns are wrapped as-is."""
        regex = re.compile("dist", re.IGNORECASE)
        rule = coerce_ignore(regex)

        assert isinstance(rule, PatternRule)
        assert rule.regex is regex
        assert should_ignore(rule, Path("/app/DIST/out.js"))

    def test_callable_becomes_predicate(self) -> None:
        """Test that callables are wrapped as predicate rules."""
        rule = coerce_ignore(lambda path: True)

        assert isinstance(rule, PredicateRule)

    def test_existing_rule_passes_through(self) -> None:
        """Test that rules are returned unchanged."""
        rule = PatternRule.compile("x")

        assert coerce_ignore(rule) is rule

    def test_none_ignores_nothing(self) -> None:
        """Test that None means no file is ignored."""
        assert coerce_ignore(None) is NEVER_IGNORE

    def test_invalid_regex(self) -> None:
        """Test that an invalid regex is a configuration error."""
        with pytest.raises(ConfigurationError, match="Invalid ignore pattern"):
            coerce_ignore("([unclosed")

    def test_unsupported_type(self) -> None:
        """Test that other types are rejected."""
        with pytest.raises(ConfigurationError, match="regex or a callable"):
            coerce_ignore(42)


class TestRuleStr:
    """Tests for rule display strings."""

    def test_pattern_str(self) -> None:
        """Test that pattern rules display their regex."""
        assert str(PatternRule.compile("node_modules")) == "node_modules"

    def test_predicate_str(self) -> None:
        """Test that predicate rules display the callable name."""

        def skip_logs(path: Path) -> bool:
            return False

        assert "skip_logs" in str(PredicateRule(skip_logs))
