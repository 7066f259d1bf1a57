"""Unit tests for named argument extraction."""

import pytest
from infrastructure.commands.errors import ConfigurationError
from infrastructure.commands.named_arguments import (
    NamedArgument,
    NamedArgumentPattern,
    extract_named_args,
    validate_named_argument_pattern,
)
from infrastructure.commands.tokenizer import tokenize
from tests.factories.commands import make_settings


@pytest.fixture
def pattern():
    return NamedArgumentPattern(prefix="--", separator="=")


class TestExtractNamedArgs:
    """Tests for pulling named arguments out of a token sequence."""

    def test_name_and_value(self, pattern):
        result = extract_named_args(tokenize("--count=5 #general"), pattern)

        assert result.named == [NamedArgument("count", "5")]
        assert result.unnamed.contents() == ["#general"]

    def test_value_from_following_group(self, pattern):
        """An empty value takes the next grouped token."""
        result = extract_named_args(tokenize('--desc= "multi word" rest'), pattern)

        assert result.named == [NamedArgument("desc", "multi word")]
        assert result.unnamed.contents() == ["rest"]

    def test_value_touching_group(self, pattern):
        result = extract_named_args(tokenize('--desc="multi word"'), pattern)

        assert result.named == [NamedArgument("desc", "multi word")]
        assert len(result.unnamed) == 0

    def test_empty_value_without_group_is_dropped(self, pattern):
        result = extract_named_args(tokenize("--desc= plain"), pattern)

        assert result.named == []
        assert result.unnamed.contents() == ["plain"]

    def test_boolean_flag(self, pattern):
        result = extract_named_args(tokenize("name --spoiler"), pattern)

        assert result.named == [NamedArgument("spoiler", "true")]
        assert result.unnamed.contents() == ["name"]

    def test_flag_requires_separator_when_configured(self):
        pattern = NamedArgumentPattern(
            prefix="--", separator="=", separator_required=True
        )

        result = extract_named_args(tokenize("--spoiler name"), pattern)

        assert result.named == []
        assert result.unnamed.contents() == ["--spoiler", "name"]

    def test_grouped_tokens_are_not_candidates(self, pattern):
        result = extract_named_args(tokenize('"--count=5" x'), pattern)

        assert result.named == []
        assert result.unnamed.contents() == ["--count=5", "x"]

    def test_preserves_order(self, pattern):
        result = extract_named_args(
            tokenize("a --x=1 b --y=2 c --x=3"), pattern
        )

        assert result.named == [
            NamedArgument("x", "1"),
            NamedArgument("y", "2"),
            NamedArgument("x", "3"),
        ]
        assert result.unnamed.contents() == ["a", "b", "c"]

    def test_value_keeps_later_separators(self, pattern):
        result = extract_named_args(tokenize("--expr=a=b"), pattern)

        assert result.named == [NamedArgument("expr", "a=b")]

    def test_empty_name_is_left_alone(self, pattern):
        result = extract_named_args(tokenize("--=5"), pattern)

        assert result.named == []
        assert result.unnamed.contents() == ["--=5"]

    def test_bare_prefix_stops_extraction(self):
        pattern = NamedArgumentPattern(
            prefix="--", separator="=", stop_on_prefix_only=True
        )

        result = extract_named_args(tokenize("--a=1 -- --b=2 text"), pattern)

        assert result.named == [NamedArgument("a", "1")]
        assert result.unnamed.contents() == ["--b=2", "text"]

    def test_bare_prefix_kept_without_stop(self, pattern):
        result = extract_named_args(tokenize("-- --b=2"), pattern)

        assert result.named == [NamedArgument("b", "2")]
        assert result.unnamed.contents() == ["--"]

    def test_custom_pattern(self):
        pattern = NamedArgumentPattern(prefix="-", separator=":")

        result = extract_named_args(tokenize("-count:5 x"), pattern)

        assert result.named == [NamedArgument("count", "5")]
        assert result.unnamed.contents() == ["x"]

    def test_input_sequence_untouched(self, pattern):
        tokens = tokenize("--a=1 b")

        extract_named_args(tokens, pattern)

        assert tokens.contents() == ["--a=1", "b"]


class TestNamedArgumentPattern:
    """Tests for pattern validation."""

    @pytest.mark.parametrize(
        "prefix,separator",
        [("", "="), ("--", ""), ("- -", "="), ("--", " =")],
    )
    def test_invalid_patterns_rejected(self, prefix, separator):
        with pytest.raises(ConfigurationError):
            validate_named_argument_pattern(
                NamedArgumentPattern(prefix=prefix, separator=separator)
            )

    def test_from_settings(self):
        settings = make_settings(
            NAMED_ARG_PREFIX="-", NAMED_ARG_SEPARATOR=":", NAMED_ARG_SEPARATOR_REQUIRED=True
        )

        pattern = NamedArgumentPattern.from_settings(settings)

        assert pattern == NamedArgumentPattern(
            prefix="-",
            separator=":",
            separator_required=True,
            stop_on_prefix_only=True,
        )
