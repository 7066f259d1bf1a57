"""Unit tests for the chat tokenizer."""

import pytest
from infrastructure.commands.errors import TokenizeError
from infrastructure.commands.tokenizer import (
    Token,
    TokenKind,
    TokenSequence,
    tokenize,
)


class TestTokenize:
    """Tests for splitting text into tokens."""

    def test_groups_quoted_text(self):
        """Quoted text becomes one GROUPED token between NORMAL tokens."""
        tokens = tokenize('a "b c" d')

        assert [(t.content, t.kind) for t in tokens] == [
            ("a", TokenKind.NORMAL),
            ("b c", TokenKind.GROUPED),
            ("d", TokenKind.NORMAL),
        ]

    def test_escaped_quote_is_literal(self):
        """An escaped quote does not open a group."""
        tokens = tokenize('a \\"b')

        assert [(t.content, t.kind) for t in tokens] == [
            ("a", TokenKind.NORMAL),
            ('"b', TokenKind.NORMAL),
        ]

    def test_unterminated_group_raises(self):
        with pytest.raises(TokenizeError, match="quotation mismatch"):
            tokenize('a "b')

    def test_backticks_group(self):
        assert tokenize("run `ls -la` now").contents() == ["run", "ls -la", "now"]

    def test_apostrophes_are_not_delimiters(self):
        assert tokenize("don't stop").contents() == ["don't", "stop"]

    def test_empty_group_yields_empty_token(self):
        tokens = tokenize('a "" b')

        assert tokens.contents() == ["a", "", "b"]
        assert tokens.token(1).kind is TokenKind.GROUPED

    def test_quote_flushes_adjacent_word(self):
        """A delimiter touching a word ends the word."""
        assert tokenize('abc"d e"').contents() == ["abc", "d e"]

    def test_escaped_whitespace_joins_words(self):
        assert tokenize("a\\ b c").contents() == ["a b", "c"]

    def test_escaped_backslash(self):
        assert tokenize("a\\\\b").contents() == ["a\\b"]

    def test_trailing_backslash_kept(self):
        assert tokenize("path\\").contents() == ["path\\"]

    def test_whitespace_only_is_empty(self):
        assert len(tokenize("   \t  ")) == 0

    def test_custom_delimiters(self):
        tokens = tokenize("a 'b c' \"d", delimiters="'")

        assert tokens.contents() == ["a", "b c", '"d']


class TestRestore:
    """Tests for rebuilding source text from tokens."""

    @pytest.mark.parametrize(
        "text",
        [
            "hello",
            'say "hello   world"  `x`',
            'a  \\"b   c',
            'mixed"group"word  tail',
            'x "" y',
            "tabs\tand  spaces",
        ],
    )
    def test_restore_from_start_reproduces_input(self, text):
        assert tokenize(text).restore() == text

    def test_restore_trims_outer_whitespace(self):
        assert tokenize("  a  b  ").restore() == "a  b"

    def test_restore_from_index(self):
        tokens = tokenize('say "hello   world" `x`')

        assert tokens.restore(1) == '"hello   world" `x`'
        assert tokens.restore(2) == "`x`"
        assert tokens.restore(3) == ""


class TestTokenSequence:
    """Tests for the immutable sequence operations."""

    def test_remove_returns_new_sequence(self):
        tokens = tokenize("a b c")

        removed = tokens.remove(1)

        assert removed.contents() == ["a", "c"]
        assert tokens.contents() == ["a", "b", "c"]

    def test_remove_out_of_range_raises(self):
        with pytest.raises(IndexError):
            tokenize("a").remove(3)

    def test_shift(self):
        first, rest = tokenize("food fruit add").shift()

        assert first == "food"
        assert rest.contents() == ["fruit", "add"]

    def test_shift_empty_raises(self):
        with pytest.raises(IndexError):
            TokenSequence().shift()

    def test_slice(self):
        assert tokenize("a b c").slice(1).contents() == ["b", "c"]

    def test_of_wraps_value(self):
        tokens = TokenSequence.of("multi word value")

        assert len(tokens) == 1
        assert tokens.get(0) == "multi word value"
        assert tokens.restore() == "multi word value"

    def test_equality(self):
        assert tokenize("a b") == tokenize("a b")
        assert tokenize("a b") != tokenize('a "b"')

    def test_restore_after_remove_keeps_following_spacing(self):
        tokens = tokenize("a --x=1   b")

        assert tokens.remove(1).restore() == "a   b"

    def test_token_fields(self):
        token = tokenize('a  "x y"').token(1)

        assert token == Token(
            content="x y", kind=TokenKind.GROUPED, raw='"x y"', leading="  "
        )

    def test_first_token_has_no_leading_whitespace(self):
        assert tokenize('  "x y"').token(0).leading == ""
        assert tokenize("a  b").slice(1).token(0).leading == ""

    def test_suffix_equals_tokenized_suffix(self):
        """A shifted or sliced suffix equals the same text tokenized directly."""
        tokens = tokenize('show a "b c"')

        _, rest = tokens.shift()

        assert rest == tokenize('a "b c"')
        assert tokens.slice(1) == tokenize('a "b c"')
        assert tokens.remove(0) == tokenize('a "b c"')
