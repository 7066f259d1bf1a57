"""Quote-aware tokenizer for chat command content.

Splits message content into tokens while remembering how each token was
written, so the original text after any token can be rebuilt exactly. This
is what lets "rest of content" arguments keep the caller's quoting and
spacing instead of a naive re-join.

Example:
    >>> tokens = tokenize('say "hello   world" `x`')
    >>> tokens.contents()
    ['say', 'hello   world', 'x']
    >>> tokens.restore(1)
    '"hello   world" `x`'
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

from infrastructure.commands.errors import TokenizeError

DEFAULT_DELIMITERS = '"`'


class TokenKind(Enum):
    """How a token was written in the source text."""

    NORMAL = "normal"  # Bare word, eligible for named argument detection
    GROUPED = "grouped"  # Quoted or backticked content


@dataclass(frozen=True)
class Token:
    """A single token and the source text it came from.

    Attributes:
        content: Token text with delimiters and escape backslashes removed
        kind: NORMAL or GROUPED
        raw: Exact source slice, including delimiters and backslashes
        leading: Source whitespace between the previous token and this one
    """

    content: str
    kind: TokenKind = TokenKind.NORMAL
    raw: str = ""
    leading: str = ""

    def is_normal(self) -> bool:
        return self.kind is TokenKind.NORMAL


class TokenSequence:
    """Immutable, index-addressable sequence of tokens.

    Every operation that drops tokens returns a new sequence, so positional
    parsing can keep plain integer cursors into the sequence it was given.
    The first token never carries leading whitespace, so equal suffixes
    compare equal however they were produced.
    """

    __slots__ = ("_tokens",)

    def __init__(self, tokens: Iterable[Token] = ()):
        items = tuple(tokens)
        if items and items[0].leading:
            items = (replace(items[0], leading=""),) + items[1:]
        self._tokens: Tuple[Token, ...] = items

    @classmethod
    def of(cls, value: str) -> "TokenSequence":
        """Wrap an already known string as a one-token sequence."""
        return cls((Token(content=value, kind=TokenKind.GROUPED, raw=value),))

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TokenSequence):
            return NotImplemented
        return self._tokens == other._tokens

    def __hash__(self) -> int:
        return hash(self._tokens)

    def __repr__(self) -> str:
        return f"TokenSequence({self.contents()!r})"

    def token(self, index: int) -> Token:
        return self._tokens[index]

    def get(self, index: int) -> str:
        """Content of the token at index."""
        return self._tokens[index].content

    def contents(self) -> List[str]:
        return [token.content for token in self._tokens]

    def slice(self, index: int) -> "TokenSequence":
        """Suffix of the sequence starting at index."""
        return TokenSequence(self._tokens[index:])

    def remove(self, index: int) -> "TokenSequence":
        """New sequence without the token at index."""
        if not -len(self._tokens) <= index < len(self._tokens):
            raise IndexError("token index out of range")
        index %= len(self._tokens)
        return TokenSequence(self._tokens[:index] + self._tokens[index + 1 :])

    def shift(self) -> Tuple[str, "TokenSequence"]:
        """Split off the first token.

        Returns:
            Tuple of (first token content, remaining sequence)

        Raises:
            IndexError: If the sequence is empty
        """
        if not self._tokens:
            raise IndexError("shift from empty token sequence")
        return self._tokens[0].content, TokenSequence(self._tokens[1:])

    def restore(self, index: int = 0) -> str:
        """Rebuild the source text from the token at index to the end.

        Tokens are written back exactly as the caller typed them, separated by
        the whitespace that originally preceded each one.
        """
        tokens = self._tokens[index:]
        if not tokens:
            return ""
        parts = [tokens[0].raw]
        for token in tokens[1:]:
            parts.append(token.leading)
            parts.append(token.raw)
        return "".join(parts)


def tokenize(text: str, delimiters: str = DEFAULT_DELIMITERS) -> TokenSequence:
    """Split text into NORMAL and GROUPED tokens.

    Algorithm:
    1. Scan left to right tracking `escaped` and the open group delimiter
    2. Whitespace outside a group ends the current NORMAL token
    3. A delimiter outside a group flushes any NORMAL token and opens a group
    4. The matching unescaped delimiter closes the group as one GROUPED token
    5. A backslash makes the next character literal, whatever it is

    Args:
        text: Message content after the command prefix
        delimiters: Characters that open and close groups

    Returns:
        TokenSequence over text

    Raises:
        TokenizeError: If a group is still open at the end of the text

    Example:
        >>> tokenize('a "b c" d').contents()
        ['a', 'b c', 'd']
        >>> tokenize('a \\\\"b').contents()
        ['a', '"b']
    """
    tokens: List[Token] = []
    content: List[str] = []
    start: Optional[int] = None
    previous_end = 0
    group: Optional[str] = None
    escaped = False

    def flush(kind: TokenKind, end: int) -> None:
        nonlocal start, previous_end
        tokens.append(
            Token(
                content="".join(content),
                kind=kind,
                raw=text[start:end],
                leading=text[previous_end:start],
            )
        )
        content.clear()
        start = None
        previous_end = end

    for index, char in enumerate(text):
        if escaped:
            content.append(char)
            escaped = False
            continue

        if char == "\\":
            escaped = True
            if start is None:
                start = index
            continue

        if group is not None:
            if char == group:
                flush(TokenKind.GROUPED, index + 1)
                group = None
            else:
                content.append(char)
            continue

        if char in delimiters:
            if start is not None:
                flush(TokenKind.NORMAL, index)
            group = char
            start = index
            continue

        if char.isspace():
            if start is not None:
                flush(TokenKind.NORMAL, index)
            continue

        if start is None:
            start = index
        content.append(char)

    if group is not None:
        raise TokenizeError("quotation mismatch")

    # Trailing lone backslash is kept as written
    if escaped:
        content.append("\\")

    if start is not None:
        flush(TokenKind.NORMAL, len(text))

    return TokenSequence(tokens)
