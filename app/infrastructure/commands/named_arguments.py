"""Named (flag-style) argument extraction for chat commands.

Named arguments let chat callers give arguments out of order, e.g.
`!say --channel=#general Hello, world!`. They are pulled out of the token
sequence before positional parsing runs on whatever is left.
"""

from dataclasses import dataclass
from typing import List, NamedTuple

from core.config import CommandSettings
from infrastructure.commands.errors import ConfigurationError
from infrastructure.commands.tokenizer import TokenSequence


@dataclass(frozen=True)
class NamedArgumentPattern:
    """How named arguments are written.

    Attributes:
        prefix: Marks a token as a named argument (e.g. "--")
        separator: Separates name and value (e.g. "=")
        separator_required: When False, `--flag` alone means `--flag=true`
        stop_on_prefix_only: A token equal to the bare prefix ends extraction
    """

    prefix: str
    separator: str
    separator_required: bool = False
    stop_on_prefix_only: bool = False

    @classmethod
    def from_settings(cls, settings: CommandSettings) -> "NamedArgumentPattern":
        pattern = cls(
            prefix=settings.NAMED_ARG_PREFIX,
            separator=settings.NAMED_ARG_SEPARATOR,
            separator_required=settings.NAMED_ARG_SEPARATOR_REQUIRED,
            stop_on_prefix_only=settings.NAMED_ARG_STOP_ON_PREFIX_ONLY,
        )
        validate_named_argument_pattern(pattern)
        return pattern


class NamedArgument(NamedTuple):
    name: str
    value: str


class ExtractedArguments(NamedTuple):
    """Named arguments in the order given, plus the remaining tokens."""

    named: List[NamedArgument]
    unnamed: TokenSequence


def validate_named_argument_pattern(pattern: NamedArgumentPattern) -> None:
    """Reject patterns that could never match a single token.

    Raises:
        ConfigurationError: If prefix or separator is empty or contains whitespace
    """
    for label, value in (("prefix", pattern.prefix), ("separator", pattern.separator)):
        if not value:
            raise ConfigurationError(f"Named argument {label} cannot be empty.")
        if any(c.isspace() for c in value):
            raise ConfigurationError(
                f"Named argument {label} cannot contain whitespace."
            )


def extract_named_args(
    tokens: TokenSequence, pattern: NamedArgumentPattern
) -> ExtractedArguments:
    """Extract named arguments out of a token sequence.

    Handles:
    - `--name=value` -> ("name", "value")
    - `--name= "multi word"` -> value taken from the following grouped token
    - `--name` -> ("name", "true") unless the separator is required
    - `--name=` with no grouped token after it -> dropped, no error
    - `--` alone -> ends extraction when stop_on_prefix_only is set

    Only NORMAL tokens are candidates; quoted text that happens to start with
    the prefix is left alone.

    Args:
        tokens: Tokenized command content
        pattern: Named argument pattern

    Returns:
        ExtractedArguments with named pairs and the unnamed tokens in order
    """
    named: List[NamedArgument] = []
    index = 0
    while index < len(tokens):
        token = tokens.token(index)
        if not token.is_normal() or not token.content.startswith(pattern.prefix):
            index += 1
            continue

        text = token.content
        separator_index = text.find(pattern.separator, len(pattern.prefix))

        if separator_index > len(pattern.prefix):
            name = text[len(pattern.prefix) : separator_index]
            value = text[separator_index + len(pattern.separator) :]
            if not value:
                if index + 1 < len(tokens) and not tokens.token(index + 1).is_normal():
                    value = tokens.get(index + 1)
                    tokens = tokens.remove(index + 1)
                else:
                    # No value anywhere, the flag is dropped
                    tokens = tokens.remove(index)
                    continue
        elif pattern.stop_on_prefix_only and text == pattern.prefix:
            tokens = tokens.remove(index)
            break
        elif (
            not pattern.separator_required
            and separator_index == -1
            and len(text) > len(pattern.prefix)
        ):
            name = text[len(pattern.prefix) :]
            value = "true"
        else:
            index += 1
            continue

        named.append(NamedArgument(name, value))
        tokens = tokens.remove(index)

    return ExtractedArguments(named=named, unnamed=tokens)
