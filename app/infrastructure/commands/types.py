"""Argument type registry.

Every ArgumentType maps to a TypeRegistryEntry holding the parsers for each
surface and the option type used when exporting command schemas. Parsers
take a ParsingContext and return an ArgumentResult; chat parsers may be
coroutines when they need the entity resolver.

Example:
    entry = TYPE_REGISTRY[ArgumentType.INTEGER]
    result = entry.chat(ParsingContext(argument=arg, invocation=ctx, value="42"))
    # ArgumentResult(value=42, error=None)
"""

import math
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional, Union

from infrastructure.commands.context import CommandContext
from infrastructure.commands.errors import TokenizeError
from infrastructure.commands.models import (
    Argument,
    ArgumentResult,
    ArgumentType,
    OptionType,
    StructuredOption,
)
from infrastructure.commands.tokenizer import DEFAULT_DELIMITERS, TokenSequence, tokenize

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass
class ParsingContext:
    """Everything a parser may look at for one argument.

    Attributes:
        argument: Argument being parsed
        invocation: Context of the running command
        value: Raw token content (chat) or None
        tokens: Token sequence the value came from
        index: Position of value in tokens
        is_named: Value was given as a named argument
        attachment_index: Next unused attachment for positional attachments
        option: Structured option (structured surface only)
        delimiters: Group delimiters used to tokenize
    """

    argument: Argument
    invocation: CommandContext
    value: Optional[str] = None
    tokens: TokenSequence = field(default_factory=TokenSequence)
    index: int = 0
    is_named: bool = False
    attachment_index: int = 0
    option: Optional[StructuredOption] = None
    delimiters: str = DEFAULT_DELIMITERS

    @property
    def name(self) -> str:
        return self.argument.name


Parser = Callable[[ParsingContext], Union[ArgumentResult, Awaitable[ArgumentResult]]]


@dataclass(frozen=True)
class TypeRegistryEntry:
    """Parsers and metadata for one argument type.

    Attributes:
        string_parser: Parses a raw string value
        structured_parser: Reads a structured option
        option_type: Option type for schema export
        chat_parser: Overrides string_parser on the chat surface
        reads_from_value: False for types fed from a side channel (attachments)
        consumes_remainder: Positional parsing stops after this type
    """

    string_parser: Parser
    structured_parser: Parser
    option_type: OptionType
    chat_parser: Optional[Parser] = None
    reads_from_value: bool = True
    consumes_remainder: bool = False

    @property
    def chat(self) -> Parser:
        return self.chat_parser or self.string_parser


def _invalid(kind: str, context: ParsingContext) -> ArgumentResult:
    prefix = f"Invalid {kind} value" if kind else "Invalid value"
    return ArgumentResult.fail(f"{prefix} `{context.value}` for argument `{context.name}`.")


def _choice(context: ParsingContext) -> ArgumentResult:
    choice = context.argument.match_choice(context.value)
    if choice is None:
        return _invalid("", context)
    return ArgumentResult.ok(choice.value)


def parse_string(context: ParsingContext) -> ArgumentResult:
    if context.argument.choices:
        return _choice(context)
    return ArgumentResult.ok(context.value)


def parse_integer(context: ParsingContext) -> ArgumentResult:
    if context.argument.choices:
        return _choice(context)
    if not _INTEGER_PATTERN.fullmatch(context.value):
        return _invalid("integer", context)
    return ArgumentResult.ok(int(context.value))


def parse_number(context: ParsingContext) -> ArgumentResult:
    if context.argument.choices:
        return _choice(context)
    try:
        value = float(context.value)
    except ValueError:
        return _invalid("number", context)
    if not math.isfinite(value):
        return _invalid("number", context)
    return ArgumentResult.ok(value)


def parse_boolean(context: ParsingContext) -> ArgumentResult:
    folded = context.value.casefold()
    if folded == "true":
        return ArgumentResult.ok(True)
    if folded == "false":
        return ArgumentResult.ok(False)
    return _invalid("boolean", context)


def _resolver_lookup(kind: str, label: str) -> Parser:
    async def parse(context: ParsingContext) -> ArgumentResult:
        resolver = context.invocation.resolver
        entity = None
        if resolver is not None:
            lookup = getattr(resolver, f"resolve_{kind}")
            entity = await lookup(context.value, context.invocation.context_id)
        if entity is None:
            return ArgumentResult.fail(
                f"Invalid {label} `{context.value}` for argument `{context.name}`."
            )
        return ArgumentResult.ok(entity)

    parse.__name__ = f"parse_{kind}"
    return parse


parse_user = _resolver_lookup("user", "guild member")
parse_channel = _resolver_lookup("channel", "channel")
parse_role = _resolver_lookup("role", "role")


async def parse_mentionable(context: ParsingContext) -> ArgumentResult:
    """A user or a role, users take precedence."""
    resolver = context.invocation.resolver
    if resolver is not None:
        context_id = context.invocation.context_id
        entity = await resolver.resolve_user(context.value, context_id)
        if entity is None:
            entity = await resolver.resolve_role(context.value, context_id)
        if entity is not None:
            return ArgumentResult.ok(entity)
    return ArgumentResult.fail(
        f"Invalid mention `{context.value}` for argument `{context.name}`."
    )


def parse_attachment_id(context: ParsingContext) -> ArgumentResult:
    """Find an attachment of the message by id."""
    for attachment in context.invocation.attachments:
        if attachment.id == context.value:
            return ArgumentResult.ok(attachment)
    return ArgumentResult.fail(
        f"Invalid attachment `{context.value}` for argument `{context.name}`."
    )


def parse_chat_attachment(context: ParsingContext) -> ArgumentResult:
    """Named: look up by id. Positional: take the next unused attachment."""
    if context.is_named:
        return parse_attachment_id(context)
    attachments = context.invocation.attachments
    if context.attachment_index >= len(attachments):
        return ArgumentResult()
    return ArgumentResult.ok(attachments[context.attachment_index])


def parse_chat_rest_of_content(context: ParsingContext) -> ArgumentResult:
    """Everything from the current token on, exactly as written."""
    context.value = context.tokens.restore(context.index)
    return parse_string(context)


def parse_split_arguments(context: ParsingContext) -> ArgumentResult:
    try:
        return ArgumentResult.ok(tokenize(context.value, context.delimiters))
    except TokenizeError as e:
        return ArgumentResult.fail(f"{e.message} in argument `{context.name}`.")


def parse_chat_split_arguments(context: ParsingContext) -> ArgumentResult:
    if context.is_named:
        return parse_split_arguments(context)
    return ArgumentResult.ok(context.tokens.slice(context.index))


def _option_value(context: ParsingContext) -> ArgumentResult:
    return ArgumentResult.ok(context.option.value)


def _option_string(context: ParsingContext) -> ArgumentResult:
    return ArgumentResult.ok(str(context.option.value))


def _option_entity(*fields: str) -> Parser:
    def read(context: ParsingContext) -> ArgumentResult:
        option = context.option
        for name in fields:
            entity = getattr(option, name)
            if entity is not None:
                return ArgumentResult.ok(entity)
        return ArgumentResult.fail(f"Invalid value for argument `{context.name}`.")

    return read


def _option_split_arguments(context: ParsingContext) -> ArgumentResult:
    context.value = str(context.option.value)
    return parse_split_arguments(context)


TYPE_REGISTRY: Dict[ArgumentType, TypeRegistryEntry] = {
    ArgumentType.STRING: TypeRegistryEntry(
        string_parser=parse_string,
        structured_parser=_option_string,
        option_type=OptionType.STRING,
    ),
    ArgumentType.INTEGER: TypeRegistryEntry(
        string_parser=parse_integer,
        structured_parser=_option_value,
        option_type=OptionType.INTEGER,
    ),
    ArgumentType.BOOLEAN: TypeRegistryEntry(
        string_parser=parse_boolean,
        structured_parser=_option_value,
        option_type=OptionType.BOOLEAN,
    ),
    ArgumentType.USER: TypeRegistryEntry(
        string_parser=parse_user,
        structured_parser=_option_entity("member", "user"),
        option_type=OptionType.USER,
    ),
    ArgumentType.CHANNEL: TypeRegistryEntry(
        string_parser=parse_channel,
        structured_parser=_option_entity("channel"),
        option_type=OptionType.CHANNEL,
    ),
    ArgumentType.ROLE: TypeRegistryEntry(
        string_parser=parse_role,
        structured_parser=_option_entity("role"),
        option_type=OptionType.ROLE,
    ),
    ArgumentType.MENTIONABLE: TypeRegistryEntry(
        string_parser=parse_mentionable,
        structured_parser=_option_entity("member", "user", "role"),
        option_type=OptionType.MENTIONABLE,
    ),
    ArgumentType.NUMBER: TypeRegistryEntry(
        string_parser=parse_number,
        structured_parser=_option_value,
        option_type=OptionType.NUMBER,
    ),
    ArgumentType.ATTACHMENT: TypeRegistryEntry(
        string_parser=parse_attachment_id,
        chat_parser=parse_chat_attachment,
        structured_parser=_option_entity("attachment"),
        option_type=OptionType.ATTACHMENT,
        reads_from_value=False,
    ),
    ArgumentType.REST_OF_CONTENT: TypeRegistryEntry(
        string_parser=parse_string,
        chat_parser=parse_chat_rest_of_content,
        structured_parser=_option_string,
        option_type=OptionType.STRING,
        consumes_remainder=True,
    ),
    ArgumentType.SPLIT_ARGUMENTS: TypeRegistryEntry(
        string_parser=parse_split_arguments,
        chat_parser=parse_chat_split_arguments,
        structured_parser=_option_split_arguments,
        option_type=OptionType.STRING,
        consumes_remainder=True,
    ),
}

_unregistered = set(ArgumentType) - set(TYPE_REGISTRY)
if _unregistered:
    raise RuntimeError(f"Argument types without parsers: {sorted(t.value for t in _unregistered)}")


def option_type_for(argument_type: ArgumentType) -> OptionType:
    return TYPE_REGISTRY[argument_type].option_type
