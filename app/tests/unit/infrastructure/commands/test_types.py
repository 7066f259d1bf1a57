"""Unit tests for the argument type registry and its parsers."""

import pytest
from infrastructure.commands.models import (
    ArgumentType,
    Choice,
    OptionType,
    StructuredOption,
)
from infrastructure.commands.tokenizer import TokenSequence, tokenize
from infrastructure.commands.types import (
    TYPE_REGISTRY,
    ParsingContext,
    option_type_for,
    parse_boolean,
    parse_chat_attachment,
    parse_chat_rest_of_content,
    parse_channel,
    parse_integer,
    parse_mentionable,
    parse_number,
    parse_role,
    parse_split_arguments,
    parse_string,
    parse_user,
)
from tests.factories.commands import make_argument


def _context(ctx, value=None, arg_type=ArgumentType.STRING, **kwargs):
    return ParsingContext(
        argument=make_argument("value", arg_type=arg_type, choices=kwargs.pop("choices", None)),
        invocation=ctx,
        value=value,
        **kwargs,
    )


class TestTypeRegistry:
    def test_every_type_registered(self):
        assert set(TYPE_REGISTRY) == set(ArgumentType)

    def test_side_channel_types(self):
        assert TYPE_REGISTRY[ArgumentType.ATTACHMENT].reads_from_value is False
        assert TYPE_REGISTRY[ArgumentType.REST_OF_CONTENT].consumes_remainder is True
        assert TYPE_REGISTRY[ArgumentType.SPLIT_ARGUMENTS].consumes_remainder is True

    @pytest.mark.parametrize(
        "arg_type,option_type",
        [
            (ArgumentType.REST_OF_CONTENT, OptionType.STRING),
            (ArgumentType.SPLIT_ARGUMENTS, OptionType.STRING),
            (ArgumentType.ATTACHMENT, OptionType.ATTACHMENT),
            (ArgumentType.MENTIONABLE, OptionType.MENTIONABLE),
        ],
    )
    def test_option_types(self, arg_type, option_type):
        assert option_type_for(arg_type) is option_type


class TestScalarParsers:
    """Tests for string, integer, number and boolean parsing."""

    def test_string(self, command_context):
        assert parse_string(_context(command_context, "hi")).value == "hi"

    def test_string_choice_by_name(self, command_context):
        context = _context(
            command_context, "MEDIUM", choices=[Choice("Medium", "m"), "large"]
        )

        assert parse_string(context).value == "m"

    def test_string_choice_miss(self, command_context):
        context = _context(command_context, "huge", choices=["small"])

        result = parse_string(context)

        assert result.error == "Invalid value `huge` for argument `value`."

    @pytest.mark.parametrize("raw,expected", [("42", 42), ("-7", -7), ("+3", 3), ("007", 7)])
    def test_integer(self, command_context, raw, expected):
        context = _context(command_context, raw, ArgumentType.INTEGER)

        assert parse_integer(context).value == expected

    @pytest.mark.parametrize(
        "raw", ["4.2", "four", "", "1_000", " 5", "5 ", "\u0661\u0662", "0x1f"]
    )
    def test_integer_invalid(self, command_context, raw):
        context = _context(command_context, raw, ArgumentType.INTEGER)

        result = parse_integer(context)

        assert result.error == f"Invalid integer value `{raw}` for argument `value`."

    def test_integer_choice(self, command_context):
        context = _context(
            command_context, "two", ArgumentType.INTEGER, choices=[Choice("two", 2)]
        )

        assert parse_integer(context).value == 2

    def test_number(self, command_context):
        assert parse_number(_context(command_context, "2.5", ArgumentType.NUMBER)).value == 2.5

    @pytest.mark.parametrize("raw", ["nan", "inf", "-inf", "abc"])
    def test_number_must_be_finite(self, command_context, raw):
        assert parse_number(_context(command_context, raw, ArgumentType.NUMBER)).is_error

    @pytest.mark.parametrize("raw,expected", [("true", True), ("FALSE", False), ("True", True)])
    def test_boolean(self, command_context, raw, expected):
        context = _context(command_context, raw, ArgumentType.BOOLEAN)

        assert parse_boolean(context).value is expected

    def test_boolean_invalid(self, command_context):
        context = _context(command_context, "yes", ArgumentType.BOOLEAN)

        assert parse_boolean(context).error == "Invalid boolean value `yes` for argument `value`."


class TestResolverParsers:
    """Tests for parsers backed by the entity resolver."""

    @pytest.mark.asyncio
    async def test_user_by_mention(self, command_context):
        result = await parse_user(_context(command_context, "<@!200>", ArgumentType.USER))

        assert result.value.username == "Grace"

    @pytest.mark.asyncio
    async def test_user_by_name_ignores_case(self, command_context):
        result = await parse_user(_context(command_context, "ada", ArgumentType.USER))

        assert result.value.id == "100"

    @pytest.mark.asyncio
    async def test_unknown_user(self, command_context):
        result = await parse_user(_context(command_context, "nobody", ArgumentType.USER))

        assert result.error == "Invalid guild member `nobody` for argument `value`."

    @pytest.mark.asyncio
    async def test_channel_by_hash_name(self, command_context):
        result = await parse_channel(
            _context(command_context, "#general", ArgumentType.CHANNEL)
        )

        assert result.value.id == "300"

    @pytest.mark.asyncio
    async def test_non_text_channel_rejected(self, command_context):
        result = await parse_channel(
            _context(command_context, "<#301>", ArgumentType.CHANNEL)
        )

        assert result.is_error

    @pytest.mark.asyncio
    async def test_role(self, command_context):
        result = await parse_role(_context(command_context, "<@&400>", ArgumentType.ROLE))

        assert result.value.name == "Moderators"

    @pytest.mark.asyncio
    async def test_mentionable_falls_back_to_role(self, command_context):
        result = await parse_mentionable(
            _context(command_context, "moderators", ArgumentType.MENTIONABLE)
        )

        assert result.value.id == "400"

    @pytest.mark.asyncio
    async def test_mentionable_prefers_user(self, command_context):
        result = await parse_mentionable(
            _context(command_context, "100", ArgumentType.MENTIONABLE)
        )

        assert result.value.username == "Ada"

    @pytest.mark.asyncio
    async def test_without_resolver(self, command_context_factory):
        ctx = command_context_factory(resolver=None)

        result = await parse_user(_context(ctx, "<@100>", ArgumentType.USER))

        assert result.is_error


class TestSideChannelParsers:
    """Tests for attachment, remainder and split argument parsing."""

    def test_positional_attachment_by_index(self, command_context_factory, attachments):
        ctx = command_context_factory(attachments=attachments)

        result = parse_chat_attachment(
            _context(ctx, arg_type=ArgumentType.ATTACHMENT, attachment_index=1)
        )

        assert result.value.filename == "photo.png"

    def test_positional_attachment_exhausted(self, command_context_factory, attachments):
        ctx = command_context_factory(attachments=attachments)

        result = parse_chat_attachment(
            _context(ctx, arg_type=ArgumentType.ATTACHMENT, attachment_index=2)
        )

        assert result.value is None
        assert result.error is None

    def test_named_attachment_by_id(self, command_context_factory, attachments):
        ctx = command_context_factory(attachments=attachments)

        result = parse_chat_attachment(
            _context(ctx, "901", ArgumentType.ATTACHMENT, is_named=True)
        )

        assert result.value.id == "901"

    def test_named_attachment_unknown_id(self, command_context_factory, attachments):
        ctx = command_context_factory(attachments=attachments)

        result = parse_chat_attachment(
            _context(ctx, "999", ArgumentType.ATTACHMENT, is_named=True)
        )

        assert result.error == "Invalid attachment `999` for argument `value`."

    def test_rest_of_content_restores_source(self, command_context):
        tokens = tokenize('say  "hello   world"  now')
        context = _context(
            command_context,
            tokens.get(1),
            ArgumentType.REST_OF_CONTENT,
            tokens=tokens,
            index=1,
        )

        assert parse_chat_rest_of_content(context).value == '"hello   world"  now'

    def test_split_arguments_tokenizes(self, command_context):
        result = parse_split_arguments(
            _context(command_context, 'a "b c"', ArgumentType.SPLIT_ARGUMENTS)
        )

        assert isinstance(result.value, TokenSequence)
        assert result.value.contents() == ["a", "b c"]

    def test_split_arguments_tokenize_error(self, command_context):
        result = parse_split_arguments(
            _context(command_context, 'a "b', ArgumentType.SPLIT_ARGUMENTS)
        )

        assert result.error == "quotation mismatch in argument `value`."


class TestStructuredParsers:
    """Tests for reading structured options."""

    def _read(self, ctx, arg_type, option):
        entry = TYPE_REGISTRY[arg_type]
        return entry.structured_parser(
            ParsingContext(
                argument=make_argument("value", arg_type=arg_type),
                invocation=ctx,
                option=option,
            )
        )

    def test_user_prefers_member(self, command_context):
        option = StructuredOption(
            "value", OptionType.USER, value="100", user="user", member="member"
        )

        assert self._read(command_context, ArgumentType.USER, option).value == "member"

    def test_missing_entity(self, command_context):
        option = StructuredOption("value", OptionType.ROLE, value="400")

        result = self._read(command_context, ArgumentType.ROLE, option)

        assert result.error == "Invalid value for argument `value`."

    def test_split_arguments_from_string(self, command_context):
        option = StructuredOption("value", OptionType.STRING, value="x `y z`")

        result = self._read(command_context, ArgumentType.SPLIT_ARGUMENTS, option)

        assert result.value.contents() == ["x", "y z"]

    def test_integer_passthrough(self, command_context):
        option = StructuredOption("value", OptionType.INTEGER, value=5)

        assert self._read(command_context, ArgumentType.INTEGER, option).value == 5
