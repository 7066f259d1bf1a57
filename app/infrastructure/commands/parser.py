"""Argument parsing for chat and structured invocations."""

import inspect
from typing import Any, Dict, Mapping, Optional, Set

from core.logging import get_module_logger
from infrastructure.commands.context import CommandContext
from infrastructure.commands.errors import (
    ArgumentParseError,
    MissingRequiredArgumentError,
)
from infrastructure.commands.models import (
    Argument,
    ArgumentResult,
    ArgumentsConfig,
    StructuredOption,
    Surface,
)
from infrastructure.commands.named_arguments import (
    NamedArgumentPattern,
    extract_named_args,
)
from infrastructure.commands.tokenizer import DEFAULT_DELIMITERS, TokenSequence
from infrastructure.commands.types import TYPE_REGISTRY, ParsingContext

logger = get_module_logger()

# Marks an argument whose error was suppressed, so it is left out of the record
_OMITTED = object()


class CommandParser:
    """Parse invocations into a record of argument values keyed by name.

    Both surfaces share one per-argument step (parse, transform, suppress or
    raise), so the same declaration yields the same record whether a command
    is typed in chat or invoked through a structured transport.

    Handles:
    - Named arguments (`--name=value`) before positional parsing
    - Positional arguments in declaration order
    - Attachments taken from the message instead of the token stream
    - Defaults, transformers and choices
    - One batched error for all missing required arguments

    Example:
        parser = CommandParser()
        args = ArgumentsConfig([
            Argument("name"),
            Argument("loud", type=ArgumentType.BOOLEAN, named=True, required=False, default=False),
        ])

        record = await parser.parse_chat(tokenize("Alice --loud"), args, ctx, pattern)
        # {"name": "Alice", "loud": True}
    """

    def __init__(self, delimiters: str = DEFAULT_DELIMITERS):
        self.delimiters = delimiters

    async def parse_chat(
        self,
        tokens: TokenSequence,
        arguments: ArgumentsConfig,
        ctx: CommandContext,
        pattern: Optional[NamedArgumentPattern] = None,
        suppress_errors: bool = False,
    ) -> Dict[str, Any]:
        """Parse chat tokens against an argument declaration.

        Algorithm:
        1. If a pattern is given, extract named arguments; undeclared names go
           to ctx.extra_args, declared ones are parsed from their value
        2. Walk positional arguments in order, skipping those already given by
           name; attachments read from ctx.attachments without using a token
        3. REST_OF_CONTENT and SPLIT_ARGUMENTS take every remaining token
        4. Fill defaults, then report every missing required argument at once

        Args:
            tokens: Tokens after the command (and subcommand) names
            arguments: Argument declaration of the command
            ctx: Invocation context
            pattern: Named argument pattern, None when named parsing is off
            suppress_errors: Drop arguments that fail instead of raising

        Returns:
            Dict of argument name to parsed value

        Raises:
            ArgumentParseError: If a given value is invalid
            MissingRequiredArgumentError: If required arguments were not given
        """
        record: Dict[str, Any] = {}
        given: Set[str] = set()

        if pattern is not None:
            extracted = extract_named_args(tokens, pattern)
            for name, value in extracted.named:
                key = name.lower()
                argument = arguments.get(key)
                if argument is None:
                    ctx.extra_args[key] = value
                    continue
                context = ParsingContext(
                    argument=argument,
                    invocation=ctx,
                    value=value,
                    tokens=TokenSequence.of(value),
                    is_named=True,
                    delimiters=self.delimiters,
                )
                parsed = await self._parse_chat_value(context, suppress_errors)
                given.add(argument.name)
                self._store(record, argument, parsed)
            tokens = extracted.unnamed

        index = 0
        attachment_index = 0
        for argument in arguments.positional():
            if argument.name in given:
                continue
            entry = TYPE_REGISTRY[argument.type]
            if entry.reads_from_value and index >= len(tokens):
                continue

            context = ParsingContext(
                argument=argument,
                invocation=ctx,
                value=tokens.get(index) if entry.reads_from_value else None,
                tokens=tokens,
                index=index,
                attachment_index=attachment_index,
                delimiters=self.delimiters,
            )
            result = await self._run_parser(entry.chat, context)
            if result.value is None and result.error is None:
                # Side channel had nothing left to read
                continue

            parsed = self._finish(argument, result, Surface.CHAT, suppress_errors)
            given.add(argument.name)
            self._store(record, argument, parsed)

            if not entry.reads_from_value:
                attachment_index += 1
            elif entry.consumes_remainder:
                index = len(tokens)
            else:
                index += 1

        if index < len(tokens):
            logger.debug(
                "surplus_tokens_ignored",
                surplus=tokens.slice(index).contents(),
            )

        self._fill_defaults(record, given, arguments, Surface.CHAT, suppress_errors)
        return record

    def parse_structured(
        self,
        options: Mapping[str, StructuredOption],
        arguments: ArgumentsConfig,
        ctx: CommandContext,
        suppress_errors: bool = False,
    ) -> Dict[str, Any]:
        """Parse structured options against an argument declaration.

        Required options are enforced by the transport, so arguments without
        an option only receive their default.

        Args:
            options: Leaf options keyed by argument name
            arguments: Argument declaration of the command
            ctx: Invocation context
            suppress_errors: Drop arguments that fail instead of raising

        Returns:
            Dict of argument name to parsed value

        Raises:
            ArgumentParseError: If an option value is rejected
        """
        record: Dict[str, Any] = {}
        for argument in arguments.arguments():
            option = options.get(argument.name)
            if option is None:
                if argument.default is None:
                    continue
                result = ArgumentResult.ok(argument.default)
            else:
                parser = TYPE_REGISTRY[argument.type].structured_parser
                result = parser(
                    ParsingContext(
                        argument=argument,
                        invocation=ctx,
                        option=option,
                        delimiters=self.delimiters,
                    )
                )
            parsed = self._finish(argument, result, Surface.STRUCTURED, suppress_errors)
            self._store(record, argument, parsed)
        return record

    async def _parse_chat_value(
        self, context: ParsingContext, suppress_errors: bool
    ) -> Any:
        entry = TYPE_REGISTRY[context.argument.type]
        result = await self._run_parser(entry.chat, context)
        if result.value is None and result.error is None:
            result = ArgumentResult.fail(
                f"Missing value for argument `{context.name}`."
            )
        return self._finish(context.argument, result, Surface.CHAT, suppress_errors)

    async def _run_parser(self, parser, context: ParsingContext) -> ArgumentResult:
        result = parser(context)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _fill_defaults(
        self,
        record: Dict[str, Any],
        given: Set[str],
        arguments: ArgumentsConfig,
        surface: Surface,
        suppress_errors: bool,
    ) -> None:
        missing = []
        for argument in arguments.arguments():
            if argument.name in given:
                continue
            if argument.default is not None:
                parsed = self._finish(
                    argument, ArgumentResult.ok(argument.default), surface, suppress_errors
                )
                self._store(record, argument, parsed)
            elif argument.required:
                missing.append(argument.name)

        if missing and not suppress_errors:
            raise MissingRequiredArgumentError(missing)

    def _finish(
        self,
        argument: Argument,
        result: ArgumentResult,
        surface: Surface,
        suppress_errors: bool,
    ) -> Any:
        """Transform a parser result, then return its value or raise its error.

        Errors of hidden arguments, or of any argument when suppress_errors is
        set, drop the argument instead of failing the invocation.
        """
        if not result.is_error and result.value is not None:
            result = self._transform(argument, result, surface)

        if result.is_error:
            if suppress_errors or argument.hidden:
                logger.debug(
                    "argument_error_suppressed",
                    argument=argument.name,
                    error=result.error,
                )
                return _OMITTED
            raise ArgumentParseError(argument.name, result.error)
        return result.value

    def _transform(
        self, argument: Argument, result: ArgumentResult, surface: Surface
    ) -> ArgumentResult:
        if argument.transformers is None:
            return result
        transformer = argument.transformers.for_surface(surface)
        if transformer is None:
            return result
        return transformer(result.value)

    def _store(self, record: Dict[str, Any], argument: Argument, value: Any) -> None:
        if value is not _OMITTED:
            record[argument.name] = value
