"""Command router for chat and structured invocations."""

import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from core.config import CommandSettings
from core.logging import get_module_logger, invocation_context
from infrastructure.commands.context import CommandContext
from infrastructure.commands.cooldowns import CooldownDecision
from infrastructure.commands.errors import (
    CommandError,
    MissingSubcommandError,
    UnknownSubcommandError,
)
from infrastructure.commands.help import HelpRenderer
from infrastructure.commands.models import StructuredInvocation, Surface
from infrastructure.commands.named_arguments import (
    NamedArgumentPattern,
    extract_named_args,
)
from infrastructure.commands.parser import CommandParser
from infrastructure.commands.tokenizer import TokenSequence, tokenize
from infrastructure.commands.tree import CommandNode, CommandTree

logger = get_module_logger()

CommandValidator = Callable[
    [CommandContext, CommandNode], Union[bool, Awaitable[bool]]
]
HelpHandler = Callable[[CommandContext, CommandNode], Any]

GENERIC_ERROR = "An error occurred processing your command."


class CommandRouter:
    """Dispatch invocations through a CommandTree to leaf handlers.

    Each level of the tree runs the same steps: permission check, cooldown
    check, then either parse arguments and run the handler (leaf) or select
    a child and descend (nested). Handlers are called as
    `handler(ctx, **arguments)` and may be coroutines.

    `dispatch_*` raise CommandError for the caller to report; `handle_*`
    catch and report errors through the context's responder.

    Example:
        tree = registry.build(settings.commands)
        router = CommandRouter(tree, settings.commands)

        ctx = CommandContext(user_id="42", responder=channel)
        await router.handle_chat('food fruit add "dragon fruit"', ctx)
        await router.handle_structured(
            StructuredInvocation.build("greet", StructuredOption("name", OptionType.STRING, "Ada")),
            ctx,
        )
    """

    def __init__(
        self,
        tree: CommandTree,
        settings: CommandSettings,
        validator: Optional[CommandValidator] = None,
        help_handler: Optional[HelpHandler] = None,
    ):
        """Initialize router.

        Args:
            tree: Built command tree
            settings: Command settings
            validator: Permission check, every command allowed when None
            help_handler: Called instead of a command when the help named
                argument is given; defaults to replying with the command page

        Raises:
            ConfigurationError: If the named argument pattern is invalid
        """
        self.tree = tree
        self.settings = settings
        self.validator = validator
        self.help_handler = help_handler or self._default_help
        self.pattern = NamedArgumentPattern.from_settings(settings)
        self.parser = CommandParser(delimiters=settings.GROUP_DELIMITERS)
        self.help_renderer = HelpRenderer(prefix=settings.COMMAND_PREFIX)

    async def handle_chat(self, content: str, ctx: CommandContext) -> bool:
        """Dispatch chat content, reporting errors to the user.

        Args:
            content: Message text after the command prefix
            ctx: Invocation context

        Returns:
            True if a handler (or help) ran
        """
        try:
            return await self.dispatch_chat(content, ctx)
        except CommandError as e:
            self._report(ctx, e)
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("command_execution_error", error=str(e))
            ctx.respond_error(GENERIC_ERROR)
        return False

    async def handle_structured(
        self, invocation: StructuredInvocation, ctx: CommandContext
    ) -> bool:
        """Dispatch a structured invocation, reporting errors to the user."""
        try:
            return await self.dispatch_structured(invocation, ctx)
        except CommandError as e:
            self._report(ctx, e)
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("command_execution_error", error=str(e))
            ctx.respond_error(GENERIC_ERROR)
        return False

    async def dispatch_chat(self, content: str, ctx: CommandContext) -> bool:
        """Tokenize chat content and run the command it names.

        Args:
            content: Message text after the command prefix
            ctx: Invocation context

        Returns:
            False for empty content, an unknown top-level command, or a
            failed permission or cooldown check; True otherwise

        Raises:
            CommandError: For tokenizing, selection and argument errors
        """
        tokens = tokenize(content, self.settings.GROUP_DELIMITERS)
        if not tokens:
            return False

        name, rest = tokens.shift()
        node = self.tree.get(name)
        if node is None:
            logger.debug("unknown_command", command=name)
            return False

        ctx.tree = self.tree
        ctx.content = rest.restore()
        with invocation_context(Surface.CHAT.value, name, ctx.user_id):
            return await self._run_chat(node, rest, ctx)

    async def dispatch_structured(
        self, invocation: StructuredInvocation, ctx: CommandContext
    ) -> bool:
        """Run the command selected by a structured invocation.

        Raises:
            CommandError: For selection and argument errors
        """
        node = self.tree.get(invocation.command)
        if node is None:
            logger.warning("unknown_structured_command", command=invocation.command)
            return False

        ctx.tree = self.tree
        with invocation_context(Surface.STRUCTURED.value, node.name, ctx.user_id):
            return await self._run_structured(node, invocation, ctx, level=0)

    async def _run_chat(
        self, node: CommandNode, tokens: TokenSequence, ctx: CommandContext
    ) -> bool:
        if not await self._preconditions(node, ctx, Surface.CHAT):
            return False

        parse_named = node.parses_named_args(self.settings.NAMED_ARGS)

        if node.is_leaf:
            if parse_named and self._wants_help(tokens):
                await self._call(self.help_handler, ctx, node)
                return True
            record = await self.parser.parse_chat(
                tokens,
                node.arguments,
                ctx,
                pattern=self.pattern if parse_named else None,
                suppress_errors=node.suppress_argument_errors,
            )
            await self._execute(node, ctx, record)
            return True

        selector, rest = self._select_chat(tokens, parse_named)
        if selector is None:
            if parse_named and self._wants_help(tokens):
                await self._call(self.help_handler, ctx, node)
                return True
            raise MissingSubcommandError(node.full_name)
        child = node.child(selector)
        if child is None:
            raise UnknownSubcommandError(node.full_name, selector)

        ctx.content = rest.restore()
        logger.debug("delegating_to_subcommand", parent=node.full_name, subcommand=selector)
        return await self._run_chat(child, rest, ctx)

    async def _run_structured(
        self,
        node: CommandNode,
        invocation: StructuredInvocation,
        ctx: CommandContext,
        level: int,
    ) -> bool:
        if not await self._preconditions(node, ctx, Surface.STRUCTURED):
            return False

        if node.is_leaf:
            record = self.parser.parse_structured(
                invocation.options,
                node.arguments,
                ctx,
                suppress_errors=node.suppress_argument_errors,
            )
            await self._execute(node, ctx, record)
            return True

        # level 0: top-level command, 1: inside a subcommand group
        selector: Optional[str] = None
        next_level = 2
        if level == 0 and invocation.group is not None:
            selector, next_level = invocation.group, 1
        elif level < 2:
            selector = invocation.subcommand

        if selector is None:
            raise MissingSubcommandError(node.full_name)
        child = node.child(selector)
        if child is None:
            raise UnknownSubcommandError(node.full_name, selector)

        logger.debug("delegating_to_subcommand", parent=node.full_name, subcommand=selector)
        return await self._run_structured(child, invocation, ctx, next_level)

    def _select_chat(
        self, tokens: TokenSequence, parse_named: bool
    ) -> Tuple[Optional[str], TokenSequence]:
        """Take the first unnamed token as the subcommand name.

        Named arguments stay in the returned sequence for the leaf to parse.
        """
        if not parse_named:
            if not tokens:
                return None, tokens
            return tokens.shift()

        unnamed = extract_named_args(tokens, self.pattern).unnamed
        if not unnamed:
            return None, tokens
        selected = unnamed.token(0)
        for index, token in enumerate(tokens):
            if token is selected:
                return selected.content, tokens.remove(index)
        return None, tokens

    def _wants_help(self, tokens: TokenSequence) -> bool:
        help_name = self.settings.RUN_HELP_NAMED_ARG
        if not help_name:
            return False
        extracted = extract_named_args(tokens, self.pattern)
        return any(arg.name.lower() == help_name.lower() for arg in extracted.named)

    async def _preconditions(
        self, node: CommandNode, ctx: CommandContext, surface: Surface
    ) -> bool:
        if self.validator is not None:
            allowed = await self._call(self.validator, ctx, node)
            if not allowed:
                logger.info("permission_denied", command=node.full_name)
                if surface is Surface.STRUCTURED:
                    ctx.respond_ephemeral("Permission denied.")
                return False

        if node.cooldown is not None:
            decision = node.cooldown.check(ctx.user_id)
            if decision is not CooldownDecision.ALLOW:
                logger.info(
                    "command_on_cooldown",
                    command=node.full_name,
                    decision=decision.value,
                )
                if decision is CooldownDecision.WARN:
                    ctx.respond_ephemeral(node.cooldown.warning())
                return False
        return True

    async def _execute(
        self, node: CommandNode, ctx: CommandContext, record: Dict[str, Any]
    ) -> None:
        ctx.command = node
        logger.info(
            "command_executing",
            command=node.full_name,
            arguments=sorted(record),
        )
        await self._call(node.handler, ctx, **record)

    async def _call(self, func: Callable, *args: Any, **kwargs: Any) -> Any:
        result = func(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _default_help(self, ctx: CommandContext, node: CommandNode) -> None:
        ctx.respond(self.help_renderer.render_command(node))

    def _report(self, ctx: CommandContext, error: CommandError) -> None:
        logger.warning(
            "command_error",
            error=error.message,
            error_type=type(error).__name__,
        )
        ctx.respond_error(error.message)
