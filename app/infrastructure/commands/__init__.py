"""Command framework for surface-agnostic command handling.

This framework provides:
- CommandRegistry: Register commands and build the immutable CommandTree
- CommandRouter: Dispatch chat text and structured invocations to handlers
- CommandParser: Parse and validate command arguments for both surfaces
- CommandContext: Per-invocation execution context

Example:
    from infrastructure.commands import (
        CommandRegistry, CommandRouter, CommandContext, Argument, ArgumentType
    )

    registry = CommandRegistry("mymodule")

    @registry.command(
        name="hello",
        description="Say hello to someone",
        args=[Argument("name", type=ArgumentType.STRING)]
    )
    def hello_command(ctx: CommandContext, name: str):
        ctx.respond(f"Hello, {name}!")

    router = CommandRouter(registry.build(settings.commands), settings.commands)
    await router.handle_chat("hello Ada", ctx)
"""

from infrastructure.commands.cooldowns import (
    CooldownDecision,
    CooldownStore,
    ExpireAge,
    ExpireAgeFormat,
    StandardCooldowns,
    TimedCache,
)
from infrastructure.commands.errors import (
    ArgumentParseError,
    CommandError,
    ConfigurationError,
    MissingRequiredArgumentError,
    MissingSubcommandError,
    TokenizeError,
    UnknownSubcommandError,
)
from infrastructure.commands.models import (
    Argument,
    ArgumentResult,
    ArgumentsConfig,
    ArgumentType,
    Choice,
    CommandDefinition,
    DefaultCommandCategory,
    DefaultCommandPermission,
    OptionType,
    StructuredInvocation,
    StructuredOption,
    Surface,
    Transformers,
)
from infrastructure.commands.tokenizer import Token, TokenKind, TokenSequence, tokenize
from infrastructure.commands.named_arguments import (
    NamedArgumentPattern,
    extract_named_args,
)
from infrastructure.commands.context import (
    Attachment,
    CommandContext,
    EntityResolver,
    ResponseChannel,
)
from infrastructure.commands.parser import CommandParser
from infrastructure.commands.tree import CommandNode, CommandTree, NodeKind
from infrastructure.commands.registry import CommandRegistry
from infrastructure.commands.permissions import PermissionValidator
from infrastructure.commands.help import HelpRenderer
from infrastructure.commands.router import CommandRouter

__all__ = [
    # Models
    "Argument",
    "ArgumentResult",
    "ArgumentsConfig",
    "ArgumentType",
    "Choice",
    "CommandDefinition",
    "DefaultCommandCategory",
    "DefaultCommandPermission",
    "OptionType",
    "StructuredInvocation",
    "StructuredOption",
    "Surface",
    "Transformers",
    # Errors
    "ArgumentParseError",
    "CommandError",
    "ConfigurationError",
    "MissingRequiredArgumentError",
    "MissingSubcommandError",
    "TokenizeError",
    "UnknownSubcommandError",
    # Tokenizing
    "Token",
    "TokenKind",
    "TokenSequence",
    "tokenize",
    "NamedArgumentPattern",
    "extract_named_args",
    # Cooldowns
    "CooldownDecision",
    "CooldownStore",
    "ExpireAge",
    "ExpireAgeFormat",
    "StandardCooldowns",
    "TimedCache",
    # Core
    "Attachment",
    "CommandContext",
    "EntityResolver",
    "ResponseChannel",
    "CommandParser",
    "CommandNode",
    "CommandTree",
    "NodeKind",
    "CommandRegistry",
    "PermissionValidator",
    "HelpRenderer",
    "CommandRouter",
]
