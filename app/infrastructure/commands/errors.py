"""Exceptions raised by the command framework.

Every exception carries a message that can be shown to the user who issued
the command. Registration problems raise ConfigurationError and must stop the
bot from starting; everything else is raised per invocation.
"""

from typing import Iterable, Tuple


class CommandError(Exception):
    """Base exception for all command framework errors.

    Example:
        try:
            await router.dispatch_chat(content, ctx)
        except CommandError as e:
            ctx.respond_error(e.message)
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(CommandError):
    """Raised at registration time for a command tree that cannot be served.

    Example:
        >>> registry.build()
        Traceback (most recent call last):
        ...
        ConfigurationError: Configuration error for command "food": Subcommand list cannot be empty.
    """

    def __init__(self, message: str, command: str = ""):
        if command:
            message = f'Configuration error for command "{command}": {message}'
        super().__init__(message)
        self.command = command


class TokenizeError(CommandError):
    """Raised when chat input leaves a quote or backtick group open."""

    def __init__(self, message: str = "quotation mismatch"):
        super().__init__(message)


class ArgumentParseError(CommandError):
    """Raised when a present value fails type conversion or transformation.

    Attributes:
        argument: Name of the argument that failed.
    """

    def __init__(self, argument: str, message: str):
        super().__init__(message)
        self.argument = argument


class MissingRequiredArgumentError(CommandError):
    """Raised once per invocation, naming every required argument not given.

    Attributes:
        names: Names of the missing arguments, in declaration order.
    """

    def __init__(self, names: Iterable[str]):
        self.names: Tuple[str, ...] = tuple(names)
        plural = "s" if len(self.names) != 1 else ""
        listed = ", ".join(f"`{name}`" for name in self.names)
        super().__init__(f"Missing required argument{plural} {listed}.")


class MissingSubcommandError(CommandError):
    """Raised when a nested command is invoked without a subcommand."""

    def __init__(self, parent: str):
        super().__init__(f"Missing subcommand for command `{parent}`.")
        self.parent = parent


class UnknownSubcommandError(CommandError):
    """Raised when the selected subcommand does not exist under its parent.

    Attributes:
        parent: Full name of the nested command.
        name: Subcommand name the caller asked for.
    """

    def __init__(self, parent: str, name: str):
        super().__init__(f"Invalid subcommand `{name}` for command `{parent}`.")
        self.parent = parent
        self.name = name
