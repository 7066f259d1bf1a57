"""Command registry for registration and discovery."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from core.config import CommandSettings
from core.logging import get_module_logger
from infrastructure.commands.cooldowns import ExpireAge
from infrastructure.commands.errors import ConfigurationError
from infrastructure.commands.models import (
    Argument,
    CommandDefinition,
    DefaultCommandCategory,
    DefaultCommandPermission,
)
from infrastructure.commands.tree import CommandTree, build_node

logger = get_module_logger()


class CommandRegistry:
    """Registry for command registration and discovery.

    Commands are registered as definitions and validated as soon as they are
    declared; `build` turns them into an immutable CommandTree and is where
    tree-wide rules (nesting depth, subcommand counts, inheritance) are
    enforced. Any ConfigurationError should stop startup.

    Attributes:
        namespace: Module namespace for the registry (e.g., "examples")
        _commands: Dict of registered top-level definitions

    Example:
        registry = CommandRegistry("examples")

        @registry.command(
            name="greet",
            args=[Argument("name", required=False, default="world")],
        )
        def greet(ctx: CommandContext, name: str):
            ...

        registry.group("food", description="Food commands")
        registry.group("fruit", parent="food", category=DefaultCommandCategory.INHERIT)

        @registry.subcommand("food fruit", name="add", args=[Argument("name")])
        def add_fruit(ctx: CommandContext, name: str):
            ...

        tree = registry.build(settings.commands)
    """

    def __init__(self, namespace: str):
        """Initialize registry.

        Args:
            namespace: Module namespace for commands
        """
        self.namespace = namespace
        self._commands: Dict[str, CommandDefinition] = {}

    def register(
        self, definition: CommandDefinition, parent: Optional[str] = None
    ) -> CommandDefinition:
        """Register a definition at the top level or under parent.

        Args:
            definition: Command definition
            parent: Space separated path of the parent, e.g. "food fruit"

        Returns:
            The registered definition

        Raises:
            ConfigurationError: If the name is taken or parent is unknown
        """
        if parent is None:
            if definition.name in self._commands:
                raise ConfigurationError(
                    f"Command `{definition.name}` is already registered in {self.namespace}."
                )
            self._commands[definition.name] = definition
            logger.debug(
                "registered command", namespace=self.namespace, name=definition.name
            )
            return definition

        parent_definition = self.find_command(parent.split())
        if parent_definition is None:
            raise ConfigurationError(
                f"Parent command '{parent}' not found in {self.namespace}"
            )
        parent_definition.add_subcommand(definition)
        logger.debug(
            "registered subcommand",
            namespace=self.namespace,
            parent=parent,
            name=definition.name,
        )
        return definition

    def command(
        self,
        name: str,
        description: str = "",
        args: Optional[Sequence[Argument]] = None,
        category: Union[str, DefaultCommandCategory] = DefaultCommandCategory.UTILITY,
        permission: Union[str, DefaultCommandPermission] = DefaultCommandPermission.EVERYONE,
        cooldown: Optional[ExpireAge] = None,
        examples: Optional[List[str]] = None,
        parent: Optional[str] = None,
        **options: Any,
    ) -> Callable:
        """Decorator to register a command with handler.

        Args:
            name: Command name
            description: Human-readable description
            args: List of Argument definitions
            category: Help category
            permission: Permission checked before running
            cooldown: Minimum time between invocations per user
            examples: List of usage examples
            parent: Space separated parent path for subcommands
            **options: disable_named_args, suppress_argument_errors

        Returns:
            Decorator function that registers the handler
        """

        def decorator(handler: Callable) -> Callable:
            self.register(
                CommandDefinition(
                    name=name,
                    handler=handler,
                    description=description,
                    category=category,
                    permission=permission,
                    args=list(args or []),
                    cooldown=cooldown,
                    examples=list(examples or []),
                    **options,
                ),
                parent=parent,
            )
            return handler

        return decorator

    def subcommand(self, parent_name: str, name: str, **kwargs: Any) -> Callable:
        """Decorator to register a subcommand.

        Subcommands inherit category and permission unless given.

        Args:
            parent_name: Space separated path of the parent command
            name: Subcommand name
            **kwargs: Same as `command`

        Returns:
            Decorator function
        """
        kwargs.setdefault("category", DefaultCommandCategory.INHERIT)
        kwargs.setdefault("permission", DefaultCommandPermission.INHERIT)
        return self.command(name, parent=parent_name, **kwargs)

    def group(
        self,
        name: str,
        description: str = "",
        parent: Optional[str] = None,
        category: Optional[Union[str, DefaultCommandCategory]] = None,
        permission: Optional[Union[str, DefaultCommandPermission]] = None,
        cooldown: Optional[ExpireAge] = None,
        shared_factory: Optional[Callable[[], Any]] = None,
    ) -> CommandDefinition:
        """Register a nested command whose subcommands are added later.

        Args:
            name: Group name
            description: Human-readable description
            parent: Space separated parent path, None for top level
            category: Defaults to UTILITY at top level, INHERIT below
            permission: Defaults to EVERYONE at top level, INHERIT below
            cooldown: Cooldown applied before selecting a subcommand
            shared_factory: Builds data shared by every subcommand

        Returns:
            The group definition
        """
        if category is None:
            category = (
                DefaultCommandCategory.UTILITY
                if parent is None
                else DefaultCommandCategory.INHERIT
            )
        if permission is None:
            permission = (
                DefaultCommandPermission.EVERYONE
                if parent is None
                else DefaultCommandPermission.INHERIT
            )
        return self.register(
            CommandDefinition(
                name=name,
                description=description,
                category=category,
                permission=permission,
                cooldown=cooldown,
                shared_factory=shared_factory,
            ),
            parent=parent,
        )

    def get_command(self, name: str) -> Optional[CommandDefinition]:
        """Get top-level command definition by name."""
        return self._commands.get(name)

    def list_commands(self) -> List[CommandDefinition]:
        """Get all registered top-level definitions."""
        return list(self._commands.values())

    def find_command(self, parts: List[str]) -> Optional[CommandDefinition]:
        """Find command definition by parts (supports subcommands).

        Args:
            parts: List of command parts (e.g., ["food"] or ["food", "fruit"])

        Returns:
            CommandDefinition or None if not found
        """
        if not parts:
            return None

        cmd = self._commands.get(parts[0])
        for part in parts[1:]:
            if cmd is None:
                return None
            cmd = cmd.get_subcommand(part)
        return cmd

    def merge(self, other: "CommandRegistry") -> None:
        """Register every top-level definition of another registry here."""
        for definition in other.list_commands():
            self.register(definition)

    def build(self, settings: CommandSettings) -> CommandTree:
        """Validate every definition and build the immutable command tree.

        Args:
            settings: Command settings

        Returns:
            CommandTree with one node per top-level command

        Raises:
            ConfigurationError: If any command cannot be served
        """
        nodes = {
            name: build_node(definition, settings)
            for name, definition in self._commands.items()
        }
        tree = CommandTree(nodes)
        logger.info(
            "command_tree_built",
            namespace=self.namespace,
            commands=len(tree),
            nodes=sum(1 for _ in tree.walk()),
        )
        return tree
