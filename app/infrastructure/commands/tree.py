"""Immutable command tree built from CommandDefinitions.

A node is fully resolved when it is built: parent path, depth, inherited
category and permission and the shared data of its top-level command are
all passed down while building, so nothing is patched in afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, NamedTuple, Optional, Tuple

from core.config import CommandSettings, NamedArgsOption
from infrastructure.commands.cooldowns import CooldownStore, to_milliseconds
from infrastructure.commands.errors import ConfigurationError
from infrastructure.commands.models import (
    ArgumentsConfig,
    CommandDefinition,
    DefaultCommandCategory,
    DefaultCommandPermission,
    OptionType,
    category_name,
    is_public_category,
    real_category_name,
)
from infrastructure.commands.types import option_type_for

MAX_SUBCOMMANDS = 25
MAX_NESTED_DEPTH = 2


class NodeKind(Enum):
    LEAF = "leaf"
    NESTED = "nested"  # Children are all leaves
    NESTED_GROUP = "nested_group"  # At least one child is nested


class _Parent(NamedTuple):
    path: Tuple[str, ...]
    depth: int
    category: str
    permission: str
    shared: Any


@dataclass(frozen=True)
class CommandNode:
    """One command in the tree.

    Attributes:
        name: Command name
        path: Names from the top-level command down to this one
        kind: LEAF, NESTED or NESTED_GROUP
        depth: 0 for top-level commands
        description: Human-readable description
        category: Resolved category (never INHERIT)
        permission: Resolved permission (never INHERIT)
        arguments: Argument declaration, empty for nested commands
        handler: Callable for leaves, None for nested commands
        children: Subcommands by name, in declaration order
        cooldown: Per-user cooldown store, None when unlimited
        examples: Usage examples
        disable_named_args: Never extract named arguments
        suppress_argument_errors: Drop failing arguments instead of erroring
        shared: Data shared by every command under the same top-level command
    """

    name: str
    path: Tuple[str, ...]
    kind: NodeKind
    depth: int
    description: str
    category: str
    permission: str
    arguments: ArgumentsConfig
    handler: Optional[Callable] = None
    children: Mapping[str, "CommandNode"] = field(default_factory=dict)
    cooldown: Optional[CooldownStore] = field(default=None, compare=False)
    examples: Tuple[str, ...] = ()
    disable_named_args: bool = False
    suppress_argument_errors: bool = False
    shared: Any = field(default=None, compare=False, repr=False)

    @property
    def full_name(self) -> str:
        return " ".join(self.path)

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.LEAF

    @property
    def is_public(self) -> bool:
        return is_public_category(self.category)

    def child(self, name: str) -> Optional["CommandNode"]:
        return self.children.get(name)

    def walk(self) -> Iterator["CommandNode"]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children.values():
            yield from child.walk()

    def parses_named_args(self, policy: NamedArgsOption) -> bool:
        """Whether chat invocations of this command extract named arguments.

        Nested commands declare no arguments of their own, so they extract
        whenever the policy allows it; this lets help requests and flags meant
        for the leaf appear before the subcommand name.
        """
        if self.disable_named_args or policy is NamedArgsOption.NEVER:
            return False
        if policy is NamedArgsOption.ALWAYS or not self.is_leaf:
            return True
        return self.arguments.uses_named_args

    def usage(self) -> str:
        """Argument summary for help output.

        Example:
            `food fruit add <name> [count] [--note]`
        """
        if not self.is_leaf:
            return f"({' | '.join(self.children)})"
        parts = []
        for argument in self.arguments.arguments():
            if argument.hidden:
                continue
            label = f"--{argument.name}" if argument.named else argument.name
            parts.append(f"<{label}>" if argument.required else f"[{label}]")
        return " ".join(parts)

    def schema(self) -> Dict[str, Any]:
        """Option schema for structured transports.

        Hidden arguments are left out. Children become SUBCOMMAND options,
        or SUBCOMMAND_GROUP options when they are nested themselves.
        """
        data: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
        }
        if self.is_leaf:
            data["options"] = [
                {
                    "name": argument.name,
                    "description": argument.description,
                    "type": option_type_for(argument.type).value,
                    "required": argument.required,
                    "choices": [
                        {"name": c.name, "value": c.value} for c in argument.choices
                    ]
                    if argument.choices
                    else None,
                    "autocomplete": argument.autocomplete is not None,
                }
                for argument in self.arguments.arguments()
                if not argument.hidden
            ]
            return data

        options = []
        for child in self.children.values():
            child_data = child.schema()
            options.append(
                {
                    "name": child.name,
                    "description": child.description,
                    "type": (
                        OptionType.SUBCOMMAND
                        if child.is_leaf
                        else OptionType.SUBCOMMAND_GROUP
                    ).value,
                    "options": child_data["options"],
                }
            )
        data["options"] = options
        return data


def build_node(
    definition: CommandDefinition,
    settings: CommandSettings,
    parent: Optional[_Parent] = None,
) -> CommandNode:
    """Build and validate a node and its subtree.

    Args:
        definition: Command definition to build
        settings: Command settings, for the named argument policy
        parent: Resolved parent data, None for top-level commands

    Returns:
        Immutable CommandNode

    Raises:
        ConfigurationError: If the definition cannot be served
    """
    name = definition.name
    path = (parent.path if parent else ()) + (name,)
    depth = parent.depth + 1 if parent else 0
    full_name = " ".join(path)

    category = category_name(definition.category)
    if category == DefaultCommandCategory.INHERIT.value:
        if parent is None:
            raise ConfigurationError(
                "Only subcommands can inherit command category from parent.", full_name
            )
        category = parent.category

    permission = category_name(definition.permission)
    if permission == DefaultCommandPermission.INHERIT.value:
        if parent is None:
            raise ConfigurationError(
                "Only subcommands can inherit command permission from parent.",
                full_name,
            )
        permission = parent.permission

    cooldown = None
    if definition.cooldown is not None and to_milliseconds(definition.cooldown) != 0:
        cooldown = CooldownStore(definition.cooldown)

    common = dict(
        name=name,
        path=path,
        depth=depth,
        description=definition.description,
        category=category,
        permission=permission,
        cooldown=cooldown,
        examples=tuple(definition.examples),
        disable_named_args=definition.disable_named_args,
        suppress_argument_errors=definition.suppress_argument_errors,
    )

    if definition.handler is not None:
        if definition.subcommands:
            raise ConfigurationError(
                "Commands with subcommands cannot have a handler.", full_name
            )
        node = CommandNode(
            kind=NodeKind.LEAF,
            arguments=definition.args,
            handler=definition.handler,
            shared=parent.shared if parent else None,
            **common,
        )
        _validate_named_policy(node, settings)
        return node

    if len(definition.args):
        raise ConfigurationError(
            "Nested commands cannot declare arguments.", full_name
        )
    if depth >= MAX_NESTED_DEPTH:
        raise ConfigurationError(
            "Nested commands only support two levels of nesting.", full_name
        )
    if not definition.subcommands:
        raise ConfigurationError("Subcommand list cannot be empty.", full_name)
    if len(definition.subcommands) > MAX_SUBCOMMANDS:
        raise ConfigurationError(
            f"Command can only have up to {MAX_SUBCOMMANDS} subcommands.", full_name
        )

    shared = parent.shared if parent else None
    if parent is None and definition.shared_factory is not None:
        shared = definition.shared_factory()

    resolved = _Parent(path, depth, category, permission, shared)
    children: Dict[str, CommandNode] = {}
    for subcommand in definition.subcommands:
        children[subcommand.name] = build_node(subcommand, settings, resolved)

    kind = (
        NodeKind.NESTED
        if all(child.is_leaf for child in children.values())
        else NodeKind.NESTED_GROUP
    )
    return CommandNode(
        kind=kind,
        arguments=definition.args,
        children=MappingProxyType(children),
        shared=shared,
        **common,
    )


def _validate_named_policy(node: CommandNode, settings: CommandSettings) -> None:
    if node.parses_named_args(settings.NAMED_ARGS):
        return
    for argument in node.arguments.arguments():
        if argument.named and argument.required:
            raise ConfigurationError(
                f"Required named argument `{argument.name}` can never be given "
                "because named arguments are disabled.",
                node.full_name,
            )


class CommandTree:
    """Top-level commands by name.

    Example:
        tree = registry.build(settings.commands)
        node = tree.get("food")
        node.child("fruit").child("add").full_name  # "food fruit add"
    """

    def __init__(self, commands: Mapping[str, CommandNode]):
        self._commands = MappingProxyType(dict(commands))

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[CommandNode]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def get(self, name: str) -> Optional[CommandNode]:
        return self._commands.get(name)

    def find(self, path: List[str]) -> Optional[CommandNode]:
        """Find a node by its path, e.g. ["food", "fruit", "add"]."""
        if not path:
            return None
        node = self._commands.get(path[0])
        for part in path[1:]:
            if node is None:
                return None
            node = node.child(part)
        return node

    def walk(self) -> Iterator[CommandNode]:
        for node in self._commands.values():
            yield from node.walk()

    @cached_property
    def categories(self) -> Dict[str, List[CommandNode]]:
        """Public runnable commands grouped by displayed category name.

        Nested commands are flattened, so "food fruit add" is listed rather
        than "food".
        """
        index: Dict[str, List[CommandNode]] = {}
        for node in self.walk():
            if node.is_leaf and node.is_public:
                index.setdefault(real_category_name(node.category), []).append(node)
        return index

    def schemas(self) -> List[Dict[str, Any]]:
        return [node.schema() for node in self._commands.values()]
