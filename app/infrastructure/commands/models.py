"""Command framework data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

from infrastructure.commands.cooldowns import ExpireAge
from infrastructure.commands.errors import ConfigurationError


class Surface(Enum):
    """Where an invocation came from."""

    CHAT = "chat"
    STRUCTURED = "structured"


class ArgumentType(Enum):
    """Supported argument types."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    USER = "user"
    CHANNEL = "channel"
    ROLE = "role"
    MENTIONABLE = "mentionable"
    NUMBER = "number"
    ATTACHMENT = "attachment"
    REST_OF_CONTENT = "rest_of_content"
    SPLIT_ARGUMENTS = "split_arguments"


# Positional parsing stops after these types
REMAINDER_TYPES = frozenset({ArgumentType.REST_OF_CONTENT, ArgumentType.SPLIT_ARGUMENTS})


class OptionType(Enum):
    """Option types understood by structured invocation transports."""

    SUBCOMMAND = "subcommand"
    SUBCOMMAND_GROUP = "subcommand_group"
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    USER = "user"
    CHANNEL = "channel"
    ROLE = "role"
    MENTIONABLE = "mentionable"
    NUMBER = "number"
    ATTACHMENT = "attachment"


# Types whose values may be restricted to a list of choices
CHOICE_TYPES = frozenset(
    {
        ArgumentType.STRING,
        ArgumentType.INTEGER,
        ArgumentType.NUMBER,
        ArgumentType.REST_OF_CONTENT,
    }
)


class DefaultCommandCategory(str, Enum):
    """Built-in categories.

    Categories starting with an underscore are hidden from help listings.
    INHERIT is only valid on subcommands and resolves to the parent's category.
    """

    UTILITY = "Utility"
    SECRET = "_Secret"
    INHERIT = "_Inherit"


class DefaultCommandPermission(str, Enum):
    """Built-in permission levels, checked by the router's validator."""

    EVERYONE = "Everyone"
    OWNER = "Owner"
    INHERIT = "_Inherit"


def category_name(category: Union[str, Enum]) -> str:
    """String value of a category or permission."""
    return category.value if isinstance(category, Enum) else str(category)


def is_public_category(category: Union[str, Enum]) -> bool:
    return not category_name(category).startswith("_")


def real_category_name(category: Union[str, Enum]) -> str:
    """Category name as shown to users, without the hidden marker."""
    return category_name(category).lstrip("_")


@dataclass(frozen=True)
class Choice:
    """Allowed value for an argument, matched by name case-insensitively."""

    name: str
    value: Any


@dataclass(frozen=True)
class ArgumentResult:
    """Outcome of parsing or transforming one argument value.

    A result with neither value nor error means "nothing to read", which side
    channel parsers use when no attachment is left.
    """

    value: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any) -> "ArgumentResult":
        return cls(value=value)

    @classmethod
    def fail(cls, error: str) -> "ArgumentResult":
        return cls(error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None


Transformer = Callable[[Any], ArgumentResult]


@dataclass(frozen=True)
class Transformers:
    """Post-parse value transformers.

    `any` runs for every surface and takes precedence; `chat` and
    `structured` are only used when `any` is not set.
    """

    any: Optional[Transformer] = None
    chat: Optional[Transformer] = None
    structured: Optional[Transformer] = None

    def for_surface(self, surface: Surface) -> Optional[Transformer]:
        if self.any is not None:
            return self.any
        return self.chat if surface is Surface.CHAT else self.structured


@dataclass
class Argument:
    """Command argument definition.

    Attributes:
        name: Argument name, also the keyword passed to the handler
        type: ArgumentType deciding how the raw value is parsed
        required: Whether invocation fails when the argument is not given
        description: Human-readable description
        named: Chat callers may only give it as `--name=value`
        hidden: Never shown in schemas, chat-only and always named
        default: Value used when the argument is not given
        choices: Allowed values, plain values or Choice(name, value)
        transformers: Post-parse transformers
        autocomplete: Suggestion callback passed through to the schema

    Examples:
        Positional: Argument("name", required=True)
        Named flag: Argument("spoiler", type=ArgumentType.BOOLEAN, named=True, required=False, default=False)
        Remainder: Argument("text", type=ArgumentType.REST_OF_CONTENT)
    """

    name: str
    type: ArgumentType = ArgumentType.STRING
    required: bool = True
    description: str = ""
    named: bool = False
    hidden: bool = False
    default: Any = None
    choices: Optional[List[Any]] = None
    transformers: Optional[Transformers] = None
    autocomplete: Optional[Callable] = None

    def __post_init__(self):
        """Validate argument configuration."""
        if not self.name.isidentifier():
            raise ConfigurationError(
                f"Argument name `{self.name}` must be a valid identifier."
            )
        if not isinstance(self.type, ArgumentType):
            raise ConfigurationError(
                f"Argument `{self.name}` has unknown type {self.type!r}."
            )
        if self.hidden and not self.named:
            raise ConfigurationError(
                f"Hidden argument `{self.name}` must also be named."
            )
        if self.hidden and self.required:
            raise ConfigurationError(
                f"Hidden argument `{self.name}` cannot be required."
            )
        if self.choices is not None:
            if self.type not in CHOICE_TYPES:
                raise ConfigurationError(
                    f"Argument `{self.name}` of type {self.type.value} cannot have choices."
                )
            self.choices = [
                c if isinstance(c, Choice) else Choice(str(c), c) for c in self.choices
            ]

    @property
    def is_positional(self) -> bool:
        return not self.named and not self.hidden

    def match_choice(self, value: str) -> Optional[Choice]:
        """Find the choice whose name matches value, ignoring case."""
        folded = value.casefold()
        for choice in self.choices or []:
            if choice.name.casefold() == folded:
                return choice
        return None


class ArgumentsConfig(Mapping[str, Argument]):
    """Ordered, name-unique collection of a command's arguments.

    Lookups are case-insensitive so that `--Name=x` finds `name`.
    """

    def __init__(self, arguments: Iterable[Argument] = ()):
        self._arguments: Dict[str, Argument] = {}
        for argument in arguments:
            key = argument.name.lower()
            if key in self._arguments:
                raise ConfigurationError(
                    f"Duplicate argument name `{argument.name}`."
                )
            self._arguments[key] = argument

    def __getitem__(self, name: str) -> Argument:
        return self._arguments[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return (argument.name for argument in self._arguments.values())

    def __len__(self) -> int:
        return len(self._arguments)

    def __repr__(self) -> str:
        return f"ArgumentsConfig({list(self)!r})"

    def arguments(self) -> List[Argument]:
        return list(self._arguments.values())

    def positional(self) -> List[Argument]:
        """Arguments filled from unnamed chat tokens, in declaration order."""
        return [a for a in self._arguments.values() if a.is_positional]

    @property
    def uses_named_args(self) -> bool:
        return any(a.named for a in self._arguments.values())

    def validate(self, command: str = "") -> None:
        """Check positional ordering rules.

        Rules:
        - Required positional arguments come before optional ones
        - A REST_OF_CONTENT or SPLIT_ARGUMENTS argument is the last positional argument

        Raises:
            ConfigurationError: If a rule is broken
        """
        seen_optional = False
        seen_remainder = False
        for argument in self.positional():
            if seen_remainder:
                raise ConfigurationError(
                    "Rest of content and split arguments must be the last positional argument.",
                    command,
                )
            if argument.required and seen_optional:
                raise ConfigurationError(
                    "Optional arguments must be configured last.", command
                )
            seen_optional = seen_optional or not argument.required
            seen_remainder = argument.type in REMAINDER_TYPES


@dataclass
class CommandDefinition:
    """Declarative command definition, built into an immutable CommandNode.

    A definition with subcommands is a nested command and cannot have a
    handler or arguments of its own.

    Attributes:
        name: Command name, a single token
        handler: Callable receiving (ctx, **arguments), sync or async
        description: Human-readable description
        category: Help category, DefaultCommandCategory.INHERIT on subcommands
        permission: Permission checked before running
        args: Argument definitions, in positional order
        subcommands: Nested commands
        cooldown: Minimum time between invocations by one user
        examples: Usage examples for help output
        disable_named_args: Never extract named arguments for this command
        suppress_argument_errors: Drop arguments that fail to parse instead of failing
        shared_factory: Builds data shared by all subcommands of a top-level nested command

    Example:
        CommandDefinition(
            name="greet",
            handler=greet,
            args=[Argument("name", required=False, default="world")],
        )
    """

    name: str
    handler: Optional[Callable] = None
    description: str = ""
    category: Union[str, DefaultCommandCategory] = DefaultCommandCategory.UTILITY
    permission: Union[str, DefaultCommandPermission] = DefaultCommandPermission.EVERYONE
    args: Union[ArgumentsConfig, Sequence[Argument]] = field(default_factory=list)
    subcommands: List["CommandDefinition"] = field(default_factory=list)
    cooldown: Optional[ExpireAge] = None
    examples: List[str] = field(default_factory=list)
    disable_named_args: bool = False
    suppress_argument_errors: bool = False
    shared_factory: Optional[Callable[[], Any]] = None

    def __post_init__(self):
        """Validate command configuration."""
        if not self.name or any(c.isspace() for c in self.name):
            raise ConfigurationError(
                f"Command name `{self.name}` must be a single non-empty token."
            )
        if not isinstance(self.args, ArgumentsConfig):
            try:
                self.args = ArgumentsConfig(self.args)
            except ConfigurationError as e:
                raise ConfigurationError(e.message, self.name) from e
        self.args.validate(self.name)

        subcommands = list(self.subcommands)
        self.subcommands = []
        for subcommand in subcommands:
            self.add_subcommand(subcommand)

    def add_subcommand(self, subcommand: "CommandDefinition") -> None:
        """Add a nested subcommand.

        Raises:
            ConfigurationError: If a subcommand with the same name exists
        """
        if self.get_subcommand(subcommand.name) is not None:
            raise ConfigurationError(
                f"Duplicate subcommand `{subcommand.name}`.", self.name
            )
        self.subcommands.append(subcommand)

    def get_subcommand(self, name: str) -> Optional["CommandDefinition"]:
        for subcommand in self.subcommands:
            if subcommand.name == name:
                return subcommand
        return None


@dataclass(frozen=True)
class StructuredOption:
    """One resolved option of a structured invocation.

    Transports fill `value` for scalar types and the matching entity field
    for USER, CHANNEL, ROLE, MENTIONABLE and ATTACHMENT options.
    """

    name: str
    type: OptionType
    value: Any = None
    user: Any = None
    member: Any = None
    channel: Any = None
    role: Any = None
    attachment: Any = None


@dataclass(frozen=True)
class StructuredInvocation:
    """A structured (slash-style) invocation.

    Attributes:
        command: Top-level command name
        options: Leaf options keyed by argument name
        group: Selected subcommand group, if any
        subcommand: Selected subcommand, if any
    """

    command: str
    options: Mapping[str, StructuredOption] = field(default_factory=dict)
    group: Optional[str] = None
    subcommand: Optional[str] = None

    @classmethod
    def build(
        cls,
        command: str,
        *options: StructuredOption,
        group: Optional[str] = None,
        subcommand: Optional[str] = None,
    ) -> "StructuredInvocation":
        return cls(
            command=command,
            options={option.name: option for option in options},
            group=group,
            subcommand=subcommand,
        )
