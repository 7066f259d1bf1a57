"""Command execution context - surface agnostic."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol
from uuid import uuid4

from core.logging import get_module_logger

if TYPE_CHECKING:
    from infrastructure.commands.tree import CommandNode, CommandTree

logger = get_module_logger()


class ResponseChannel(Protocol):
    """Protocol for transport-specific response channels."""

    def send_message(self, text: str, **kwargs) -> None:
        """Send message to the invoking user's channel."""
        ...  # pylint: disable=unnecessary-ellipsis

    def send_ephemeral(self, text: str, **kwargs) -> None:
        """Send message visible only to the invoking user."""
        ...  # pylint: disable=unnecessary-ellipsis

    def send_error(self, text: str, **kwargs) -> None:
        """Send error message to the invoking user."""
        ...  # pylint: disable=unnecessary-ellipsis


class EntityResolver(Protocol):
    """Looks up users, channels and roles referenced in chat text.

    Each method returns None when nothing matches.
    """

    async def resolve_user(self, text: str, context_id: Optional[str]) -> Any:
        ...  # pylint: disable=unnecessary-ellipsis

    async def resolve_channel(self, text: str, context_id: Optional[str]) -> Any:
        ...  # pylint: disable=unnecessary-ellipsis

    async def resolve_role(self, text: str, context_id: Optional[str]) -> Any:
        ...  # pylint: disable=unnecessary-ellipsis


@dataclass(frozen=True)
class Attachment:
    """File attached to a chat message."""

    id: str
    filename: str
    url: str = ""
    size: int = 0


@dataclass
class CommandContext:
    """Surface-agnostic command execution context.

    One context is created per invocation by the transport and handed to
    the handler. The router narrows `content` as it descends into
    subcommands, so a handler sees only the text after its own name.

    Attributes:
        user_id: Identifier of the invoking user
        context_id: Guild/workspace the command was issued in, None for DMs
        channel_id: Channel the command was issued in
        content: Chat content after the command name, empty for structured calls
        attachments: Files attached to the chat message
        extra_args: Named arguments given in chat that the command did not declare
        metadata: Transport-specific data
        correlation_id: Identifier used to tie log lines together
        resolver: Entity lookup (injected by transport)
        responder: Response channel (injected by transport)
        command: Command being run (set by the router)
        tree: Command tree the router dispatches into (set by the router)

    Example:
        def greet(ctx: CommandContext, name: str):
            ctx.respond(f"Hello, {name}!")
    """

    user_id: str
    context_id: Optional[str] = None
    channel_id: Optional[str] = None
    content: str = ""
    attachments: List[Attachment] = field(default_factory=list)
    extra_args: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    correlation_id: Optional[str] = None

    # Injected by transport
    resolver: Optional[EntityResolver] = field(default=None, repr=False)
    responder: Optional[ResponseChannel] = field(default=None, repr=False)

    # Set by router
    command: Optional["CommandNode"] = field(default=None, repr=False)
    tree: Optional["CommandTree"] = field(default=None, repr=False)

    def __post_init__(self):
        """Initialize defaults."""
        if self.correlation_id is None:
            self.correlation_id = str(uuid4())

    def respond(self, text: str, **kwargs) -> None:
        """Send response message to user.

        Args:
            text: Message text
            **kwargs: Transport-specific options
        """
        if self.responder is None:
            logger.warning("respond called without responder set", text=text)
            return
        self.responder.send_message(text, **kwargs)

    def respond_ephemeral(self, text: str, **kwargs) -> None:
        """Send message visible only to the user."""
        if self.responder is None:
            logger.warning("respond_ephemeral called without responder set", text=text)
            return
        self.responder.send_ephemeral(text, **kwargs)

    def respond_error(self, text: str, **kwargs) -> None:
        if self.responder is None:
            logger.warning("respond_error called without responder set", text=text)
            return
        self.responder.send_error(text, **kwargs)
