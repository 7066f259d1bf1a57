"""In-memory guild directory used to resolve chat mentions, ids and names."""

import re
from typing import Iterable, List, Optional, TypeVar

from pydantic import BaseModel

USER_MENTION = re.compile(r"^<@!?(\d+)>$")
CHANNEL_MENTION = re.compile(r"^<#(\d+)>$")
ROLE_MENTION = re.compile(r"^<@&(\d+)>$")


class Member(BaseModel):
    id: str
    username: str

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"


class Channel(BaseModel):
    id: str
    name: str
    kind: str = "text"

    @property
    def mention(self) -> str:
        return f"<#{self.id}>"


class Role(BaseModel):
    id: str
    name: str

    @property
    def mention(self) -> str:
        return f"<@&{self.id}>"


E = TypeVar("E", Member, Channel, Role)


def _lookup(
    text: str, mention: "re.Pattern[str]", entities: List[E], name_of
) -> Optional[E]:
    """Mention first, then id, then name ignoring case."""
    match = mention.match(text)
    if match:
        return next((e for e in entities if e.id == match.group(1)), None)
    by_id = next((e for e in entities if e.id == text), None)
    if by_id is not None:
        return by_id
    folded = text.casefold()
    return next((e for e in entities if name_of(e).casefold() == folded), None)


class GuildDirectory:
    """EntityResolver over fixed lists of members, channels and roles.

    Only text channels resolve as channels.

    Example:
        directory = GuildDirectory(members=[Member(id="1", username="ada")])
        await directory.resolve_user("<@1>", None)  # Member(id="1", ...)
    """

    def __init__(
        self,
        members: Iterable[Member] = (),
        channels: Iterable[Channel] = (),
        roles: Iterable[Role] = (),
    ):
        self.members = list(members)
        self.channels = list(channels)
        self.roles = list(roles)

    async def resolve_user(self, text: str, context_id: Optional[str]) -> Optional[Member]:
        return _lookup(text, USER_MENTION, self.members, lambda m: m.username)

    async def resolve_channel(
        self, text: str, context_id: Optional[str]
    ) -> Optional[Channel]:
        if text.startswith("#"):
            text = text[1:]
        channel = _lookup(text, CHANNEL_MENTION, self.channels, lambda c: c.name)
        if channel is None or channel.kind != "text":
            return None
        return channel

    async def resolve_role(self, text: str, context_id: Optional[str]) -> Optional[Role]:
        return _lookup(text, ROLE_MENTION, self.roles, lambda r: r.name)
