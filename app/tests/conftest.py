"""Shared fixtures for the command framework test suite."""

import pytest

from infrastructure.commands.context import Attachment
from infrastructure.commands.parser import CommandParser
from modules.examples.directory import Channel, GuildDirectory, Member, Role
from tests.factories.commands import (
    make_command_context,
    make_responder,
    make_settings,
)


@pytest.fixture
def command_settings():
    """Default CommandSettings, isolated from the environment."""
    return make_settings()


@pytest.fixture
def guild_directory():
    """Directory with two members, a text and a voice channel, and one role."""
    return GuildDirectory(
        members=[
            Member(id="100", username="Ada"),
            Member(id="200", username="Grace"),
        ],
        channels=[
            Channel(id="300", name="general"),
            Channel(id="301", name="lounge", kind="voice"),
        ],
        roles=[Role(id="400", name="Moderators")],
    )


@pytest.fixture
def response_channel():
    """Mock ResponseChannel."""
    return make_responder()


@pytest.fixture
def command_context_factory(guild_directory):
    """Factory for CommandContext instances resolving against guild_directory.

    Returns:
        Callable that creates CommandContext with default or custom values
    """

    def _factory(**kwargs):
        kwargs.setdefault("resolver", guild_directory)
        return make_command_context(**kwargs)

    return _factory


@pytest.fixture
def command_context(command_context_factory):
    return command_context_factory()


@pytest.fixture
def attachments():
    return [
        Attachment(id="900", filename="report.txt"),
        Attachment(id="901", filename="photo.png"),
    ]


@pytest.fixture
def command_parser():
    """CommandParser instance for parsing tests."""
    return CommandParser()
