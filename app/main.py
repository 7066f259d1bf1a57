import asyncio
import sys
from typing import Optional, TextIO

from dotenv import load_dotenv
from core.config import Settings, settings
from core.logging import get_module_logger
from infrastructure.commands import (
    CommandContext,
    CommandRouter,
    ConfigurationError,
    PermissionValidator,
)
from modules.examples import Channel, GuildDirectory, Member, Role, registry

logger = get_module_logger()

load_dotenv()


class ConsoleResponder:
    """ResponseChannel writing replies to a text stream."""

    def __init__(self, stream: TextIO = sys.stdout):
        self.stream = stream

    def send_message(self, text: str, **kwargs) -> None:
        print(text, file=self.stream)

    def send_ephemeral(self, text: str, **kwargs) -> None:
        print(f"(only you can see this) {text}", file=self.stream)

    def send_error(self, text: str, **kwargs) -> None:
        print(f"Error: {text}", file=self.stream)


def demo_directory() -> GuildDirectory:
    return GuildDirectory(
        members=[Member(id="1", username="ada"), Member(id="2", username="grace")],
        channels=[
            Channel(id="10", name="general"),
            Channel(id="11", name="voice", kind="voice"),
        ],
        roles=[Role(id="20", name="moderators")],
    )


def build_router(app_settings: Optional[Settings] = None) -> CommandRouter:
    """Build the command tree and router.

    Raises:
        ConfigurationError: If a registered command cannot be served
    """
    app_settings = app_settings or settings
    tree = registry.build(app_settings.commands)
    validator = PermissionValidator(owner_ids=app_settings.commands.OWNER_IDS)
    return CommandRouter(tree, app_settings.commands, validator=validator)


async def run_console(
    router: CommandRouter,
    lines: TextIO = sys.stdin,
    output: TextIO = sys.stdout,
    user_id: str = "1",
) -> None:
    """Dispatch every prefixed line of input as a chat command."""
    prefix = router.settings.COMMAND_PREFIX
    responder = ConsoleResponder(output)
    resolver = demo_directory()
    for line in lines:
        content = line.strip()
        if not content.startswith(prefix):
            continue
        ctx = CommandContext(
            user_id=user_id,
            context_id="console",
            channel_id="10",
            resolver=resolver,
            responder=responder,
        )
        await router.handle_chat(content[len(prefix) :], ctx)


def main():
    """Main function to start the application."""
    logger.info("application_startup")
    try:
        router = build_router()
    except ConfigurationError as e:
        logger.error("command_configuration_invalid", error=e.message)
        sys.exit(1)

    logger.info(
        "application_ready",
        commands=len(router.tree),
        prefix=router.settings.COMMAND_PREFIX,
    )
    asyncio.run(run_console(router))


if __name__ == "__main__":
    main()
