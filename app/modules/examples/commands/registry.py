"""Command registry for the example module."""

import random
from typing import Optional

from core.config import settings
from core.logging import get_module_logger
from infrastructure.commands import (
    Argument,
    ArgumentResult,
    ArgumentType,
    Attachment,
    CommandContext,
    CommandRegistry,
    HelpRenderer,
    StandardCooldowns,
    TokenSequence,
    Transformers,
)
from modules.examples.commands import food

logger = get_module_logger()

# Create registry for example commands
registry = CommandRegistry(namespace="examples")

FUN = "Fun"

EIGHT_BALL_ANSWERS = [
    "It is certain.",
    "It is decidedly so.",
    "Without a doubt.",
    "Yes, definitely.",
    "You may rely on it.",
    "As I see it, yes.",
    "Most likely.",
    "Outlook good.",
    "Yes.",
    "Signs point to yes.",
    "Reply hazy, try again.",
    "Ask again later.",
    "Better not tell you now.",
    "Cannot predict now.",
    "Concentrate and ask again.",
    "Don't count on it.",
    "My reply is no.",
    "My sources say no.",
    "Outlook not so good.",
    "Very doubtful.",
]


def _non_negative(value: int) -> ArgumentResult:
    if value < 0:
        return ArgumentResult.fail("Seed must not be negative.")
    return ArgumentResult.ok(value)


@registry.command(
    name="ping",
    description="Checks that the bot is responding.",
    cooldown=StandardCooldowns.LOW,
)
def ping(ctx: CommandContext):
    ctx.respond("Pong!")


@registry.command(
    name="help",
    description="Shows help for a category or command.",
    args=[
        Argument(
            "query",
            type=ArgumentType.REST_OF_CONTENT,
            required=False,
            description="Category or command name.",
        )
    ],
    cooldown=StandardCooldowns.LOW,
    examples=["", "Fun", "food fruit add"],
)
def help_command(ctx: CommandContext, query: Optional[str] = None):
    """Reply with the help page matching query."""
    renderer = HelpRenderer(prefix=settings.commands.COMMAND_PREFIX)
    ctx.respond(renderer.query(ctx.tree, query))


@registry.command(
    name="show-args",
    description="Shows the chat command arguments and how they were split by the bot.",
    args=[
        Argument(
            "args",
            type=ArgumentType.SPLIT_ARGUMENTS,
            required=False,
            description="Arguments to parse.",
        )
    ],
    cooldown=StandardCooldowns.LOW,
)
def show_args(ctx: CommandContext, args: Optional[TokenSequence] = None):
    if not args:
        ctx.respond("Command Arguments\nNone!")
        return
    lines = [f"Argument {i}: {value}" for i, value in enumerate(args.contents())]
    ctx.respond("Command Arguments\n" + "\n".join(lines))


@registry.command(
    name="rename-file",
    description="Renames the given file by reuploading it with a new name.",
    args=[
        Argument("file", type=ArgumentType.ATTACHMENT, description="Attachment."),
        Argument("name", type=ArgumentType.REST_OF_CONTENT, description="New name."),
        Argument(
            "description",
            type=ArgumentType.REST_OF_CONTENT,
            named=True,
            required=False,
            description="Description",
        ),
        Argument(
            "spoiler",
            type=ArgumentType.BOOLEAN,
            named=True,
            required=False,
            default=False,
            description="Spoiler the new attachment?",
        ),
    ],
    cooldown=StandardCooldowns.LOW,
    examples=['my-file.txt --description="Weekly report" --spoiler'],
)
def rename_file(
    ctx: CommandContext,
    file: Attachment,
    name: str,
    spoiler: bool,
    description: Optional[str] = None,
):
    """Reupload file under a new name."""
    new_name = f"SPOILER_{name}" if spoiler else name
    logger.info("renaming_file", attachment_id=file.id, new_name=new_name)
    message = f"Renamed `{file.filename}` to `{new_name}`."
    if description:
        message += f"\n{description}"
    ctx.respond(message)


@registry.command(
    name="say",
    description="Repeats a message, optionally into another channel.",
    args=[
        Argument("message", type=ArgumentType.REST_OF_CONTENT, description="Message."),
        Argument(
            "channel",
            type=ArgumentType.CHANNEL,
            named=True,
            required=False,
            description="Channel to send to.",
        ),
    ],
    cooldown=StandardCooldowns.LOW,
    examples=["--channel=#general Hello, world!"],
)
def say(ctx: CommandContext, message: str, channel=None):
    if channel is not None:
        ctx.respond(f"[{channel.mention}] {message}")
    else:
        ctx.respond(message)


@registry.command(
    name="greet",
    description="Greets another user.",
    category=FUN,
    args=[
        Argument("target", type=ArgumentType.USER, description="User to greet."),
        Argument(
            "greeting",
            type=ArgumentType.REST_OF_CONTENT,
            required=False,
            default="Hello!",
            description="Greeting to send.",
        ),
    ],
    cooldown=StandardCooldowns.LOW,
)
def greet(ctx: CommandContext, target, greeting: str):
    ctx.respond(f'{target.mention}, <@{ctx.user_id}> says "{greeting}"')


@registry.command(
    name="8ball",
    description="Shakes the Magic 8-ball for a glimpse into the future.",
    category=FUN,
    args=[
        Argument(
            "question",
            type=ArgumentType.REST_OF_CONTENT,
            required=False,
            description="Question to ask.",
        ),
        Argument(
            "seed",
            type=ArgumentType.INTEGER,
            named=True,
            hidden=True,
            required=False,
            transformers=Transformers(any=_non_negative),
        ),
    ],
    cooldown=StandardCooldowns.LOW,
)
def eight_ball(
    ctx: CommandContext, question: Optional[str] = None, seed: Optional[int] = None
):
    """Answer with a random 8-ball reply, reproducible when seeded."""
    rng = random.Random(seed) if seed is not None else random
    if question:
        ctx.respond(question)
    ctx.respond(f":8ball: - {rng.choice(EIGHT_BALL_ANSWERS)}")


food.register(registry)
