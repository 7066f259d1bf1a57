"""Example commands for the command framework.

Covers every argument style the framework supports:
- food: Nested command with subcommand groups and shared data
- rename-file: Attachment, rest of content and named arguments
- show-args: Split arguments
- greet: User lookup with a defaulted remainder
- 8ball: Optional remainder with a hidden named argument
- help, ping: Utility commands
"""

from modules.examples.commands.registry import registry
from modules.examples.directory import GuildDirectory, Member, Channel, Role

__all__ = ["registry", "GuildDirectory", "Member", "Channel", "Role"]
