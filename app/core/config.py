"""Command framework configuration settings."""

from enum import Enum
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NamedArgsOption(str, Enum):
    """Policy deciding when named arguments are extracted from chat commands."""

    NEVER = "never"
    IF_NEEDED = "if_needed"
    ALWAYS = "always"


class CommandSettings(BaseSettings):
    """Chat and structured command parsing settings.

    Environment Variables:
        COMMAND_PREFIX: Prefix that marks a chat message as a command (e.g. "!")
        NAMED_ARGS: Named argument policy: never, if_needed or always
        NAMED_ARG_PREFIX: Prefix of a named argument token (e.g. "--")
        NAMED_ARG_SEPARATOR: Separator between name and value (e.g. "=")
        NAMED_ARG_SEPARATOR_REQUIRED: Reject valueless boolean flags
        NAMED_ARG_STOP_ON_PREFIX_ONLY: A bare prefix token ends named argument parsing
        RUN_HELP_NAMED_ARG: Named argument that requests help, empty to disable
        GROUP_DELIMITERS: Characters that open and close a grouped token
        OWNER_IDS: User ids allowed to run Owner commands (JSON list)

    Example:
        ```python
        from core.config import settings

        if settings.commands.NAMED_ARGS == NamedArgsOption.NEVER:
            ...
        ```
    """

    COMMAND_PREFIX: str = "!"
    NAMED_ARGS: NamedArgsOption = NamedArgsOption.IF_NEEDED
    NAMED_ARG_PREFIX: str = "--"
    NAMED_ARG_SEPARATOR: str = "="
    NAMED_ARG_SEPARATOR_REQUIRED: bool = False
    NAMED_ARG_STOP_ON_PREFIX_ONLY: bool = True
    RUN_HELP_NAMED_ARG: str = "help"
    GROUP_DELIMITERS: str = '"`'
    OWNER_IDS: List[str] = []

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("NAMED_ARG_PREFIX", "NAMED_ARG_SEPARATOR", "GROUP_DELIMITERS")
    @classmethod
    def _reject_whitespace(cls, v: str) -> str:
        """Named argument markers and delimiters cannot be empty or hold whitespace."""
        if not v or any(c.isspace() for c in v):
            raise ValueError("value cannot be empty or contain whitespace")
        return v

    @field_validator("NAMED_ARGS", mode="before")
    @classmethod
    def _parse_named_args(cls, v):
        """Accept the policy name in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class Settings(BaseSettings):
    """Application settings - main aggregator.

    Environment Variables:
        PREFIX: Environment prefix, empty in production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    """

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    commands: CommandSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation."""
        if "commands" not in kwargs:
            kwargs["commands"] = CommandSettings()
        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
