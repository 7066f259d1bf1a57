"""Structured logging for command parsing and dispatch."""

import logging
import inspect
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from structlog.stdlib import BoundLogger
from .config import Settings, settings


def _is_test_environment() -> bool:
    """Detect if running in a test environment."""
    return "pytest" in sys.modules


def configure_logging(app_settings: Optional[Settings] = None) -> BoundLogger:
    """Configure structlog and the standard library root logger.

    Output is silenced under pytest, rendered for the console in development
    and rendered as JSON lines in production.

    Args:
        app_settings: Settings to read LOG_LEVEL and environment from.
            Defaults to the module singleton.

    Returns:
        Root structlog logger.
    """
    app_settings = app_settings or settings

    if _is_test_environment():
        logging.root.setLevel(logging.CRITICAL + 1)
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            level=logging.CRITICAL + 1,
            force=True,
        )
        return structlog.stdlib.get_logger()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if app_settings.is_production:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, app_settings.LOG_LEVEL.upper(), logging.INFO),
    )
    return structlog.stdlib.get_logger()


logger: BoundLogger = configure_logging()


def get_module_logger() -> BoundLogger:
    """Get a logger for the calling module with full path context."""
    current_frame = inspect.currentframe()
    if current_frame is None:
        return logger

    module = inspect.getmodule(current_frame.f_back)
    if module is None:
        return logger.bind(component="unknown")

    module_name = module.__name__
    return logger.bind(component=module_name.split(".")[-1], module_path=module_name)


@contextmanager
def invocation_context(surface: str, command: str, user_id: str) -> Iterator[None]:
    """Bind invocation details to every log line emitted inside the block.

    Args:
        surface: "chat" or "structured"
        command: Top-level command name being dispatched
        user_id: Identifier of the caller
    """
    with structlog.contextvars.bound_contextvars(
        surface=surface, command=command, user_id=user_id
    ):
        yield
