"""
Logging setup for meta plugins and host tooling.

stdout is reserved for protocol output, so every handler writes to stderr.
A broken configuration never stops a plugin from answering: invalid settings
or an unknown level name fall back to WARNING with a warning on stderr.
"""

import logging
import sys
from typing import Optional, TextIO

from pydantic import ValidationError
from pydantic_settings import SettingsError

from meta_plugin.config import Settings, get_settings

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = Settings.model_fields["log_format"].default


def resolve_level(name: str) -> Optional[int]:
    """Map a level name such as "info" to its number, or None if unknown."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Set up logging configuration."""
    problems: list[str] = []

    try:
        settings: Optional[Settings] = get_settings()
    except (ValidationError, SettingsError) as e:
        settings = None
        problems.append(f"Invalid meta settings, using defaults: {e}")

    requested = level or (settings.effective_log_level if settings else None)
    log_level = resolve_level(requested) if requested else DEFAULT_LOG_LEVEL
    if log_level is None:
        problems.append(f"Unknown log level {requested!r}, using WARNING")
        log_level = DEFAULT_LOG_LEVEL

    log_format = format_string or (settings.log_format if settings else DEFAULT_LOG_FORMAT)

    # Root logger configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler (never stdout)
    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(console_handler)

    # Reduce noise from the event loop
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    for problem in problems:
        logging.getLogger(__name__).warning(problem)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)
