"""Logging configuration for the application."""

import logging
import sys

from gatekeeper.core.config import get_settings

# Third-party loggers that are chatty at DEBUG/INFO on every cache or store call.
_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def setup_logging() -> None:
    """Configure application-wide logging.

    Level comes from settings.log_level when set; otherwise DEBUG when
    settings.debug is True, else INFO. Output goes to stdout.
    """
    settings = get_settings()
    if settings.log_level:
        log_level = logging.getLevelName(settings.log_level.upper())
    else:
        log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

