"""Logging configuration for scopewire.

The package logs through loguru but stays silent until ``setup_logging`` is
called, so embedding applications decide whether registry activity shows up.
"""

import logging
import sys

from loguru import logger

PACKAGE_NAME = "scopewire"


class InterceptHandler(logging.Handler):
    """Intercept standard logging messages toward loguru."""

    def emit(self, record):
        # Get corresponding loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logged message originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_level: str | None = None):
    """Configure loguru logging and enable scopewire's own messages.

    Args:
        log_level: Log level to use. Falls back to ``Settings.log_level``.
    """
    if log_level is None:
        from .settings import get_settings

        log_level = get_settings().log_level

    log_level = log_level.upper()

    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        level=log_level,
        colorize=True,
    )
    logger.enable(PACKAGE_NAME)

    logger.info(f"Log level set to: {log_level}")

    # Redirect all standard logging to loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def disable_logging():
    """Silence scopewire's messages again (the state after import)."""
    logger.disable(PACKAGE_NAME)
