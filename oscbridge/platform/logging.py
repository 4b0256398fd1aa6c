"""Logging helpers shared by every oscbridge component."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, TextIO

# ANSI escape sequences for colors
COLORS = {
    "black": "\u001b[30;1m",
    "red": "\u001b[31;1m",
    "green": "\u001b[32;1m",
    "yellow": "\u001b[33;1m",
    "blue": "\u001b[34;1m",
    "magenta": "\u001b[35;1m",
    "cyan": "\u001b[36;1m",
    "white": "\u001b[37;1m",
    "reset": "\u001b[0m",
}

LEVEL_COLORS = {
    logging.DEBUG: "cyan",
    logging.INFO: "green",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "magenta",
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL_ENV = "OSCBRIDGE_LOG_LEVEL"


class ColorFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI colour when writing to a TTY."""

    def __init__(self, fmt: str = DEFAULT_FORMAT, use_color: bool = True) -> None:
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not self.use_color or color is None:
            return text
        return f"{COLORS[color]}{text}{COLORS['reset']}"


def _resolve_level(level: Optional[int | str]) -> int:
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def create_logger(
    name: str,
    level: Optional[int | str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Return a named logger with a single colourised stream handler.

    Calling this repeatedly with the same name reuses the existing handler, so
    components can create their logger in ``__init__`` without stacking output.

    Args:
        name: Logger name, usually ``__name__`` plus a component suffix.
        level: Explicit level. Defaults to ``$OSCBRIDGE_LOG_LEVEL`` or WARNING.
        stream: Output stream for the handler (defaults to ``sys.stderr``).
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))
    if not any(getattr(handler, "_oscbridge_handler", False) for handler in logger.handlers):
        stream = stream or sys.stderr
        handler = logging.StreamHandler(stream)
        is_tty = bool(getattr(stream, "isatty", lambda: False)())
        handler.setFormatter(ColorFormatter(use_color=is_tty))
        handler._oscbridge_handler = True
        logger.addHandler(handler)
    return logger


__all__ = ["COLORS", "ColorFormatter", "create_logger"]
