"""
Logging helpers for foldercopy.

Every module logs through ``get_logger(__name__)``; the CLI configures the
base ``foldercopy`` logger once with ``setup_logger``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from colorama import Fore, Style, just_fix_windows_console

BASE_LOGGER = "foldercopy"

_LEVEL_COLORS = {
    logging.DEBUG: Style.DIM,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColorFormatter(logging.Formatter):
    """Prefix messages with ``[foldercopy]`` and colour them by level.

    A record may carry an explicit ``color`` attribute (via ``extra=``) to
    override the level colour, e.g. green for success messages.
    """

    def __init__(self, use_color: bool = True) -> None:
        super().__init__("[foldercopy] %(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if not self.use_color:
            return msg
        color = getattr(record, "color", None) or _LEVEL_COLORS.get(record.levelno)
        if not color:
            return msg
        return color + msg + Style.RESET_ALL


def setup_logger(
    *, level: int = logging.INFO, stream: Optional[TextIO] = None
) -> logging.Logger:
    """Configure the base logger once and return it."""
    base = logging.getLogger(BASE_LOGGER)
    base.setLevel(level)
    if any(isinstance(h.formatter, ColorFormatter) for h in base.handlers):
        return base

    just_fix_windows_console()
    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColorFormatter(use_color=stream.isatty()))
    base.addHandler(handler)
    base.propagate = False
    return base


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger namespaced under ``foldercopy``."""
    if not name or name == BASE_LOGGER:
        return logging.getLogger(BASE_LOGGER)
    if name.startswith(BASE_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{BASE_LOGGER}.{name}")
