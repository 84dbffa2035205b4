"""
Size guard and output sinks for the assembled document.
"""

from __future__ import annotations

import datetime
from pathlib import Path
from typing import Callable, Optional

import pyperclip

from .core import Assembly, OutputError
from .log import get_logger

logger = get_logger(__name__)

Confirm = Callable[[str], bool]
ChooseSink = Callable[[], Optional["ClipboardSink | FileSink"]]


def format_bytes(n: int) -> str:
    if n < 1024:
        return f"{n} B"
    kb = n / 1024
    if kb < 1024:
        return f"{kb:.1f} KB"
    return f"{kb / 1024:.1f} MB"


def exceeds_limit(total_bytes: int, max_bytes: int) -> bool:
    return total_bytes > max_bytes


def default_export_name(root: Path, now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now()
    return f"{root.name}-{now.strftime('%Y%m%d-%H%M')}-structured.md"


class ClipboardSink:
    label = "clipboard"

    def write(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise OutputError(f"Could not copy to clipboard: {e}")

    def done_message(self) -> str:
        return "Folder contents copied to clipboard."


class FileSink:
    label = "file"

    def __init__(self, path: Path) -> None:
        self.path = path

    def write(self, text: str) -> None:
        try:
            out_path = self.path.resolve()
        except (OSError, RuntimeError) as e:
            raise OutputError(f"Could not resolve output path '{self.path}': {e}")

        if not out_path.parent.exists():
            try:
                out_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise OutputError(f"Could not create directory '{out_path.parent}': {e}")
        try:
            with out_path.open("w", encoding="utf-8", newline="") as out_fh:
                out_fh.write(text)
        except OSError as e:
            raise OutputError(f"Could not write '{out_path}': {e}")

    def done_message(self) -> str:
        return f"Folder contents exported to {self.path}."


def confirm_size(total_bytes: int, max_bytes: int, confirm: Confirm) -> bool:
    """Return True when output of ``total_bytes`` may be delivered."""
    if not exceeds_limit(total_bytes, max_bytes):
        return True
    return confirm(
        f"Output is large ({format_bytes(total_bytes)} > {format_bytes(max_bytes)}). Proceed?"
    )


def deliver(assembly: Assembly, choose_sink: ChooseSink, max_bytes: int, confirm: Confirm):
    """
    Size-check the document, then hand it to the sink ``choose_sink`` returns.

    The sink is only asked for once the size check has passed, so a declined
    confirmation never prompts for a destination. Returns the sink written
    to, or None when nothing was written.
    """
    if not confirm_size(assembly.total_bytes, max_bytes, confirm):
        logger.info("Aborted; nothing was written.")
        return None

    sink = choose_sink()
    if sink is None:
        logger.info("No destination chosen; nothing was written.")
        return None

    sink.write(assembly.text)
    logger.debug("Wrote %d bytes to %s", assembly.total_bytes, sink.label)
    return sink
