"""
CLI entrypoint for foldercopy package.
"""
import argparse
import contextlib
import logging
import signal
import sys
from pathlib import Path
from typing import Iterator, List, Optional

from colorama import Fore

from . import __version__
from . import prompts
from .core import (
    DEFAULT_IGNORE_NAMES,
    DEFAULT_MAX_OUTPUT_BYTES,
    FolderCopyError,
    Settings,
    WalkConfig,
    collect,
    immediate_subdirs,
    load_extra_patterns,
    validate_root,
)
from .delivery import ClipboardSink, FileSink, default_export_name, deliver, format_bytes
from .log import get_logger, setup_logger

logger = get_logger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="foldercopy",
        description="Copy a folder's file contents as one structured document.",
    )
    p.add_argument("root", nargs="?", type=Path, default=Path("."), help="Folder to copy")
    p.add_argument(
        "--top-level",
        action="store_true",
        help="Only copy files directly inside the folder (no recursion)",
    )
    p.add_argument(
        "--subdir",
        action="append",
        metavar="NAME",
        help="Immediate subfolder to descend into (repeatable; skips the picker)",
    )
    sink = p.add_mutually_exclusive_group()
    sink.add_argument("--clipboard", action="store_true", help="Copy the output to the clipboard")
    sink.add_argument("--out", type=Path, help="Export the output to this file")
    p.add_argument(
        "--config",
        type=Path,
        help="Path to a file with extra ignore patterns (one per line)",
    )
    p.add_argument(
        "--ignore",
        action="append",
        metavar="PATTERN",
        help="Extra ignore pattern, exact path or with '*' wildcards (repeatable)",
    )
    p.add_argument(
        "--no-default-ignores",
        action="store_true",
        help="Do not apply the built-in ignore list",
    )
    p.add_argument(
        "--max-output-bytes",
        type=int,
        default=DEFAULT_MAX_OUTPUT_BYTES,
        help="Ask before delivering output larger than this (default 1,000,000)",
    )
    p.add_argument(
        "--include-binary",
        action="store_true",
        help="Do not skip files that look binary",
    )
    p.add_argument("-y", "--yes", action="store_true", help="Proceed with large output without asking")
    p.add_argument("--no-input", action="store_true", help="Never prompt; use defaults")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def build_settings(ns: argparse.Namespace) -> Settings:
    patterns: List[str] = [] if ns.no_default_ignores else list(DEFAULT_IGNORE_NAMES)
    if ns.config:
        patterns.extend(load_extra_patterns(ns.config.resolve()))
        logger.debug("Loaded extra patterns from %s", ns.config)
    patterns.extend(ns.ignore or [])
    return Settings(
        ignore_names=tuple(patterns),
        max_output_bytes=ns.max_output_bytes,
        skip_likely_binary=not ns.include_binary,
    )


class Cancellation:
    """Cooperative cancellation flag, settable from a signal handler."""

    def __init__(self) -> None:
        self.requested = False

    def cancel(self) -> None:
        self.requested = True

    def __call__(self) -> bool:
        return self.requested


@contextlib.contextmanager
def _interrupt_cancels(token: Cancellation) -> Iterator[None]:
    """While active, Ctrl-C requests cancellation instead of raising."""

    def _handler(signum, frame):
        if not token.requested:
            logger.warning("Cancelling… (partial output will be kept)")
        token.cancel()

    installed = False
    try:
        previous = signal.signal(signal.SIGINT, _handler)
        installed = True
    except ValueError:
        logger.debug("Not in the main thread; Ctrl-C will abort instead of cancel")
    try:
        yield
    finally:
        if installed:
            signal.signal(signal.SIGINT, previous)


def _allowed_subdirs(ns, root: Path, settings: Settings):
    if ns.top_level:
        return None
    if ns.subdir is not None:
        return frozenset(ns.subdir)
    if ns.no_input:
        return None
    names = immediate_subdirs(root, settings.ignore_names)
    if not names:
        return None
    return prompts.pick_subdirs(names)


def _choose_sink(ns, root: Path):
    if ns.clipboard:
        return ClipboardSink()
    if ns.out:
        return FileSink(ns.out)
    if ns.no_input:
        return ClipboardSink()
    action = prompts.choose_action()
    if action == prompts.CLIPBOARD:
        return ClipboardSink()
    if action == prompts.EXPORT:
        target = prompts.ask_destination(root / default_export_name(root))
        if target is not None:
            return FileSink(target)
    return None


def run(ns: argparse.Namespace) -> int:
    root = validate_root(ns.root)
    settings = build_settings(ns)

    config = WalkConfig(
        root=root,
        recursive=not ns.top_level,
        allowed_top_subdirs=_allowed_subdirs(ns, root, settings),
        ignore_names=settings.ignore_names,
    )

    logger.info("Collecting contents of %s …", root)
    token = Cancellation()
    with _interrupt_cancels(token):
        assembly = collect(config, settings, is_cancelled=token, progress=logger.info)

    if assembly.cancelled:
        logger.warning("Cancelled; continuing with %d file(s) collected so far.", len(assembly.included))
    logger.info(
        "%d file(s) included, %d skipped as binary, %s.",
        len(assembly.included),
        len(assembly.skipped_binary),
        format_bytes(assembly.total_bytes),
    )

    if ns.yes:
        confirm = lambda message: True  # noqa: E731
    elif ns.no_input:
        confirm = lambda message: False  # noqa: E731
    else:
        confirm = prompts.confirm

    sink = deliver(
        assembly,
        lambda: _choose_sink(ns, root),
        settings.max_output_bytes,
        confirm,
    )
    if sink is not None:
        logger.info(sink.done_message(), extra={"color": Fore.GREEN})
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    ns = _parse_args(argv)
    if ns.verbose:
        level = logging.DEBUG
    elif ns.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    setup_logger(level=level)

    try:
        sys.exit(run(ns))
    except FolderCopyError as e:
        logger.error("Error: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.error("Unexpected error: %s", e)
        logger.debug("Traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
