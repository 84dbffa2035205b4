"""
Interactive terminal prompts.

Each prompt reads through an injectable ``input_fn`` and treats end of input
as the user cancelling that prompt.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, FrozenSet, Optional, Sequence, TextIO

InputFn = Callable[[str], str]

CLIPBOARD = "clipboard"
EXPORT = "export"


def _ask(input_fn: Optional[InputFn], prompt: str) -> Optional[str]:
    try:
        return (input_fn or input)(prompt).strip()
    except EOFError:
        return None


def pick_subdirs(
    names: Sequence[str],
    input_fn: Optional[InputFn] = None,
    out: Optional[TextIO] = None,
) -> Optional[FrozenSet[str]]:
    """
    Let the user deselect top-level subdirectories (all selected by default).

    Returns None to keep "all" (empty answer or cancelled prompt), otherwise
    the selected names, possibly empty.
    """
    out = out or sys.stderr
    print("\nSubfolders to include (all selected):", file=out)
    for idx, name in enumerate(names, 1):
        print(f"  [x] {idx}. {name}", file=out)

    while True:
        try:
            answer = _ask(
                input_fn,
                "Numbers to exclude (e.g. 1 3), 'none' for top-level files only, Enter for all: ",
            )
        except KeyboardInterrupt:
            # Ctrl-C cancels the picker, which keeps every subfolder
            print(file=out)
            return None
        if not answer:
            return None
        if answer.lower() == "none":
            return frozenset()
        try:
            picks = {int(tok) for tok in answer.replace(",", " ").split()}
        except ValueError:
            print("Please enter numbers from the list.", file=out)
            continue
        if any(p < 1 or p > len(names) for p in picks):
            print(f"Numbers must be between 1 and {len(names)}.", file=out)
            continue
        return frozenset(n for i, n in enumerate(names, 1) if i not in picks)


def confirm(message: str, input_fn: Optional[InputFn] = None) -> bool:
    answer = _ask(input_fn, f"{message} [y/N]: ")
    return bool(answer) and answer.lower() in ("y", "yes")


def choose_action(input_fn: Optional[InputFn] = None, out: Optional[TextIO] = None) -> Optional[str]:
    out = out or sys.stderr
    print("\nWhat do you want to do with the structured output?", file=out)
    print("  1. Copy to clipboard", file=out)
    print("  2. Export to file", file=out)
    answer = _ask(input_fn, "Choice [1]: ")
    if answer is None:
        return None
    if answer in ("", "1"):
        return CLIPBOARD
    if answer == "2":
        return EXPORT
    return None


def ask_destination(default: Path, input_fn: Optional[InputFn] = None) -> Optional[Path]:
    answer = _ask(input_fn, f"Save to [{default}]: ")
    if answer is None:
        return None
    return Path(answer).expanduser() if answer else default
