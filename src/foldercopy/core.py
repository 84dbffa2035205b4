"""
Core logic for foldercopy package.
"""

from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Iterable, Iterator, List, Mapping, Optional, Sequence, Union

import pathspec
from pathspec.pattern import RegexPattern

from .log import get_logger

logger = get_logger(__name__)

CancelCheck = Callable[[], bool]
ProgressCallback = Callable[[str], None]


# Exceptions
class FolderCopyError(Exception): ...
class InvalidRootError(FolderCopyError): ...
class ConfigFileError(FolderCopyError): ...
class TraversalError(FolderCopyError): ...
class FileReadError(FolderCopyError): ...
class FileDecodeError(FileReadError): ...
class OutputError(FolderCopyError): ...


# Defaults & helpers
DEFAULT_IGNORE_NAMES: tuple[str, ...] = (
    ".git",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    ".DS_Store",
    "*.pyc",
    "*.lock",
    "*.min.js",
)
DEFAULT_MAX_OUTPUT_BYTES = 1_000_000
SNIFF_BYTES = 1024
PROGRESS_EVERY = 25

LANGUAGE_TAGS: Mapping[str, str] = MappingProxyType({
    ".js": "javascript", ".ts": "typescript", ".tsx": "tsx", ".jsx": "jsx",
    ".json": "json", ".md": "markdown", ".yml": "yaml", ".yaml": "yaml",
    ".toml": "toml", ".ini": "ini", ".env": "",
    ".html": "html", ".css": "css", ".scss": "scss", ".less": "less",
    ".vue": "vue", ".svelte": "svelte",
    ".py": "python", ".rb": "ruby", ".php": "php", ".go": "go", ".rs": "rust",
    ".java": "java", ".kt": "kotlin", ".swift": "swift",
    ".c": "c", ".h": "c", ".cpp": "cpp", ".cc": "cpp", ".cxx": "cpp", ".hpp": "cpp",
    ".cs": "csharp", ".sql": "sql", ".sh": "bash", ".ps1": "powershell",
    ".r": "r", ".pl": "perl", ".lua": "lua", ".dart": "dart",
    ".xml": "xml",
})


def language_tag(path: Path, table: Mapping[str, str] = LANGUAGE_TAGS) -> str:
    return table.get(path.suffix.lower(), "")


def _never_cancelled() -> bool:
    return False


@dataclass(frozen=True)
class Settings:
    ignore_names: tuple[str, ...] = DEFAULT_IGNORE_NAMES
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    skip_likely_binary: bool = True


@dataclass(frozen=True)
class WalkConfig:
    root: Path
    recursive: bool = True
    allowed_top_subdirs: Optional[frozenset[str]] = None
    ignore_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class FileRecord:
    path: Path
    rel_path: str


@dataclass
class Assembly:
    """The structured document plus the bookkeeping gathered while building it."""

    text: str = ""
    total_bytes: int = 0
    included: List[str] = field(default_factory=list)
    skipped_binary: List[str] = field(default_factory=list)
    cancelled: bool = False


# Ignore-pattern utilities
def _pattern_regex(pattern: str) -> "re.Pattern[str]":
    body = ".*".join(re.escape(chunk) for chunk in pattern.split("*"))
    return re.compile(rf"^{body}\Z", re.IGNORECASE | re.DOTALL)


def build_ignore_spec(patterns: Iterable[str]) -> pathspec.PathSpec:
    """
    Compile ignore patterns into a single spec.

    A pattern without ``*`` must equal the relative path; ``*`` matches any
    run of characters, path separators included. Matching ignores case.
    """
    return pathspec.PathSpec(
        [RegexPattern(_pattern_regex(p), include=True) for p in patterns]
    )


IgnoreRules = Union[pathspec.PathSpec, Iterable[str]]


def _as_spec(patterns: IgnoreRules) -> pathspec.PathSpec:
    return patterns if isinstance(patterns, pathspec.PathSpec) else build_ignore_spec(patterns)


def _spec_matches(spec: pathspec.PathSpec, rel_path: str) -> bool:
    # PathSpec.match_file would normalize the path but not the patterns
    return any(p.regex.match(rel_path) is not None for p in spec.patterns)


def matches(rel_path: str, patterns: IgnoreRules) -> bool:
    return _spec_matches(_as_spec(patterns), rel_path)


def load_extra_patterns(config_path: Path) -> List[str]:
    if not config_path.exists():
        raise ConfigFileError(f"Config file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return [
                ln.strip()
                for ln in fh
                if ln.strip() and not ln.lstrip().startswith("#")
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read config file '{config_path}': {e}")


# Binary sniffing
def looks_binary(path: Path) -> bool:
    """Return True when a NUL byte occurs in the first ``SNIFF_BYTES`` bytes."""
    try:
        with open(path, "rb") as fh:
            head = fh.read(SNIFF_BYTES)
    except OSError as e:
        raise FileReadError(f"Could not read '{path}': {e}")
    return b"\0" in head


# Tree walking
def validate_root(root: Path) -> Path:
    try:
        root = root.resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidRootError(f"Could not resolve root path '{root}': {e}")
    if not root.exists():
        raise InvalidRootError(f"Root directory '{root}' does not exist")
    if not root.is_dir():
        raise InvalidRootError(f"Root path '{root}' is not a directory")
    return root


def _list_dir(directory: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return list(it)
    except OSError as e:
        raise TraversalError(f"Could not scan directory '{directory}': {e}")


def immediate_subdirs(root: Path, ignore_names: IgnoreRules = ()) -> List[str]:
    """Names of the root's subdirectories that the ignore rules leave in play."""
    spec = _as_spec(ignore_names)
    return [
        e.name
        for e in _list_dir(root)
        if e.is_dir(follow_symlinks=False) and not _spec_matches(spec, e.name)
    ]


def walk(config: WalkConfig, is_cancelled: Optional[CancelCheck] = None) -> Iterator[FileRecord]:
    """
    Yield files under ``config.root`` depth-first, in directory-listing order.

    Every entry's relative path, and its bare name, is checked against the
    ignore rules before anything else, so an ignored directory is never
    entered. Symlinks and special files are skipped. Once ``is_cancelled``
    returns True, no further records are produced.
    """
    cancelled = is_cancelled or _never_cancelled
    spec = build_ignore_spec(config.ignore_names)
    allowed = config.allowed_top_subdirs

    def _walk(directory: Path, rel_base: str) -> Iterator[FileRecord]:
        if cancelled():
            return
        for entry in _list_dir(directory):
            if cancelled():
                return
            rel = f"{rel_base}/{entry.name}" if rel_base else entry.name
            # bare names apply at any depth
            if _spec_matches(spec, rel) or _spec_matches(spec, entry.name):
                logger.debug("Ignoring %s", rel)
                continue
            if entry.is_dir(follow_symlinks=False):
                if not rel_base and allowed is not None and entry.name not in allowed:
                    logger.debug("Skipping deselected subdirectory %s", rel)
                    continue
                if config.recursive:
                    yield from _walk(Path(entry.path), rel)
            elif entry.is_file(follow_symlinks=False):
                yield FileRecord(path=Path(entry.path), rel_path=rel)

    yield from _walk(config.root, "")


# Output assembly
def format_block(rel_path: str, content: str, lang: str) -> str:
    return f"\n--- file: {rel_path} ---\n```{lang}\n{content}\n```\n"


def _read_text(path: Path) -> str:
    try:
        with open(path, "r", encoding="utf-8", newline="") as fh:
            return fh.read()
    except UnicodeDecodeError as e:
        raise FileDecodeError(f"'{path}' is not valid UTF-8 text: {e}")
    except OSError as e:
        raise FileReadError(f"Could not read '{path}': {e}")


def assemble(
    records: Sequence[FileRecord],
    settings: Settings,
    is_cancelled: Optional[CancelCheck] = None,
    progress: Optional[ProgressCallback] = None,
    languages: Mapping[str, str] = LANGUAGE_TAGS,
) -> Assembly:
    cancelled = is_cancelled or _never_cancelled
    result = Assembly()
    parts: List[str] = []
    total = len(records)
    started = time.monotonic()

    for i, record in enumerate(records):
        if cancelled():
            result.cancelled = True
            break

        if looks_binary(record.path) and settings.skip_likely_binary:
            logger.debug("Skipping likely binary %s", record.rel_path)
            result.skipped_binary.append(record.rel_path)
            continue

        content = _read_text(record.path)
        block = format_block(record.rel_path, content, language_tag(record.path, languages))
        parts.append(block)
        result.included.append(record.rel_path)
        result.total_bytes += len(block.encode("utf-8"))

        if progress and i % PROGRESS_EVERY == 0:
            elapsed = round(time.monotonic() - started)
            progress(f"Processed {i + 1}/{total} files ({elapsed}s)…")

        if cancelled():
            result.cancelled = True
            break

    result.text = "".join(parts)
    return result


def collect(
    config: WalkConfig,
    settings: Settings,
    is_cancelled: Optional[CancelCheck] = None,
    progress: Optional[ProgressCallback] = None,
) -> Assembly:
    """Walk the tree and assemble every accepted file into one document."""
    records = list(walk(config, is_cancelled))
    if progress:
        progress(f"Reading {len(records)} files…")
    result = assemble(records, settings, is_cancelled, progress)
    if is_cancelled and is_cancelled():
        result.cancelled = True
    return result
