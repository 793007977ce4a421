"""Resolve include/exclude path patterns into the files to scan.

Patterns are relative to the project root and use POSIX separators:

- ``*`` matches anything within one path segment (no ``/``)
- ``**`` matches zero or more whole segments, consuming a following ``/``

Every other character is literal. Exclude entries are plain directory names,
not globs: a file is dropped if any segment of its relative path equals one.
"""

import os
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Pattern

from hemingway.services.exceptions import ConfigurationError
from hemingway.utils.logging import get_logger

logger = get_logger(__name__)


def glob_to_regex(pattern: str) -> Pattern[str]:
    """Compile a glob pattern into a regex anchored on the full relative path.

    Example:
        >>> bool(glob_to_regex("src/**/*.tsx").match("src/Hero.tsx"))
        True
        >>> bool(glob_to_regex("src/*.tsx").match("src/ui/Hero.tsx"))
        False
    """
    parts = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if pattern.startswith("**", i):
            i += 2
            if i < len(pattern) and pattern[i] == "/":
                i += 1
                parts.append("(?:.*/)?")
            else:
                parts.append(".*")
        elif ch == "*":
            parts.append("[^/]*")
            i += 1
        else:
            parts.append(re.escape(ch))
            i += 1
    return re.compile("^" + "".join(parts) + "$")


def static_prefix(pattern: str) -> str:
    """Return the fixed directory prefix of a pattern ('.' if there is none).

    A pattern without wildcards is returned unchanged (it names one file).

    Example:
        >>> static_prefix("src/components/**/*.tsx")
        'src/components'
        >>> static_prefix("*.html")
        '.'
    """
    first_wild = pattern.find("*")
    if first_wild == -1:
        return pattern
    head = pattern[:first_wild]
    cut = head.rfind("/")
    if cut == -1:
        return "."
    return head[:cut].rstrip("/") or "."


def is_excluded(relative_path: str, exclude_patterns: Iterable[str]) -> bool:
    """Check whether any segment of a relative path equals an exclude entry."""
    segments = relative_path.split("/")
    return any(segment in segments for segment in exclude_patterns)


def _walk_files(base: Path, exclude: frozenset) -> Iterator[Path]:
    """Yield every file under base, pruning excluded directory names.

    Unreadable directories contribute nothing.
    """
    try:
        entries = sorted(os.scandir(base), key=lambda e: e.name)
    except OSError as e:
        logger.debug("directory_unreadable", path=str(base), error=str(e))
        return

    for entry in entries:
        if entry.name in exclude:
            continue
        try:
            if entry.is_dir():
                yield from _walk_files(Path(entry.path), exclude)
            elif entry.is_file():
                yield Path(entry.path)
        except OSError as e:
            logger.debug("entry_unreadable", path=entry.path, error=str(e))


def resolve_files(
    project_root: Path,
    include_patterns: Iterable[str],
    exclude_patterns: Iterable[str] = (),
) -> List[Path]:
    """Resolve include/exclude patterns into the candidate files to scan.

    Args:
        project_root: Directory the patterns are relative to
        include_patterns: Glob patterns; a file is kept if it matches any
        exclude_patterns: Directory names to skip wherever they occur

    Returns:
        Deduplicated absolute file paths in stable (sorted walk) order

    Raises:
        ConfigurationError: If there is no usable pattern or the project
            root is not a readable directory
    """
    patterns = [p.strip() for p in include_patterns if p and p.strip()]
    if not patterns:
        raise ConfigurationError("No usable source patterns configured")

    root = Path(project_root)
    if not root.is_dir() or not os.access(root, os.R_OK | os.X_OK):
        raise ConfigurationError(f"Project root is not a readable directory: {root}")

    exclude = frozenset(exclude_patterns)
    regexes = [glob_to_regex(p) for p in patterns]

    # Ordered set: insertion order doubles as the stable scan order
    matched: Dict[Path, None] = {}
    bases = dict.fromkeys(static_prefix(p) for p in patterns)

    for base in bases:
        abs_base = root / base
        if abs_base.is_file():
            candidates: Iterable[Path] = [abs_base]
        else:
            candidates = _walk_files(abs_base, exclude)

        for abs_file in candidates:
            rel = abs_file.relative_to(root).as_posix()
            if is_excluded(rel, exclude):
                continue
            if any(regex.match(rel) for regex in regexes):
                matched.setdefault(abs_file, None)

    logger.debug(
        "source_files_resolved",
        root=str(root),
        patterns=patterns,
        count=len(matched),
    )
    return list(matched)
