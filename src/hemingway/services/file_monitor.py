"""File modification monitoring for concurrent edit detection."""

from pathlib import Path
from typing import Dict


class FileMonitor:
    """
    Track file modification times between reading and writing.

    The rewrite engine records the winning file's mtime just before the fresh
    read it splices into. atomic_write then checks it again just before the
    rename, so a save that lands in between (an editor or a dev-server codegen
    step) fails the rewrite instead of being overwritten.

    Example:
        >>> monitor = FileMonitor()
        >>> monitor.record(Path("src/Hero.tsx"))
        >>> # Later, before rename:
        >>> if monitor.is_modified(Path("src/Hero.tsx")):
        ...     pass  # abort, the file changed since it was read
    """

    def __init__(self) -> None:
        self._mtimes: Dict[Path, int] = {}

    def record(self, path: Path) -> None:
        """
        Record current modification time for a file.

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        self._mtimes[path] = path.stat().st_mtime_ns

    def is_modified(self, path: Path) -> bool:
        """
        Check if file has been modified since last record.

        Returns:
            True if file modified or not yet tracked, False otherwise

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        if path not in self._mtimes:
            return True
        return path.stat().st_mtime_ns != self._mtimes[path]

    def refresh(self, path: Path) -> None:
        """Update the recorded modification time after our own write."""
        self._mtimes[path] = path.stat().st_mtime_ns

    def forget(self, path: Path) -> None:
        self._mtimes.pop(path, None)

    def is_tracked(self, path: Path) -> bool:
        return path in self._mtimes
