"""File I/O for the rewrite engine: fresh reads and atomic write-back."""

import os
import structlog
from pathlib import Path
from typing import Optional

from hemingway.services.exceptions import FileModifiedError
from hemingway.services.file_monitor import FileMonitor

logger = structlog.get_logger()


def read_source(path: Path) -> str:
    """
    Read a source file's full text.

    Newlines are preserved exactly (no universal-newline translation) so
    offsets and the written-back content stay byte-faithful.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not UTF-8 text
    """
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def atomic_write(
    path: Path,
    content: str,
    file_monitor: Optional[FileMonitor] = None
) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    1. Write to a temporary file beside the target
    2. fsync to ensure data is on disk
    3. Modification check (after write, before rename)
    4. Atomic rename to replace original file

    The caller is expected to have just re-read the file, so only the late
    check is made here. The original file mode is carried over to the
    replacement.

    Args:
        path: Target file path
        content: Content to write
        file_monitor: Optional FileMonitor for concurrent modification detection

    Raises:
        FileModifiedError: If file was modified during write operation
        OSError: On file I/O errors
        PermissionError: On permission errors
    """
    # Create temporary file in same directory (ensures same filesystem for atomic rename)
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"

    try:
        with open(temp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        if path.exists():
            os.chmod(temp_path, path.stat().st_mode & 0o7777)

        if file_monitor and file_monitor.is_tracked(path) and file_monitor.is_modified(path):
            raise FileModifiedError(
                str(path),
                "File was modified during write (late check)"
            )

        # On POSIX systems, this is atomic even if target exists
        temp_path.replace(path)

        if file_monitor:
            file_monitor.refresh(path)

        logger.debug(
            "atomic_write_success",
            path=str(path),
            size=len(content)
        )

    except FileModifiedError:
        if temp_path.exists():
            temp_path.unlink()
        raise

    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error(
            "atomic_write_failed",
            path=str(path),
            error=str(e)
        )
        raise
