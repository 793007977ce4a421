"""Structured logging setup for Hemingway."""

import structlog
from pathlib import Path
from typing import Any, Optional, Tuple
import os


# (log file, level) of the active configuration
_active: Optional[Tuple[Path, str]] = None


def configure_logging(log_dir: Optional[Path] = None) -> Path:
    """
    Configure structlog for JSON logging to ~/.cache/hemingway/logs/hemingway.log.

    The log directory can be moved with HEMINGWAY_LOG_DIR (used when log_dir
    is not given). Reconfiguring with the same file and level is a no-op.

    Log level can be controlled via HEMINGWAY_LOG_LEVEL environment variable:
    - Set to "DEBUG" to see every scanned file and candidate span
    - Defaults to "INFO" if not set

    Log levels:
    - DEBUG: Per-file scan results, skipped files, variant matches
    - INFO: Rewrites, undo walks, config loading
    - WARNING: Ambiguous matches, partial undo failures
    - ERROR: Write failures, configuration errors

    Example:
        # Enable debug logging
        HEMINGWAY_LOG_LEVEL=DEBUG hemingway write "Get Started" "Start now"

        # View logs with jq for readability:
        tail -f ~/.cache/hemingway/logs/hemingway.log | jq .

    Args:
        log_dir: Directory for the log file (default: ~/.cache/hemingway/logs)

    Returns:
        Path of the log file being written
    """
    global _active

    if log_dir is None:
        env_dir = os.environ.get("HEMINGWAY_LOG_DIR")
        log_dir = Path(env_dir) if env_dir else Path.home() / ".cache" / "hemingway" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "hemingway.log"

    log_level = os.environ.get("HEMINGWAY_LOG_LEVEL", "INFO").upper()

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
    if log_level not in valid_levels:
        log_level = "INFO"

    # Already writing there; do not open a second handle
    if _active == (log_file, log_level):
        return log_file

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a")),
        cache_logger_on_first_use=True,
    )
    _active = (log_file, log_level)

    return log_file


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("rewrite_success", file="src/app.tsx", line=12)
    """
    return structlog.get_logger(name)
