"""Custom exceptions for Hemingway services.

These never cross the RewriteEngine boundary: the engine converts them into
failed WriteOutcome results.
"""


class HemingwayError(Exception):
    """Base class for rewrite engine errors."""


class ConfigurationError(HemingwayError):
    """Raised when the search setup is unusable.

    Examples: no non-empty include pattern, or a project root that does not
    exist or is not a readable directory.
    """


class NotFoundError(HemingwayError):
    """Raised when the search text is absent from every scanned file.

    Attributes:
        search_text: The text that was searched for (untruncated)
    """

    def __init__(self, search_text: str):
        """Initialize NotFoundError.

        Args:
            search_text: The text that could not be located
        """
        self.search_text = search_text
        super().__init__(f'Text not found in source files: "{search_text[:80]}..."')


class WriteIOError(HemingwayError):
    """Raised when the winning file cannot be re-read or written back.

    Attributes:
        path: Path to the file being rewritten
        message: Underlying I/O error message
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Failed to rewrite {path}: {message}")


class FileModifiedError(HemingwayError):
    """Raised when a file is modified during an atomic write operation.

    This exception indicates that the file changed between the initial
    read and the final write, which could lead to data loss if the write
    were to proceed.

    Attributes:
        path: Path to the file that was modified
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str = "File was modified during write operation"):
        """Initialize FileModifiedError.

        Args:
            path: Path to the file that was modified
            message: Human-readable error message
        """
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")
