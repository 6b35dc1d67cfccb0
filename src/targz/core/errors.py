"""Error handling with friendly messages."""

from __future__ import annotations


class TargzError(Exception):
    """Base exception for all targz errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class InvalidArgumentError(TargzError, ValueError):
    """A precondition on the caller's arguments does not hold."""

    pass


class CurrentDirectoryError(InvalidArgumentError):
    """Refusal to archive the current working directory."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Cannot archive current directory: '{path}'",
            "Pass a subdirectory, or archive from the parent directory",
        )


class ConfigError(TargzError):
    """Configuration error."""

    pass


class FileError(TargzError):
    """File operation error."""

    pass


class CorruptedArchiveError(FileError):
    """Archive stream is not valid gzip-compressed tar."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(
            f"Archive '{source}' is corrupted or unreadable: {reason}",
            "Check that the file is a complete .tar.gz archive",
        )
