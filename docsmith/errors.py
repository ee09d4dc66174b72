"""Exception types raised by docsmith components."""

from __future__ import annotations


class DocsmithError(RuntimeError):
    """Base class for failures that should end a docsmith run with a message."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigError(DocsmithError):
    """Raised when configuration or credentials cannot be loaded."""


class ScanError(DocsmithError):
    """Raised when a project file cannot be read during scanning."""


class ExtractionError(DocsmithError):
    """Raised by extractors for descriptors that parse but have the wrong shape."""


class RemoteMetadataError(DocsmithError):
    """Raised when repository metadata cannot be fetched from the hosting API."""


class GenerationError(DocsmithError):
    """Raised when the text generation backend fails."""


class NotAGitRepositoryError(DocsmithError):
    """Raised when local mode runs outside of a git working tree."""


__all__ = [
    "ConfigError",
    "DocsmithError",
    "ExtractionError",
    "GenerationError",
    "NotAGitRepositoryError",
    "RemoteMetadataError",
    "ScanError",
]
