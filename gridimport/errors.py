"""
Exceptions raised by the multi-file import orchestration.

Hierarchy:
    ImportingError
    ├── InvalidArgument        Empty file list, or nothing left to merge.
    ├── UnsupportedOperation   A format cannot read in the requested mode.
    └── RetrievalError         A URL file record could not be downloaded.

Errors raised by the format strategies themselves (OSError, pandas parser
errors, ...) are not wrapped and reach the caller unchanged.
"""

from __future__ import annotations


class ImportingError(Exception):
    """Base class for all import orchestration errors."""


class InvalidArgument(ImportingError, ValueError):
    """Raised when the orchestrator is called with arguments it cannot work with."""


class UnsupportedOperation(ImportingError, NotImplementedError):
    """
    Raised when a format importer does not implement the read strategy for a mode.

    Args:
        message: Human-readable description.
        mode: The read mode that was requested.
        format_name: Name of the importer class, if known.
    """

    def __init__(self, message: str, mode=None, format_name: str | None = None) -> None:
        super().__init__(message)
        self.mode = mode
        self.format_name = format_name

    def __str__(self) -> str:
        base = super().__str__()
        parts = []
        if self.format_name:
            parts.append(f"format={self.format_name}")
        if self.mode is not None:
            parts.append(f"mode={getattr(self.mode, 'value', self.mode)}")
        if parts:
            return f"{base} | {' '.join(parts)}"
        return base


class RetrievalError(ImportingError):
    """
    Raised when a remote file cannot be fetched into the job's raw data directory.

    Args:
        message: Human-readable description.
        url: The URL being retrieved.
        status_code: HTTP status, when a response was received.
    """

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is not None:
            return f"{base} | url={self.url} status={self.status_code}"
        if self.url:
            return f"{base} | url={self.url}"
        return base
