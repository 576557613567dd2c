"""Exception types raised inside the job orchestration core."""

from __future__ import annotations


class DocbaseTaskError(RuntimeError):
    """Base class for orchestration errors."""


class StatusDecodeError(DocbaseTaskError):
    """Raised when a status payload does not match the expected shape."""


class ApiAuthError(DocbaseTaskError):
    """Raised when a remote call needs an auth token and none is configured."""


class NuggetValidationError(ValueError):
    """Raised when a nugget span does not fit inside its document text."""

    def __init__(self, message: str, *, document_name: str | None = None) -> None:
        super().__init__(message)
        self.document_name = document_name
