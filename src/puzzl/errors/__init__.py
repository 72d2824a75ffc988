"""Puzzl error hierarchy."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from puzzl.concurrency.cancellation import CancellationToken


class ErrorCategory(StrEnum):
    """Category of error for classification and handling."""

    CANCELLATION = "cancellation"
    STATE = "state"
    HTTP = "http"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class PuzzlError(Exception):
    """Base error for all puzzl exceptions."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.retryable = retryable
        self.details: dict[str, Any] = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, category={self.category!r})"


class OperationCanceledError(PuzzlError):
    """A cancellable operation observed its token being cancelled.

    Callers usually swallow this as a normal stop signal and re-raise
    everything else.
    """

    def __init__(
        self,
        cancellation_token: CancellationToken,
        message: str = "Operation cancelled",
    ) -> None:
        super().__init__(message, category=ErrorCategory.CANCELLATION, retryable=False)
        self.cancellation_token = cancellation_token


class InvalidStateError(PuzzlError):
    """A lifecycle method was called from a state that doesn't allow it."""

    def __init__(self, message: str, *, state: str | None = None) -> None:
        super().__init__(message, category=ErrorCategory.STATE, retryable=False)
        self.state = state


class HttpRequestError(PuzzlError):
    """Server answered with a non-2xx status code."""

    def __init__(self, status: int, response: str = "") -> None:
        super().__init__(
            f"Server returned HTTP status code {status}",
            category=ErrorCategory.HTTP,
            retryable=status == 429 or status >= 500,
        )
        self.status = status
        self.response = response


class ConfigurationError(PuzzlError):
    """Invalid or missing configuration."""

    def __init__(self, message: str) -> None:
        super().__init__(message, category=ErrorCategory.CONFIGURATION, retryable=False)
