"""Puzzl - cooperative cancellation, restartable tasks and typed events for asyncio."""

from puzzl.concurrency import (
    CancellationToken,
    CancellationTokenSource,
    Task,
    TaskStatus,
    sleep,
)
from puzzl.errors import (
    ConfigurationError,
    ErrorCategory,
    HttpRequestError,
    InvalidStateError,
    OperationCanceledError,
    PuzzlError,
)
from puzzl.event import AsyncEvent, AsyncEventDispatcher, Event, EventDispatcher
from puzzl.pattern import BoxedVar

__version__ = "0.1.0"

__all__ = [
    "AsyncEvent",
    "AsyncEventDispatcher",
    "BoxedVar",
    "CancellationToken",
    "CancellationTokenSource",
    "ConfigurationError",
    "ErrorCategory",
    "Event",
    "EventDispatcher",
    "HttpRequestError",
    "InvalidStateError",
    "OperationCanceledError",
    "PuzzlError",
    "Task",
    "TaskStatus",
    "sleep",
    "__version__",
]
