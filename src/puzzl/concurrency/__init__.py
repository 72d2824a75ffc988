"""Cooperative cancellation, cancellable sleep and restartable tasks."""

from puzzl.concurrency.cancellation import CancellationToken, CancellationTokenSource
from puzzl.concurrency.sleep import sleep
from puzzl.concurrency.task import AsyncCallback, Task, TaskStatus

__all__ = [
    "AsyncCallback",
    "CancellationToken",
    "CancellationTokenSource",
    "Task",
    "TaskStatus",
    "sleep",
]
