"""Restartable, cancellable wrapper around a coroutine function.

Similar to an ``asyncio.Task`` with a few key differences:

1. The wrapped function doesn't run until :meth:`Task.start` is called.
2. The outcome (result or error) can be awaited from anywhere, at any time,
   through :meth:`Task.wait`.
3. The task can be cancelled cooperatively through the token it hands to
   the wrapped function, and re-run after :meth:`Task.reset`.

Example::

    fetch_task = Task(lambda token: fetch_blog_post(token))
    # ... in some click handler
    fetch_task.cancel()  # cancels if necessary
    post = await fetch_task.start_or_wait()

:meth:`Task.start` moves the task to ``IN_PROGRESS`` before returning, so
``cancel()`` and ``wait()`` apply to the run right away, from any
coroutine::

    running = fetch_task.start()
    fetch_task.cancel()
    await fetch_task.wait()  # OperationCanceledError once the function checks its token
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import Awaitable, Callable, Generic, TypeVar

from puzzl.concurrency.cancellation import CancellationToken, CancellationTokenSource
from puzzl.errors import InvalidStateError
from puzzl.event.dispatcher import EventDispatcher, EventView

logger = logging.getLogger(__name__)

TResult = TypeVar("TResult")

AsyncCallback = Callable[[CancellationToken], Awaitable[TResult]]


class TaskStatus(StrEnum):
    """Lifecycle states of a Task."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    ERRORED = "errored"


class Task(Generic[TResult]):
    """Controls a deferred async operation: start, cancel, wait, reset."""

    def __init__(self, func: AsyncCallback[TResult]) -> None:
        self._func = func
        self._status = TaskStatus.NOT_STARTED
        self._last_result: TResult | None = None
        self._last_error: BaseException | None = None
        self._token_source = CancellationTokenSource()
        self._run: asyncio.Task[TResult] | None = None
        # Settled before on_ended listeners run
        self._waiters: list[asyncio.Future[TResult]] = []
        self._on_ended: EventDispatcher[Task[TResult], None] = EventDispatcher()

    def __repr__(self) -> str:
        return f"Task(status={self._status!s})"

    @property
    def status(self) -> TaskStatus:
        return self._status

    @property
    def on_ended(self) -> EventView[Task[TResult], None]:
        """Fires once the wrapped function has returned or raised.

        Listener errors are logged and never change the task's outcome.
        """
        return self._on_ended.as_event()

    def reset(self) -> None:
        """Reset the task to its initial (not started) state."""
        if self._status == TaskStatus.IN_PROGRESS:
            raise InvalidStateError("Can't reset a running task", state=self._status)

        self._status = TaskStatus.NOT_STARTED
        self._last_result = None
        self._last_error = None
        self._run = None
        self._token_source = CancellationTokenSource()

    def cancel(self) -> None:
        """Cancel a running task. Does nothing in any other state."""
        if self._status == TaskStatus.IN_PROGRESS:
            logger.debug("Cancelling %r", self)
            self._token_source.cancel()

    def start(self) -> asyncio.Task[TResult]:
        """Run the wrapped function in a new asyncio task and return that task.

        The status is ``IN_PROGRESS`` when this returns.  Awaiting the
        returned task gives the result, or raises the function's error.
        Must be called with an event loop running.
        """
        if self._status != TaskStatus.NOT_STARTED:
            raise InvalidStateError("Task already started or completed", state=self._status)
        loop = asyncio.get_running_loop()

        self._last_result = None
        self._last_error = None
        self._status = TaskStatus.IN_PROGRESS
        logger.debug("Starting %r", self)

        run = loop.create_task(self._execute(self._token_source.token))
        run.add_done_callback(self._on_run_done)
        self._run = run
        return run

    async def wait(self) -> TResult:
        """Wait for the task to end and return its result (or raise its error)."""
        if self._status == TaskStatus.NOT_STARTED:
            raise InvalidStateError("Can't wait for a task that was not started", state=self._status)
        if self._status == TaskStatus.IN_PROGRESS:
            future: asyncio.Future[TResult] = asyncio.get_running_loop().create_future()
            self._waiters.append(future)
            try:
                return await future
            finally:
                if future in self._waiters:
                    self._waiters.remove(future)

        return self._outcome()

    async def start_or_wait(self) -> TResult:
        """Start the task, or wait for it if it was already started."""
        if self._status == TaskStatus.NOT_STARTED:
            return await self.start()
        return await self.wait()

    async def _execute(self, token: CancellationToken) -> TResult:
        try:
            result = await self._func(token)
        except (Exception, asyncio.CancelledError) as exc:
            self._end(TaskStatus.ERRORED, None, exc)
            raise
        self._end(TaskStatus.FINISHED, result, None)
        return result

    def _on_run_done(self, run: asyncio.Task[TResult]) -> None:
        # Cancelled before its first step, so _execute never ran
        if run is self._run and self._status == TaskStatus.IN_PROGRESS:
            self._end(TaskStatus.ERRORED, None, asyncio.CancelledError())

    def _end(self, status: TaskStatus, result: TResult | None, error: BaseException | None) -> None:
        self._last_result = result
        self._last_error = error
        self._status = status
        logger.debug("%r ended", self)

        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if future.done():
                continue
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)  # type: ignore[arg-type]

        try:
            self._on_ended.dispatch(self, None)
        except Exception:
            logger.exception("on_ended listener of %r failed", self)

    def _outcome(self) -> TResult:
        if self._status == TaskStatus.ERRORED:
            assert self._last_error is not None
            raise self._last_error
        return self._last_result  # type: ignore[return-value]
