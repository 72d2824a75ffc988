"""Asynchronous event channel.

Same as :class:`~puzzl.event.dispatcher.EventDispatcher`, except listeners
may return an awaitable.  :meth:`AsyncEventDispatcher.dispatch` runs the
listeners one after the other and completes once the last one has settled.
"""

from __future__ import annotations

import inspect
import itertools
import logging
from typing import Any, Awaitable, Callable, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

TSender = TypeVar("TSender")
TArgs = TypeVar("TArgs")

AsyncEventListener = Callable[[TArgs, TSender], Any]


class AsyncEvent(Protocol[TSender, TArgs]):
    """Subscribe-only side of an async event channel."""

    def subscribe(self, listener: AsyncEventListener[TArgs, TSender]) -> None: ...

    def subscribe_once(self, listener: AsyncEventListener[TArgs, TSender]) -> None: ...

    def unsubscribe(self, listener: AsyncEventListener[TArgs, TSender]) -> None: ...


class AsyncEventView(Generic[TSender, TArgs]):
    """Wraps an async dispatcher and forwards only the subscription methods."""

    __slots__ = ("_dispatcher",)

    def __init__(self, dispatcher: AsyncEventDispatcher[TSender, TArgs]) -> None:
        self._dispatcher = dispatcher

    def subscribe(self, listener: AsyncEventListener[TArgs, TSender]) -> None:
        self._dispatcher.subscribe(listener)

    def subscribe_once(self, listener: AsyncEventListener[TArgs, TSender]) -> None:
        self._dispatcher.subscribe_once(listener)

    def unsubscribe(self, listener: AsyncEventListener[TArgs, TSender]) -> None:
        self._dispatcher.unsubscribe(listener)


class AsyncEventDispatcher(Generic[TSender, TArgs]):
    """Sequential async pub/sub channel.

    Listeners never overlap: each one starts only after the previous
    listener's awaitable has settled.  A failing listener does not stop
    the ones after it; the first failure is re-raised once all of them
    have run.
    """

    def __init__(self) -> None:
        # Insertion-ordered; values are subscription serials
        self._listeners: dict[AsyncEventListener[TArgs, TSender], int] = {}
        self._serials = itertools.count()
        self._once_wrappers: dict[
            AsyncEventListener[TArgs, TSender], AsyncEventListener[TArgs, TSender]
        ] = {}

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: AsyncEventListener[TArgs, TSender]) -> None:
        """Register a listener (sync function or coroutine function)."""
        if listener not in self._listeners:
            self._listeners[listener] = next(self._serials)

    def unsubscribe(self, listener: AsyncEventListener[TArgs, TSender]) -> None:
        """Remove a listener, including a pending ``subscribe_once`` of it."""
        self._listeners.pop(listener, None)
        wrapper = self._once_wrappers.pop(listener, None)
        if wrapper is not None:
            self._listeners.pop(wrapper, None)

    def subscribe_once(self, listener: AsyncEventListener[TArgs, TSender]) -> None:
        """Register a listener that is removed before its first call."""
        if listener in self._once_wrappers:
            return

        def wrapper(args: TArgs, sender: TSender) -> Awaitable[Any] | Any:
            self._once_wrappers.pop(listener, None)
            self._listeners.pop(wrapper, None)
            return listener(args, sender)

        self._once_wrappers[listener] = wrapper
        self.subscribe(wrapper)

    async def dispatch(self, sender: TSender, args: TArgs) -> None:
        """Run every subscribed listener in order, awaiting each result.

        Raises the first listener failure after all listeners have run.
        Later failures are attached to it as notes.
        """
        first_error: Exception | None = None

        for listener, serial in list(self._listeners.items()):
            # Removed, or removed and re-added, earlier in this pass
            if self._listeners.get(listener) != serial:
                continue
            try:
                result = listener(args, sender)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                if first_error is None:
                    first_error = exc
                else:
                    logger.warning("Async event listener %r failed: %s", listener, exc)
                    first_error.add_note(f"also failed: {type(exc).__name__}: {exc}")

        if first_error is not None:
            raise first_error

    def clear(self) -> None:
        """Remove all listeners."""
        self._listeners.clear()
        self._once_wrappers.clear()

    def as_event(self) -> AsyncEventView[TSender, TArgs]:
        """Return a view that hides :meth:`dispatch`."""
        return AsyncEventView(self)
