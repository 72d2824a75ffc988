"""Synchronous event channel.

One dispatcher is created per event type, giving listeners a typed
``(args, sender)`` signature.  Owners keep the dispatcher private and hand
out the subscribe-only view returned by :meth:`EventDispatcher.as_event`::

    class TimestampEmitter:
        def __init__(self) -> None:
            self._on_tick: EventDispatcher[TimestampEmitter, float] = EventDispatcher()

        @property
        def on_tick(self) -> Event[TimestampEmitter, float]:
            return self._on_tick.as_event()

        def tick(self) -> None:
            self._on_tick.dispatch(self, time.time())
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Generic, Protocol, TypeVar

TSender = TypeVar("TSender")
TArgs = TypeVar("TArgs")

EventListener = Callable[[TArgs, TSender], Any]


class Event(Protocol[TSender, TArgs]):
    """Subscribe-only side of an event channel."""

    def subscribe(self, listener: Callable[[TArgs, TSender], Any]) -> None: ...

    def subscribe_once(self, listener: Callable[[TArgs, TSender], Any]) -> None: ...

    def unsubscribe(self, listener: Callable[[TArgs, TSender], Any]) -> None: ...


class EventView(Generic[TSender, TArgs]):
    """Wraps a dispatcher and forwards only the subscription methods."""

    __slots__ = ("_dispatcher",)

    def __init__(self, dispatcher: EventDispatcher[TSender, TArgs]) -> None:
        self._dispatcher = dispatcher

    def subscribe(self, listener: EventListener[TArgs, TSender]) -> None:
        self._dispatcher.subscribe(listener)

    def subscribe_once(self, listener: EventListener[TArgs, TSender]) -> None:
        self._dispatcher.subscribe_once(listener)

    def unsubscribe(self, listener: EventListener[TArgs, TSender]) -> None:
        self._dispatcher.unsubscribe(listener)


class EventDispatcher(Generic[TSender, TArgs]):
    """In-process synchronous pub/sub channel.

    Listeners are kept in subscription order.  Subscribing the same
    listener twice is a no-op.
    """

    def __init__(self) -> None:
        # Insertion-ordered; values are subscription serials
        self._listeners: dict[EventListener[TArgs, TSender], int] = {}
        self._serials = itertools.count()
        self._once_wrappers: dict[EventListener[TArgs, TSender], EventListener[TArgs, TSender]] = {}

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: EventListener[TArgs, TSender]) -> None:
        """Register a listener."""
        if listener not in self._listeners:
            self._listeners[listener] = next(self._serials)

    def unsubscribe(self, listener: EventListener[TArgs, TSender]) -> None:
        """Remove a listener, including a pending ``subscribe_once`` of it."""
        self._listeners.pop(listener, None)
        wrapper = self._once_wrappers.pop(listener, None)
        if wrapper is not None:
            self._listeners.pop(wrapper, None)

    def subscribe_once(self, listener: EventListener[TArgs, TSender]) -> None:
        """Register a listener that is removed before its first call."""
        if listener in self._once_wrappers:
            return

        def wrapper(args: TArgs, sender: TSender) -> Any:
            self._once_wrappers.pop(listener, None)
            self._listeners.pop(wrapper, None)
            return listener(args, sender)

        self._once_wrappers[listener] = wrapper
        self.subscribe(wrapper)

    def dispatch(self, sender: TSender, args: TArgs) -> None:
        """Call every subscribed listener with ``(args, sender)``.

        Listeners unsubscribed by an earlier listener in the same pass are
        skipped, even if they were subscribed again.  Listeners subscribed
        during the pass are first called on the next dispatch.
        """
        for listener, serial in list(self._listeners.items()):
            if self._listeners.get(listener) == serial:
                listener(args, sender)

    def clear(self) -> None:
        """Remove all listeners."""
        self._listeners.clear()
        self._once_wrappers.clear()

    def as_event(self) -> EventView[TSender, TArgs]:
        """Return a view that hides :meth:`dispatch`."""
        return EventView(self)
