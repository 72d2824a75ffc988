"""Typed synchronous and asynchronous event channels."""

from puzzl.event.async_dispatcher import (
    AsyncEvent,
    AsyncEventDispatcher,
    AsyncEventListener,
    AsyncEventView,
)
from puzzl.event.dispatcher import Event, EventDispatcher, EventListener, EventView

__all__ = [
    "AsyncEvent",
    "AsyncEventDispatcher",
    "AsyncEventListener",
    "AsyncEventView",
    "Event",
    "EventDispatcher",
    "EventListener",
    "EventView",
]
