"""Mutable single-value cell with change notification."""

from __future__ import annotations

from typing import Generic, TypeVar

from puzzl.event.dispatcher import EventDispatcher, EventView

T = TypeVar("T")


class BoxedVar(Generic[T]):
    """Store a value inside an object so it can be passed by reference.

    Useful when a value is injected into a collaborator before it is known.
    Every assignment fires :attr:`on_change`, even when the new value equals
    the old one.
    """

    def __init__(self, value: T | None = None) -> None:
        self._value: T | None = None
        self._on_change: EventDispatcher[BoxedVar[T], T | None] = EventDispatcher()
        if value is not None:
            self.value = value

    def __repr__(self) -> str:
        return f"BoxedVar({self._value!r})"

    @property
    def value(self) -> T | None:
        return self._value

    @value.setter
    def value(self, value: T | None) -> None:
        self._value = value
        self._on_change.dispatch(self, value)

    @property
    def on_change(self) -> EventView[BoxedVar[T], T | None]:
        return self._on_change.as_event()
