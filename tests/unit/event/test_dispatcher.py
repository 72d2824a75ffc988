"""Tests for the synchronous EventDispatcher."""

from __future__ import annotations

from typing import Any

import pytest

from puzzl.event import EventDispatcher


class Emitter:
    pass


def recorder(log: list[Any], name: str):
    def listener(args: Any, sender: Any) -> None:
        log.append((name, args, sender))
    return listener


class TestSubscribe:
    def test_dispatch_passes_args_and_sender(self) -> None:
        dispatcher: EventDispatcher[Emitter, int] = EventDispatcher()
        sender = Emitter()
        log: list[Any] = []
        dispatcher.subscribe(recorder(log, "a"))
        dispatcher.dispatch(sender, 42)
        assert log == [("a", 42, sender)]

    def test_subscription_order(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        for name in ("a", "b", "c"):
            dispatcher.subscribe(recorder(log, name))
        dispatcher.dispatch(None, 1)
        assert [name for name, _, _ in log] == ["a", "b", "c"]

    def test_duplicate_subscription_is_noop(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        listener = recorder(log, "a")
        dispatcher.subscribe(listener)
        dispatcher.subscribe(listener)
        dispatcher.dispatch(None, 1)
        assert len(log) == 1
        assert len(dispatcher) == 1

    def test_bound_methods_match_by_equality(self) -> None:
        received: list[int] = []

        class Sink:
            def on_event(self, args: int, sender: None) -> None:
                received.append(args)

        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        sink = Sink()
        # Bound methods create new objects each access but compare equal
        dispatcher.subscribe(sink.on_event)
        dispatcher.subscribe(sink.on_event)
        dispatcher.dispatch(None, 7)
        dispatcher.unsubscribe(sink.on_event)
        dispatcher.dispatch(None, 8)
        assert received == [7]

    def test_unsubscribe(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        listener = recorder(log, "a")
        dispatcher.subscribe(listener)
        dispatcher.unsubscribe(listener)
        dispatcher.dispatch(None, 1)
        assert log == []

    def test_unsubscribe_unknown_is_noop(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        dispatcher.unsubscribe(lambda args, sender: None)
        assert len(dispatcher) == 0

    def test_sequence_of_subscriptions(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        a, b, c = recorder(log, "a"), recorder(log, "b"), recorder(log, "c")
        dispatcher.subscribe(a)
        dispatcher.subscribe(b)
        dispatcher.unsubscribe(a)
        dispatcher.subscribe(c)
        dispatcher.subscribe(a)
        dispatcher.dispatch(None, 1)
        assert [name for name, _, _ in log] == ["b", "c", "a"]

    def test_clear(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        dispatcher.subscribe(recorder(log, "a"))
        dispatcher.subscribe_once(recorder(log, "b"))
        dispatcher.clear()
        dispatcher.dispatch(None, 1)
        assert log == []

    def test_listener_error_propagates(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()

        def bad(args: int, sender: None) -> None:
            raise RuntimeError("boom")

        dispatcher.subscribe(bad)
        with pytest.raises(RuntimeError, match="boom"):
            dispatcher.dispatch(None, 1)


class TestSubscribeOnce:
    def test_invoked_once(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        dispatcher.subscribe_once(recorder(log, "once"))
        for i in range(3):
            dispatcher.dispatch(None, i)
        assert log == [("once", 0, None)]
        assert len(dispatcher) == 0

    def test_reentrant_dispatch_does_not_invoke_twice(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        calls: list[int] = []

        def once(args: int, sender: None) -> None:
            calls.append(args)
            if args == 0:
                dispatcher.dispatch(None, 1)

        dispatcher.subscribe_once(once)
        dispatcher.dispatch(None, 0)
        assert calls == [0]

    def test_once_listener_unsubscribing_others(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        other = recorder(log, "other")

        def once(args: int, sender: None) -> None:
            log.append(("once", args, sender))
            dispatcher.unsubscribe(other)

        dispatcher.subscribe_once(once)
        dispatcher.subscribe(other)
        dispatcher.dispatch(None, 1)
        dispatcher.dispatch(None, 2)
        assert log == [("once", 1, None)]

    def test_unsubscribe_cancels_pending_once(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        listener = recorder(log, "once")
        dispatcher.subscribe_once(listener)
        dispatcher.unsubscribe(listener)
        dispatcher.dispatch(None, 1)
        assert log == []

    def test_once_does_not_drop_regular_subscription(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        listener = recorder(log, "a")
        dispatcher.subscribe(listener)
        dispatcher.subscribe_once(listener)
        dispatcher.dispatch(None, 1)
        dispatcher.dispatch(None, 2)
        assert [args for _, args, _ in log] == [1, 1, 2]


class TestMutationDuringDispatch:
    def test_removed_listener_not_called_in_same_pass(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        second = recorder(log, "second")

        def first(args: int, sender: None) -> None:
            log.append(("first", args, sender))
            dispatcher.unsubscribe(second)

        dispatcher.subscribe(first)
        dispatcher.subscribe(second)
        dispatcher.dispatch(None, 1)
        assert [name for name, _, _ in log] == ["first"]

    def test_added_listener_called_on_next_dispatch(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        late = recorder(log, "late")

        def adder(args: int, sender: None) -> None:
            dispatcher.subscribe(late)

        dispatcher.subscribe(adder)
        dispatcher.dispatch(None, 1)
        assert log == []
        dispatcher.dispatch(None, 2)
        assert log == [("late", 2, None)]

    def test_resubscribed_listener_waits_for_next_dispatch(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        log: list[Any] = []
        second = recorder(log, "second")

        def first(args: int, sender: None) -> None:
            dispatcher.unsubscribe(second)
            dispatcher.subscribe(second)

        dispatcher.subscribe(first)
        dispatcher.subscribe(second)
        dispatcher.dispatch(None, 1)
        assert log == []
        dispatcher.dispatch(None, 2)
        assert log == [("second", 2, None)]


class TestAsEvent:
    def test_view_hides_dispatch(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        event = dispatcher.as_event()
        assert not hasattr(event, "dispatch")
        assert event is not dispatcher

    def test_view_subscribes_on_dispatcher(self) -> None:
        dispatcher: EventDispatcher[None, int] = EventDispatcher()
        event = dispatcher.as_event()
        log: list[Any] = []
        listener = recorder(log, "a")
        event.subscribe(listener)
        event.subscribe_once(recorder(log, "b"))
        dispatcher.dispatch(None, 1)
        event.unsubscribe(listener)
        dispatcher.dispatch(None, 2)
        assert [(name, args) for name, args, _ in log] == [("a", 1), ("b", 1)]
