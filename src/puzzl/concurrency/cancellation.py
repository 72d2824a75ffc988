"""Cooperative cancellation primitives.

A :class:`CancellationTokenSource` creates one :class:`CancellationToken`
and is the only object able to cancel it.  The token is passed to
cancellable functions, which react to cancellation either by polling
(``token.is_cancelled`` / ``token.throw_if_cancelled()``) at key points or
by registering a callback::

    async def caller() -> None:
        source = CancellationTokenSource()
        try:
            await cancellable(source.token)
        except OperationCanceledError:
            logger.info("cancelled")

    async def cancellable(token: CancellationToken) -> None:
        for _ in range(1000):
            await sleep(1000)
            token.throw_if_cancelled()

Cancellation never interrupts running code by itself.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from puzzl.errors import OperationCanceledError
from puzzl.event.dispatcher import EventDispatcher

logger = logging.getLogger(__name__)


def _noop() -> None:
    pass


@dataclass(slots=True)
class _CancellationState:
    """State shared by a source and its token. Only the source writes it."""

    cancelled: bool = False
    on_cancel: EventDispatcher[CancellationTokenSource, list[Exception]] = field(
        default_factory=EventDispatcher, repr=False,
    )


class CancellationToken:
    """Read-only handle on a single cancellation signal.

    Not meant to be instantiated directly; use ``CancellationTokenSource().token``.
    """

    __slots__ = ("_state",)

    def __init__(self, state: _CancellationState) -> None:
        self._state = state

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._state.cancelled})"

    @property
    def is_cancelled(self) -> bool:
        return self._state.cancelled

    def throw_if_cancelled(self) -> None:
        """Raise OperationCanceledError if the token is cancelled."""
        if self._state.cancelled:
            raise OperationCanceledError(self)

    def register(self, callback: Callable[[], object]) -> Callable[[], None]:
        """Call *callback* when the token is cancelled.

        If the token is already cancelled, *callback* runs right away,
        before this method returns.  Each call creates a separate
        registration, fired once, in registration order.

        Returns a function that removes the registration.
        """
        if self._state.cancelled:
            callback()
            return _noop

        def listener(errors: list[Exception], _source: CancellationTokenSource) -> None:
            try:
                callback()
            except Exception as exc:
                errors.append(exc)

        on_cancel = self._state.on_cancel
        on_cancel.subscribe(listener)
        return lambda: on_cancel.unsubscribe(listener)

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        if self._state.cancelled:
            return

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def wake() -> None:
            if not future.done():
                future.set_result(None)

        unregister = self.register(wake)
        try:
            await future
        finally:
            unregister()


class CancellationTokenSource:
    """Creates a :class:`CancellationToken` and has the ability to cancel it."""

    __slots__ = ("_state", "_token", "_unlink")

    def __init__(self) -> None:
        self._state = _CancellationState()
        self._token = CancellationToken(self._state)
        self._unlink: Callable[[], None] = _noop

    def __repr__(self) -> str:
        return f"CancellationTokenSource(cancelled={self._state.cancelled})"

    @property
    def token(self) -> CancellationToken:
        return self._token

    def cancel(self) -> None:
        """Cancel the token and notify registered callbacks.

        Only the first call has an effect.  Every callback runs even if an
        earlier one raises; the first error is re-raised afterwards.
        """
        if self._state.cancelled:
            return
        self._state.cancelled = True
        self._unlink()
        self._unlink = _noop

        on_cancel = self._state.on_cancel
        logger.debug("Cancelling token, %d callback(s) registered", len(on_cancel))

        errors: list[Exception] = []
        on_cancel.dispatch(self, errors)
        on_cancel.clear()

        if errors:
            first = errors[0]
            for extra in errors[1:]:
                first.add_note(f"also failed: {type(extra).__name__}: {extra}")
            raise first

    def create_linked(self) -> CancellationTokenSource:
        """Create a child source that is cancelled together with this one.

        Cancelling the child does not affect this source.  Call
        :meth:`dispose` on the child to detach it.
        """
        child = CancellationTokenSource()
        child._unlink = self._token.register(child.cancel)
        return child

    def dispose(self) -> None:
        """Detach from the parent source and drop all pending callbacks.

        Linked children of this source are no longer cancelled with it.
        The cancelled state itself is left as it is.
        """
        self._unlink()
        self._unlink = _noop
        self._state.on_cancel.clear()
