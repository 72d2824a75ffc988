"""Cancellable delay.

This is the pattern every cancellable coroutine in puzzl follows: start the
underlying operation, register with the token right after, and let a
cancellation that arrives first settle the result.
"""

from __future__ import annotations

import asyncio

from puzzl.concurrency.cancellation import CancellationToken
from puzzl.errors import OperationCanceledError


async def sleep(millis: float, token: CancellationToken | None = None) -> None:
    """Wait *millis* milliseconds.

    Raises OperationCanceledError if *token* gets cancelled first (or is
    already cancelled); the pending timer is dropped in that case.

    Example::

        print("then")
        await sleep(1000)
        print("now")
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[None] = loop.create_future()

    def on_timeout() -> None:
        if not future.done():
            future.set_result(None)

    handle = loop.call_later(max(millis, 0) / 1000, on_timeout)
    unregister = None

    if token is not None:
        def on_cancel() -> None:
            handle.cancel()
            if not future.done():
                future.set_exception(OperationCanceledError(token))

        unregister = token.register(on_cancel)

    try:
        await future
    finally:
        handle.cancel()
        if unregister is not None:
            unregister()
