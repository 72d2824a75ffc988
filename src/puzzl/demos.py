"""Small runnable programs showing how the puzzl primitives fit together.

Each demo takes an ``echo`` callable for output so the CLI can print and
tests can collect lines.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable

import httpx

from puzzl.concurrency import CancellationToken, CancellationTokenSource, Task, sleep
from puzzl.config import PuzzlConfig
from puzzl.errors import OperationCanceledError
from puzzl.event import EventDispatcher, EventView
from puzzl.network import HttpRequest

Echo = Callable[[str], None]


@dataclass(slots=True)
class BlogPost:
    author: str
    description: str


class TimestampEmitter:
    """Emits the current timestamp on every tick."""

    def __init__(self) -> None:
        self._on_tick: EventDispatcher[TimestampEmitter, float] = EventDispatcher()

    @property
    def on_tick(self) -> EventView[TimestampEmitter, float]:
        # Consumers only see the subscription methods
        return self._on_tick.as_event()

    async def run(self, ticks: int, interval_ms: float, token: CancellationToken | None = None) -> None:
        for _ in range(ticks):
            await sleep(interval_ms, token)
            self._on_tick.dispatch(self, time.time())


async def fetch_blog_post(delay_ms: float) -> BlogPost:
    # This could be an HTTP request that returns JSON
    await sleep(delay_ms)
    return BlogPost(author="John", description="A blog post")


async def fetch_blog_post_cancellable(delay_ms: float, token: CancellationToken) -> BlogPost:
    await sleep(delay_ms)
    # Assuming the request itself can't be cancelled, this is the first chance to bail out
    token.throw_if_cancelled()
    return BlogPost(author="John", description="A blog post")


async def run_events_demo(echo: Echo, *, ticks: int = 3, interval_ms: float = 1000) -> int:
    """Subscribe to a timestamp emitter and print every tick. Returns the tick count seen."""
    emitter = TimestampEmitter()
    seen = 0

    def on_tick(timestamp: float, _sender: TimestampEmitter) -> None:
        nonlocal seen
        seen += 1
        echo(f"tick {seen}: {timestamp:.3f}")

    emitter.on_tick.subscribe(on_tick)
    await emitter.run(ticks, interval_ms)
    return seen


async def run_cancellation_demo(echo: Echo, *, delay_ms: float = 1000, cancel_after_ms: float = 500) -> bool:
    """Fetch a post, then fetch again while a cancellation fires. Returns True if cancelled."""
    post = await fetch_blog_post(delay_ms)
    echo(f"Fetched: {post}")

    source = CancellationTokenSource()
    # The cancellation could come from any other part of the application
    asyncio.get_running_loop().call_later(cancel_after_ms / 1000, source.cancel)

    try:
        post = await fetch_blog_post_cancellable(delay_ms, source.token)
    except OperationCanceledError:
        echo("Request was cancelled")
        return True
    echo(f"Fetched: {post}")
    return False


async def run_task_demo(echo: Echo, *, delay_ms: float = 1000, cancel_after_ms: float = 500) -> BlogPost:
    """Start a Task, cancel it from elsewhere, wait for it, then reset and re-run it."""
    fetch_task: Task[BlogPost] = Task(lambda token: fetch_blog_post_cancellable(delay_ms, token))

    # Start the task without waiting for the result
    running = fetch_task.start()
    asyncio.get_running_loop().call_later(cancel_after_ms / 1000, fetch_task.cancel)

    # Some other part of the app waits for the task to finish
    try:
        post = await fetch_task.wait()
        echo(f"Fetched: {post}")
    except OperationCanceledError:
        echo("Request was cancelled")
    # The start() caller sees the same outcome; it was already reported above
    await asyncio.gather(running, return_exceptions=True)

    fetch_task.reset()
    post = await fetch_task.start()
    echo(f"Fetched after restart: {post}")
    return post


async def run_fetch(
    echo: Echo,
    url: str,
    *,
    config: PuzzlConfig,
    cancel_after_ms: float | None = None,
    client: httpx.AsyncClient | None = None,
) -> str | None:
    """Fetch *url* with the configured timeout and echo the body. Returns None if cancelled."""
    source = CancellationTokenSource()
    if cancel_after_ms is not None:
        asyncio.get_running_loop().call_later(cancel_after_ms / 1000, source.cancel)

    async with HttpRequest.from_config(config, client) as http:
        try:
            body = await http.fetch(url, token=source.token)
        except OperationCanceledError:
            echo("Request was cancelled")
            return None
    echo(body)
    return body
