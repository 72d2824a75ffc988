"""Global test fixtures for puzzl."""

from __future__ import annotations

import asyncio

import pytest

from puzzl.concurrency import CancellationTokenSource


@pytest.fixture
def event_loop_policy():
    """Use default asyncio event loop policy."""
    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture
def token_source() -> CancellationTokenSource:
    """A fresh, uncancelled token source."""
    return CancellationTokenSource()
