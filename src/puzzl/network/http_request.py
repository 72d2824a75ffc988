"""Async HTTP request helper with cooperative cancellation.

Wraps httpx.  Expects a 2xx response status and raises HttpRequestError
otherwise::

    try:
        data = await HttpRequest().fetch("https://example.org/posts")
    except HttpRequestError as e:
        if e.status == 504:
            ...  # do something special
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import httpx

from puzzl.concurrency.cancellation import CancellationToken
from puzzl.config import DEFAULT_HTTP_TIMEOUT, PuzzlConfig
from puzzl.errors import HttpRequestError, OperationCanceledError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


class DataType(IntEnum):
    """What kind of payload ``HttpRequestOptions.data`` holds."""

    JSON = 0  # serialized with json.dumps before sending
    RAW = 1  # sent as-is


@dataclass(slots=True)
class HttpRequestOptions:
    """Options for a single request."""

    method: str = "GET"
    timeout: float | None = None  # seconds
    data: Any = None
    data_type: DataType = DataType.JSON
    headers: dict[str, str] = field(default_factory=dict)


class HttpRequest:
    """Promise-style wrapper around ``httpx.AsyncClient``.

    A client can be injected (tests pass one with a mock transport);
    otherwise one is created lazily and closed by :meth:`aclose`.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        default_timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._default_timeout = default_timeout

    @classmethod
    def from_config(cls, config: PuzzlConfig, client: httpx.AsyncClient | None = None) -> HttpRequest:
        """Create a request helper whose default timeout is ``config.http_timeout``."""
        return cls(client, default_timeout=config.http_timeout)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if it was created here."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpRequest:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def fetch(
        self,
        url: str,
        options: HttpRequestOptions | None = None,
        token: CancellationToken | None = None,
    ) -> str:
        """Perform the request and return the response body as text.

        Raises:
            ValueError: data was given with a GET request.
            HttpRequestError: the server answered with a non-2xx status.
            OperationCanceledError: *token* was cancelled before completion.
        """
        options = options or HttpRequestOptions()
        method = options.method.upper()

        kwargs: dict[str, Any] = {
            "headers": {},
            "timeout": options.timeout if options.timeout else self._default_timeout,
        }
        if options.data is not None:
            if method == "GET":
                raise ValueError("Can't send data with GET method. Use POST instead")
            if options.data_type == DataType.JSON:
                kwargs["headers"]["Content-Type"] = JSON_CONTENT_TYPE
                kwargs["content"] = json.dumps(options.data)
            else:
                kwargs["content"] = options.data
        kwargs["headers"].update(options.headers)

        if token is not None:
            token.throw_if_cancelled()

        logger.debug("HTTP %s %s", method, url)
        request = asyncio.ensure_future(self._get_client().request(method, url, **kwargs))

        unregister = None
        if token is not None:
            unregister = token.register(request.cancel)
        try:
            response = await request
        except asyncio.CancelledError:
            if token is not None and token.is_cancelled and not _current_task_cancelling():
                raise OperationCanceledError(token) from None
            raise
        finally:
            if unregister is not None:
                unregister()

        if not 200 <= response.status_code < 300:
            raise HttpRequestError(response.status_code, response.text)
        return response.text

    async def fetch_json(
        self,
        url: str,
        options: HttpRequestOptions | None = None,
        token: CancellationToken | None = None,
    ) -> Any:
        """Same as :meth:`fetch`, decoding the body as JSON."""
        return json.loads(await self.fetch(url, options, token))


def _current_task_cancelling() -> bool:
    """Whether the awaiting task itself was asked to cancel."""
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0
