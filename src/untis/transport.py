"""HTTP transport capability consumed by the client.

The client only depends on the HttpRequester protocol: an awaitable callable
taking a URL plus method/headers/body and returning an HttpResponse. Any
object with that shape works (tests inject a recording stub).
AiohttpRequester is the default implementation.

Timeouts and cancellation belong to the transport; the client sets none.
"""

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from src.untis.errors import RequestFailedError
from src.untis.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class HttpResponse(Protocol):
    @property
    def ok(self) -> bool: ...

    @property
    def status(self) -> int: ...

    async def text(self) -> str: ...

    async def json(self) -> Any: ...


class HttpRequester(Protocol):
    async def __call__(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
    ) -> HttpResponse: ...


@dataclass(frozen=True)
class BufferedResponse:
    """A fully read response, safe to use after the connection is released."""

    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    async def text(self) -> str:
        return self.body

    async def json(self) -> Any:
        return json.loads(self.body)


class AiohttpRequester:
    """HttpRequester backed by an aiohttp.ClientSession.

    Use as an async context manager. If no session is passed, one is created
    on enter and closed on exit; a passed-in session is left open.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._session = session
        self._own_session = session is None
        self._timeout = timeout

    async def __aenter__(self) -> "AiohttpRequester":
        if self._own_session:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._own_session and self._session:
            await self._session.close()
            self._session = None

    async def __call__(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
    ) -> BufferedResponse:
        if self._session is None:
            raise RuntimeError("AiohttpRequester must be used inside 'async with'")

        try:
            async with self._session.request(
                method, url, headers=dict(headers or {}), data=body
            ) as resp:
                text = await resp.text(errors="replace")
                return BufferedResponse(status=resp.status, body=text)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("transport_error", method=method, error=str(e), type=type(e).__name__)
            raise RequestFailedError(None, str(e) or type(e).__name__) from e
