from __future__ import annotations

import asyncio
from typing import Optional, Protocol
from aiohttp import ClientSession, ClientTimeout
from yarl import URL
import aiohttp
import logging

from ..errors import RequestFailure

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can GET a URL and hand back the body bytes, raising RequestFailure otherwise."""

    def __call__(self, url: str) -> bytes:
        ...


async def fetch_bytes(
    session: ClientSession,
    url: str,
    *,
    user_agent: Optional[str] = None,
) -> bytes:
    """
    GET a URL once and return the body bytes. Raises RequestFailure on
    network errors and non-2xx answers; nothing is retried.
    """
    headers = {}
    if user_agent:
        headers["User-Agent"] = user_agent

    try:
        # encoded=True: the query is already canonical and signed, yarl must not requote it.
        async with session.get(URL(url, encoded=True), headers=headers) as resp:
            if not 200 <= resp.status < 300:
                logger.warning("GET %s answered HTTP %s", url, resp.status)
                raise RequestFailure(url, status=resp.status, reason=resp.reason or "")
            return await resp.read()
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.warning("GET %s failed: %r", url, exc)
        raise RequestFailure(url, reason=repr(exc)) from exc


def create_session() -> ClientSession:
    """
    Create an aiohttp ClientSession with no total timeout; a hung server hangs the caller.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    return aiohttp.ClientSession(timeout=ClientTimeout(total=None))


class AiohttpTransport:
    """
    Blocking transport: each call opens a session, performs one GET and closes it.
    Calling it from inside a running event loop raises RuntimeError; async callers
    await ``fetch`` directly or push the blocking search into ``asyncio.to_thread``.
    """

    def __init__(self, user_agent: Optional[str] = None) -> None:
        self.user_agent = user_agent

    async def fetch(self, url: str) -> bytes:
        session = create_session()
        try:
            return await fetch_bytes(session, url, user_agent=self.user_agent)
        finally:
            await session.close()

    def __call__(self, url: str) -> bytes:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.fetch(url))
        raise RuntimeError(
            "AiohttpTransport blocks and cannot run inside an event loop; "
            "await AiohttpTransport.fetch(url) or call the search via asyncio.to_thread"
        )
