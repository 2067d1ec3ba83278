from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from cointrace.config import settings


class ExplorerClientFactory:
    """
    Lazily creates and caches httpx AsyncClient instances, one per upstream
    base URL. All clients share the same timeout and headers.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._clients: Dict[str, httpx.AsyncClient] = {}
        self._lock = asyncio.Lock()
        self._timeout = settings.http_request_timeout if timeout is None else timeout
        self._transport = transport

    async def get_client(self, base_url: str) -> httpx.AsyncClient:
        async with self._lock:
            if base_url not in self._clients:
                self._clients[base_url] = httpx.AsyncClient(
                    base_url=base_url,
                    timeout=self._timeout,
                    transport=self._transport,
                    headers={
                        "User-Agent": settings.http_user_agent,
                        "Accept": "application/json",
                    },
                )
            return self._clients[base_url]

    async def close_all(self) -> None:
        async with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()

        # Close outside lock to avoid await under lock
        await asyncio.gather(*(client.aclose() for client in clients), return_exceptions=True)
