# filestore/transport.py
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import httpx

from filestore.exceptions import TransportError

logger = logging.getLogger("FileStore_Core").getChild("Transport")


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of one HTTP exchange."""
    status_code: int
    content: bytes
    headers: Dict[str, str] = field(default_factory=dict)


class Transport(Protocol):
    """Anything able to perform a single HTTP request asynchronously."""

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> TransportResponse:
        ...


class HttpxTransport:
    """Transport backed by a shared ``httpx.AsyncClient``."""

    def __init__(self, timeout: float = 30.0, client: httpx.AsyncClient | None = None):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> TransportResponse:
        try:
            response = await self.client.request(method, url, headers=headers, content=content)
        except httpx.RequestError as e:
            logger.error(f"Network error during {method} {url}: {e}")
            raise TransportError(f"{method} {url} failed: {e}") from e
        logger.debug(f"{method} {url} -> {response.status_code} ({len(response.content)} bytes)")
        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
