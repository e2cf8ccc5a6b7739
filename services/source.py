"""Retrieval of CSV text from a local path or an HTTP(S) URL."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from services.errors import RetrievalError

logger = logging.getLogger(__name__)

_HTTP_SCHEMES = ("http://", "https://")


def is_remote(source: str) -> bool:
    return source.lower().startswith(_HTTP_SCHEMES)


class SourceLoader:
    """Fetches the raw CSV text for a dashboard load."""

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport

    async def fetch_text(self, source: str) -> str:
        if is_remote(source):
            raw = await self._fetch_remote(source)
        else:
            raw = await asyncio.to_thread(self._read_file, source)

        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise RetrievalError(source, "content is not valid UTF-8") from exc

    async def _fetch_remote(self, source: str) -> bytes:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(source)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "Source responded with an error status",
                    extra={"source": source, "status_code": exc.response.status_code},
                )
                raise RetrievalError(
                    source, f"HTTP status {exc.response.status_code}"
                ) from exc
            except httpx.HTTPError as exc:
                logger.error("Source could not be reached", extra={"source": source})
                raise RetrievalError(source, str(exc) or type(exc).__name__) from exc
        return response.content

    @staticmethod
    def _read_file(source: str) -> bytes:
        path = Path(source)
        try:
            return path.read_bytes()
        except OSError as exc:
            logger.error("Source file could not be read", extra={"source": source})
            raise RetrievalError(source, exc.strerror or str(exc)) from exc
