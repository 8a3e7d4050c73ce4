"""HTTP memory server client.

    GET    /memories        -> 200, JSON array of records
    POST   /memories        -> 201, the saved record (multipart upload)
    DELETE /memories/{id}   -> 204
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from nomadish.errors import DecodeError, NetworkUnavailableError, ServerError

logger = logging.getLogger(__name__)

_FORM_FIELDS = ("name", "notes", "rating", "latitude", "longitude")


class HTTPRemoteClient:
    """Talks to the memory server over HTTP with a shared aiohttp session."""

    def __init__(self, base_url: str, timeout: float = 30) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # ── Requests ─────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        expected: int,
        data: aiohttp.FormData | None = None,
    ) -> bytes:
        url = f"{self._base_url}{path}"
        session = self._get_session()
        try:
            async with session.request(method, url, data=data) as resp:
                body = await resp.read()
                if resp.status != expected:
                    detail = body[:200].decode("utf-8", errors="replace")
                    raise ServerError(resp.status, detail)
                return body
        except aiohttp.ClientError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise NetworkUnavailableError(f"{method} {url}: {e}") from e
        except asyncio.TimeoutError as e:
            logger.warning("%s %s timed out", method, url)
            raise NetworkUnavailableError(f"{method} {url}: timed out") from e

    @staticmethod
    def _parse_json(body: bytes) -> Any:
        try:
            return json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(f"Response body is not valid JSON: {e}") from e

    # ── Operations ───────────────────────────────────────────

    async def fetch_all(self) -> list[dict[str, Any]]:
        body = await self._request("GET", "/memories", expected=200)
        data = self._parse_json(body)
        if not isinstance(data, list):
            raise DecodeError("Expected a JSON array of memories")
        logger.debug("Fetched %d memories", len(data))
        return data

    async def add(self, record: dict[str, Any], photo: bytes | None) -> dict[str, Any]:
        form = aiohttp.FormData()
        for key in _FORM_FIELDS:
            form.add_field(key, str(record[key]))
        if photo is not None:
            form.add_field("image", photo, filename="photo.jpg", content_type="image/jpeg")

        body = await self._request("POST", "/memories", expected=201, data=form)
        data = self._parse_json(body)
        if not isinstance(data, dict):
            raise DecodeError("Expected a JSON object for the saved memory")
        return data

    async def delete(self, memory_id: str) -> None:
        await self._request("DELETE", f"/memories/{quote(memory_id, safe='')}", expected=204)
