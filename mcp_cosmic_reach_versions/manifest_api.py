"""HTTP client for the game version manifest.

- Shared httpx.AsyncClient with connection pooling
- Timeouts, bounded retries with backoff, bounded concurrency via semaphore
- HTTPS-only guard on URLs
- Optional TTL cache for the manifest document

Logs go through the centralized logger (stderr only).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from .cache import AsyncTTLCache
from .config import Settings
from .models import VersionManifest

_logger = logging.getLogger(__name__)

_RETRIABLE_ERRORS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.WriteError,
    httpx.RemoteProtocolError,
    httpx.NetworkError,
)


class VersionManifestHttpClient:
    """Resilient async client for the version manifest endpoint.

    Defaults come from Settings; keyword arguments override them for tests.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        manifest_path: str | None = None,
        timeout_seconds: Optional[int] = None,
        max_retries: Optional[int] = None,
        concurrency: Optional[int] = None,
        cache_enabled: Optional[bool] = None,
        client: httpx.AsyncClient | None = None,
        sleep_fn: Any | None = None,
    ) -> None:
        s = Settings()
        self._base_url = (base_url or s.VERSION_MANIFEST_BASE_URL).rstrip("/")
        self._manifest_path = manifest_path or s.VERSION_MANIFEST_PATH

        if not self._base_url.lower().startswith("https://"):
            raise ValueError("Base URL must be HTTPS")

        self._timeout_seconds = int(timeout_seconds or s.HTTP_TIMEOUT_SECONDS)
        self._max_retries = int(max_retries if max_retries is not None else s.HTTP_MAX_RETRIES)

        conc = int(concurrency or s.HTTP_CONCURRENCY)
        if conc < 1:
            raise ValueError("HTTP_CONCURRENCY must be >= 1")
        self._sem = asyncio.Semaphore(conc)

        enabled = s.CACHE_ENABLED if cache_enabled is None else cache_enabled
        self._cache: AsyncTTLCache[str, VersionManifest] | None = (
            AsyncTTLCache(
                default_ttl_seconds=s.CACHE_TTL_SECONDS_MANIFEST,
                max_entries=s.CACHE_MAX_ENTRIES,
            )
            if enabled
            else None
        )

        self._client = client or httpx.AsyncClient(timeout=self._timeout_seconds)
        self._sleep = sleep_fn or asyncio.sleep

    @property
    def manifest_url(self) -> str:
        return f"{self._base_url}/{self._manifest_path.lstrip('/')}"

    async def aclose(self) -> None:
        await self._client.aclose()

    def _should_retry(self, exc: BaseException | None, response: httpx.Response | None) -> bool:
        if exc is not None:
            return isinstance(exc, _RETRIABLE_ERRORS)
        if response is None:
            return False
        status = response.status_code
        return status == 429 or 500 <= status <= 599

    async def _backoff(self, attempt: int) -> None:
        # 0.05, 0.1, 0.2, ... seconds
        await self._sleep(0.05 * (2 ** max(0, attempt - 1)))

    async def get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        """GET ``url`` and parse JSON, retrying transient failures only."""
        if not url.lower().startswith("https://"):
            raise ValueError("URL must be HTTPS")

        _logger.debug("HTTP GET JSON", extra={"op": "get_json"})

        last_exc: BaseException | None = None
        last_response: httpx.Response | None = None

        for attempt in range(0, self._max_retries + 1):
            exc: BaseException | None = None
            resp: httpx.Response | None = None
            async with self._sem:
                try:
                    resp = await self._client.get(url, params=params)
                    if not self._should_retry(None, resp):
                        resp.raise_for_status()
                        return resp.json()
                except httpx.HTTPStatusError as e:
                    if not self._should_retry(None, e.response):
                        raise
                    exc = e
                except Exception as e:  # network errors
                    exc = e

            last_exc = exc
            last_response = resp
            if attempt < self._max_retries and self._should_retry(exc, resp):
                _logger.info(
                    "retrying manifest request",
                    extra={"op": "get_json", "attempt": attempt + 1},
                )
                await self._backoff(attempt + 1)
                continue
            break

        if last_exc is not None:
            raise last_exc
        if last_response is not None:
            last_response.raise_for_status()
        raise RuntimeError("Request failed without response or exception")

    async def get_version_manifest(self) -> VersionManifest:
        """Fetch and validate the version manifest."""
        url = self.manifest_url
        if self._cache is not None:
            cached = await self._cache.get(url)
            if cached is not None:
                return cached

        _logger.info("fetching version manifest", extra={"op": "version_manifest"})
        data = await self.get_json(url)
        manifest = VersionManifest.model_validate(data)
        _logger.info(
            "fetched version manifest",
            extra={"op": "version_manifest", "count": len(manifest.versions)},
        )

        if self._cache is not None:
            await self._cache.set(url, manifest)
        return manifest


_singleton: VersionManifestHttpClient | None = None


def get_client() -> VersionManifestHttpClient:
    global _singleton
    if _singleton is None:
        _singleton = VersionManifestHttpClient()
    return _singleton


async def close_client() -> None:
    global _singleton
    if _singleton is not None:
        await _singleton.aclose()
        _singleton = None


__all__ = ["VersionManifestHttpClient", "get_client", "close_client"]
