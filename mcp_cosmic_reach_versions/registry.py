"""Catalog of Cosmic Reach versions built from the version manifest.

The registry fetches the manifest on first use, normalizes every entry and
keeps the result for its whole lifetime. A new registry is the only way to see
a newer manifest.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Mapping, Optional, Union

from .cache import AsyncOnce
from .lookup import get_version_regex, normalize_version, normalize_version_range
from .manifest import get_version_manifest_entries
from .manifest_api import VersionManifestHttpClient, get_client
from .models import CosmicReachVersion
from .versioning import VersionRange, parse_version

_logger = logging.getLogger(__name__)

RangeLike = Union[str, Iterable[str], VersionRange]


class CosmicReachVersionRegistry:
    """Looks up Cosmic Reach versions by id or by version range."""

    def __init__(self, client: VersionManifestHttpClient | None = None) -> None:
        self._client = client
        self._versions: AsyncOnce[Mapping[str, CosmicReachVersion]] = AsyncOnce(
            self._load_versions
        )
        self._version_regex: Optional[re.Pattern[str]] = None

    async def get_version(self, id: str) -> Optional[CosmicReachVersion]:
        """Return the version with the given id, or the first one it resolves to."""
        versions = await self._versions.get()
        version = versions.get(id)
        if version is not None:
            return version

        matching = await self.get_versions(id)
        return matching[0] if matching else None

    async def get_versions(self, range: RangeLike) -> list[CosmicReachVersion]:
        """Return the versions within ``range``, newest first."""
        versions = await self._versions.get()
        regex = await self.get_version_regex()
        normalized = normalize_version_range(range, versions, regex)
        return [v for v in versions.values() if normalized.includes(v.version)]

    async def get_all_versions(self) -> Mapping[str, CosmicReachVersion]:
        return await self._versions.get()

    async def get_version_regex(self) -> re.Pattern[str]:
        if self._version_regex is None:
            versions = await self._versions.get()
            self._version_regex = get_version_regex(versions.keys())
        return self._version_regex

    async def _load_versions(self) -> Mapping[str, CosmicReachVersion]:
        client = self._client or get_client()
        manifest = await client.get_version_manifest()
        entries = get_version_manifest_entries(manifest)

        versions: dict[str, CosmicReachVersion] = {}
        for i, entry in enumerate(entries):
            normalized = normalize_version(entry.id, entries, i)
            try:
                parsed = parse_version(normalized)
            except ValueError:
                _logger.warning(
                    "skipping version with unparseable canonical form",
                    extra={"op": "build_versions", "id": entry.id, "normalized": normalized},
                )
                continue
            versions[entry.id] = CosmicReachVersion.create(
                entry.id, parsed, entry.type, entry.url, entry.release_date
            )

        _logger.info("built version registry", extra={"op": "build_versions", "count": len(versions)})
        return versions


_singleton: CosmicReachVersionRegistry | None = None


def get_registry() -> CosmicReachVersionRegistry:
    global _singleton
    if _singleton is None:
        _singleton = CosmicReachVersionRegistry()
    return _singleton


def reset_registry() -> None:
    """Drop the shared registry so the next lookup fetches a fresh manifest."""
    global _singleton
    _singleton = None


__all__ = ["CosmicReachVersionRegistry", "get_registry", "reset_registry"]
