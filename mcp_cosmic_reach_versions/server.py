"""MCP server and tool definitions.

Design notes:
- Transport adapter stays thin; the ``*_core`` functions hold the logic.
- Version data comes from the shared registry, which fetches the manifest once.
- Logging goes to stderr via the central logging config.
"""

from __future__ import annotations

import logging
from typing import Union

from fastmcp import FastMCP

from .config import Settings
from .logging_config import configure_logging
from .models import (
    GameVersionInfo,
    GameVersionResponse,
    GameVersionsResponse,
)
from .providers import (
    COSMIC_REACH,
    GameVersionLookup,
    GameVersionProvider,
    get_game_version_lookup_by_name,
    get_game_version_provider_by_name,
)

_logger = logging.getLogger(__name__)

_settings = Settings()
configure_logging(_settings.LOG_LEVEL, json_logs=_settings.LOG_JSON)

_MAX_VERSIONS_LIMIT = 1000


def _resolve_provider(game: str) -> GameVersionProvider:
    provider = get_game_version_provider_by_name(game)
    if provider is None:
        raise ValueError(f"Unknown game: {game!r}")
    return provider


def _resolve_lookup(game: str) -> GameVersionLookup:
    lookup = get_game_version_lookup_by_name(game)
    if lookup is None:
        raise ValueError(f"Unknown game: {game!r}")
    return lookup


def _as_range_list(version_range: Union[str, list[str]]) -> list[str]:
    ranges = [version_range] if isinstance(version_range, str) else list(version_range)
    ranges = [r.strip() for r in ranges if r and r.strip()]
    if not ranges:
        raise ValueError("version_range must contain at least one non-empty expression")
    return ranges


async def get_game_version_core(*, game: str = COSMIC_REACH, version_id: str) -> GameVersionResponse:
    """Core logic for the get_game_version tool (transport-neutral).

    Exact ids win over ids that merely normalize to the same version
    (``20w14~`` and ``20w14infinite`` share one canonical form).

    Errors:
    - Unknown game or unknown version id: ValueError, surfaced as a tool error.
    """

    lookup = _resolve_lookup(game)
    vid = (version_id or "").strip()
    if not vid:
        raise ValueError("version_id must be non-empty")

    version = await lookup(vid)
    if version is None:
        raise ValueError(f"No {game} version found for {vid!r}")

    return GameVersionResponse(game=game, version=GameVersionInfo.from_version(version))


async def get_game_versions_core(
    *,
    game: str = COSMIC_REACH,
    version_range: Union[str, list[str]],
    include_snapshots: bool = True,
    max_versions: int = 200,
) -> GameVersionsResponse:
    """Core logic for the get_game_versions tool (transport-neutral).

    Returns matching versions newest first. A range that matches nothing, or
    cannot be parsed, yields an empty list rather than an error.
    """

    provider = _resolve_provider(game)
    ranges = _as_range_list(version_range)
    limit = max(1, min(int(max_versions), _MAX_VERSIONS_LIMIT))

    _logger.info("resolving game version range", extra={"op": "get_game_versions", "game": game})
    matching = await provider(ranges)
    if not include_snapshots:
        matching = [v for v in matching if v.is_release]

    caveats: list[str] = []
    if len(matching) > limit:
        caveats.append(f"Result truncated to {limit} of {len(matching)} versions")

    return GameVersionsResponse(
        game=game,
        version_range=ranges,
        versions=[GameVersionInfo.from_version(v) for v in matching[:limit]],
        snapshots_included=include_snapshots,
        caveats=caveats,
    )


_server = FastMCP("mcp-cosmic-reach-versions")


@_server.tool()
async def get_game_version(version_id: str, game: str = COSMIC_REACH) -> dict:
    """Return a single game version by its manifest id (e.g. "1.17", "20w45a").

    Transport wrapper around get_game_version_core.
    """

    result = await get_game_version_core(game=game, version_id=version_id)
    return result.model_dump(mode="json")


@_server.tool()
async def get_game_versions(
    version_range: Union[str, list[str]],
    game: str = COSMIC_REACH,
    include_snapshots: bool = True,
    max_versions: int = 200,
) -> dict:
    """Return game versions within a range, newest first.

    Ranges accept raw ids and comparators, e.g. ">1.16.4 <=1.16.5 || 21w03a"
    or "(1.17,1.18]". Transport wrapper around get_game_versions_core.
    """

    result = await get_game_versions_core(
        game=game,
        version_range=version_range,
        include_snapshots=include_snapshots,
        max_versions=max_versions,
    )
    return result.model_dump(mode="json")


def run() -> None:  # pragma: no cover
    if _settings.TRANSPORT == "http":
        _server.run(transport="http", host=_settings.HTTP_HOST, port=_settings.HTTP_PORT)
    else:
        _server.run()


__all__ = [
    "get_game_version_core",
    "get_game_versions_core",
    "run",
]
