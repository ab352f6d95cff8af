"""Game version providers and lookups, found by game name."""

from __future__ import annotations

import re
from typing import Awaitable, Callable, Final, Mapping, Optional, TypeVar

from .models import CosmicReachVersion
from .registry import RangeLike, get_registry

GameVersionProvider = Callable[[RangeLike], Awaitable[list[CosmicReachVersion]]]
GameVersionLookup = Callable[[str], Awaitable[Optional[CosmicReachVersion]]]

T = TypeVar("T")

_NON_WORD: Final[re.Pattern[str]] = re.compile(r"[\W_]+")


async def _cosmic_reach_versions(range: RangeLike) -> list[CosmicReachVersion]:
    return await get_registry().get_versions(range)


async def _cosmic_reach_version(id: str) -> Optional[CosmicReachVersion]:
    return await get_registry().get_version(id)


COSMIC_REACH: Final[str] = "cosmic-reach"

GAME_VERSION_PROVIDERS: Final[Mapping[str, GameVersionProvider]] = {
    COSMIC_REACH: _cosmic_reach_versions,
}

GAME_VERSION_LOOKUPS: Final[Mapping[str, GameVersionLookup]] = {
    COSMIC_REACH: _cosmic_reach_version,
}


def _game_key(name: str) -> str:
    return _NON_WORD.sub("", name).lower()


def _by_game(table: Mapping[str, T], name: str) -> Optional[T]:
    if not name:
        return None
    key = _game_key(name)
    for game, value in table.items():
        if _game_key(game) == key:
            return value
    return None


def get_game_version_provider_by_name(name: str) -> Optional[GameVersionProvider]:
    """Return the range provider for ``name`` (case and separators ignored), or None."""
    return _by_game(GAME_VERSION_PROVIDERS, name)


def get_game_version_lookup_by_name(name: str) -> Optional[GameVersionLookup]:
    """Return the single-version lookup for ``name``, or None for unknown games."""
    return _by_game(GAME_VERSION_LOOKUPS, name)


__all__ = [
    "COSMIC_REACH",
    "GameVersionProvider",
    "GameVersionLookup",
    "GAME_VERSION_PROVIDERS",
    "GAME_VERSION_LOOKUPS",
    "get_game_version_provider_by_name",
    "get_game_version_lookup_by_name",
]
