"""Cosmic Reach manifest version types and their stability classification."""

from __future__ import annotations

import re
from enum import Enum
from typing import Final, Optional, Union

from .versioning import VersionType

# Snapshots that are really release candidates or pre-releases
_BETA_SNAPSHOT: Final[re.Pattern[str]] = re.compile(
    r"-pre|-rc|-beta|Pre-Release|Release Candidate", re.IGNORECASE
)

_NON_WORD: Final[re.Pattern[str]] = re.compile(r"[\W_]+")


def _name_key(value: str) -> str:
    return _NON_WORD.sub("", value).lower()


class CosmicReachVersionType(str, Enum):
    """Version type tag as it appears in the version manifest.

    Lookup by value ignores case and non-word characters, so ``"OLD BETA"``,
    ``"old-beta"`` and ``"OldBeta"`` all resolve to :attr:`OLD_BETA`.
    """

    RELEASE = "release"
    SNAPSHOT = "snapshot"
    OLD_BETA = "old_beta"
    OLD_ALPHA = "old_alpha"

    @classmethod
    def _missing_(cls, value: object) -> Optional["CosmicReachVersionType"]:
        if not isinstance(value, str):
            return None
        key = _name_key(value)
        for member in cls:
            if _name_key(member.value) == key:
                return member
        return None

    @classmethod
    def parse(cls, value: str) -> Optional["CosmicReachVersionType"]:
        """Return the matching member, or None for unknown tags."""
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def friendly_name(self) -> str:
        return self.value.replace("_", " ").title()


def to_version_type(
    type: Union[CosmicReachVersionType, str, None], version: Optional[str] = None
) -> VersionType:
    """Classify a manifest entry as release, beta or alpha.

    Snapshots are alpha unless ``version`` marks them as a pre-release or a
    release candidate. Unknown tags are treated as releases.
    """

    if isinstance(type, str) and not isinstance(type, CosmicReachVersionType):
        type = CosmicReachVersionType.parse(type)

    if type is CosmicReachVersionType.SNAPSHOT:
        if version and _BETA_SNAPSHOT.search(version):
            return VersionType.BETA
        return VersionType.ALPHA
    if type is CosmicReachVersionType.OLD_BETA:
        return VersionType.BETA
    if type is CosmicReachVersionType.OLD_ALPHA:
        return VersionType.ALPHA
    return VersionType.RELEASE


__all__ = ["CosmicReachVersionType", "to_version_type"]
