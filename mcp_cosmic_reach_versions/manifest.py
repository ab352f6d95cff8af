"""Version manifest indexing and enclosing-release lookup.

The manifest lists every version newest first, but its order is not reliable
for old snapshots. Entries are re-sorted by release date here, and the release
a snapshot leads up to is derived from, in order:

1. the entry itself, when it is a release
2. a release number embedded in the id (``1.16.5-rc1``, ``1.18 Pre-Release 2``)
3. a hardcoded table of snapshot weeks for ranges where order is known to be wrong
4. the nearest newer release in the manifest
5. the nearest older release, with its patch number incremented
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Final, Optional, Sequence

from .models import VersionManifest, VersionManifestEntry
from .version_type import CosmicReachVersionType

RELEASE_REGEX: Final[re.Pattern[str]] = re.compile(r"\d+\.\d+(\.\d+)?")

# 20w45a -> (20, 45, a); leading zero of the week is dropped (13w03a -> 3)
SNAPSHOT_REGEX: Final[re.Pattern[str]] = re.compile(r"(?:Snapshot )?(\d+)w0?(0|[1-9]\d*)([a-z])")

_RELEASE_PARTS_REGEX: Final[re.Pattern[str]] = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")

_UNDATED: Final[datetime] = datetime.min.replace(tzinfo=timezone.utc)


def get_version_manifest_entries(manifest: VersionManifest) -> list[VersionManifestEntry]:
    """Return manifest entries with parsed release dates, newest first."""
    entries = [
        VersionManifestEntry.model_validate(
            {**entry.model_dump(), "release_date": entry.release_time or None}
        )
        for entry in manifest.versions
    ]
    # Entries without a release time go last, in manifest order
    entries.sort(
        key=lambda e: (e.release_date is not None, e.release_date or _UNDATED), reverse=True
    )
    return entries


def find_nearest_release_version(
    entries: Sequence[VersionManifestEntry], index: int
) -> Optional[str]:
    """Find the release that gives context to ``entries[index]``.

    Returns None for old alpha/beta entries and when nothing fits.
    """

    entry = entries[index]
    if entry.type is CosmicReachVersionType.RELEASE:
        return entry.id

    if entry.type is not CosmicReachVersionType.SNAPSHOT:
        return None

    release = RELEASE_REGEX.search(entry.id)
    if release:
        return release.group(0)

    snapshot = SNAPSHOT_REGEX.search(entry.id)
    if snapshot:
        hardcoded = _find_nearest_release_version_by_snapshot_date(
            int(snapshot.group(1)), int(snapshot.group(2))
        )
        if hardcoded:
            return hardcoded

    for i in range(index - 1, -1, -1):
        if entries[i].type is CosmicReachVersionType.RELEASE:
            return entries[i].id

    for i in range(index + 1, len(entries)):
        if entries[i].type is not CosmicReachVersionType.RELEASE:
            continue

        parts = _RELEASE_PARTS_REGEX.search(entries[i].id)
        if parts:
            major, minor, patch = parts.groups()
            return f"{major}.{minor}.{int(patch or 0) + 1}"

    return None


def _find_nearest_release_version_by_snapshot_date(year: int, week: int) -> Optional[str]:
    if year == 23 and week >= 12:
        return "1.20"

    if (year == 20 and week >= 45) or (year == 21 and week <= 20):
        return "1.17"

    if (year == 15 and week >= 31) or (year == 16 and week <= 7):
        return "1.9"

    if year == 14 and 2 <= week <= 34:
        return "1.8"

    if year == 13 and 47 <= week <= 49:
        return "1.7.4"

    if year == 13 and 36 <= week <= 43:
        return "1.7.2"

    if year == 13 and 16 <= week <= 26:
        return "1.6"

    return None


__all__ = [
    "RELEASE_REGEX",
    "SNAPSHOT_REGEX",
    "get_version_manifest_entries",
    "find_nearest_release_version",
]
