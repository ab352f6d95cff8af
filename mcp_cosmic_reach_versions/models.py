"""Pydantic domain and response models.

Manifest models mirror the upstream JSON (camelCase aliases) and ignore
unknown fields. Response models are what the tools return.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from semantic_version import Version

from .version_type import CosmicReachVersionType, to_version_type
from .versioning import VersionType


class LatestVersions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    release: str
    snapshot: str


class RawVersionManifestEntry(BaseModel):
    """One entry of the ``versions`` array of the version manifest."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    # Unrecognised tags are kept as raw strings
    type: Union[CosmicReachVersionType, str] = Field(..., union_mode="left_to_right")
    url: str = ""
    time: str = ""
    release_time: str = Field(default="", alias="releaseTime")
    sha1: str = ""
    # 0 means the launcher warns that the version predates current safety features
    compliance_level: int = Field(default=0, alias="complianceLevel")


class VersionManifestEntry(RawVersionManifestEntry):
    """Manifest entry with its release time parsed."""

    release_date: Optional[datetime] = None


class VersionManifest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    latest: Optional[LatestVersions] = None
    versions: list[RawVersionManifestEntry] = Field(default_factory=list)


class CosmicReachVersion(BaseModel):
    """A catalog entry with its canonical, comparable version."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    version: Version
    manifest_type: Union[CosmicReachVersionType, str] = Field(..., union_mode="left_to_right")
    type: VersionType
    url: str = ""
    release_date: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        id: str,
        version: Version,
        manifest_type: Union[CosmicReachVersionType, str],
        url: str,
        release_date: Optional[datetime],
    ) -> "CosmicReachVersion":
        return cls(
            id=id,
            version=version,
            manifest_type=manifest_type,
            type=to_version_type(manifest_type, str(version)),
            url=url,
            release_date=release_date,
        )

    @property
    def is_alpha(self) -> bool:
        return self.type is VersionType.ALPHA

    @property
    def is_beta(self) -> bool:
        return self.type is VersionType.BETA

    @property
    def is_release(self) -> bool:
        return self.type is VersionType.RELEASE

    @property
    def is_snapshot(self) -> bool:
        return not self.is_release

    @property
    def is_old_alpha(self) -> bool:
        return self.manifest_type is CosmicReachVersionType.OLD_ALPHA

    @property
    def is_old_beta(self) -> bool:
        return self.manifest_type is CosmicReachVersionType.OLD_BETA

    def __str__(self) -> str:
        return self.id


# Tool response models


class GameVersionInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    version: str
    type: VersionType
    manifest_type: Union[CosmicReachVersionType, str] = Field(..., union_mode="left_to_right")
    url: str = ""
    release_date: Optional[datetime] = None

    @classmethod
    def from_version(cls, version: CosmicReachVersion) -> "GameVersionInfo":
        return cls(
            id=version.id,
            version=str(version.version),
            type=version.type,
            manifest_type=version.manifest_type,
            url=version.url,
            release_date=version.release_date,
        )


class GameVersionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    game: str
    version: GameVersionInfo
    caveats: list[str] = Field(default_factory=list)


class GameVersionsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    game: str
    version_range: list[str]
    versions: list[GameVersionInfo]
    snapshots_included: Optional[bool] = None
    caveats: list[str] = Field(default_factory=list)


__all__ = [
    "LatestVersions",
    "RawVersionManifestEntry",
    "VersionManifestEntry",
    "VersionManifest",
    "CosmicReachVersion",
    "GameVersionInfo",
    "GameVersionResponse",
    "GameVersionsResponse",
]
