"""Application configuration using pydantic-settings.

Every field can be overridden by an environment variable with the same name
(case-insensitive), e.g. ``VERSION_MANIFEST_BASE_URL=https://mirror.example/mc``.

Notes:
- The manifest is a single document, so the cache only ever holds a handful of
  entries; CACHE_MAX_ENTRIES stays small on purpose.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Top-level application settings."""

    # Version manifest endpoint
    VERSION_MANIFEST_BASE_URL: str = "https://piston-meta.mojang.com/mc"
    VERSION_MANIFEST_PATH: str = "/game/version_manifest_v2.json"

    # HTTP behavior
    HTTP_TIMEOUT_SECONDS: int = Field(default=10, ge=1)
    HTTP_MAX_RETRIES: int = Field(default=2, ge=0)
    HTTP_CONCURRENCY: int = Field(default=4, ge=1)

    # Cache
    CACHE_ENABLED: bool = True
    CACHE_TTL_SECONDS_MANIFEST: int = Field(default=3600, ge=0)  # 1 hour
    CACHE_MAX_ENTRIES: int = Field(default=16, ge=1)

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_JSON: bool = False

    # Tool server transport
    TRANSPORT: Literal["stdio", "http"] = "stdio"
    HTTP_HOST: str = "127.0.0.1"
    HTTP_PORT: int = Field(default=8000, ge=1, le=65535)

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)


__all__ = ["Settings"]
