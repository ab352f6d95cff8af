"""Cosmic Reach version lookup: normalization, range matching and an MCP tool server."""

from .logging_config import configure_logging
from .lookup import get_version_regex, normalize_version, normalize_version_range
from .registry import CosmicReachVersionRegistry, get_registry

__all__ = [
    "configure_logging",
    "normalize_version",
    "normalize_version_range",
    "get_version_regex",
    "CosmicReachVersionRegistry",
    "get_registry",
]
