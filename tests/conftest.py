from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterator
from pathlib import Path
from typing import Any

import pytest
import respx

from mcp_cosmic_reach_versions import manifest_api, registry
from mcp_cosmic_reach_versions.config import Settings

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(autouse=True)
async def _reset_singletons() -> AsyncIterator[None]:
    # Each test gets a fresh registry and HTTP client bound to its own event loop
    registry.reset_registry()
    yield
    registry.reset_registry()
    await manifest_api.close_client()


@pytest.fixture
def manifest_json() -> dict[str, Any]:
    return json.loads((DATA_DIR / "version_manifest_v2.json").read_text(encoding="utf-8"))


@pytest.fixture
def manifest_url() -> str:
    s = Settings()
    return f"{s.VERSION_MANIFEST_BASE_URL.rstrip('/')}/{s.VERSION_MANIFEST_PATH.lstrip('/')}"


@pytest.fixture
def respx_router() -> Iterator[respx.Router]:
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def respx_manifest_mock(respx_router: respx.Router, manifest_url: str):
    """Prepare a route on the configured version manifest URL.

    Tests can call `.mock(return_value=...)` and inspect `.called`/`.call_count`.
    """

    return respx_router.get(manifest_url)
