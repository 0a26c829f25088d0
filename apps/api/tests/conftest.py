from __future__ import annotations

import os
from dataclasses import replace
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

# Keep CI independent from any local .env file.
_ENV_DEFAULTS = {
    "APP_ENV": "test",
    "LOG_LEVEL": "WARNING",
}
for _key, _value in _ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)

import streakcard.services.platforms as platforms_service
import streakcard.services.upstream as upstream_service
from streakcard.core.clock import get_now
from streakcard.main import app
from tests.fixtures.calendars import FIXED_NOW


@pytest.fixture(autouse=True)
def reset_test_state(monkeypatch: pytest.MonkeyPatch) -> None:
    app.dependency_overrides.clear()
    # Each test runs on its own event loop; never reuse a client across them.
    monkeypatch.setattr(upstream_service, "_http", None)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def client(fixed_now: datetime) -> TestClient:
    async def _override_now() -> datetime:
        return fixed_now

    app.dependency_overrides[get_now] = _override_now
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def adapter_mocks(monkeypatch: pytest.MonkeyPatch) -> dict[str, AsyncMock]:
    mocks = {
        "github": AsyncMock(return_value=0),
        "leetcode": AsyncMock(return_value={}),
        "gfg": AsyncMock(return_value=0),
    }
    routed = {
        "github": "github",
        "leetcode": "leetcode",
        "leetcode-potd": "leetcode",
        "leetcode-submissions": "leetcode",
        "gfg": "gfg",
        "geeksforgeeks": "gfg",
    }
    for platform_id, mock_name in routed.items():
        spec = platforms_service.PLATFORMS[platform_id]
        monkeypatch.setitem(
            platforms_service.PLATFORMS,
            platform_id,
            replace(spec, fetch=mocks[mock_name]),
        )
    return mocks
