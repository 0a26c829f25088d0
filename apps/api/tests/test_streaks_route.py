from __future__ import annotations

import json
from unittest.mock import AsyncMock
from urllib.parse import quote

from fastapi.testclient import TestClient

from tests.fixtures.calendars import LEETCODE_CALENDAR


def _platforms_param(items: list[dict]) -> str:
    return json.dumps(items)


def test_fetch_streak_by_path_returns_streak_result(
    client: TestClient, adapter_mocks: dict[str, AsyncMock]
) -> None:
    adapter_mocks["leetcode"].return_value = LEETCODE_CALENDAR

    response = client.get("/api/fetch-streak/leetcode/octocat")

    assert response.status_code == 200
    assert response.json() == {
        "platform": "leetcode",
        "username": "octocat",
        "streak": 2,
        "source": "api",
        "url": "https://leetcode.com/octocat",
    }


def test_fetch_streak_by_query_matches_path_variant(
    client: TestClient, adapter_mocks: dict[str, AsyncMock]
) -> None:
    adapter_mocks["github"].return_value = 14

    response = client.get(
        "/api/fetch-streak", params={"platform": "github", "username": "octocat"}
    )

    assert response.status_code == 200
    assert response.json()["streak"] == 14
    assert response.json()["url"] == "https://github.com/octocat"


def test_fetch_streak_requires_platform_and_username(client: TestClient) -> None:
    response = client.get("/api/fetch-streak", params={"platform": "github"})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "PLATFORM_USERNAME_REQUIRED"


def test_fetch_streak_by_path_rejects_blank_username(
    client: TestClient, adapter_mocks: dict[str, AsyncMock]
) -> None:
    response = client.get("/api/fetch-streak/github/%20")

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "PLATFORM_USERNAME_REQUIRED"
    adapter_mocks["github"].assert_not_awaited()


def test_fetch_streak_unknown_platform_is_manual_zero(client: TestClient) -> None:
    response = client.get("/api/fetch-streak/myspace/tom")

    assert response.status_code == 200
    body = response.json()
    assert body["streak"] == 0
    assert body["source"] == "manual"
    assert body["url"] == "#"


def test_fetch_streak_upstream_failure_still_returns_200(
    client: TestClient, adapter_mocks: dict[str, AsyncMock]
) -> None:
    adapter_mocks["gfg"].side_effect = RuntimeError("boom")

    response = client.get("/api/fetch-streak/gfg/octocat")

    assert response.status_code == 200
    assert response.json()["streak"] == 0
    assert response.json()["source"] == "api"


def test_streak_card_renders_svg_with_fetched_streaks(
    client: TestClient, adapter_mocks: dict[str, AsyncMock]
) -> None:
    adapter_mocks["github"].return_value = 21
    adapter_mocks["leetcode"].return_value = LEETCODE_CALENDAR
    platforms = _platforms_param(
        [
            # Client-supplied streak values are ignored.
            {"platform": "github", "username": "octocat", "streak": 999},
            {"platform": "leetcode-potd", "username": "octocat"},
        ]
    )

    response = client.get(
        "/api/streak-card",
        params={"platforms": platforms, "name": "Ada", "color": "#336699"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert response.headers["cache-control"] == "public, max-age=1800"
    svg = response.text
    assert "21 days" in svg
    assert "2 days" in svg
    assert "999 days" not in svg
    assert "https://github.com/octocat" in svg
    adapter_mocks["github"].assert_awaited_once_with("octocat")


def test_streak_card_accepts_double_encoded_platforms(
    client: TestClient, adapter_mocks: dict[str, AsyncMock]
) -> None:
    adapter_mocks["gfg"].return_value = 5
    encoded = quote(_platforms_param([{"platform": "gfg", "username": "dev"}]))

    response = client.get("/api/streak-card", params={"platforms": encoded})

    assert response.status_code == 200
    assert "5 days" in response.text


def test_streak_card_degrades_failed_platforms_to_zero(
    client: TestClient, adapter_mocks: dict[str, AsyncMock]
) -> None:
    adapter_mocks["github"].side_effect = RuntimeError("boom")
    adapter_mocks["gfg"].return_value = 7
    platforms = _platforms_param(
        [
            {"platform": "github", "username": "octocat"},
            {"platform": "gfg", "username": "octocat"},
        ]
    )

    response = client.get("/api/streak-card", params={"platforms": platforms})

    assert response.status_code == 200
    assert "0 days" in response.text
    assert "7 days" in response.text


def test_streak_card_defaults_blank_username(
    client: TestClient, adapter_mocks: dict[str, AsyncMock]
) -> None:
    platforms = _platforms_param([{"platform": "github", "username": ""}])

    response = client.get("/api/streak-card", params={"platforms": platforms})

    assert response.status_code == 200
    adapter_mocks["github"].assert_awaited_once_with("user")


def test_streak_card_requires_platforms(client: TestClient) -> None:
    response = client.get("/api/streak-card")

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "PLATFORMS_REQUIRED"


def test_streak_card_rejects_empty_platform_list(client: TestClient) -> None:
    response = client.get("/api/streak-card", params={"platforms": "[]"})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "PLATFORMS_REQUIRED"


def test_streak_card_rejects_invalid_json(client: TestClient) -> None:
    response = client.get("/api/streak-card", params={"platforms": "[{oops"})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "PLATFORMS_INVALID"


def test_streak_card_rejects_wrong_shape(client: TestClient) -> None:
    response = client.get(
        "/api/streak-card", params={"platforms": json.dumps({"platform": "github"})}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "PLATFORMS_INVALID"


def test_streak_card_rejects_too_many_platforms(client: TestClient) -> None:
    platforms = _platforms_param(
        [{"platform": "unstop", "username": f"u{i}"} for i in range(31)]
    )

    response = client.get("/api/streak-card", params={"platforms": platforms})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "PLATFORMS_TOO_MANY"


def test_streak_card_renders_full_platform_catalog(
    client: TestClient, adapter_mocks: dict[str, AsyncMock]
) -> None:
    catalog = client.get("/api/platforms").json()
    platforms = _platforms_param(
        [{"platform": p["id"], "username": "octocat"} for p in catalog]
    )

    response = client.get("/api/streak-card", params={"platforms": platforms})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert "CodeChef" in response.text


def test_list_platforms_reports_api_support(client: TestClient) -> None:
    response = client.get("/api/platforms")

    assert response.status_code == 200
    by_id = {p["id"]: p for p in response.json()}
    assert by_id["github"]["has_api"] is True
    assert by_id["leetcode-submissions"]["has_api"] is True
    assert by_id["unstop"]["has_api"] is False
    assert by_id["codechef"]["label"] == "CodeChef"


def test_cors_allows_any_origin(client: TestClient) -> None:
    response = client.get("/health", headers={"origin": "https://example.com"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
