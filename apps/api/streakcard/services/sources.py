from __future__ import annotations

import json
import re
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import quote

from streakcard.core.config import settings
from streakcard.services.error_log import log_upstream_failure
from streakcard.services.upstream import (
    MalformedCalendar,
    UpstreamError,
    UpstreamUnavailable,
    request_json,
    request_text,
)

# Either a {timestamp_seconds: count} calendar or an already-final streak.
RawActivityRecord = dict[str, Any] | int

LEETCODE_CALENDAR_QUERY = """
query getUserProfile($username: String!) {
  matchedUser(username: $username) {
    submissionCalendar
  }
}
"""

_GFG_STREAK_RE = re.compile(r'<text id="total-streak-text">(\d+)')


def _base_url(value: object) -> str:
    return str(value).rstrip("/")


def _path_segment(username: str) -> str:
    return quote(username, safe="")


def parse_submission_calendar(value: Any, *, source: str) -> dict[str, Any]:
    """LeetCode ships the calendar as a JSON-encoded string; some mirrors decode it."""
    if isinstance(value, str):
        try:
            value = json.loads(value) if value.strip() else {}
        except ValueError as exc:
            raise MalformedCalendar(
                "submission calendar is not valid JSON", source=source
            ) from exc
    if not isinstance(value, dict):
        raise MalformedCalendar(
            "submission calendar is not an object", source=source
        )
    return {str(k): v for k, v in value.items()}


async def fetch_github_streak(username: str) -> int:
    source = "github"
    payload = await request_json(
        "GET",
        str(settings.github_streak_api_url),
        source=source,
        params={"user": username, "type": "json"},
    )
    if not isinstance(payload, dict):
        raise MalformedCalendar("github payload is not an object", source=source)
    if payload.get("error"):
        raise MalformedCalendar(f"github stats error: {payload['error']}", source=source)

    current = payload.get("currentStreak")
    if not isinstance(current, dict):
        return 0
    length = current.get("length")
    if isinstance(length, bool) or not isinstance(length, int):
        return 0
    return max(length, 0)


async def _leetcode_graphql_calendar(username: str) -> dict[str, Any]:
    source = "leetcode-graphql"
    payload = await request_json(
        "POST",
        str(settings.leetcode_graphql_url),
        source=source,
        json={"query": LEETCODE_CALENDAR_QUERY, "variables": {"username": username}},
        headers={"content-type": "application/json", "referer": "https://leetcode.com"},
    )
    if not isinstance(payload, dict):
        raise MalformedCalendar("graphql payload is not an object", source=source)
    if payload.get("errors"):
        raise UpstreamUnavailable("graphql returned errors", source=source)

    data = payload.get("data")
    matched = data.get("matchedUser") if isinstance(data, dict) else None
    if not isinstance(matched, dict):
        raise MalformedCalendar("no matched user", source=source)
    calendar = matched.get("submissionCalendar")
    if calendar is None:
        raise MalformedCalendar("no submission calendar", source=source)
    return parse_submission_calendar(calendar, source=source)


async def _leetcode_rest_calendar(username: str) -> dict[str, Any]:
    source = "leetcode-rest"
    url = f"{_base_url(settings.leetcode_calendar_api_url)}/{_path_segment(username)}/calendar"
    payload = await request_json("GET", url, source=source)
    if not isinstance(payload, dict):
        raise MalformedCalendar("calendar payload is not an object", source=source)
    calendar = payload.get("submissionCalendar")
    if calendar is None:
        raise MalformedCalendar("no submission calendar", source=source)
    return parse_submission_calendar(calendar, source=source)


CalendarSource = Callable[[str], Awaitable[dict[str, Any]]]

# Tried in order; the first one that yields a calendar wins.
LEETCODE_CALENDAR_SOURCES: list[tuple[str, CalendarSource]] = [
    ("leetcode-graphql", _leetcode_graphql_calendar),
    ("leetcode-rest", _leetcode_rest_calendar),
]


async def fetch_leetcode_calendar(username: str) -> dict[str, Any]:
    for source, fetch in LEETCODE_CALENDAR_SOURCES:
        try:
            return await fetch(username)
        except UpstreamError as exc:
            log_upstream_failure(
                platform="leetcode", username=username, source=source, err=exc
            )
    # Every candidate failed: degrade to an empty calendar (streak 0).
    return {}


async def fetch_gfg_streak(username: str) -> int:
    source = "gfg"
    html = await request_text(
        f"{_base_url(settings.gfg_card_url)}/{_path_segment(username)}",
        source=source,
    )
    match = _GFG_STREAK_RE.search(html)
    if not match:
        return 0
    return int(match.group(1))
