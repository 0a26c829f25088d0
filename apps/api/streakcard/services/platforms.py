from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Literal
from urllib.parse import quote

from streakcard.schemas.streaks import StreakResult
from streakcard.services.error_log import log_upstream_failure
from streakcard.services.sources import (
    RawActivityRecord,
    fetch_gfg_streak,
    fetch_github_streak,
    fetch_leetcode_calendar,
)
from streakcard.services.streaks import current_streak

logger = logging.getLogger(__name__)

PlatformKind = Literal["calendar", "counter", "manual"]
Fetcher = Callable[[str], Awaitable[RawActivityRecord]]


class UnsupportedPlatform(Exception):
    def __init__(self, platform: str) -> None:
        super().__init__(f"Unsupported platform: {platform}")
        self.platform = platform


@dataclass(frozen=True)
class PlatformSpec:
    id: str
    label: str
    icon: str
    kind: PlatformKind
    profile_url: str
    fetch: Fetcher | None = None

    @property
    def has_api(self) -> bool:
        return self.fetch is not None


_LEETCODE_URL = "https://leetcode.com/{username}"
_GFG_URL = "https://auth.geeksforgeeks.org/user/{username}"

_SPECS = [
    PlatformSpec("github", "GitHub", "💻", "counter", "https://github.com/{username}", fetch_github_streak),
    PlatformSpec("leetcode", "LeetCode", "💡", "calendar", _LEETCODE_URL, fetch_leetcode_calendar),
    PlatformSpec("leetcode-potd", "LeetCode POTD", "🔥", "calendar", _LEETCODE_URL, fetch_leetcode_calendar),
    PlatformSpec("leetcode-submissions", "LeetCode", "💡", "calendar", _LEETCODE_URL, fetch_leetcode_calendar),
    PlatformSpec("gfg", "GFG", "🔥", "counter", _GFG_URL, fetch_gfg_streak),
    PlatformSpec("geeksforgeeks", "GFG", "🔥", "counter", _GFG_URL, fetch_gfg_streak),
    # No public API: profile link only.
    PlatformSpec("unstop", "Unstop", "🚀", "manual", "https://unstop.com/u/{username}"),
    PlatformSpec("codechef", "CodeChef", "👨‍🍳", "manual", "https://www.codechef.com/users/{username}"),
    PlatformSpec("codeforces", "Codeforces", "🏆", "manual", "https://codeforces.com/profile/{username}"),
    PlatformSpec("hackerrank", "HackerRank", "🎯", "manual", "https://www.hackerrank.com/{username}"),
    PlatformSpec("microsoft", "Microsoft", "🎁", "manual", "https://rewards.microsoft.com/"),
    PlatformSpec("puzzles", "Puzzles", "🧩", "manual", "https://www.chess.com/member/{username}"),
    PlatformSpec("weather", "Weather", "☁️", "manual", "#"),
]

PLATFORMS: dict[str, PlatformSpec] = {spec.id: spec for spec in _SPECS}


def normalize_platform_id(platform: str) -> str:
    return platform.strip().lower()


def get_platform(platform: str) -> PlatformSpec:
    spec = PLATFORMS.get(normalize_platform_id(platform))
    if spec is None:
        raise UnsupportedPlatform(platform)
    return spec


def profile_url(platform: str, username: str) -> str:
    try:
        spec = get_platform(platform)
    except UnsupportedPlatform:
        return "#"
    return spec.profile_url.format(username=quote(username, safe=""))


def platform_label(platform: str) -> str:
    try:
        return get_platform(platform).label
    except UnsupportedPlatform:
        return platform.upper()


async def resolve_streak(platform: str, username: str, *, now: datetime) -> StreakResult:
    """
    Retrieve, normalize and evaluate one platform's streak.

    Never raises: unsupported platforms come back as a manual zero and any
    retrieval failure is logged here and degraded to an api zero.
    """
    url = profile_url(platform, username)
    try:
        spec = get_platform(platform)
    except UnsupportedPlatform:
        logger.info("Unsupported platform requested: %s", platform[:64])
        spec = None

    if spec is None or spec.fetch is None:
        return StreakResult(
            platform=platform, username=username, streak=0, source="manual", url=url
        )

    raw: RawActivityRecord
    try:
        raw = await spec.fetch(username)
    except Exception as exc:
        log_upstream_failure(
            platform=spec.id, username=username, source=spec.id, err=exc
        )
        raw = 0 if spec.kind == "counter" else {}

    if isinstance(raw, int):
        streak = max(raw, 0)
    else:
        streak = current_streak(raw, now=now)

    return StreakResult(
        platform=platform, username=username, streak=streak, source="api", url=url
    )


async def resolve_many(
    requests: Iterable[tuple[str, str]], *, now: datetime
) -> list[StreakResult]:
    # Independent pipelines; results keep request order.
    return list(
        await asyncio.gather(
            *(resolve_streak(platform, username, now=now) for platform, username in requests)
        )
    )
