from __future__ import annotations

import json
from urllib.parse import unquote

from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import TypeAdapter, ValidationError

from streakcard.core.clock import NowDep
from streakcard.core.config import settings
from streakcard.schemas.streaks import CardPlatform, PlatformInfo, StreakResult
from streakcard.services.card import render_card
from streakcard.services.platforms import PLATFORMS, resolve_many, resolve_streak

router = APIRouter()

_card_platforms = TypeAdapter(list[CardPlatform])

_PLATFORMS_HINT = 'Expected a JSON list like [{"platform": "github", "username": "octocat"}].'


def _bad_request(message: str, *, code: str, hint: str | None = None) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": message, "hint": hint, "code": code},
    )


def _parse_card_platforms(raw: str | None) -> list[CardPlatform]:
    if raw is None or not raw.strip():
        raise _bad_request("Platforms parameter required", code="PLATFORMS_REQUIRED")

    # The UI URI-encodes the JSON before putting it in the query string.
    payload: object = None
    decoded = False
    for candidate in (raw, unquote(raw)):
        try:
            payload = json.loads(candidate)
        except ValueError:
            continue
        decoded = True
        break
    if not decoded:
        raise _bad_request(
            "Platforms parameter is not valid JSON",
            code="PLATFORMS_INVALID",
            hint=_PLATFORMS_HINT,
        )

    try:
        platforms = _card_platforms.validate_python(payload)
    except ValidationError:
        raise _bad_request(
            "Platforms parameter has an invalid shape",
            code="PLATFORMS_INVALID",
            hint=_PLATFORMS_HINT,
        )

    if not platforms:
        raise _bad_request("Platforms parameter required", code="PLATFORMS_REQUIRED")
    # A card listing the whole catalog always fits.
    limit = max(settings.card_max_platforms, len(PLATFORMS))
    if len(platforms) > limit:
        raise _bad_request(
            f"At most {limit} platforms per card",
            code="PLATFORMS_TOO_MANY",
        )
    return platforms


@router.get("/fetch-streak/{platform}/{username}", response_model=StreakResult)
async def fetch_streak_by_path(
    platform: str, username: str, now: NowDep
) -> StreakResult:
    platform = platform.strip()
    username = username.strip()
    if not platform or not username:
        raise _bad_request(
            "Platform and username required", code="PLATFORM_USERNAME_REQUIRED"
        )
    return await resolve_streak(platform, username, now=now)


@router.get("/fetch-streak", response_model=StreakResult)
async def fetch_streak(
    now: NowDep,
    platform: str | None = Query(default=None, max_length=64),
    username: str | None = Query(default=None, max_length=100),
) -> StreakResult:
    platform = (platform or "").strip()
    username = (username or "").strip()
    if not platform or not username:
        raise _bad_request(
            "Platform and username required", code="PLATFORM_USERNAME_REQUIRED"
        )
    return await resolve_streak(platform, username, now=now)


@router.get("/streak-card")
async def get_streak_card(
    now: NowDep,
    platforms: str | None = Query(default=None),
    name: str = Query(default="", max_length=80),
    greeting: str = Query(default="", max_length=160),
    color: str = Query(default="#FF8C42", max_length=16),
) -> Response:
    requested = _parse_card_platforms(platforms)
    results = await resolve_many(
        ((p.platform, p.username) for p in requested), now=now
    )
    svg = render_card(results, name=name, greeting=greeting, color=color)
    return Response(
        content=svg,
        media_type="image/svg+xml",
        headers={
            "cache-control": f"public, max-age={settings.card_cache_max_age_seconds}"
        },
    )


@router.get("/platforms", response_model=list[PlatformInfo])
async def list_platforms() -> list[PlatformInfo]:
    return [
        PlatformInfo(id=spec.id, label=spec.label, icon=spec.icon, has_api=spec.has_api)
        for spec in PLATFORMS.values()
    ]
