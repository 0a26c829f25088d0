from __future__ import annotations

import logging

import sentry_sdk

from streakcard.services.upstream import UpstreamError

logger = logging.getLogger(__name__)

_MAX_FIELD_LEN = 128


def _clip(value: str) -> str:
    return value[:_MAX_FIELD_LEN]


def log_upstream_failure(
    *,
    platform: str,
    username: str,
    source: str,
    err: BaseException,
) -> None:
    """
    Record a failed retrieval at the adapter boundary.

    Expected provider failures are a warning; anything else also goes to Sentry
    tagged with the platform and source so it can be triaged.
    """
    # Best-effort logging; never raise.
    try:
        status_code = err.status_code if isinstance(err, UpstreamError) else None
        logger.warning(
            "Streak source %s failed for platform %s: %s",
            source,
            platform,
            err,
            extra={
                "platform": _clip(platform),
                "username": _clip(username),
                "source": _clip(source),
                "error_type": type(err).__name__,
                "status_code": status_code,
            },
        )
        if isinstance(err, UpstreamError):
            return
        with sentry_sdk.new_scope() as scope:
            scope.set_tag("area", "streak_source")
            scope.set_tag("platform", _clip(platform))
            scope.set_tag("source", _clip(source))
            sentry_sdk.capture_exception(err)
    except Exception:
        return
