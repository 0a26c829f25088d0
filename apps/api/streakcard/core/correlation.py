from __future__ import annotations

import re
import uuid

from fastapi import Request

CORRELATION_HEADER = "x-correlation-id"

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9._:\-]{8,128}$")


def resolve_correlation_id(raw: str | None) -> str:
    value = (raw or "").strip()
    if _SAFE_ID_RE.match(value):
        return value
    return uuid.uuid4().hex


async def correlation_id_middleware(request: Request, call_next):
    correlation_id = resolve_correlation_id(request.headers.get(CORRELATION_HEADER))
    request.state.correlation_id = correlation_id
    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response
