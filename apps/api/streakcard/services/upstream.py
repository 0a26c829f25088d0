from __future__ import annotations

from typing import Any

import httpx

from streakcard.core.config import settings

_http: httpx.AsyncClient | None = None

_USER_AGENT = "streakcard/0.1"


class UpstreamError(Exception):
    def __init__(
        self,
        message: str,
        *,
        source: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code


class UpstreamUnavailable(UpstreamError):
    """Network failure, timeout, or non-2xx answer from a provider."""


class MalformedCalendar(UpstreamError):
    """Provider answered, but the payload is missing or unparsable."""


def get_http() -> httpx.AsyncClient:
    global _http
    if _http is None:
        _http = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.upstream_timeout_seconds),
            headers={"user-agent": _USER_AGENT},
            follow_redirects=True,
        )
    return _http


async def close_http() -> None:
    global _http
    if _http is not None:
        await _http.aclose()
        _http = None


def _raise_for_status(resp: httpx.Response, *, source: str) -> None:
    if resp.status_code < 400:
        return
    raise UpstreamUnavailable(
        f"{source} responded with status {resp.status_code}",
        source=source,
        status_code=resp.status_code,
    )


async def request(
    method: str,
    url: str,
    *,
    source: str,
    params: dict[str, Any] | None = None,
    json: Any | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    try:
        resp = await get_http().request(
            method, url, params=params, json=json, headers=headers
        )
    except httpx.TimeoutException as exc:
        raise UpstreamUnavailable(f"{source} timed out", source=source) from exc
    except httpx.HTTPError as exc:
        raise UpstreamUnavailable(
            f"{source} request failed: {type(exc).__name__}", source=source
        ) from exc
    _raise_for_status(resp, source=source)
    return resp


async def request_json(
    method: str,
    url: str,
    *,
    source: str,
    params: dict[str, Any] | None = None,
    json: Any | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    resp = await request(
        method, url, source=source, params=params, json=json, headers=headers
    )
    try:
        return resp.json()
    except ValueError as exc:
        raise MalformedCalendar(
            f"{source} returned a non-JSON body", source=source
        ) from exc


async def request_text(
    url: str,
    *,
    source: str,
    params: dict[str, Any] | None = None,
) -> str:
    resp = await request("GET", url, source=source, params=params)
    return resp.text
