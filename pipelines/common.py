"""Shared utilities for retrieving external API responses."""

from __future__ import annotations

from datetime import datetime, UTC
from typing import Any, Mapping

import httpx

DEFAULT_TIMEOUT_SECONDS = 30.0


Headers = Mapping[str, str] | None
Params = Mapping[str, Any] | None


class UpstreamError(RuntimeError):
    """Raised when the upstream API answers with a non-success status."""

    def __init__(self, series_id: str, status_code: int, body: str) -> None:
        super().__init__(f"FRED fetch failed: {series_id} {status_code} {body}")
        self.series_id = series_id
        self.status_code = status_code
        self.body = body


async def fetch_json(
    url: str,
    *,
    label: str,
    headers: Headers = None,
    params: Params = None,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any:
    """Issue a single GET request and return the decoded JSON payload.

    There is no retry: a non-success response raises ``UpstreamError`` carrying
    ``label`` (the series being fetched), the status code and the response body.
    Callers may pass a shared ``client``; otherwise a short-lived one is opened.
    """

    if client is None:
        async with httpx.AsyncClient(timeout=timeout) as owned:
            response = await owned.get(url, headers=headers, params=params)
    else:
        response = await client.get(url, headers=headers, params=params)

    if not response.is_success:
        raise UpstreamError(label, response.status_code, response.text)
    return response.json()


def utc_timestamp(now: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""

    moment = (now or datetime.now(UTC)).astimezone(UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = ["fetch_json", "utc_timestamp", "UpstreamError", "DEFAULT_TIMEOUT_SECONDS"]
