"""Batch job that refreshes the published FRED series snapshots and index."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import httpx
from dotenv import load_dotenv
from pydantic import ValidationError

from jobs.config import TRACKED_SERIES, SeriesConfig
from pipelines.common import DEFAULT_TIMEOUT_SECONDS, UpstreamError, utc_timestamp
from pipelines.model import IndexDocument
from pipelines.sources.fred import fetch_series_snapshot
from storage.snapshots import get_data_dir, index_path, snapshot_path, write_if_changed

load_dotenv()

logger = logging.getLogger(__name__)

API_KEY_ENV = "FRED_API_KEY"


class MissingCredentialError(RuntimeError):
    """Raised before any request when the FRED API key is not configured."""


@dataclass
class FetchReport:
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    index_written: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.updated) or self.index_written


def resolve_api_key(api_key: str | None = None) -> str:
    resolved = api_key or os.getenv(API_KEY_ENV)
    if not resolved:
        raise MissingCredentialError(f"Missing env {API_KEY_ENV}")
    return resolved


async def fetch_weekly_async(
    series: Iterable[SeriesConfig] | None = None,
    *,
    api_key: str | None = None,
    data_dir: str | os.PathLike[str] | None = None,
    client: httpx.AsyncClient | None = None,
) -> FetchReport:
    """Fetch every configured series in order and publish what changed.

    Series are processed one at a time and each file is written before the next
    request goes out, so an ``UpstreamError`` part-way through leaves the
    earlier series on disk and the index untouched.
    """

    key = resolve_api_key(api_key)
    selected = tuple(series) if series is not None else TRACKED_SERIES
    out_dir = Path(get_data_dir(data_dir))
    out_dir.mkdir(parents=True, exist_ok=True)

    owned = client is None
    http = client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SECONDS)
    report = FetchReport()
    try:
        for config in selected:
            snapshot = await fetch_series_snapshot(config, api_key=key, client=http)
            if write_if_changed(snapshot_path(out_dir, config.series_id), snapshot):
                report.updated.append(config.series_id)
                logger.info("Updated %s: %s points", config.series_id, snapshot.points)
            else:
                report.unchanged.append(config.series_id)
                logger.info("No change %s", config.series_id)
    finally:
        if owned:
            await http.aclose()

    index = IndexDocument(
        updated_at=utc_timestamp(),
        series=tuple(config.series_id for config in selected),
    )
    report.index_written = write_if_changed(
        index_path(out_dir), index, force=bool(report.updated)
    )
    if report.index_written:
        logger.info("Updated index: %s series", len(index.series))
    return report


def main(series: Iterable[SeriesConfig] | None = None) -> int:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    try:
        resolve_api_key()
    except MissingCredentialError as exc:
        logger.error("%s", exc)
        return 1

    try:
        report = asyncio.run(fetch_weekly_async(series))
    except (UpstreamError, ValidationError, httpx.HTTPError) as exc:
        logger.error("Weekly fetch failed: %s", exc)
        return 1

    logger.info(
        "Weekly fetch finished (updated=%s, unchanged=%s).",
        len(report.updated),
        len(report.unchanged),
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
