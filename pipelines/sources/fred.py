"""St. Louis Fed (FRED) ingestor utilities."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

import httpx

from jobs.config import MAX_POINTS, SeriesConfig
from pipelines.common import fetch_json, utc_timestamp
from pipelines.model import Observation, SeriesSnapshot

FRED_BASE_URL = "https://api.stlouisfed.org/fred/series/observations"

# FRED marks missing observations with a lone dot.
MISSING_VALUE = "."

logger = logging.getLogger(__name__)


def build_observation_params(
    config: SeriesConfig, api_key: str, *, limit: int = MAX_POINTS
) -> dict[str, Any]:
    """Query parameters for the most recent ``limit`` observations, newest first."""

    params: dict[str, Any] = {
        "series_id": config.series_id,
        "api_key": api_key,
        "file_type": "json",
    }
    if config.frequency:
        params["frequency"] = config.frequency
    params["sort_order"] = "desc"
    params["limit"] = limit
    return params


def _coerce_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        numeric = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if stripped == MISSING_VALUE:
            return None
        try:
            numeric = float(stripped)
        except ValueError:
            return None
    else:
        return None

    if math.isnan(numeric) or math.isinf(numeric):
        return None
    return numeric


def normalize_observations(
    observations: Iterable[Mapping[str, Any]], *, limit: int = MAX_POINTS
) -> list[Observation]:
    """Turn newest-first upstream rows into the ascending, capped stored sequence.

    Undated rows and rows with the missing marker (or anything non-numeric)
    are dropped. The
    order is reversed before truncating so that the most recent ``limit``
    observations are the ones that survive.
    """

    kept: list[Observation] = []
    for obs in observations:
        if not isinstance(obs, Mapping):
            continue
        observed_on = obs.get("date")
        if not isinstance(observed_on, str) or not observed_on.strip():
            continue
        value = _coerce_float(obs.get("value"))
        if value is None:
            continue
        kept.append(Observation(date=observed_on, value=value))

    kept.reverse()
    return kept[-limit:] if limit > 0 else []


async def fetch_series_snapshot(
    config: SeriesConfig,
    *,
    api_key: str,
    client: httpx.AsyncClient | None = None,
    limit: int = MAX_POINTS,
    updated_at: str | None = None,
) -> SeriesSnapshot:
    """Fetch one configured FRED series and normalize it into a ``SeriesSnapshot``."""

    payload = await fetch_json(
        FRED_BASE_URL,
        label=config.series_id,
        params=build_observation_params(config, api_key, limit=limit),
        client=client,
    )

    observations = payload.get("observations") if isinstance(payload, Mapping) else None
    if not isinstance(observations, list):
        logger.warning("FRED response for %s carried no observations.", config.series_id)
        observations = []

    data = normalize_observations(observations, limit=limit)
    return SeriesSnapshot.from_observations(
        config.series_id,
        data,
        updated_at=updated_at or utc_timestamp(),
        freq=config.freq_label,
    )


__all__ = [
    "FRED_BASE_URL",
    "MISSING_VALUE",
    "build_observation_params",
    "normalize_observations",
    "fetch_series_snapshot",
]
