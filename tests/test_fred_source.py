import asyncio

import httpx
import pytest

from jobs.config import MAX_POINTS, TRACKED_SERIES
from pipelines.common import UpstreamError
from pipelines.sources.fred import (
    build_observation_params,
    fetch_series_snapshot,
    normalize_observations,
)

CATALOG = {series.series_id: series for series in TRACKED_SERIES}


def test_weekly_series_requests_weekly_frequency():
    params = build_observation_params(CATALOG["DGS10"], "secret")

    assert params == {
        "series_id": "DGS10",
        "api_key": "secret",
        "file_type": "json",
        "frequency": "w",
        "sort_order": "desc",
        "limit": MAX_POINTS,
    }


def test_native_frequency_series_omits_frequency():
    params = build_observation_params(CATALOG["GFDEBTN"], "secret")

    assert "frequency" not in params
    assert params["sort_order"] == "desc"


def test_missing_marker_is_dropped_and_numbers_are_coerced():
    rows = [
        {"date": "2025-01-03", "value": "4.60"},
        {"date": "2024-12-27", "value": "."},
        {"date": "2024-12-20", "value": "4.52"},
    ]

    data = normalize_observations(rows)

    assert [obs.date for obs in data] == ["2024-12-20", "2025-01-03"]
    assert data[-1].value == pytest.approx(4.6)
    assert all(isinstance(obs.value, float) for obs in data)


def test_undated_rows_are_dropped():
    rows = [
        {"date": "2025-01-03", "value": "4.6"},
        {"value": "4.5"},
        {"date": "", "value": "4.4"},
        {"date": None, "value": "4.3"},
    ]

    data = normalize_observations(rows)

    assert [obs.date for obs in data] == ["2025-01-03"]
    assert all(obs.date for obs in data)


def test_truncation_keeps_the_most_recent_points(fred_payload):
    payload = fred_payload(list(range(200)))
    newest = payload["observations"][0]

    data = normalize_observations(payload["observations"], limit=MAX_POINTS)

    assert len(data) == MAX_POINTS
    assert data[-1].date == newest["date"]
    assert data[-1].value == pytest.approx(float(newest["value"]))
    assert [obs.date for obs in data] == sorted(obs.date for obs in data)


def test_fetch_series_snapshot_normalizes_response(fake_fred, fred_payload):
    transport, calls = fake_fred({"GFDEBTN": fred_payload([100.0, 110.0, 125.0])})

    async def _run():
        async with httpx.AsyncClient(transport=transport) as client:
            return await fetch_series_snapshot(
                CATALOG["GFDEBTN"], api_key="secret", client=client
            )

    snapshot = asyncio.run(_run())

    assert snapshot.series_id == "GFDEBTN"
    assert snapshot.freq == "native"
    assert snapshot.points == 3
    assert [obs.value for obs in snapshot.data] == [100.0, 110.0, 125.0]
    assert calls[0]["limit"] == str(MAX_POINTS)
    assert calls[0]["sort_order"] == "desc"


def test_non_success_response_raises_with_details(fake_fred):
    transport, _ = fake_fred({"DGS10": (400, "Bad Request. Variable frequency is not valid")})

    async def _run():
        async with httpx.AsyncClient(transport=transport) as client:
            await fetch_series_snapshot(CATALOG["DGS10"], api_key="secret", client=client)

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(_run())

    error = excinfo.value
    assert error.series_id == "DGS10"
    assert error.status_code == 400
    assert "frequency is not valid" in error.body
    assert "DGS10 400" in str(error)
