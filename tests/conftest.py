from datetime import date, timedelta

import httpx
import pytest

from pipelines.common import utc_timestamp
from pipelines.model import IndexDocument, Observation, SeriesSnapshot
from storage.snapshots import index_path, snapshot_path, write_if_changed


def _weekly_dates(start: date, count: int) -> list[str]:
    return [(start + timedelta(weeks=i)).isoformat() for i in range(count)]


@pytest.fixture()
def make_observations():
    def _make(values, start=date(2024, 1, 5)):
        dates = _weekly_dates(start, len(values))
        return [Observation(date=d, value=v) for d, v in zip(dates, values)]

    return _make


@pytest.fixture()
def fred_payload():
    """Newest-first FRED observation rows, as the API returns them with sort_order=desc."""

    def _payload(values, start=date(2024, 1, 5)):
        dates = _weekly_dates(start, len(values))
        rows = [{"date": d, "value": str(v)} for d, v in zip(dates, values)]
        return {"observations": list(reversed(rows))}

    return _payload


@pytest.fixture()
def fake_fred():
    """Build an ``httpx.MockTransport`` answering per ``series_id``.

    ``responses`` maps a series id to either a JSON payload (200) or a
    ``(status, text)`` tuple. Every request's query parameters are recorded.
    """

    def _factory(responses):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            params = dict(request.url.params)
            calls.append(params)
            answer = responses[params["series_id"]]
            if isinstance(answer, tuple):
                status, text = answer
                return httpx.Response(status, text=text)
            return httpx.Response(200, json=answer)

        return httpx.MockTransport(handler), calls

    return _factory


@pytest.fixture()
def publish(tmp_path):
    """Write snapshot files plus an index into ``tmp_path`` and return the directory."""

    def _publish(series, index_ids=None):
        stamp = utc_timestamp()
        for series_id, data in series.items():
            snapshot = SeriesSnapshot.from_observations(series_id, data, updated_at=stamp, freq="w")
            write_if_changed(snapshot_path(tmp_path, series_id), snapshot)
        ids = tuple(index_ids) if index_ids is not None else tuple(series)
        write_if_changed(index_path(tmp_path), IndexDocument(updated_at=stamp, series=ids))
        return tmp_path

    return _publish
