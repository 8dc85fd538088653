import json

import pytest

from pipelines.model import IndexDocument, Observation, SeriesSnapshot
from storage.snapshots import serialize_document


def test_series_snapshot_serialization_roundtrip():
    payload = {
        "seriesId": "DGS10",
        "freq": "w",
        "updatedAt": "2025-01-03T12:00:00.000Z",
        "points": 2,
        "data": [
            {"date": "2024-12-27", "value": 4.58},
            {"date": "2025-01-03", "value": "4.6"},
        ],
    }

    snapshot = SeriesSnapshot.model_validate(payload)

    assert snapshot.series_id == "DGS10"
    assert snapshot.data[-1].value == pytest.approx(4.6)

    document = snapshot.to_document()
    assert list(document) == ["seriesId", "freq", "updatedAt", "points", "data"]
    assert document["data"][0] == {"date": "2024-12-27", "value": 4.58}


def test_snapshot_without_freq_omits_the_field():
    snapshot = SeriesSnapshot.from_observations(
        "VIXCLS", [Observation(date="2025-01-03", value=17.1)], updated_at="t"
    )

    assert "freq" not in snapshot.to_document()


def test_serialized_document_is_indented_with_trailing_newline():
    index = IndexDocument(updated_at="2025-01-03T12:00:00.000Z", series=("DGS10", "VIXCLS"))

    text = serialize_document(index.to_document())

    assert text.endswith("}\n")
    assert text.startswith('{\n  "updatedAt"')
    assert json.loads(text)["series"] == ["DGS10", "VIXCLS"]


def test_snapshot_points_must_match_data_length():
    with pytest.raises(ValueError):
        SeriesSnapshot(
            series_id="DGS10",
            updated_at="t",
            points=3,
            data=(Observation(date="2025-01-03", value=4.6),),
        )


@pytest.mark.parametrize(
    "dates",
    [
        ("2025-01-03", "2024-12-27"),
        ("2025-01-03", "2025-01-03"),
    ],
)
def test_snapshot_rejects_unsorted_or_duplicate_dates(dates):
    data = tuple(Observation(date=d, value=1.0) for d in dates)

    with pytest.raises(ValueError):
        SeriesSnapshot(series_id="DGS10", updated_at="t", points=len(data), data=data)


@pytest.mark.parametrize("value", ["not-a-number", float("nan"), float("inf")])
def test_observation_requires_finite_numeric_value(value):
    with pytest.raises(ValueError):
        Observation(date="2025-01-03", value=value)
