"""Render-time series transforms: week-over-week, deltas and trailing windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from pipelines.model import Observation, SeriesSnapshot


@dataclass(frozen=True)
class WeekOverWeek:
    last: float | None
    prev: float | None
    delta: float | None
    pct: float | None


@dataclass(frozen=True)
class DeltaOverlay:
    """Auxiliary series drawn on a card's secondary axis."""

    label: str
    data: tuple[Observation, ...]


def calc_wow(data: Sequence[Observation]) -> WeekOverWeek:
    last = data[-1].value if len(data) >= 1 else None
    prev = data[-2].value if len(data) >= 2 else None
    if last is None or prev is None:
        return WeekOverWeek(last=last, prev=prev, delta=None, pct=None)
    delta = last - prev
    # Undefined against a zero base.
    pct = None if prev == 0 else delta / prev * 100
    return WeekOverWeek(last=last, prev=prev, delta=delta, pct=pct)


def delta_series(data: Sequence[Observation]) -> tuple[Observation, ...]:
    """Differences between consecutive levels, dated at the later point."""

    return tuple(
        Observation(date=current.date, value=current.value - previous.value)
        for previous, current in zip(data, data[1:])
    )


def _parse_date(raw: str) -> date | None:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def _years_before(anchor: date, years: int) -> date:
    try:
        return anchor.replace(year=anchor.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year.
        return anchor.replace(year=anchor.year - years, day=28)


def trailing_window(
    data: Sequence[Observation], years: int
) -> tuple[Observation, ...]:
    """Keep the points within ``years`` of the series' own last date.

    The anchor is the last observation, never the wall clock. An empty series or
    an unparseable last date is returned unchanged.
    """

    if not data:
        return tuple(data)
    anchor = _parse_date(data[-1].date)
    if anchor is None:
        return tuple(data)
    cutoff = _years_before(anchor, years)
    kept = []
    for obs in data:
        parsed = _parse_date(obs.date)
        if parsed is not None and parsed >= cutoff:
            kept.append(obs)
    return tuple(kept)


def apply_debt_window(
    snapshot: SeriesSnapshot, *, years: int, label: str
) -> tuple[SeriesSnapshot, DeltaOverlay]:
    """Truncate the level series to its trailing window and derive its delta overlay."""

    windowed = trailing_window(snapshot.data, years)
    truncated = snapshot.model_copy(update={"data": windowed, "points": len(windowed)})
    return truncated, DeltaOverlay(label=label, data=delta_series(windowed))


__all__ = [
    "WeekOverWeek",
    "DeltaOverlay",
    "calc_wow",
    "delta_series",
    "trailing_window",
    "apply_debt_window",
]
