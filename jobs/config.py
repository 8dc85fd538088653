"""Static configuration for the tracked FRED series."""

from __future__ import annotations

from dataclasses import dataclass

MAX_POINTS = 166
WEEKLY_FREQUENCY = "w"


@dataclass(frozen=True)
class SeriesConfig:
    """Configuration describing how to fetch and label one series."""

    series_id: str
    name: str
    # None requests the upstream's native frequency (no resample).
    frequency: str | None = WEEKLY_FREQUENCY

    @property
    def freq_label(self) -> str:
        return self.frequency or "native"


TRACKED_SERIES: tuple[SeriesConfig, ...] = (
    SeriesConfig(series_id="THREEFYTP10", name="10Y Term Premium"),
    SeriesConfig(series_id="DGS10", name="10Y Treasury Yield"),
    SeriesConfig(series_id="DGS30", name="30Y Treasury Yield"),
    SeriesConfig(series_id="DFII10", name="10Y Real Yield"),
    SeriesConfig(series_id="T10YIE", name="10Y Inflation Expectation"),
    SeriesConfig(series_id="T10Y2Y", name="10Y-2Y Spread"),
    # FRED rejects frequency=w for GFDEBTN.
    SeriesConfig(series_id="GFDEBTN", name="US Federal Debt", frequency=None),
    SeriesConfig(series_id="VIXCLS", name="VIX"),
)

TERM_PREMIUM_SERIES_ID = "THREEFYTP10"
TEN_YEAR_YIELD_SERIES_ID = "DGS10"
VIX_SERIES_ID = "VIXCLS"
FEDERAL_DEBT_SERIES_ID = "GFDEBTN"


__all__ = [
    "MAX_POINTS",
    "WEEKLY_FREQUENCY",
    "SeriesConfig",
    "TRACKED_SERIES",
    "TERM_PREMIUM_SERIES_ID",
    "TEN_YEAR_YIELD_SERIES_ID",
    "VIX_SERIES_ID",
    "FEDERAL_DEBT_SERIES_ID",
]
