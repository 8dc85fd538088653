"""Render-time configuration for the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from jobs.config import (
    FEDERAL_DEBT_SERIES_ID,
    TEN_YEAR_YIELD_SERIES_ID,
    TERM_PREMIUM_SERIES_ID,
    TRACKED_SERIES,
    VIX_SERIES_ID,
)

DEBT_DELTA_LABEL = "WoW change (delta)"


@dataclass(frozen=True)
class DashboardConfig:
    """Everything a render pass needs besides the published data."""

    series: tuple[str, ...]
    display_names: Mapping[str, str] = field(default_factory=dict)
    debt_series_id: str = FEDERAL_DEBT_SERIES_ID
    debt_window_years: int = 3
    debt_delta_label: str = DEBT_DELTA_LABEL
    table_rows: int = 40
    term_premium_series_id: str = TERM_PREMIUM_SERIES_ID
    ten_year_yield_series_id: str = TEN_YEAR_YIELD_SERIES_ID
    vix_series_id: str = VIX_SERIES_ID

    def display_name(self, series_id: str) -> str:
        return self.display_names.get(series_id) or series_id


def default_dashboard_config() -> DashboardConfig:
    return DashboardConfig(
        series=tuple(s.series_id for s in TRACKED_SERIES),
        display_names={s.series_id: s.name for s in TRACKED_SERIES},
    )


__all__ = ["DashboardConfig", "DEBT_DELTA_LABEL", "default_dashboard_config"]
