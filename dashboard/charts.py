"""Plotly figures for the series cards."""

from __future__ import annotations

import logging
from typing import Sequence

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from dashboard.transforms import DeltaOverlay
from pipelines.model import Observation

logger = logging.getLogger(__name__)

CHART_HEIGHT = 260


def chart_slot(series_id: str) -> str:
    return f"c_{series_id}"


def align_overlay(
    primary: Sequence[Observation], overlay: Sequence[Observation]
) -> list[float | None]:
    """Overlay values on the primary dates; dates without a match become gaps."""

    by_date = {obs.date: obs.value for obs in overlay}
    return [by_date.get(obs.date) for obs in primary]


def build_series_figure(
    label: str,
    data: Sequence[Observation],
    overlay: DeltaOverlay | None = None,
) -> go.Figure:
    dates = [obs.date for obs in data]
    fig = make_subplots(specs=[[{"secondary_y": overlay is not None}]])
    fig.add_trace(
        go.Scatter(
            x=dates,
            y=[obs.value for obs in data],
            mode="lines",
            name=label,
            line=dict(width=2),
        ),
        secondary_y=False,
    )

    if overlay is not None:
        fig.add_trace(
            go.Bar(
                x=dates,
                y=align_overlay(data, overlay.data),
                name=overlay.label,
                opacity=0.5,
            ),
            secondary_y=True,
        )
        fig.update_yaxes(title_text=overlay.label, secondary_y=True)

    fig.update_layout(
        template="plotly_white",
        height=CHART_HEIGHT,
        margin=dict(l=40, r=40, t=20, b=30),
        showlegend=True,
        legend=dict(orientation="h", yanchor="bottom", y=1.0, x=0),
        xaxis=dict(nticks=8),
    )
    return fig


class ChartBoard:
    """Figures bound to visual slots; drawing into a slot replaces what was there."""

    def __init__(self) -> None:
        self._charts: dict[str, go.Figure] = {}

    def __len__(self) -> int:
        return len(self._charts)

    def get(self, slot: str) -> go.Figure | None:
        return self._charts.get(slot)

    def destroy(self, slot: str) -> None:
        if self._charts.pop(slot, None) is not None:
            logger.debug("Destroyed chart in slot %s.", slot)

    def draw(self, slot: str, figure: go.Figure) -> go.Figure:
        self.destroy(slot)
        self._charts[slot] = figure
        return figure

    def to_html(self, slot: str) -> str:
        figure = self._charts.get(slot)
        if figure is None:
            return ""
        return figure.to_html(full_html=False, include_plotlyjs=False, div_id=slot)


__all__ = ["ChartBoard", "CHART_HEIGHT", "align_overlay", "build_series_figure", "chart_slot"]
