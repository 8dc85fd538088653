"""One dashboard render pass and its HTML rendition.

``build_dashboard`` runs the whole sequence: load the index, load each snapshot
in turn, window the federal debt series and attach its delta overlay, derive
the advisory signal, then build one card and one chart per cataloged series.
Any ``DashboardLoadError`` aborts the pass; callers surface it with
``render_error_page``.
"""

from __future__ import annotations

import html
import json
import logging
import math
from dataclasses import dataclass
from typing import Mapping

from dashboard.advisory import AdvisorySignal, tlt_decision
from dashboard.charts import ChartBoard, build_series_figure, chart_slot
from dashboard.config import DashboardConfig
from dashboard.loader import DataSource, load_all, load_index
from dashboard.transforms import DeltaOverlay, WeekOverWeek, apply_debt_window, calc_wow
from pipelines.model import Observation, SeriesSnapshot

logger = logging.getLogger(__name__)

PLOTLY_CDN = "https://cdn.plot.ly/plotly-2.35.2.min.js"


@dataclass(frozen=True)
class SeriesCard:
    series_id: str
    name: str
    wow: WeekOverWeek
    points: int
    rows: tuple[Observation, ...]
    data: tuple[Observation, ...]
    overlay: DeltaOverlay | None = None

    @property
    def slot(self) -> str:
        return chart_slot(self.series_id)


@dataclass(frozen=True)
class SignalInputs:
    term_premium: float | None
    ten_year_yield: float | None
    vix: float | None


@dataclass(frozen=True)
class DashboardView:
    updated_at: str
    signal: AdvisorySignal
    inputs: SignalInputs
    cards: tuple[SeriesCard, ...]
    charts: ChartBoard


def latest_value(store: Mapping[str, SeriesSnapshot], series_id: str) -> float | None:
    """Last observed value, or ``None`` when the series is absent or empty."""

    snapshot = store.get(series_id)
    if snapshot is None or not snapshot.data:
        return None
    return snapshot.data[-1].value


def build_card(
    config: DashboardConfig,
    series_id: str,
    snapshot: SeriesSnapshot | None,
    overlay: DeltaOverlay | None = None,
) -> SeriesCard:
    data = snapshot.data if snapshot is not None else ()
    newest_first = tuple(reversed(data))[: config.table_rows]
    return SeriesCard(
        series_id=series_id,
        name=config.display_name(series_id),
        wow=calc_wow(data),
        points=len(data),
        rows=newest_first,
        data=tuple(data),
        overlay=overlay,
    )


async def build_dashboard(
    config: DashboardConfig,
    source: DataSource,
    *,
    board: ChartBoard | None = None,
) -> DashboardView:
    index = await load_index(source)
    store = await load_all(source, index)

    overlays: dict[str, DeltaOverlay] = {}
    debt = store.get(config.debt_series_id)
    if debt is not None:
        store[config.debt_series_id], overlays[config.debt_series_id] = apply_debt_window(
            debt, years=config.debt_window_years, label=config.debt_delta_label
        )

    inputs = SignalInputs(
        term_premium=latest_value(store, config.term_premium_series_id),
        ten_year_yield=latest_value(store, config.ten_year_yield_series_id),
        vix=latest_value(store, config.vix_series_id),
    )
    signal = tlt_decision(inputs.term_premium, inputs.ten_year_yield, inputs.vix)

    cards = tuple(
        build_card(config, series_id, store.get(series_id), overlays.get(series_id))
        for series_id in config.series
    )

    charts = board if board is not None else ChartBoard()
    for card in cards:
        charts.draw(card.slot, build_series_figure(card.name, card.data, card.overlay))

    logger.info("Rendered %s cards (signal=%s).", len(cards), signal.level.name.lower())
    return DashboardView(
        updated_at=index.updated_at or "-",
        signal=signal,
        inputs=inputs,
        cards=cards,
        charts=charts,
    )


def fmt(value: float | None) -> str:
    if value is None or math.isnan(value):
        return "-"
    if abs(value) >= 100000:
        return f"{value:,.0f}"
    text = f"{value:,.4f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def fmt_pct(pct: float | None) -> str:
    return "-" if pct is None else f"{pct:.2f}%"


def render_card_html(card: SeriesCard, charts: ChartBoard) -> str:
    esc = html.escape
    rows = "".join(
        f"<tr><td>{esc(obs.date)}</td><td>{fmt(obs.value)}</td></tr>" for obs in card.rows
    )
    wow = card.wow
    return f"""
    <div class="card">
      <div class="head">
        <div>
          <div class="title"><b>{esc(card.series_id)}</b> - {esc(card.name)}</div>
          <div class="kpis">
            <div class="kpi"><b>This week</b>{fmt(wow.last)}</div>
            <div class="kpi"><b>Last week</b>{fmt(wow.prev)}</div>
            <div class="kpi"><b>WoW</b>{fmt(wow.delta)} ({fmt_pct(wow.pct)})</div>
          </div>
        </div>
        <div class="muted">points: {card.points}</div>
      </div>
      <div class="chartWrap">{charts.to_html(card.slot)}</div>
      <details>
        <summary>Show table (last {len(card.rows)} weeks)</summary>
        <table>
          <thead><tr><th>Date</th><th>Value</th></tr></thead>
          <tbody>{rows}</tbody>
        </table>
      </details>
    </div>"""


def render_signal_html(view: DashboardView) -> str:
    esc = html.escape
    signal = view.signal
    inputs = view.inputs
    metrics = (
        f"Term premium={fmt(inputs.term_premium)} | 10Y={fmt(inputs.ten_year_yield)} "
        f"| VIX={fmt(inputs.vix)}"
    )
    reasons = f"Triggers: {'; '.join(signal.reasons)}" if signal.reasons else ""
    return f"""
    <div class="signal">
      <div id="tltLight" class="status {esc(signal.color)}"></div>
      <div id="tltAction">{esc(signal.action)}</div>
      <div id="tltMetrics" class="muted">{esc(metrics)}</div>
      <div id="tltReason">{esc(reasons)}</div>
    </div>"""


def _page(body: str, *, title: str) -> str:
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>{html.escape(title)}</title>
  <script src="{PLOTLY_CDN}"></script>
</head>
<body>
{body}
</body>
</html>
"""


def render_page_html(view: DashboardView, *, title: str = "FRED Weekly Dashboard") -> str:
    cards = "".join(render_card_html(card, view.charts) for card in view.cards)
    body = f"""  <header>
    <button id="reloadBtn" onclick="window.location.reload()">Reload</button>
    <span>Updated: <span id="updatedAt">{html.escape(view.updated_at)}</span></span>
  </header>
{render_signal_html(view)}
  <div id="grid">{cards}
  </div>"""
    return _page(body, title=title)


def render_error_page(error: BaseException, *, title: str = "FRED Weekly Dashboard") -> str:
    message = html.escape(str(error))
    body = f"""  <header>
    <button id="reloadBtn" onclick="window.location.reload()">Reload</button>
  </header>
  <script>alert({_js_string(str(error))});</script>
  <pre class="error">{message}</pre>"""
    return _page(body, title=title)


def _js_string(text: str) -> str:
    # Keep "</script>" from closing the tag early.
    return json.dumps(text).replace("</", "<\\/")


__all__ = [
    "SeriesCard",
    "SignalInputs",
    "DashboardView",
    "latest_value",
    "build_card",
    "build_dashboard",
    "fmt",
    "fmt_pct",
    "render_card_html",
    "render_signal_html",
    "render_page_html",
    "render_error_page",
]
