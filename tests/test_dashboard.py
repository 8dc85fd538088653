import asyncio

import httpx
import pytest

from dashboard.advisory import SignalLevel
from dashboard.charts import ChartBoard, align_overlay, build_series_figure
from dashboard.config import DashboardConfig, default_dashboard_config
from dashboard.loader import DashboardLoadError, DirectoryDataSource, HttpDataSource, load_index
from dashboard.render import build_dashboard, render_error_page, render_page_html
from dashboard.transforms import DeltaOverlay, delta_series
from pipelines.model import Observation


@pytest.fixture()
def published(publish, make_observations):
    config = default_dashboard_config()
    series = {series_id: make_observations([1.0, 2.0, 3.0]) for series_id in config.series}
    series["THREEFYTP10"] = make_observations([0.1, -0.2])
    series["DGS10"] = make_observations([3.4, 3.0])
    series["VIXCLS"] = make_observations([20.0, 15.0])
    series["GFDEBTN"] = make_observations([float(v) for v in range(100, 360)])
    return publish(series)


def test_build_dashboard_renders_every_cataloged_series(published):
    config = default_dashboard_config()

    view = asyncio.run(build_dashboard(config, DirectoryDataSource(published)))

    assert [card.series_id for card in view.cards] == list(config.series)
    assert view.signal.level is SignalLevel.BULLISH
    assert view.inputs.vix == 15.0
    assert len(view.charts) == len(config.series)

    dgs10 = next(card for card in view.cards if card.series_id == "DGS10")
    assert dgs10.name == "10Y Treasury Yield"
    assert dgs10.wow.delta == pytest.approx(-0.4)
    assert dgs10.overlay is None


def test_debt_card_is_windowed_with_delta_overlay(published):
    view = asyncio.run(build_dashboard(default_dashboard_config(), DirectoryDataSource(published)))

    debt = next(card for card in view.cards if card.series_id == "GFDEBTN")
    assert debt.points == len(debt.data) < 260
    assert debt.overlay is not None
    assert debt.overlay.label == "WoW change (delta)"
    assert len(debt.overlay.data) == debt.points - 1
    assert len(debt.rows) == 40
    assert debt.rows[0] == debt.data[-1]


def test_card_without_display_name_or_data_falls_back(published):
    config = DashboardConfig(series=("DGS10", "DGS2"))

    view = asyncio.run(build_dashboard(config, DirectoryDataSource(published)))

    dgs10, dgs2 = view.cards
    assert dgs10.name == "DGS10"
    assert dgs2.points == 0
    assert dgs2.wow.last is None


def test_missing_snapshot_aborts_the_render_pass(publish, make_observations):
    data_dir = publish({"DGS10": make_observations([4.0, 4.1])}, index_ids=["DGS10", "VIXCLS"])

    with pytest.raises(DashboardLoadError) as excinfo:
        asyncio.run(build_dashboard(default_dashboard_config(), DirectoryDataSource(data_dir)))

    assert "VIXCLS.json" in excinfo.value.path


def test_missing_index_aborts_the_render_pass(tmp_path):
    with pytest.raises(DashboardLoadError):
        asyncio.run(load_index(DirectoryDataSource(tmp_path)))


def test_undecodable_index_aborts_the_render_pass(tmp_path):
    (tmp_path / "_index.json").write_bytes(b'{"updatedAt": "\xff", "series": []}')

    with pytest.raises(DashboardLoadError) as excinfo:
        asyncio.run(load_index(DirectoryDataSource(tmp_path)))

    assert excinfo.value.reason == "invalid encoding"
    assert excinfo.value.path.endswith("_index.json")


def test_http_source_defeats_caches():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        if request.url.path == "/data/_index.json":
            return httpx.Response(200, json={"updatedAt": "2025-01-03T00:00:00.000Z", "series": []})
        return httpx.Response(404)

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            source = HttpDataSource("https://example.test/data/", client=client)
            index = await load_index(source)
            with pytest.raises(DashboardLoadError) as excinfo:
                await source.load_json("DGS10.json")
            return index, excinfo.value

    index, error = asyncio.run(_go())

    assert index.series == ()
    assert int(seen[0].params["t"]) > 0
    assert error.reason == "404"
    assert error.path == "https://example.test/data/DGS10.json"


def test_overlay_is_aligned_by_date_with_gaps():
    levels = [
        Observation(date="2025-01-03", value=10),
        Observation(date="2025-01-10", value=12),
        Observation(date="2025-01-17", value=9),
    ]
    overlay = DeltaOverlay(label="delta", data=delta_series(levels))

    assert align_overlay(levels, overlay.data) == [None, 2.0, -3.0]

    fig = build_series_figure("US Federal Debt", levels, overlay)
    line, bars = fig.data
    assert line.type == "scatter"
    assert bars.type == "bar"
    assert list(bars.y) == [None, 2.0, -3.0]
    assert bars.yaxis == "y2"


def test_drawing_into_a_slot_replaces_the_previous_chart(make_observations):
    board = ChartBoard()
    first = build_series_figure("VIX", make_observations([1.0, 2.0]))
    second = build_series_figure("VIX", make_observations([3.0, 4.0]))

    board.draw("c_VIXCLS", first)
    board.draw("c_VIXCLS", second)

    assert len(board) == 1
    assert board.get("c_VIXCLS") is second


def test_rerender_into_same_board_keeps_one_chart_per_slot(published):
    board = ChartBoard()
    config = default_dashboard_config()

    asyncio.run(build_dashboard(config, DirectoryDataSource(published), board=board))
    asyncio.run(build_dashboard(config, DirectoryDataSource(published), board=board))

    assert len(board) == len(config.series)


def test_page_html_contains_cards_and_signal(published):
    view = asyncio.run(build_dashboard(default_dashboard_config(), DirectoryDataSource(published)))

    page = render_page_html(view)

    assert 'id="reloadBtn"' in page
    assert "status green" in page
    assert "<b>GFDEBTN</b> - US Federal Debt" in page
    assert 'id="c_VIXCLS"' in page


def test_error_page_raises_an_alert():
    page = render_error_page(DashboardLoadError("./data/_index.json", "404"))

    assert 'alert("Failed to load ./data/_index.json: 404")' in page
