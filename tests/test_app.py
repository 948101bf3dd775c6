"""Tests for the Textual application."""

from datetime import date, datetime

import pytest

from tui_gantt.app import GanttApp
from tui_gantt.demo_data import demo_records
from tui_gantt.models import GanttOptions, TaskWarning, ViewMode
from tui_gantt.screens.warning_screen import WarningScreen, group_warnings
from tui_gantt.widgets.gantt_chart import (
    PX_PER_CELL,
    GanttChartWidget,
    GanttPopup,
    GanttView,
    measure_label,
    px_to_cell,
)

PAUSE = 0.15
TODAY = date(2024, 6, 12)


def _app(**kwargs):
    return GanttApp(demo_records(TODAY), today=datetime(2024, 6, 12), **kwargs)


class TestDemoData:
    def test_groups_and_dependencies(self):
        records = demo_records(TODAY)
        assert [r.get("name") for r in records[:2]] == ["Phase 1: Design", "Phase 2: Build"]
        ids = [t["id"] for group in records[:2] for t in group["taskList"]]
        assert "core" in ids and "release" in ids

    def test_unscheduled_task_is_invalid(self):
        app = _app()
        assert app.chart.get_task("docs").invalid
        assert not app.chart.get_task("core").invalid


class TestHelpers:
    def test_px_to_cell(self):
        assert px_to_cell(0) == 0
        assert px_to_cell(PX_PER_CELL * 3 + 1) == 3

    def test_measure_label(self):
        assert measure_label("abc") == 3 * PX_PER_CELL


class TestWarningGrouping:
    def test_grouped_per_task_in_row_order(self):
        warnings = [
            TaskWarning(2, "Late", "Invalid end date: 'soon'"),
            TaskWarning(0, "Early", "Invalid progress: 'x', defaulting to 0"),
            TaskWarning(2, "Late", "Duplicate id 'late', regenerated"),
        ]
        assert group_warnings(warnings) == [
            (0, "Early", ["Invalid progress: 'x', defaulting to 0"]),
            (2, "Late", ["Invalid end date: 'soon'", "Duplicate id 'late', regenerated"]),
        ]

    def test_empty(self):
        assert group_warnings([]) == []


@pytest.mark.asyncio
async def test_app_starts():
    app = _app(demo_mode=True)
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(delay=PAUSE)
        assert app.query_one(GanttChartWidget) is not None
        assert app.chart.options.view_mode == ViewMode.DAY


@pytest.mark.asyncio
async def test_view_mode_bindings():
    app = _app(demo_mode=True)
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(delay=PAUSE)
        await pilot.press("W")
        await pilot.pause(delay=PAUSE)
        assert app.chart.options.view_mode == ViewMode.WEEK
        await pilot.press("M")
        await pilot.pause(delay=PAUSE)
        assert app.chart.options.view_mode == ViewMode.MONTH
        await pilot.press("D")
        await pilot.pause(delay=PAUSE)
        assert app.chart.options.view_mode == ViewMode.DAY


@pytest.mark.asyncio
async def test_unavailable_view_mode_ignored():
    options = GanttOptions(view_modes=(ViewMode.DAY, ViewMode.WEEK))
    app = _app(demo_mode=True, options=options)
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(delay=PAUSE)
        await pilot.press("Y")
        await pilot.pause(delay=PAUSE)
        assert app.chart.options.view_mode == ViewMode.DAY


@pytest.mark.asyncio
async def test_warnings_screen():
    app = GanttApp(
        [{"name": "Bad", "start": "2024-06-10", "end": "2024-06-12", "progress": "lots"}],
        today=datetime(2024, 6, 12),
    )
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(delay=PAUSE)
        await pilot.press("!")
        await pilot.pause(delay=PAUSE)
        assert isinstance(app.screen, WarningScreen)
        assert len(app.screen.warnings) == 1
        await pilot.press("escape")
        await pilot.pause(delay=PAUSE)
        assert not isinstance(app.screen, WarningScreen)


@pytest.mark.asyncio
async def test_warning_selection_selects_task():
    app = GanttApp(
        [
            {"id": "ok", "name": "Fine", "start": "2024-06-10", "end": "2024-06-12"},
            {"id": "bad", "name": "Bad", "start": "2024-06-10", "end": "2024-06-12", "progress": "lots"},
        ],
        today=datetime(2024, 6, 12),
    )
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(delay=PAUSE)
        await pilot.press("!")
        await pilot.pause(delay=PAUSE)
        await pilot.press("down")
        await pilot.press("enter")
        await pilot.pause(delay=PAUSE)
        assert not isinstance(app.screen, WarningScreen)
        assert "active" in app.chart.primitives["bad"].group.classes
        assert "active" not in app.chart.primitives["ok"].group.classes
        assert app.query_one(GanttPopup).display


@pytest.mark.asyncio
async def test_view_change_persisted(tmp_path):
    app = GanttApp(
        [{"name": "A", "start": "2024-06-10", "end": "2024-06-12"}],
        project_dir=tmp_path,
        today=datetime(2024, 6, 12),
    )
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(delay=PAUSE)
        await pilot.press("W")
        await pilot.pause(delay=PAUSE)
    from tui_gantt.config import load_options

    assert load_options(tmp_path).view_mode == ViewMode.WEEK


@pytest.mark.asyncio
async def test_popup_hidden_initially():
    app = _app(demo_mode=True)
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(delay=PAUSE)
        popup = app.query_one(GanttPopup)
        assert not popup.display
        assert app.chart.popup is popup
        assert app.query_one(GanttView).chart is app.chart


def _single_task_app():
    # Bar spans chart px 38..152, i.e. view cells 6..25 on the first line
    return GanttApp(
        [{"id": "t", "name": "Task", "start": "2024-06-10", "end": "2024-06-12"}],
        today=datetime(2024, 6, 12),
    )


@pytest.mark.asyncio
async def test_click_on_bar_opens_popup():
    app = _single_task_app()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(delay=PAUSE)
        await pilot.click(GanttView, offset=(12, 0))
        await pilot.pause(delay=PAUSE)
        assert app.query_one(GanttPopup).display
        assert app.last_event == "Task"


@pytest.mark.asyncio
async def test_drag_back_to_origin_is_not_a_click():
    app = _single_task_app()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(delay=PAUSE)
        await pilot.mouse_down(GanttView, offset=(12, 0))
        await pilot.hover(GanttView, offset=(20, 0))
        await pilot.pause(delay=PAUSE)
        assert app.chart.get_bar("t").x == 76
        await pilot.hover(GanttView, offset=(12, 0))
        await pilot.mouse_up(GanttView, offset=(12, 0))
        await pilot.pause(delay=PAUSE)
        assert app.chart.get_bar("t").x == 38
        assert not app.query_one(GanttPopup).display
        assert app.last_event == ""
