"""Tests for the grid layout."""

from datetime import datetime

import pytest

from tui_gantt.grid import build_grid, date_label, is_thick, today_highlight
from tui_gantt.layout import CoordinateMapper, LayoutContext
from tui_gantt.models import GanttOptions, TaskGroup, ViewMode
from tui_gantt.scale import compute_range, resolve
from tui_gantt.tasks import normalize_tasks


def _context(mode, records, today):
    tasks, _, _ = normalize_tasks(records)
    scale = resolve(mode)
    options = GanttOptions(view_mode=mode, step=scale.step, column_width=scale.column_width)
    timeline = compute_range(tasks, mode)
    return LayoutContext.create(options, timeline, today=today), list(timeline.ticks)


DAY_RECORDS = [
    {"name": "A", "start": "2024-01-01", "end": "2024-01-03"},
    {"name": "B", "start": "2024-01-02", "end": "2024-01-04"},
]


class TestBuildGrid:
    def test_dimensions(self):
        ctx, ticks = _context(ViewMode.DAY, DAY_RECORDS, datetime(2024, 1, 5))
        grid = build_grid(ctx, ticks, 2)
        assert len(ticks) == 11
        assert grid.width == 11 * 38
        assert grid.height == 65 + 10 + 2 * 70
        assert grid.header.height == 65
        assert [r.rect.y for r in grid.rows] == [65, 135]
        assert [r.line_class for r in grid.rows] == ["row-line", "row-line"]

    def test_ticks(self):
        ctx, ticks = _context(ViewMode.DAY, DAY_RECORDS, datetime(2024, 1, 5))
        grid = build_grid(ctx, ticks, 2)
        assert [t.x for t in grid.ticks[:3]] == [0, 38, 76]
        assert grid.ticks[0].y == 65 + 5
        assert grid.ticks[0].height == 2 * 70
        # Jan 1 is the only month start in range
        assert [t.date for t in grid.ticks if t.thick] == [datetime(2024, 1, 1)]
        assert grid.ticks[1].css_class == "tick thick"
        assert grid.divisors == [38]

    def test_group_bands(self):
        ctx, ticks = _context(ViewMode.DAY, DAY_RECORDS, datetime(2024, 1, 5))
        grid = build_grid(ctx, ticks, 2, [TaskGroup("Phase", 0, 2)])
        band = grid.group_bands[0]
        assert band.rect.y == 65
        assert band.rect.height == 140
        assert band.rect.width == grid.width
        assert grid.rows[1].line_class == "last-row-line"

    def test_upper_labels_beyond_grid_are_dropped(self):
        ctx, ticks = _context(ViewMode.DAY, DAY_RECORDS, datetime(2024, 1, 5))
        grid = build_grid(ctx, ticks, 2)
        assert all(label.upper_x <= grid.width for label in grid.labels if label.upper_text)


class TestThickTicks:
    def test_week_every_fifth(self):
        ctx, _ = _context(ViewMode.WEEK, DAY_RECORDS, datetime(2024, 1, 5))
        d = datetime(2024, 1, 1)
        assert [is_thick(ctx, d, i) for i in range(6)] == [True, False, False, False, False, True]

    def test_month_even_months(self):
        ctx, _ = _context(ViewMode.MONTH, DAY_RECORDS, datetime(2024, 1, 5))
        assert is_thick(ctx, datetime(2024, 2, 1), 1)
        assert not is_thick(ctx, datetime(2024, 3, 1), 2)

    def test_year_never_thick(self):
        ctx, _ = _context(ViewMode.YEAR, DAY_RECORDS, datetime(2024, 1, 5))
        assert not is_thick(ctx, datetime(2024, 1, 1), 0)


class TestTodayHighlight:
    def test_day(self):
        ctx, ticks = _context(ViewMode.DAY, DAY_RECORDS, datetime(2024, 1, 5))
        h = today_highlight(ctx, ticks)
        assert h.x == 5 * 38 + 19

    def test_month_proportional_within_month(self):
        ctx, ticks = _context(ViewMode.MONTH, DAY_RECORDS, datetime(2024, 3, 15))
        h = today_highlight(ctx, ticks)
        assert h.x == pytest.approx(2 * 90 + 90 * 15 / 31)
        assert h.label_x == 2 * 90 + 45

    def test_week_on_tick_date(self):
        ctx, ticks = _context(ViewMode.WEEK, DAY_RECORDS, datetime(2024, 1, 10))
        h = today_highlight(ctx, ticks)
        # Ticks start Wed 2023-12-27; Jan 10 is the third tick itself
        assert h.x == pytest.approx(2 * 90)

    def test_week_offset_within_tick_column(self):
        # Mon Jan 8 lies inside the Jan 3 column, before the Jan 10 tick
        ctx, ticks = _context(ViewMode.WEEK, DAY_RECORDS, datetime(2024, 1, 8))
        h = today_highlight(ctx, ticks)
        assert h.x == pytest.approx(90 + 90 * 5 / 7)
        assert h.x < 2 * 90

    def test_week_matches_date_to_x(self):
        today = datetime(2024, 1, 13, 12)
        ctx, ticks = _context(ViewMode.WEEK, DAY_RECORDS, today)
        h = today_highlight(ctx, ticks)
        assert h.x == pytest.approx(CoordinateMapper(ctx).date_to_x(today))

    def test_outside_range(self):
        ctx, ticks = _context(ViewMode.DAY, DAY_RECORDS, datetime(2030, 1, 1))
        assert today_highlight(ctx, ticks) is None

    def test_other_modes_have_none(self):
        ctx, ticks = _context(ViewMode.HALF_DAY, DAY_RECORDS, datetime(2024, 1, 2))
        assert today_highlight(ctx, ticks) is None


class TestDateLabel:
    def test_day_mode_month_change(self):
        ctx, _ = _context(ViewMode.DAY, DAY_RECORDS, datetime(2024, 1, 5))
        label = date_label(ctx, datetime(2024, 1, 1), datetime(2023, 12, 31), 1)
        assert label.lower_text == "1"
        assert label.upper_text == "January"
        assert label.lower_x == 38 + 19
        assert label.lower_y == 65 - 15
        assert label.upper_y == 65 - 35

    def test_day_mode_same_month(self):
        ctx, _ = _context(ViewMode.DAY, DAY_RECORDS, datetime(2024, 1, 5))
        label = date_label(ctx, datetime(2024, 1, 2), datetime(2024, 1, 1), 2)
        assert label.upper_text == ""

    def test_quarter_day_hours(self):
        ctx, _ = _context(ViewMode.QUARTER_DAY, DAY_RECORDS, datetime(2024, 1, 5))
        label = date_label(ctx, datetime(2024, 1, 2, 6), datetime(2024, 1, 2), 5)
        assert label.lower_text == "06"
        assert label.upper_text == ""
        label = date_label(ctx, datetime(2024, 1, 2), datetime(2024, 1, 1, 18), 4)
        assert label.upper_text == "2 Jan"

    def test_week_number_and_month(self):
        ctx, _ = _context(ViewMode.WEEK, DAY_RECORDS, datetime(2024, 1, 5))
        label = date_label(ctx, datetime(2024, 1, 3), datetime(2023, 12, 27), 1)
        assert label.lower_text == "1"
        assert label.upper_text == "January 2024"

    def test_month_and_year_modes(self):
        ctx, _ = _context(ViewMode.MONTH, DAY_RECORDS, datetime(2024, 1, 5))
        label = date_label(ctx, datetime(2025, 1, 1), datetime(2024, 12, 1), 12)
        assert label.lower_text == "January"
        assert label.upper_text == "2025"
        ctx, _ = _context(ViewMode.YEAR, DAY_RECORDS, datetime(2024, 1, 5))
        label = date_label(ctx, datetime(2025, 1, 1), datetime(2024, 1, 1), 1)
        assert label.lower_text == "2025"

    def test_localized(self):
        ctx, _ = _context(ViewMode.MONTH, DAY_RECORDS, datetime(2024, 1, 5))
        label = date_label(ctx, datetime(2024, 3, 1), datetime(2024, 2, 1), 2, language="fr")
        assert label.lower_text == "Mars"
