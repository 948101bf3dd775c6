"""Layout context and date <-> pixel coordinate mapping."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tui_gantt import date_utils
from tui_gantt.models import GanttOptions, ViewMode
from tui_gantt.scale import TimelineRange

# Month columns are laid out as 30 days regardless of the real month length.
MONTH_DAYS_PER_COLUMN = 30


@dataclass(frozen=True)
class LayoutContext:
    """Everything a pure layout computation needs, rebuilt on task-set or view-mode change."""

    view_mode: ViewMode
    step: float
    column_width: float
    gantt_start: datetime
    gantt_end: datetime
    header_height: float
    bar_height: float
    padding: float
    today: datetime

    @classmethod
    def create(cls, options: GanttOptions, timeline: TimelineRange, today: datetime | None = None) -> LayoutContext:
        return cls(
            view_mode=options.view_mode,
            step=options.step,
            column_width=options.column_width,
            gantt_start=timeline.gantt_start,
            gantt_end=timeline.gantt_end,
            header_height=options.header_height,
            bar_height=options.bar_height,
            padding=options.padding,
            today=today or date_utils.today(),
        )

    @property
    def row_height(self) -> float:
        return self.bar_height + self.padding * 2


class CoordinateMapper:
    """Bidirectional date <-> x conversion and row -> y placement."""

    def __init__(self, context: LayoutContext) -> None:
        self.context = context

    def date_to_x(self, d: datetime) -> float:
        ctx = self.context
        if ctx.view_mode == ViewMode.MONTH:
            days = date_utils.diff(d, ctx.gantt_start, date_utils.DAY)
            return days * ctx.column_width / MONTH_DAYS_PER_COLUMN
        hours = date_utils.diff(d, ctx.gantt_start, date_utils.HOUR)
        return hours / ctx.step * ctx.column_width

    def x_to_date(self, x: float) -> datetime:
        ctx = self.context
        return date_utils.add(ctx.gantt_start, x / ctx.column_width * ctx.step, date_utils.HOUR)

    def duration_to_width(self, start: datetime, end: datetime) -> float:
        ctx = self.context
        return ctx.column_width * (date_utils.diff(end, start, date_utils.HOUR) / ctx.step)

    def row_y(self, index: int) -> float:
        ctx = self.context
        return ctx.header_height + ctx.padding + index * ctx.row_height

    def row_at(self, y: float) -> int | None:
        """Row index whose band contains y, or None above the first row."""
        ctx = self.context
        offset = y - ctx.header_height
        if offset < 0:
            return None
        return int(offset // ctx.row_height)

    def initial_scroll_x(self, oldest_start: datetime) -> float:
        """Scroll offset that puts the earliest task one column from the left edge."""
        ctx = self.context
        hours = date_utils.diff(oldest_start, ctx.gantt_start, date_utils.HOUR)
        return max(0.0, hours / ctx.step * ctx.column_width - ctx.column_width)
