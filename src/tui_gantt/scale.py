"""View-mode scale table and the visible timeline range."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator

from tui_gantt import date_utils
from tui_gantt.models import Task, ViewMode


@dataclass(frozen=True)
class ViewScale:
    """Hours per column and column width in pixels."""

    step: float
    column_width: float


# Downstream rendering depends on these exact constants.
SCALE_TABLE: dict[ViewMode, ViewScale] = {
    ViewMode.QUARTER_DAY: ViewScale(6, 38),
    ViewMode.HALF_DAY: ViewScale(12, 38),
    ViewMode.DAY: ViewScale(24, 38),
    ViewMode.WEEK: ViewScale(24 * 7, 90),
    ViewMode.MONTH: ViewScale(24 * 30, 90),
    ViewMode.YEAR: ViewScale(24 * 365, 120),
}


def resolve(mode: ViewMode | str) -> ViewScale:
    """Look up the scale for a view mode. Raises ValueError for unknown modes."""
    parsed = ViewMode.parse(mode)
    if parsed is None:
        raise ValueError(f"Unknown view mode: {mode!r}")
    return SCALE_TABLE[parsed]


class Ticks:
    """Axis tick dates from gantt_start to gantt_end. Iterating restarts from the beginning."""

    def __init__(self, gantt_start: datetime, gantt_end: datetime, mode: ViewMode, step: float) -> None:
        self.gantt_start = gantt_start
        self.gantt_end = gantt_end
        self.mode = mode
        self.step = step

    def _next(self, cur: datetime) -> datetime:
        if self.mode == ViewMode.YEAR:
            return date_utils.add(cur, 1, date_utils.YEAR)
        if self.mode == ViewMode.MONTH:
            return date_utils.add(cur, 1, date_utils.MONTH)
        return date_utils.add(cur, self.step, date_utils.HOUR)

    def __iter__(self) -> Iterator[datetime]:
        cur = date_utils.clone(self.gantt_start)
        yield cur
        while cur < self.gantt_end:
            cur = self._next(cur)
            yield cur

    def __len__(self) -> int:
        return sum(1 for _ in self)


@dataclass(frozen=True)
class TimelineRange:
    gantt_start: datetime
    gantt_end: datetime
    ticks: Ticks

    def contains(self, start: datetime, end: datetime) -> bool:
        return self.gantt_start <= start and end <= self.gantt_end


def _pad(start: datetime, end: datetime, mode: ViewMode) -> tuple[datetime, datetime]:
    add = date_utils.add
    if mode in (ViewMode.QUARTER_DAY, ViewMode.HALF_DAY):
        return add(start, -7, date_utils.DAY), add(end, 7, date_utils.DAY)
    if mode == ViewMode.MONTH:
        return date_utils.start_of(start, date_utils.YEAR), add(end, 1, date_utils.YEAR)
    if mode == ViewMode.YEAR:
        return add(start, -2, date_utils.YEAR), add(end, 2, date_utils.YEAR)
    if mode == ViewMode.WEEK:
        return add(start, -5, date_utils.DAY), add(end, 2, date_utils.MONTH)
    return add(start, -1, date_utils.DAY), add(end, 5, date_utils.DAY)


def compute_range(tasks: Iterable[Task], mode: ViewMode | str) -> TimelineRange:
    """Visible window covering every task span plus view-mode padding.

    Invalid tasks only count when there is no valid task at all; with no tasks
    the window is built around today.
    """
    mode = ViewMode.parse(mode) or ViewMode.DAY
    scale = resolve(mode)

    tasks = list(tasks)
    considered = [t for t in tasks if not t.invalid] or tasks
    if considered:
        start = min(t.start_date for t in considered)
        end = max(t.end_date for t in considered)
    else:
        start = end = date_utils.today()

    # Every mode pads the end by at least five days, so truncation keeps the last task inside.
    start = date_utils.start_of(start, date_utils.DAY)
    end = date_utils.start_of(end, date_utils.DAY)

    gantt_start, gantt_end = _pad(start, end, mode)
    return TimelineRange(gantt_start, gantt_end, Ticks(gantt_start, gantt_end, mode, scale.step))
