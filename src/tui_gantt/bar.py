"""Bar geometry: task dates/progress -> pixels, and back after a drag."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tui_gantt import date_utils
from tui_gantt.layout import CoordinateMapper
from tui_gantt.models import BarState, DragState, Task

HANDLE_WIDTH = 8
HANDLE_INSET = 1
PROGRESS_HANDLE_HALF_WIDTH = 5
PROGRESS_HANDLE_HEIGHT = 8.66

_LEVEL_NAMES = {0: "zero", 1: "one", 2: "two", 3: "three"}


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def end_x(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class LabelFit:
    """Outcome of the label measurement pass."""

    text: str
    x: float
    big: bool


def compute_bar(task: Task, mapper: CoordinateMapper) -> BarState:
    """Place a task's bar on the timeline."""
    width = mapper.duration_to_width(task.start_date, task.end_date)
    return BarState(
        task_id=task.id,
        x=mapper.date_to_x(task.start_date),
        y=mapper.row_y(task.index),
        width=width,
        height=mapper.context.bar_height,
        progress_width=width * task.progress / 100,
        invalid=task.invalid,
    )


def recompute_dates(bar: BarState, mapper: CoordinateMapper) -> tuple[datetime, datetime]:
    """Inverse mapping of a (possibly dragged) bar into (start, end).

    Call once per completed gesture; calling per frame compounds rounding.
    """
    new_start = _round_second(mapper.x_to_date(bar.x))
    new_end = _round_second(mapper.x_to_date(bar.x + bar.width))
    return new_start, new_end


def _round_second(d: datetime) -> datetime:
    """Drop sub-second float noise from the inverse mapping."""
    return date_utils.start_of(date_utils.add(d, 0.5, date_utils.SECOND), date_utils.SECOND)


def compute_progress(bar: BarState) -> int:
    if bar.width <= 0:
        return 0
    return int(bar.progress_width / bar.width * 100)


# ── Handles ───────────────────────────────────────────────────────

def handle_rects(bar: BarState) -> tuple[Rect, Rect]:
    """(left, right) resize handle rectangles."""
    y = bar.y + HANDLE_INSET
    height = bar.height - 2 * HANDLE_INSET
    left = Rect(bar.x + HANDLE_INSET, y, HANDLE_WIDTH, height)
    right = Rect(bar.end_x - HANDLE_WIDTH - HANDLE_INSET, y, HANDLE_WIDTH, height)
    return left, right


def has_progress_handle(task: Task) -> bool:
    return not task.invalid and 0 < task.progress < 100


def progress_polygon_points(bar: BarState) -> list[float]:
    """Triangle under the end of the progress bar: x1, y1, x2, y2, x3, y3."""
    end_x = bar.progress_end_x
    bottom = bar.y + bar.height
    return [
        end_x - PROGRESS_HANDLE_HALF_WIDTH, bottom,
        end_x + PROGRESS_HANDLE_HALF_WIDTH, bottom,
        end_x, bottom - PROGRESS_HANDLE_HEIGHT,
    ]


def hit_test(bar: BarState, task: Task, x: float) -> DragState | None:
    """Which gesture a pointer-down at x starts on this bar. None for invalid bars."""
    if bar.invalid or task.invalid:
        return None
    if has_progress_handle(task) and abs(x - bar.progress_end_x) <= PROGRESS_HANDLE_HALF_WIDTH:
        return DragState.RESIZING_PROGRESS
    left, right = handle_rects(bar)
    if left.x <= x <= left.end_x:
        return DragState.RESIZING_LEFT
    if right.x <= x <= right.end_x:
        return DragState.RESIZING_RIGHT
    return DragState.MOVING


# ── Styling ───────────────────────────────────────────────────────

def level_name(level: int) -> str:
    return _LEVEL_NAMES.get(level, "one")


def bar_class(task: Task) -> str:
    if task.invalid:
        return "bar bar-invalid"
    overdue = " bar-overdue" if task.overdue else ""
    return f"bar bar-level-{level_name(task.level)}{overdue}"


def progress_class(task: Task) -> str:
    overdue = " bar-progress-overdue" if task.overdue else ""
    return f"bar bar-progress-{level_name(task.level)}{overdue}"


def popup_class(task: Task) -> str:
    if task.overdue:
        return "task-overdue"
    return f"task-level-{level_name(task.level)}"


# ── Labels and popup text ─────────────────────────────────────────

def label_text(task: Task) -> str:
    return f"{task.name} {task.progress}%"


def progress_label_text(task: Task) -> str:
    return f" {task.progress}%"


def fit_label(bar: BarState, task: Task, measured_width: float) -> LabelFit:
    """Second render phase: keep the full label if it fits, else progress only."""
    center = bar.x + bar.width / 2
    if measured_width > bar.width:
        return LabelFit(progress_label_text(task), center, True)
    return LabelFit(label_text(task), center, False)


def popup_title(task: Task) -> str:
    if task.overdue:
        return f"{100 - task.progress}% overdue"
    return task.name


def popup_subtitle(task: Task, language: str = "en") -> str:
    start = date_utils.format(task.start_date, "MMM D", language)
    end = date_utils.format(task.inclusive_end, "MMM D", language)
    return f"{start} - {end}"
