"""Data models for TUI Gantt."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from tui_gantt import date_utils


class ViewMode(Enum):
    """Timeline granularity, ordered from finest to coarsest."""

    QUARTER_DAY = "Quarter Day"
    HALF_DAY = "Half Day"
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"
    YEAR = "Year"

    @classmethod
    def parse(cls, value: object) -> ViewMode | None:
        """Accept a ViewMode, its value ("Quarter Day"), name or "QuarterDay". None if unknown."""
        if isinstance(value, ViewMode):
            return value
        if not isinstance(value, str):
            return None
        key = value.replace(" ", "").replace("_", "").lower()
        for mode in cls:
            if key == mode.name.replace("_", "").lower():
                return mode
        return None


VIEW_MODES: tuple[ViewMode, ...] = tuple(ViewMode)


class DragState(Enum):
    """Pointer-interaction state of the chart."""

    IDLE = "idle"
    MOVING = "moving"
    RESIZING_LEFT = "resizing_left"
    RESIZING_RIGHT = "resizing_right"
    RESIZING_PROGRESS = "resizing_progress"

POPUP_TRIGGERS = ("click", "mouseover")


@dataclass
class Task:
    """Normalized task owned by the chart. Input records are never mutated."""

    id: str
    name: str
    index: int
    start_date: datetime
    end_date: datetime
    start: Any = None  # raw input value
    end: Any = None  # raw input value
    dependencies: list[str] = field(default_factory=list)
    progress: int = 0
    level: int = 0
    custom_class: str = ""
    overdue: bool = False
    group: str = ""
    invalid: bool = False
    record: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def inclusive_end(self) -> datetime:
        """Last instant covered by the task (end minus one second)."""
        return date_utils.add(self.end_date, -1, date_utils.SECOND)


@dataclass
class TaskGroup:
    """A named run of consecutive tasks (rows) in the chart."""

    name: str
    first_index: int
    count: int
    overdue: bool = False

    @property
    def last_index(self) -> int:
        return self.first_index + self.count - 1


@dataclass
class TaskWarning:
    """A recoverable problem found while normalizing input tasks."""

    task_index: int
    task_name: str
    message: str

    def __str__(self) -> str:
        return f"#{self.task_index} {self.task_name}: {self.message}"


@dataclass
class BarState:
    """Pixel geometry of one task bar. Mutated in place during a drag."""

    task_id: str
    x: float
    y: float
    width: float
    height: float
    progress_width: float
    invalid: bool = False

    @property
    def end_x(self) -> float:
        return self.x + self.width

    @property
    def progress_end_x(self) -> float:
        return self.x + self.progress_width

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.end_x and self.y <= y <= self.y + self.height


EventCallback = Callable[..., Any]


@dataclass
class GanttOptions:
    """Chart options. ``column_width`` and ``step`` follow the active view mode."""

    header_height: int = 65
    column_width: float = 30
    step: float = 24
    bar_height: int = 50
    bar_corner_radius: int = 10
    arrow_curve: int = 5
    padding: int = 10
    view_mode: ViewMode = ViewMode.DAY
    view_modes: tuple[ViewMode, ...] = VIEW_MODES
    date_format: str = "YYYY-MM-DD"
    popup_trigger: str = "click"
    language: str = "en"
    inclusive_end: bool = True
    on_click: EventCallback | None = None
    on_date_change: EventCallback | None = None
    on_progress_change: EventCallback | None = None
    on_view_change: EventCallback | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GanttOptions:
        """Build options from a plain dict, ignoring unknown keys and bad values."""
        options = cls()
        for key, value in data.items():
            if key == "view_mode":
                mode = ViewMode.parse(value)
                if mode is not None:
                    options.view_mode = mode
            elif key == "popup_trigger":
                if value in POPUP_TRIGGERS:
                    options.popup_trigger = value
            elif key == "view_modes":
                modes = tuple(m for m in (ViewMode.parse(v) for v in value) if m is not None)
                if modes:
                    options.view_modes = modes
            elif key in _SCALAR_OPTIONS:
                setattr(options, key, value)
        return options


_SCALAR_OPTIONS = {
    "header_height", "column_width", "step", "bar_height", "bar_corner_radius",
    "arrow_curve", "padding", "date_format", "language", "inclusive_end",
    "on_click", "on_date_change", "on_progress_change", "on_view_change",
}
