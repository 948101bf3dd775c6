"""Grid layout: header band, row bands, axis ticks, date labels and today highlight."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable

from tui_gantt import date_utils
from tui_gantt.bar import Rect
from tui_gantt.layout import LayoutContext
from tui_gantt.models import TaskGroup, ViewMode

LOWER_LABEL_OFFSET = 15
UPPER_LABEL_OFFSET = 35
WEEK_THICK_EVERY = 5

# (lower, upper) label x offsets in columns
_LABEL_COLUMNS: dict[ViewMode, tuple[float, float]] = {
    ViewMode.QUARTER_DAY: (4 / 2, 0),
    ViewMode.HALF_DAY: (2 / 2, 0),
    ViewMode.DAY: (1 / 2, 30 / 2),
    ViewMode.WEEK: (0, 4 / 2),
    ViewMode.MONTH: (1 / 2, 12 / 2),
    ViewMode.YEAR: (1 / 2, 30 / 2),
}


@dataclass(frozen=True)
class GridRow:
    rect: Rect
    line_y: float
    line_class: str  # "row-line" or "last-row-line"


@dataclass(frozen=True)
class Tick:
    date: datetime
    x: float
    y: float
    height: float
    thick: bool

    @property
    def css_class(self) -> str:
        return "tick thick" if self.thick else "tick"


@dataclass(frozen=True)
class Highlight:
    """Current-date marker: divisor line x and the header badge x."""

    x: float
    label_x: float


@dataclass(frozen=True)
class DateLabel:
    lower_text: str
    upper_text: str
    lower_x: float
    upper_x: float
    lower_y: float
    upper_y: float


@dataclass(frozen=True)
class GroupBand:
    name: str
    rect: Rect
    overdue: bool = False


@dataclass
class GridLayout:
    background: Rect
    header: Rect
    rows: list[GridRow] = field(default_factory=list)
    ticks: list[Tick] = field(default_factory=list)
    divisors: list[float] = field(default_factory=list)
    highlight: Highlight | None = None
    labels: list[DateLabel] = field(default_factory=list)
    group_bands: list[GroupBand] = field(default_factory=list)

    @property
    def width(self) -> float:
        return self.background.width

    @property
    def height(self) -> float:
        return self.background.height


def is_thick(ctx: LayoutContext, d: datetime, position: int) -> bool:
    """Whether a tick lands on a calendar-significant boundary."""
    if ctx.view_mode == ViewMode.DAY:
        return d.day == 1
    if ctx.view_mode == ViewMode.MONTH:
        return d.month % 2 == 0
    if ctx.view_mode == ViewMode.WEEK:
        return position % WEEK_THICK_EVERY == 0
    return False


def today_highlight(ctx: LayoutContext, ticks: list[datetime]) -> Highlight | None:
    """At most one current-date marker, placed by the active view mode's rule."""
    if ctx.view_mode not in (ViewMode.DAY, ViewMode.WEEK, ViewMode.MONTH):
        return None
    today = ctx.today
    cw = ctx.column_width
    for i, d in enumerate(ticks):
        tick_x = i * cw
        if ctx.view_mode == ViewMode.DAY:
            if d.date() == today.date():
                x = tick_x + cw / 2
                return Highlight(x, x)
        elif ctx.view_mode == ViewMode.MONTH:
            if (d.year, d.month) == (today.year, today.month):
                x = tick_x + cw * today.day / date_utils.days_in_month(today)
                return Highlight(x, tick_x + cw / 2)
        elif d <= today < d + timedelta(days=7):
            x = tick_x + cw * date_utils.diff(today, d, date_utils.HOUR) / ctx.step
            return Highlight(x, x)
    return None


def date_label(
    ctx: LayoutContext,
    d: datetime,
    last_date: datetime | None,
    position: int,
    language: str = "en",
) -> DateLabel:
    """Header texts for one tick; the upper text only appears when its unit changes."""
    if last_date is None:
        last_date = date_utils.add(d, 1, date_utils.YEAR)
    fmt = date_utils.format
    mode = ctx.view_mode
    day_changed = d.date() != last_date.date()
    month_changed = d.month != last_date.month
    year_changed = d.year != last_date.year

    if mode in (ViewMode.QUARTER_DAY, ViewMode.HALF_DAY):
        lower = fmt(d, "HH", language)
        if not day_changed:
            upper = ""
        elif mode == ViewMode.QUARTER_DAY or month_changed:
            upper = fmt(d, "D MMM", language)
        else:
            upper = fmt(d, "D", language)
    elif mode == ViewMode.DAY:
        lower = fmt(d, "D", language) if day_changed else ""
        upper = fmt(d, "MMMM", language) if month_changed else ""
    elif mode == ViewMode.WEEK:
        lower = str(date_utils.iso_week_number(d))
        upper = fmt(d, "MMMM YYYY", language) if month_changed else ""
    elif mode == ViewMode.MONTH:
        lower = fmt(d, "MMMM", language)
        upper = fmt(d, "YYYY", language) if year_changed else ""
    else:
        lower = fmt(d, "YYYY", language)
        upper = fmt(d, "YYYY", language) if year_changed else ""

    lower_cols, upper_cols = _LABEL_COLUMNS[mode]
    base_x = position * ctx.column_width
    return DateLabel(
        lower_text=lower,
        upper_text=upper,
        lower_x=base_x + ctx.column_width * lower_cols,
        upper_x=base_x + ctx.column_width * upper_cols,
        lower_y=ctx.header_height - LOWER_LABEL_OFFSET,
        upper_y=ctx.header_height - UPPER_LABEL_OFFSET,
    )


def build_grid(
    ctx: LayoutContext,
    ticks: Iterable[datetime],
    task_count: int,
    groups: Iterable[TaskGroup] = (),
    language: str = "en",
) -> GridLayout:
    """Lay out the whole grid for one render pass."""
    dates = list(ticks)
    groups = list(groups)
    cw = ctx.column_width
    row_height = ctx.row_height
    row_width = len(dates) * cw
    rows_height = row_height * task_count
    full_height = ctx.header_height + ctx.padding + rows_height

    layout = GridLayout(
        background=Rect(0, 0, row_width, full_height),
        header=Rect(0, 0, row_width, ctx.header_height),
    )

    last_rows = {g.last_index for g in groups}
    for i in range(task_count):
        y = ctx.header_height + i * row_height
        line_class = "last-row-line" if i in last_rows else "row-line"
        layout.rows.append(GridRow(Rect(0, y, row_width, row_height), y + row_height, line_class))

    for g in groups:
        y = ctx.header_height + g.first_index * row_height
        layout.group_bands.append(GroupBand(g.name, Rect(0, y, row_width, g.count * row_height), g.overdue))

    tick_y = ctx.header_height + ctx.padding / 2
    last_date: datetime | None = None
    for i, d in enumerate(dates):
        thick = is_thick(ctx, d, i)
        tick_x = i * cw
        layout.ticks.append(Tick(d, tick_x, tick_y, rows_height, thick))
        if thick:
            layout.divisors.append(tick_x)

        label = date_label(ctx, d, last_date, i, language)
        if label.upper_text and label.upper_x > row_width:
            label = DateLabel(label.lower_text, "", label.lower_x, label.upper_x, label.lower_y, label.upper_y)
        layout.labels.append(label)
        last_date = d

    layout.highlight = today_highlight(ctx, dates)
    return layout
