"""Gantt chart custom widget."""

from __future__ import annotations

import asyncio
from datetime import date

from textual import events
from textual.app import ComposeResult
from textual.containers import Container
from textual.geometry import Size
from textual.message import Message
from textual.scroll_view import ScrollView
from textual.strip import Strip
from textual.widget import Widget
from textual.widgets import Static

from rich.segment import Segment
from rich.style import Style
from rich.text import Text

from tui_gantt import theme
from tui_gantt.bar import Rect, popup_class
from tui_gantt.chart import GanttChart
from tui_gantt.models import Task, TaskGroup, ViewMode

# Chart pixels per terminal cell, horizontally
PX_PER_CELL = 6

VIEW_MODE_LABELS: dict[ViewMode, str] = {
    ViewMode.QUARTER_DAY: "QD",
    ViewMode.HALF_DAY: "HD",
    ViewMode.DAY: "D",
    ViewMode.WEEK: "W",
    ViewMode.MONTH: "M",
    ViewMode.YEAR: "Y",
}


def px_to_cell(px: float) -> int:
    return int(px // PX_PER_CELL)


def cell_to_px(cell: int) -> float:
    """Pixel x at the centre of a terminal cell."""
    return cell * PX_PER_CELL + PX_PER_CELL / 2


def measure_label(text: str) -> float:
    """Label width in chart pixels, for the label fit pass."""
    return Text(text).cell_len * PX_PER_CELL


class GanttToolbar(Widget):
    """1-line toolbar showing today's date and clickable view mode buttons."""

    class ViewModeChanged(Message):
        def __init__(self, view_mode: ViewMode) -> None:
            super().__init__()
            self.view_mode = view_mode

    DEFAULT_CSS = """
    GanttToolbar {
        height: 1;
        background: $background;
    }
    """

    def __init__(self, view_modes: tuple[ViewMode, ...] = tuple(ViewMode), **kwargs) -> None:
        super().__init__(**kwargs)
        self._view_mode: ViewMode = ViewMode.DAY
        self._view_modes = view_modes
        self._today: date = date.today()
        self._button_regions: list[tuple[int, int, ViewMode]] = []

    def update_toolbar(self, view_mode: ViewMode, today: date | None = None) -> None:
        self._view_mode = view_mode
        if today is not None:
            self._today = today
        self.refresh()

    @property
    def _is_dark(self) -> bool:
        try:
            return self.app.dark
        except Exception:
            return True

    def render(self) -> Text:
        text = Text()
        text.append(
            f"Today: {self._today.isoformat()}",
            Style(bold=True, color=theme.GRID_TODAY_MARKER.resolve(self._is_dark)),
        )
        text.append("  │ ", Style(dim=True))

        self._button_regions = []
        for i, mode in enumerate(self._view_modes):
            label = VIEW_MODE_LABELS[mode]
            start = len(text)
            if mode == self._view_mode:
                text.append(f" {label} ", Style(bold=True, reverse=True))
            else:
                text.append(f" {label} ", Style(dim=True))
            self._button_regions.append((start, len(text), mode))
            if i < len(self._view_modes) - 1:
                text.append("│", Style(dim=True))
        return text

    def on_click(self, event: events.Click) -> None:
        for start, end, mode in self._button_regions:
            if start <= event.x < end:
                if mode != self._view_mode:
                    self.post_message(self.ViewModeChanged(mode))
                return


class GanttHeader(Widget):
    """Fixed header: upper and lower date labels plus the today marker line."""

    DEFAULT_CSS = """
    GanttHeader {
        height: 3;
        background: $background;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.chart: GanttChart | None = None
        self.scroll_x_offset: int = 0

    def update_header(self, chart: GanttChart) -> None:
        self.chart = chart
        self.refresh()

    @property
    def _is_dark(self) -> bool:
        try:
            return self.app.dark
        except Exception:
            return True

    @property
    def _chart_width(self) -> int:
        if self.chart is None or self.chart.grid is None:
            return 0
        return px_to_cell(self.chart.grid.width) + 1

    def render_line(self, y: int) -> Strip:
        width = max(self.size.width, self._chart_width)
        if self.chart is None or self.chart.grid is None:
            return Strip.blank(self.size.width)
        if y == 0:
            full = self._render_labels(width, upper=True)
        elif y == 1:
            full = self._render_labels(width, upper=False)
        elif y == 2:
            full = self._render_today_line(width)
        else:
            return Strip.blank(self.size.width)
        return full.crop(self.scroll_x_offset, self.scroll_x_offset + self.size.width)

    def _render_labels(self, width: int, upper: bool) -> Strip:
        """Place each label's text starting at its x, later labels never overwrite earlier ones."""
        cells = [" "] * width
        for label in self.chart.grid.labels:
            text = label.upper_text if upper else label.lower_text
            if not text:
                continue
            col = px_to_cell(label.upper_x if upper else label.lower_x)
            if upper:
                col = max(0, col - len(text) // 2)
            for i, ch in enumerate(text):
                if 0 <= col + i < width and cells[col + i] == " ":
                    cells[col + i] = ch
        style = Style(bold=upper, color=theme.GRID_HEADER.resolve(self._is_dark))
        return Strip([Segment("".join(cells), style)])

    def _render_today_line(self, width: int) -> Strip:
        highlight = self.chart.grid.highlight
        marker_col = px_to_cell(highlight.label_x) if highlight is not None else -1
        line_style = Style(color=theme.GRID_TODAY_MARKER.resolve(self._is_dark))
        dim_style = Style(dim=True)
        segments: list[Segment] = []
        for c in range(width):
            if c == marker_col:
                segments.append(Segment("▼", line_style))
            else:
                segments.append(Segment("┄", dim_style))
        return Strip(segments)


class GanttView(ScrollView):
    """Renders the bars, one terminal line per task, and drives pointer gestures."""

    class ScrollXChanged(Message):
        """Emitted when horizontal scroll position changes."""

        def __init__(self, scroll_x: float) -> None:
            super().__init__()
            self.scroll_x = scroll_x

    class TaskClicked(Message):
        def __init__(self, task_id: str) -> None:
            super().__init__()
            self.task_id = task_id

    DEFAULT_CSS = """
    GanttView {
        height: 1fr;
        background: $background;
        overflow-y: auto;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.chart: GanttChart | None = None
        self._pressed: bool = False
        self._press_cell: tuple[int, int] | None = None
        self._moved: bool = False

    def update_gantt(self, chart: GanttChart) -> None:
        self.chart = chart
        width = px_to_cell(chart.grid.width) + 1 if chart.grid else 0
        self.virtual_size = Size(width + 2, max(len(chart.tasks), self.size.height))
        self.refresh()

    def scroll_to_first_task(self) -> None:
        if self.chart is not None:
            self.scroll_to(x=max(0, px_to_cell(self.chart.initial_scroll_x)), animate=False)

    def watch_scroll_x(self, old: float, new: float) -> None:
        self.post_message(self.ScrollXChanged(new))

    @property
    def _is_dark(self) -> bool:
        try:
            return self.app.dark
        except Exception:
            return True

    # ── Pointer input ─────────────────────────────────────────────

    def _to_chart(self, event: events.MouseEvent) -> tuple[float, float] | None:
        """Translate a widget-relative mouse position into chart pixels."""
        chart = self.chart
        if chart is None:
            return None
        row = event.y + int(self.scroll_y)
        x = cell_to_px(event.x + int(self.scroll_x))
        y = chart.mapper.row_y(row) + chart.context.bar_height / 2
        return x, y

    def on_mouse_down(self, event: events.MouseDown) -> None:
        point = self._to_chart(event)
        if point is None:
            return
        if self.chart.pointer_down(*point) is not None:
            self._pressed = True
            self._press_cell = (event.x + int(self.scroll_x), event.y + int(self.scroll_y))
            self._moved = False
            self.capture_mouse()
            self.refresh()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if not self._pressed:
            return
        if (event.x + int(self.scroll_x), event.y + int(self.scroll_y)) != self._press_cell:
            self._moved = True
        point = self._to_chart(event)
        if point is not None and self.chart.pointer_move(*point):
            self.refresh()

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if self.chart is None:
            return
        was_pressed = self._pressed
        self._pressed = False
        self.release_mouse()
        result = self.chart.pointer_up()
        self.refresh()
        # Only a release that never left the pressed cell counts as a click
        if was_pressed and not self._moved and not result.changed:
            point = self._to_chart(event)
            task_id = self.chart.bar_at(*point) if point else None
            if task_id is not None:
                self.post_message(self.TaskClicked(task_id))

    # ── Rendering ─────────────────────────────────────────────────

    def render_line(self, y: int) -> Strip:
        scroll_w = self.virtual_size.width if self.virtual_size.width > 0 else self.size.width
        width = max(self.size.width, scroll_w)
        virtual_y = y + int(self.scroll_y)
        scroll_x = int(self.scroll_x)

        chart = self.chart
        if chart is None or not chart.tasks:
            if y == 0:
                text = Text("  No Gantt data", style="dim")
                return Strip(text.render(self.app.console))
            return Strip.blank(self.size.width)

        if virtual_y < 0 or virtual_y >= len(chart.tasks):
            strip = self._render_grid_only(width)
        else:
            strip = self._render_bar(chart.tasks[virtual_y], width, scroll_x)
        return strip.crop(scroll_x, scroll_x + self.size.width)

    def _grid_cells(self, width: int) -> list[tuple[str, Style]]:
        dark = self._is_dark
        tick = Style(color=theme.GRID_TICK.resolve(dark), dim=True)
        thick = Style(color=theme.GRID_THICK_TICK.resolve(dark))
        today = Style(color=theme.GRID_TODAY_MARKER.resolve(dark))
        cells: list[tuple[str, Style]] = [(" ", Style())] * width
        for t in self.chart.grid.ticks:
            col = px_to_cell(t.x)
            if 0 <= col < width:
                cells[col] = ("│", thick) if t.thick else ("┊", tick)
        highlight = self.chart.grid.highlight
        if highlight is not None:
            col = px_to_cell(highlight.x)
            if 0 <= col < width:
                cells[col] = ("│", today)
        return cells

    def _render_grid_only(self, width: int) -> Strip:
        return Strip([Segment(ch, style) for ch, style in self._grid_cells(width)])

    def _group_starting_at(self, index: int) -> TaskGroup | None:
        for group in self.chart.groups:
            if group.first_index == index:
                return group
        return None

    def _render_bar(self, task: Task, width: int, scroll_x: int = 0) -> Strip:
        dark = self._is_dark
        chart = self.chart
        bar = chart.bars[task.id]
        cells = self._grid_cells(width)

        bar_style = Style(color=theme.bar_color(task).resolve(dark))
        progress_style = Style(color=theme.progress_color(task).resolve(dark))
        prims = chart.primitives.get(task.id)
        if prims is not None and "active" in prims.group.classes:
            active = Style.parse(theme.GRID_ACTIVE_BAR.resolve(dark))
            bar_style += active
            progress_style += active

        start_col = px_to_cell(bar.x)
        end_col = max(start_col + 1, px_to_cell(bar.end_x))
        filled_col = px_to_cell(bar.progress_end_x)
        for c in range(max(0, start_col), min(width, end_col)):
            if c < filled_col:
                cells[c] = ("█", progress_style)
            else:
                cells[c] = ("░" if task.invalid else "▒", bar_style)

        # Label text from the fit pass: inside the bar, or after it when "big"
        if prims is not None and prims.label is not None:
            text = str(prims.label.attrs.get("text", ""))
            if "big" in prims.label.classes:
                col = end_col + 1
            else:
                col = start_col + max(0, (end_col - start_col - len(text)) // 2)
            label_style = Style(bold=True)
            for i, ch in enumerate(text):
                if 0 <= col + i < width:
                    _, base = cells[col + i]
                    cells[col + i] = (ch, base + label_style)

        # Group name pinned to the left edge of the first row, over empty grid only
        group = self._group_starting_at(task.index)
        if group is not None:
            group_style = Style.parse(theme.GRID_GROUP_BAND.resolve(dark))
            for i, ch in enumerate(f" {group.name} "):
                col = scroll_x + i
                if col < width and cells[col][0] in (" ", "┊", "│"):
                    cells[col] = (ch, group_style)

        return Strip([Segment(ch, style) for ch, style in cells])


class GanttPopup(Static):
    """One-line task details shown under the chart; implements the chart popup interface."""

    DEFAULT_CSS = """
    GanttPopup {
        height: 1;
        padding: 0 1;
        background: $surface;
        display: none;
    }
    GanttPopup.task-overdue {
        background: $error 30%;
    }
    """

    def show(self, target: Rect, title: str, subtitle: str | None, task: Task) -> None:
        color = theme.POPUP_TITLE.resolve(getattr(self.app, "dark", True))
        text = Text(title, Style.parse(color))
        if subtitle:
            text.append(f"  {subtitle}", Style(dim=True))
        self.set_classes(popup_class(task))
        self.update(text)
        self.display = True

    def hide(self) -> None:
        self.display = False


class GanttChartWidget(Container):
    """Toolbar, header, scrolling bar view and popup line around one GanttChart."""

    DEFAULT_CSS = """
    GanttChartWidget {
        width: 1fr;
        height: 1fr;
    }
    GanttChartWidget #gantt-header {
        height: 3;
    }
    GanttChartWidget #gantt-view {
        height: 1fr;
    }
    """

    def __init__(self, chart: GanttChart, **kwargs) -> None:
        super().__init__(**kwargs)
        self.chart = chart
        self._pending_rebuild: bool = False

    def compose(self) -> ComposeResult:
        yield GanttToolbar(self.chart.options.view_modes, id="gantt-toolbar")
        yield GanttHeader(id="gantt-header")
        yield GanttView(id="gantt-view")
        yield GanttPopup(id="gantt-popup")

    def on_mount(self) -> None:
        self.chart.popup = self.query_one("#gantt-popup", GanttPopup)
        self.chart.fit_labels(measure_label)
        self._push_to_view()
        self.query_one("#gantt-view", GanttView).scroll_to_first_task()

    def change_view_mode(self, mode: ViewMode) -> None:
        self.chart.change_view_mode(mode)
        self.chart.fit_labels(measure_label)
        self._push_to_view()
        self.query_one("#gantt-view", GanttView).scroll_to_first_task()

    def focus_task(self, task_id: str) -> None:
        """Scroll the task's bar into view and select it."""
        task = self.chart.get_task(task_id)
        if task is None:
            return
        view = self.query_one("#gantt-view", GanttView)
        bar_col = px_to_cell(self.chart.bars[task_id].x)
        view.scroll_to(x=max(0, bar_col - 2), y=task.index, animate=False)
        self.chart.select(task_id)
        view.refresh()

    def on_gantt_toolbar_view_mode_changed(self, event: GanttToolbar.ViewModeChanged) -> None:
        self.change_view_mode(event.view_mode)

    def on_gantt_view_scroll_x_changed(self, event: GanttView.ScrollXChanged) -> None:
        header = self.query_one("#gantt-header", GanttHeader)
        header.scroll_x_offset = int(event.scroll_x)
        header.refresh()

    def on_gantt_view_task_clicked(self, event: GanttView.TaskClicked) -> None:
        self.chart.click(event.task_id)
        self.query_one("#gantt-view", GanttView).refresh()

    def _push_to_view(self) -> None:
        """Push the chart to the toolbar, header and view once they are composed."""
        try:
            toolbar = self.query_one("#gantt-toolbar", GanttToolbar)
            header = self.query_one("#gantt-header", GanttHeader)
            view = self.query_one("#gantt-view", GanttView)
            toolbar.update_toolbar(self.chart.options.view_mode, self.chart.context.today.date())
            view.update_gantt(self.chart)
            header.update_header(self.chart)
            self._pending_rebuild = False
        except Exception:
            if not self._pending_rebuild:
                try:
                    asyncio.get_running_loop()
                except RuntimeError:
                    return
                self._pending_rebuild = True
                self.set_timer(0.01, self._push_to_view)
