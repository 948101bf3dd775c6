"""Gantt chart engine: tasks, view mode, render passes, pointer gestures and events."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable

from tui_gantt import bar as bar_geometry
from tui_gantt import scale
from tui_gantt.dependencies import DependencyGraph
from tui_gantt.drag import DragEngine, DragResult
from tui_gantt.grid import GridLayout, build_grid
from tui_gantt.layout import CoordinateMapper, LayoutContext
from tui_gantt.models import (
    BarState,
    DragState,
    GanttOptions,
    Task,
    TaskGroup,
    TaskWarning,
    ViewMode,
)
from tui_gantt.render import Popup, Primitive, PrimitiveTree, Renderer
from tui_gantt.tasks import normalize_tasks

# Filter widget radio positions
FILTER_DAY = 1
FILTER_WEEK = 2
FILTER_MONTH = 3


@dataclass
class BarPrimitives:
    """Renderer handles belonging to one bar."""

    group: Primitive
    bar: Primitive
    progress: Primitive | None = None
    label: Primitive | None = None
    handle_left: Primitive | None = None
    handle_right: Primitive | None = None
    handle_progress: Primitive | None = None


def _toggle_class(primitive: Primitive, css_class: str, on: bool) -> None:
    classes = [c for c in primitive.classes if c != css_class]
    if on:
        classes.append(css_class)
    primitive.set(**{"class": " ".join(classes)})


class GanttChart:
    """Owns the normalized tasks and every derived layout for one chart."""

    def __init__(
        self,
        tasks: Iterable[dict[str, Any]],
        options: GanttOptions | dict[str, Any] | None = None,
        renderer: Renderer | None = None,
        popup: Popup | None = None,
        clock: Callable[[], float] = time.monotonic,
        today: datetime | None = None,
    ) -> None:
        if isinstance(options, GanttOptions):
            self.options = options
        else:
            self.options = GanttOptions.from_dict(options or {})
        self.renderer: Renderer = renderer if renderer is not None else PrimitiveTree()
        self.popup = popup
        self._clock = clock
        self._today = today

        self.records: list[dict[str, Any]] = []
        self.tasks: list[Task] = []
        self.groups: list[TaskGroup] = []
        self.warnings: list[TaskWarning] = []
        self.graph = DependencyGraph({}, {})
        self.bars: dict[str, BarState] = {}
        self.primitives: dict[str, BarPrimitives] = {}
        self.grid: GridLayout | None = None

        self.setup_tasks(tasks)
        self.change_view_mode()

    # ── Tasks ─────────────────────────────────────────────────────

    def setup_tasks(self, records: Iterable[dict[str, Any]]) -> None:
        self.records = list(records)
        self.tasks, self.groups, self.warnings = normalize_tasks(
            self.records, inclusive_end=self.options.inclusive_end
        )
        self._tasks_by_id = {t.id: t for t in self.tasks}
        self.graph = DependencyGraph.build(self.tasks)

    def refresh(self, records: Iterable[dict[str, Any]]) -> None:
        """Replace the task set and redraw in the current view mode."""
        self.setup_tasks(records)
        self.change_view_mode()

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks_by_id.get(task_id)

    def get_bar(self, task_id: str) -> BarState | None:
        return self.bars.get(task_id)

    def oldest_start(self) -> datetime | None:
        if not self.tasks:
            return None
        return min(t.start_date for t in self.tasks)

    # ── View mode ─────────────────────────────────────────────────

    def view_is(self, *modes: ViewMode) -> bool:
        return self.options.view_mode in modes

    def change_view_mode(self, mode: ViewMode | str | None = None) -> None:
        """Switch view mode, rebuild the layout, redraw and emit ``view_change``."""
        if mode is None:
            mode = self.options.view_mode
        view_scale = scale.resolve(mode)
        self.options.view_mode = ViewMode.parse(mode)
        self.options.step = view_scale.step
        self.options.column_width = view_scale.column_width

        self.timeline = scale.compute_range(self.tasks, self.options.view_mode)
        self.context = LayoutContext.create(self.options, self.timeline, self._today)
        self.mapper = CoordinateMapper(self.context)
        self.render()
        self.trigger_event("view_change", self.options.view_mode)

    def filter_type(self) -> int:
        """Radio position the filter widget should show as checked."""
        if self.view_is(ViewMode.DAY):
            return FILTER_DAY
        if self.view_is(ViewMode.WEEK):
            return FILTER_WEEK
        return FILTER_MONTH

    @property
    def initial_scroll_x(self) -> float:
        oldest = self.oldest_start()
        if oldest is None:
            return 0.0
        return self.mapper.initial_scroll_x(oldest)

    # ── Rendering ─────────────────────────────────────────────────

    def render(self) -> None:
        """First render pass: grid and bar geometry. Labels are fitted by :meth:`fit_labels`."""
        self.hide_popup()
        self.renderer.clear()
        self.grid = build_grid(
            self.context,
            self.timeline.ticks,
            len(self.tasks),
            self.groups,
            self.options.language,
        )
        grid_layer = self.renderer.create("g", {"class": "grid"})
        bar_layer = self.renderer.create("g", {"class": "bar"})
        self._draw_grid(grid_layer)

        self.bars = {t.id: bar_geometry.compute_bar(t, self.mapper) for t in self.tasks}
        self.primitives = {}
        for task in self.tasks:
            self.primitives[task.id] = self._draw_bar(task, self.bars[task.id], bar_layer)

        self.drag = DragEngine(self._tasks_by_id, self.bars, self.graph, self.mapper, clock=self._clock)

    def fit_labels(self, measure: Callable[[str], float]) -> None:
        """Second render pass: measure each label and fall back to progress-only text if too wide."""
        for task in self.tasks:
            prims = self.primitives.get(task.id)
            if prims is None or prims.label is None:
                continue
            fit = bar_geometry.fit_label(self.bars[task.id], task, measure(bar_geometry.label_text(task)))
            prims.label.set(text=fit.text, x=fit.x)
            _toggle_class(prims.label, "big", fit.big)

    def _draw_grid(self, layer: Primitive) -> None:
        grid = self.grid
        create = self.renderer.create
        bg = grid.background
        create("rect", {"x": bg.x, "y": bg.y, "width": bg.width, "height": bg.height, "class": "grid-background"}, layer)
        for row in grid.rows:
            r = row.rect
            create("rect", {"x": r.x, "y": r.y, "width": r.width, "height": r.height, "class": "grid-row"}, layer)
            create("line", {"x1": r.x, "y1": row.line_y, "x2": r.end_x, "y2": row.line_y, "class": row.line_class}, layer)
        h = grid.header
        create("rect", {"x": h.x, "y": h.y, "width": h.width, "height": h.height, "class": "grid-header"}, layer)
        for tick in grid.ticks:
            create("path", {"d": f"M {tick.x} {tick.y} v {tick.height}", "class": tick.css_class}, layer)
        for x in grid.divisors:
            create("path", {"d": f"M {x} 0 v {grid.height}", "class": "month-divisor"}, layer)
        if grid.highlight is not None:
            create(
                "path",
                {"d": f"M {grid.highlight.x} {self.context.header_height} v {grid.height}", "class": "today-divisor"},
                layer,
            )
        for label in grid.labels:
            create("text", {"x": label.lower_x, "y": label.lower_y, "text": label.lower_text, "class": "lower-text"}, layer)
            if label.upper_text:
                create("text", {"x": label.upper_x, "y": label.upper_y, "text": label.upper_text, "class": "upper-text"}, layer)
        for band in grid.group_bands:
            r = band.rect
            create(
                "rect",
                {"x": r.x, "y": r.y, "width": r.width, "height": r.height, "text": band.name, "class": "task-header"},
                layer,
            )

    def _draw_bar(self, task: Task, state: BarState, layer: Primitive) -> BarPrimitives:
        create = self.renderer.create
        radius = self.options.bar_corner_radius
        group = create(
            "g",
            {"class": f"bar-wrapper {task.custom_class}".strip(), "data-id": task.id},
            layer,
        )
        rect_attrs = {"y": state.y, "height": state.height, "rx": radius, "ry": radius}
        prims = BarPrimitives(
            group=group,
            bar=create("rect", {**rect_attrs, "x": state.x, "width": state.width, "class": bar_geometry.bar_class(task)}, group),
        )
        self.renderer.animate(prims.bar, "width", 0, state.width)
        if not task.invalid:
            prims.progress = create(
                "rect",
                {**rect_attrs, "x": state.x, "width": state.progress_width, "class": bar_geometry.progress_class(task)},
                group,
            )
            self.renderer.animate(prims.progress, "width", 0, state.progress_width)
        prims.label = create(
            "text",
            {"x": state.x + state.width / 2, "y": state.y + state.height / 2,
             "text": bar_geometry.label_text(task), "class": "bar-label"},
            group,
        )
        if not task.invalid:
            left, right = bar_geometry.handle_rects(state)
            prims.handle_left = create(
                "rect", {"x": left.x, "y": left.y, "width": left.width, "height": left.height, "class": "handle left"}, group
            )
            prims.handle_right = create(
                "rect", {"x": right.x, "y": right.y, "width": right.width, "height": right.height, "class": "handle right"}, group
            )
            if bar_geometry.has_progress_handle(task):
                prims.handle_progress = create(
                    "polygon", {"points": bar_geometry.progress_polygon_points(state), "class": "handle progress"}, group
                )
        return prims

    def redraw_bar(self, task_id: str) -> None:
        """Sync one bar's primitives with its (mutated) geometry."""
        state = self.bars[task_id]
        prims = self.primitives[task_id]
        prims.bar.set(x=state.x, width=state.width)
        if prims.progress is not None:
            prims.progress.set(x=state.x, width=state.progress_width)
        if prims.label is not None:
            prims.label.set(x=state.x + state.width / 2)
        if prims.handle_left is not None and prims.handle_right is not None:
            left, right = bar_geometry.handle_rects(state)
            prims.handle_left.set(x=left.x)
            prims.handle_right.set(x=right.x)
        if prims.handle_progress is not None:
            prims.handle_progress.set(points=bar_geometry.progress_polygon_points(state))

    # ── Pointer gestures ──────────────────────────────────────────

    def bar_at(self, x: float, y: float) -> str | None:
        row = self.mapper.row_at(y)
        if row is None or row >= len(self.tasks):
            return None
        task = self.tasks[row]
        return task.id if self.bars[task.id].contains(x, y) else None

    def pointer_down(self, x: float, y: float) -> DragState | None:
        """Start a gesture on the bar under the pointer; a miss clears the selection."""
        task_id = self.bar_at(x, y)
        if task_id is None:
            self.unselect_all()
            self.hide_popup()
            return None
        mode = bar_geometry.hit_test(self.bars[task_id], self._tasks_by_id[task_id], x)
        if mode is None or not self.drag.pointer_down(task_id, mode, x, y):
            return None
        _toggle_class(self.primitives[task_id].group, "active", True)
        return mode

    def pointer_move(self, x: float, y: float) -> bool:
        if not self.drag.pointer_move(x, y):
            return False
        for task_id in self.drag.gesture.affected_ids:
            self.redraw_bar(task_id)
        return True

    def pointer_up(self) -> DragResult:
        """End any gesture (also for releases outside the chart) and emit change events."""
        gesture = self.drag.gesture
        result = self.drag.pointer_up()
        if gesture is not None:
            for task_id in gesture.affected_ids:
                _toggle_class(self.primitives[task_id].group, "active", False)
            for task_id in gesture.affected_ids:
                self.redraw_bar(task_id)
        for event in result.events:
            self.trigger_event(event.name, event.task, *event.args)
        return result

    @property
    def bar_being_dragged(self) -> str | None:
        return self.drag.bar_being_dragged

    def unselect_all(self) -> None:
        for prims in self.primitives.values():
            _toggle_class(prims.group, "active", False)

    # ── Popup and click ───────────────────────────────────────────

    def click(self, task_id: str) -> bool:
        """Handle a click on a bar. Ignored right after a drag changed something."""
        return self._activate(task_id, "click")

    def hover(self, task_id: str) -> bool:
        return self._activate(task_id, "mouseover")

    def _activate(self, task_id: str, trigger: str) -> bool:
        task = self.get_task(task_id)
        if task is None or self.drag.is_cooling_down():
            return False
        if trigger == "click":
            self.trigger_event("click", task)
        if trigger != self.options.popup_trigger:
            return False
        self.select(task_id)
        return True

    def select(self, task_id: str) -> None:
        """Mark one bar active and show its popup."""
        self.unselect_all()
        _toggle_class(self.primitives[task_id].group, "active", True)
        self.show_popup(task_id)

    def show_popup(self, task_id: str) -> None:
        if self.popup is None or self.bar_being_dragged:
            return
        task = self._tasks_by_id[task_id]
        state = self.bars[task_id]
        self.popup.show(
            bar_geometry.Rect(state.x, state.y, state.width, state.height),
            bar_geometry.popup_title(task),
            bar_geometry.popup_subtitle(task, self.options.language),
            task,
        )

    def hide_popup(self) -> None:
        if self.popup is not None:
            self.popup.hide()

    # ── Events ────────────────────────────────────────────────────

    def trigger_event(self, event: str, *args: Any) -> None:
        callback = getattr(self.options, f"on_{event}", None)
        if callback is not None:
            callback(*args)
