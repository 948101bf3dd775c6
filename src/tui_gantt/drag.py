"""Pointer-drag state machine: move, resize and progress gestures."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Callable

from tui_gantt import bar as bar_geometry
from tui_gantt.dependencies import DependencyGraph
from tui_gantt.layout import CoordinateMapper
from tui_gantt.models import BarState, DragState, Task, ViewMode

COOLDOWN_SECONDS = 1.0


@dataclass(frozen=True)
class Baseline:
    """Bar geometry captured when the gesture started."""

    x: float
    width: float
    progress_width: float


@dataclass
class Gesture:
    """State owned by one pointer-down -> pointer-up interaction."""

    mode: DragState
    dragged_id: str
    affected_ids: list[str]
    origin_x: float
    origin_y: float
    baselines: dict[str, Baseline]
    finaldx: float = 0.0


@dataclass(frozen=True)
class ChangeEvent:
    """An event to forward to the host: ``date_change`` or ``progress_change``."""

    name: str
    task: Task
    args: tuple


@dataclass
class DragResult:
    events: list[ChangeEvent] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.events)


class DragEngine:
    """Turns pointer deltas into snapped bar geometry and, on release, date changes.

    *bars* is shared with the chart and mutated in place.
    """

    def __init__(
        self,
        tasks: dict[str, Task],
        bars: dict[str, BarState],
        graph: DependencyGraph,
        mapper: CoordinateMapper,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.tasks = tasks
        self.bars = bars
        self.graph = graph
        self.mapper = mapper
        self.clock = clock
        self.gesture: Gesture | None = None
        self._cooldown_until: float = 0.0

    @property
    def state(self) -> DragState:
        return self.gesture.mode if self.gesture else DragState.IDLE

    @property
    def bar_being_dragged(self) -> str | None:
        return self.gesture.dragged_id if self.gesture else None

    @property
    def view_mode(self) -> ViewMode:
        return self.mapper.context.view_mode

    @property
    def column_width(self) -> float:
        return self.mapper.context.column_width

    def is_cooling_down(self, now: float | None = None) -> bool:
        """True shortly after a gesture that moved, so its release opens no popup."""
        now = self.clock() if now is None else now
        return now < self._cooldown_until

    # ── Snapping ──────────────────────────────────────────────────

    def snap_unit(self) -> float:
        if self.view_mode == ViewMode.WEEK:
            return self.column_width / 7
        if self.view_mode == ViewMode.MONTH:
            return self.column_width / 30
        return self.column_width

    def get_snap_position(self, dx: float) -> float:
        """Quantize a pixel delta to the nearest sub-unit boundary, halves rounding up."""
        unit = self.snap_unit()
        return math.floor(dx / unit + 0.5) * unit

    # ── Transitions ───────────────────────────────────────────────

    def pointer_down(self, bar_id: str, mode: DragState, x: float, y: float) -> bool:
        """Start a gesture on *bar_id*. Returns False when the task cannot be dragged."""
        if mode == DragState.IDLE:
            raise ValueError("A gesture needs a non-idle mode")
        if self.gesture is not None:
            self.pointer_up()
        task = self.tasks[bar_id]
        if task.invalid:
            return False

        invalid_ids = {t.id for t in self.tasks.values() if t.invalid}
        if mode in (DragState.MOVING, DragState.RESIZING_LEFT):
            dependents = self.graph.all_dependents(bar_id, exclude=invalid_ids)
            affected = [bar_id] + [d for d in dependents if d in self.bars]
        else:
            affected = [bar_id]

        baselines = {}
        for task_id in affected:
            bar = self.bars[task_id]
            baselines[task_id] = Baseline(bar.x, bar.width, bar.progress_width)

        self.gesture = Gesture(mode, bar_id, affected, x, y, baselines)
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        """Apply one pointer-move frame. Returns True if any bar changed."""
        gesture = self.gesture
        if gesture is None:
            return False
        dx = x - gesture.origin_x

        if gesture.mode == DragState.RESIZING_PROGRESS:
            return self._move_progress(gesture, dx)

        finaldx = self.get_snap_position(dx)
        updates = self._plan_frame(gesture, finaldx)
        if updates is None:
            return False

        # Every affected bar is updated before the caller redraws
        for task_id, (new_x, new_width) in updates.items():
            bar = self.bars[task_id]
            bar.x = new_x
            bar.width = new_width
            bar.progress_width = new_width * self.tasks[task_id].progress / 100
        gesture.finaldx = finaldx
        return True

    def pointer_up(self) -> DragResult:
        """Finish the gesture, commit changed dates/progress and return to idle."""
        gesture = self.gesture
        result = DragResult()
        if gesture is None:
            return result
        self.gesture = None

        if not gesture.finaldx:
            return result

        if gesture.mode == DragState.RESIZING_PROGRESS:
            event = self._commit_progress(gesture.dragged_id)
            if event:
                result.events.append(event)
        else:
            for task_id in gesture.affected_ids:
                event = self._commit_dates(task_id)
                if event:
                    result.events.append(event)

        self._cooldown_until = self.clock() + COOLDOWN_SECONDS
        return result

    # ── Internals ─────────────────────────────────────────────────

    def _plan_frame(self, gesture: Gesture, finaldx: float) -> dict[str, tuple[float, float]] | None:
        """New (x, width) per bar for this frame, or None when the frame is rejected."""
        dragged = gesture.dragged_id
        base = gesture.baselines[dragged]
        updates: dict[str, tuple[float, float]] = {}

        if gesture.mode == DragState.MOVING:
            new_x = base.x + finaldx
            if not self._respects_predecessors(dragged, new_x):
                return None
            for task_id in gesture.affected_ids:
                b = gesture.baselines[task_id]
                updates[task_id] = (b.x + finaldx, b.width)

        elif gesture.mode == DragState.RESIZING_LEFT:
            new_x = base.x + finaldx
            new_width = base.width - finaldx
            if new_width < self.column_width:
                return None
            if not self._respects_predecessors(dragged, new_x):
                return None
            updates[dragged] = (new_x, new_width)
            for task_id in gesture.affected_ids:
                if task_id != dragged:
                    b = gesture.baselines[task_id]
                    updates[task_id] = (b.x + finaldx, b.width)

        elif gesture.mode == DragState.RESIZING_RIGHT:
            new_width = base.width + finaldx
            if new_width < self.column_width:
                return None
            updates[dragged] = (base.x, new_width)

        return updates

    def _respects_predecessors(self, task_id: str, new_x: float) -> bool:
        """A bar may not start before any of its direct predecessors."""
        xs = [
            self.bars[dep].x
            for dep in self.graph.predecessors(task_id)
            if dep in self.bars and dep != task_id and not self.tasks[dep].invalid
        ]
        return not xs or new_x >= max(xs)

    def _move_progress(self, gesture: Gesture, dx: float) -> bool:
        bar = self.bars[gesture.dragged_id]
        base = gesture.baselines[gesture.dragged_id]
        # Handle stays within [bar.x, bar.x + bar.width]
        dx = max(-base.progress_width, min(dx, bar.width - base.progress_width))
        bar.progress_width = base.progress_width + dx
        gesture.finaldx = dx
        return True

    def _commit_dates(self, task_id: str) -> ChangeEvent | None:
        task = self.tasks[task_id]
        new_start, new_end = bar_geometry.recompute_dates(self.bars[task_id], self.mapper)
        if new_start == task.start_date and new_end == task.end_date:
            return None
        task.start_date = new_start
        task.end_date = new_end
        return ChangeEvent("date_change", task, (new_start, task.inclusive_end))

    def _commit_progress(self, task_id: str) -> ChangeEvent | None:
        task = self.tasks[task_id]
        new_progress = bar_geometry.compute_progress(self.bars[task_id])
        if new_progress == task.progress:
            return None
        task.progress = new_progress
        return ChangeEvent("progress_change", task, (new_progress,))

