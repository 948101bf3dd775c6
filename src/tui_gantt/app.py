"""Main Textual App for TUI Gantt."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from tui_gantt import date_utils, theme
from tui_gantt.chart import GanttChart
from tui_gantt.config import load_options, save_options
from tui_gantt.models import GanttOptions, Task, ViewMode
from tui_gantt.screens.warning_screen import WarningScreen
from tui_gantt.widgets.gantt_chart import GanttChartWidget


class GanttApp(App):
    """TUI Gantt Application."""

    TITLE = "TUI Gantt"
    CSS = """
    #main-content {
        height: 1fr;
        border: round $surface-lighten-2;
        border-title-align: left;
    }
    #status-bar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $primary-background;
        color: $text;
    }
    """

    BINDINGS = [
        Binding("exclamation_mark", "warnings", "Warnings"),
        Binding("q", "quit", "Quit"),
        # View modes
        Binding("Q", "view_mode('Quarter Day')", "Quarter Day", show=False),
        Binding("H", "view_mode('Half Day')", "Half Day", show=False),
        Binding("D", "view_mode('Day')", "Day", show=False),
        Binding("W", "view_mode('Week')", "Week", show=False),
        Binding("M", "view_mode('Month')", "Month", show=False),
        Binding("Y", "view_mode('Year')", "Year", show=False),
    ]

    def __init__(
        self,
        records: list[dict[str, Any]],
        project_dir: Path | None = None,
        options: GanttOptions | None = None,
        no_color: bool = False,
        demo_mode: bool = False,
        today: datetime | None = None,
    ) -> None:
        if no_color:
            os.environ["NO_COLOR"] = "1"
        super().__init__()
        self.project_dir = project_dir
        self.demo_mode = demo_mode
        if options is None:
            options = load_options(project_dir) if project_dir is not None else GanttOptions()
        options.on_date_change = self._on_date_change
        options.on_progress_change = self._on_progress_change
        options.on_click = self._on_click
        theme.load_theme(project_dir)
        self.chart = GanttChart(records, options, today=today)
        # Registered after construction so the initial render is not persisted
        options.on_view_change = self._on_view_change
        self.last_event: str = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield GanttChartWidget(self.chart, id="main-content")
        yield Static("", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        name = self.project_dir.name if self.project_dir else "Demo"
        self.title = f"TUI Gantt - {name}"
        self._update_status_bar()

    # ── Chart events ──

    def _on_view_change(self, mode: ViewMode) -> None:
        self.last_event = f"View: {mode.value}"
        if self.project_dir is not None and not self.demo_mode:
            save_options(self.project_dir, self.chart.options)
        self._update_status_bar()

    def _on_date_change(self, task: Task, start: datetime, end: datetime) -> None:
        self.last_event = f"{task.name}: {date_utils.format(start, 'YYYY-MM-DD')} → {date_utils.format(end, 'YYYY-MM-DD')}"
        self.notify(self.last_event, severity="information")
        self._update_status_bar()

    def _on_progress_change(self, task: Task, progress: int) -> None:
        self.last_event = f"{task.name}: {progress}%"
        self.notify(self.last_event, severity="information")
        self._update_status_bar()

    def _on_click(self, task: Task) -> None:
        self.last_event = task.name
        self._update_status_bar()

    def _update_status_bar(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except Exception:
            return
        parts: list[str] = []
        if self.demo_mode:
            parts.append("[bold]DEMO[/bold]")
        warning_count = len(self.chart.warnings)
        if warning_count > 0:
            color = theme.STATUSBAR_WARNING.dark
            parts.append(f"[{color}]⚠ {warning_count} warning(s)[/{color}]")
        parts.append(f"View: {self.chart.options.view_mode.value}")
        if self.last_event:
            parts.append(self.last_event)
        bar.update(" | ".join(parts))

    # ── Actions ──

    def action_view_mode(self, mode: str) -> None:
        view_mode = ViewMode.parse(mode)
        if view_mode is None or view_mode not in self.chart.options.view_modes:
            self.notify(f"View mode not available: {mode}", severity="warning")
            return
        self.query_one(GanttChartWidget).change_view_mode(view_mode)

    def action_warnings(self) -> None:
        self.push_screen(
            WarningScreen(self.chart.warnings, self.chart.tasks),
            callback=self._on_warning_selected,
        )

    def _on_warning_selected(self, task_id: str | None) -> None:
        if task_id:
            self.query_one(GanttChartWidget).focus_task(task_id)
