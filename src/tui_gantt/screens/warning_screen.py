"""Task warnings modal: problems grouped per task row, selectable to jump to the bar."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option

from rich.text import Text

from tui_gantt import theme
from tui_gantt.models import Task, TaskWarning


def group_warnings(warnings: list[TaskWarning]) -> list[tuple[int, str, list[str]]]:
    """Warnings bundled per (task index, task name), in row order."""
    grouped: dict[tuple[int, str], list[str]] = {}
    for w in warnings:
        grouped.setdefault((w.task_index, w.task_name), []).append(w.message)
    return [(index, name, messages) for (index, name), messages in sorted(grouped.items())]


class WarningScreen(ModalScreen[str | None]):
    """Lists input problems per task. Selecting a task dismisses with its id."""

    BINDINGS = [("escape", "cancel", "Close")]

    DEFAULT_CSS = """
    WarningScreen {
        align: center middle;
    }
    #warning-container {
        width: 80;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: thick $warning;
        padding: 1 2;
    }
    #warning-title {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }
    #warning-list {
        height: auto;
        max-height: 100%;
    }
    """

    def __init__(self, warnings: list[TaskWarning], tasks: list[Task] | None = None) -> None:
        super().__init__()
        self.warnings = warnings
        self.tasks = tasks or []

    def _task_at(self, index: int, name: str) -> Task | None:
        # Entries dropped before normalization carry no name and no row
        if name and 0 <= index < len(self.tasks):
            return self.tasks[index]
        return None

    def _prompt(self, index: int, name: str, messages: list[str], task: Task | None) -> Text:
        icon = theme.WARNING_ICON.resolve(getattr(self.app, "dark", True))
        text = Text()
        text.append("⚠ ", style=icon)
        if task is not None:
            text.append(f"#{index} {task.name}", style="bold")
            if task.invalid:
                text.append("  (not draggable)", style="dim")
        else:
            text.append(name or "Ignored input", style="bold")
        for message in messages:
            text.append(f"\n    {message}")
        return text

    def compose(self) -> ComposeResult:
        grouped = group_warnings(self.warnings)
        with Vertical(id="warning-container"):
            yield Static(
                f"Task Warnings ({len(self.warnings)} in {len(grouped)} task(s))",
                id="warning-title",
            )
            if not grouped:
                yield Static("No warnings.")
                return
            options = []
            for index, name, messages in grouped:
                task = self._task_at(index, name)
                options.append(
                    Option(
                        self._prompt(index, name, messages, task),
                        id=task.id if task is not None else None,
                        disabled=task is None,
                    )
                )
            yield OptionList(*options, id="warning-list")

    def on_mount(self) -> None:
        try:
            self.query_one("#warning-list", OptionList).focus()
        except Exception:
            pass

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_cancel(self) -> None:
        self.dismiss(None)
