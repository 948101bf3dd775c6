"""Project configuration management using tomlkit."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
import yaml

from tui_gantt.models import GanttOptions

CONFIG_DIR = ".tui-gantt"
CONFIG_FILE = "config.toml"
TASKS_FILE = "tasks.yaml"

# Options persisted in the [chart] table, with the type each value is coerced to
_PERSISTED: dict[str, type] = {
    "header_height": int,
    "bar_height": int,
    "bar_corner_radius": int,
    "arrow_curve": int,
    "padding": int,
    "date_format": str,
    "language": str,
    "inclusive_end": bool,
}


def _get_config_path(project_dir: Path) -> Path:
    return project_dir / CONFIG_DIR / CONFIG_FILE


def load_options(project_dir: Path) -> GanttOptions:
    """Load chart options from .tui-gantt/config.toml (defaults on any problem)."""
    config_path = _get_config_path(project_dir)
    if not config_path.exists():
        return GanttOptions()

    try:
        content = config_path.read_text(encoding="utf-8")
        doc = tomlkit.parse(content)
    except Exception:
        return GanttOptions()

    chart_section = doc.get("chart", {})
    if not isinstance(chart_section, dict):
        return GanttOptions()

    data: dict[str, Any] = {}
    for key, kind in _PERSISTED.items():
        if key not in chart_section:
            continue
        try:
            data[key] = kind(chart_section[key])
        except (TypeError, ValueError):
            continue
    if "view_mode" in chart_section:
        data["view_mode"] = str(chart_section["view_mode"])
    if "popup_trigger" in chart_section:
        data["popup_trigger"] = str(chart_section["popup_trigger"])
    view_modes = chart_section.get("view_modes")
    if isinstance(view_modes, list):
        data["view_modes"] = [str(m) for m in view_modes]

    return GanttOptions.from_dict(data)


def save_options(project_dir: Path, options: GanttOptions) -> None:
    """Save chart options to .tui-gantt/config.toml."""
    config_path = _get_config_path(project_dir)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    doc = tomlkit.document()
    chart_table = tomlkit.table()
    chart_table.add("view_mode", options.view_mode.value)
    chart_table.add("view_modes", [m.value for m in options.view_modes])
    chart_table.add("popup_trigger", options.popup_trigger)
    for key in _PERSISTED:
        chart_table.add(key, getattr(options, key))
    doc.add("chart", chart_table)

    config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")


# ── Task files (YAML) ───────────────────────────────────────────

def load_task_records(path: Path) -> list[dict[str, Any]]:
    """Read a YAML task list.

    Accepts either a top-level list or a mapping with a ``tasks`` key.
    Entries that are not mappings are skipped. Raises ``OSError`` or
    ``yaml.YAMLError`` when the file cannot be read.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("tasks", [])
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


def resolve_tasks_path(path: Path) -> Path:
    """A directory resolves to its ``tasks.yaml``; a file is used as is."""
    if path.is_dir():
        return path / TASKS_FILE
    return path

