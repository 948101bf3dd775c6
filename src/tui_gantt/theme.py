"""YAML-based centralized color system for TUI Gantt.

Loads colors from default_theme.yaml and optionally merges
project-level overrides from {project_dir}/.tui-gantt/theme.yaml.
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path
from typing import NamedTuple

import yaml

from tui_gantt.bar import level_name
from tui_gantt.models import Task


class ColorPair(NamedTuple):
    """A pair of colors for dark and light themes."""

    dark: str
    light: str

    def resolve(self, is_dark: bool) -> str:
        return self.dark if is_dark else self.light


# ── Module-level variables (populated by _apply) ──────────────────

BAR_COLORS: dict[str, ColorPair]
PROGRESS_COLORS: dict[str, ColorPair]
BAR_OVERDUE: ColorPair
BAR_INVALID: ColorPair
PROGRESS_OVERDUE: ColorPair

GRID_HEADER: ColorPair
GRID_TICK: ColorPair
GRID_THICK_TICK: ColorPair
GRID_TODAY_MARKER: ColorPair
GRID_GROUP_BAND: ColorPair
GRID_ACTIVE_BAR: ColorPair

STATUSBAR_WARNING: ColorPair
WARNING_ICON: ColorPair
POPUP_TITLE: ColorPair


# ── Internal helpers ──────────────────────────────────────────────

def _load_yaml(path: Path) -> dict:
    """Load a YAML file and return a dict (empty dict on error)."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except Exception:
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (returns a new dict)."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _pair(d: dict) -> ColorPair:
    """Convert a {dark: ..., light: ...} dict to a ColorPair."""
    return ColorPair(str(d.get("dark", "white")), str(d.get("light", "white")))


def _apply(data: dict) -> None:
    """Map parsed YAML data onto module-level constants."""
    mod = sys.modules[__name__]

    # ── Bars ──
    bar = data.get("bar", {})
    progress = data.get("progress", {})
    levels = ("zero", "one", "two", "three")
    mod.BAR_COLORS = {name: _pair(bar.get(name, {})) for name in levels}
    mod.PROGRESS_COLORS = {name: _pair(progress.get(name, {})) for name in levels}
    mod.BAR_OVERDUE = _pair(bar.get("overdue", {}))
    mod.BAR_INVALID = _pair(bar.get("invalid", {}))
    mod.PROGRESS_OVERDUE = _pair(progress.get("overdue", {}))

    # ── Grid ──
    grid = data.get("grid", {})
    mod.GRID_HEADER = _pair(grid.get("header", {}))
    mod.GRID_TICK = _pair(grid.get("tick", {}))
    mod.GRID_THICK_TICK = _pair(grid.get("thick_tick", {}))
    mod.GRID_TODAY_MARKER = _pair(grid.get("today_marker", {}))
    mod.GRID_GROUP_BAND = _pair(grid.get("group_band", {}))
    mod.GRID_ACTIVE_BAR = _pair(grid.get("active_bar", {"dark": "reverse", "light": "reverse"}))

    # ── UI ──
    ui = data.get("ui", {})
    mod.STATUSBAR_WARNING = _pair(ui.get("statusbar_warning", {}))
    mod.WARNING_ICON = _pair(ui.get("warning_icon", {}))
    mod.POPUP_TITLE = _pair(ui.get("popup_title", {}))


# ── Lookups ───────────────────────────────────────────────────────

def bar_color(task: Task) -> ColorPair:
    """Bar fill color, following the bar's CSS class rules."""
    if task.invalid:
        return BAR_INVALID
    if task.overdue:
        return BAR_OVERDUE
    return BAR_COLORS[level_name(task.level)]


def progress_color(task: Task) -> ColorPair:
    if task.overdue:
        return PROGRESS_OVERDUE
    return PROGRESS_COLORS[level_name(task.level)]


# ── Public API ────────────────────────────────────────────────────

def init_theme(project_dir: Path) -> Path:
    """Copy default_theme.yaml → {project_dir}/.tui-gantt/theme.yaml.

    Raises FileExistsError if the destination already exists.
    """
    dest = project_dir / ".tui-gantt" / "theme.yaml"
    if dest.exists():
        raise FileExistsError(str(dest))
    dest.parent.mkdir(parents=True, exist_ok=True)
    src = Path(__file__).parent / "default_theme.yaml"
    shutil.copy2(src, dest)
    return dest


def load_theme(project_dir: Path | None = None) -> None:
    """Load the default theme and optionally merge project overrides."""
    default_path = Path(__file__).parent / "default_theme.yaml"
    data = _load_yaml(default_path)

    if project_dir is not None:
        override_path = project_dir / ".tui-gantt" / "theme.yaml"
        if override_path.is_file():
            override = _load_yaml(override_path)
            if override:
                data = _deep_merge(data, override)

    _apply(data)


# Apply default theme on module import
load_theme()
