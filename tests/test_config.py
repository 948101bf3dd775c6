"""Tests for project configuration and task files."""

import pytest
import yaml

from tui_gantt.config import (
    CONFIG_DIR,
    CONFIG_FILE,
    load_options,
    load_task_records,
    resolve_tasks_path,
    save_options,
)
from tui_gantt.models import GanttOptions, ViewMode


def _write_config(tmp_path, text):
    config_dir = tmp_path / CONFIG_DIR
    config_dir.mkdir()
    (config_dir / CONFIG_FILE).write_text(text, encoding="utf-8")


class TestLoadOptions:
    def test_load_nonexistent(self, tmp_path):
        options = load_options(tmp_path)
        assert options.view_mode == ViewMode.DAY
        assert options.popup_trigger == "click"

    def test_load_existing(self, tmp_path):
        _write_config(
            tmp_path,
            """
[chart]
view_mode = "Week"
view_modes = ["Day", "Week", "Month"]
popup_trigger = "mouseover"
bar_height = 30
language = "fr"
inclusive_end = false
unknown_key = "ignored"
""",
        )
        options = load_options(tmp_path)
        assert options.view_mode == ViewMode.WEEK
        assert options.view_modes == (ViewMode.DAY, ViewMode.WEEK, ViewMode.MONTH)
        assert options.popup_trigger == "mouseover"
        assert options.bar_height == 30
        assert options.language == "fr"
        assert options.inclusive_end is False

    def test_invalid_values_fall_back(self, tmp_path):
        _write_config(
            tmp_path,
            """
[chart]
view_mode = "Fortnight"
popup_trigger = "doubleclick"
bar_height = "tall"
""",
        )
        options = load_options(tmp_path)
        assert options.view_mode == ViewMode.DAY
        assert options.popup_trigger == "click"
        assert options.bar_height == GanttOptions().bar_height

    def test_broken_toml_gives_defaults(self, tmp_path):
        _write_config(tmp_path, "[chart\nview_mode = ")
        assert load_options(tmp_path).view_mode == ViewMode.DAY


class TestSaveOptions:
    def test_roundtrip(self, tmp_path):
        options = GanttOptions(view_mode=ViewMode.MONTH, language="es", padding=4)
        save_options(tmp_path, options)
        assert (tmp_path / CONFIG_DIR / CONFIG_FILE).exists()
        loaded = load_options(tmp_path)
        assert loaded.view_mode == ViewMode.MONTH
        assert loaded.language == "es"
        assert loaded.padding == 4

    def test_callbacks_not_saved(self, tmp_path):
        options = GanttOptions(on_click=lambda task: None)
        save_options(tmp_path, options)
        text = (tmp_path / CONFIG_DIR / CONFIG_FILE).read_text(encoding="utf-8")
        assert "on_click" not in text


class TestTaskRecords:
    def test_list_form(self, tmp_path):
        path = tmp_path / "tasks.yaml"
        path.write_text(
            "- name: A\n  start: 2024-01-01\n  end: 2024-01-03\n- just a string\n",
            encoding="utf-8",
        )
        records = load_task_records(path)
        assert len(records) == 1
        assert records[0]["name"] == "A"

    def test_mapping_form(self, tmp_path):
        path = tmp_path / "tasks.yaml"
        path.write_text("tasks:\n  - name: A\n  - name: B\n", encoding="utf-8")
        assert [r["name"] for r in load_task_records(path)] == ["A", "B"]

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "tasks.yaml"
        path.write_text("- name: [unclosed\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            load_task_records(path)

    def test_resolve_tasks_path(self, tmp_path):
        assert resolve_tasks_path(tmp_path) == tmp_path / "tasks.yaml"
        f = tmp_path / "plan.yaml"
        assert resolve_tasks_path(f) == f
