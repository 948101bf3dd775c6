"""Tests for task normalization."""

from datetime import datetime

from tui_gantt.tasks import generate_id, normalize_tasks, parse_dependencies


class TestNormalizeTask:
    def test_full_record(self):
        tasks, groups, warnings = normalize_tasks([
            {"id": "a", "name": "Alpha", "start": "2024-01-01", "end": "2024-01-03",
             "progress": 40, "dependencies": "x, y", "level": 2, "custom_class": "hot"},
        ])
        t = tasks[0]
        assert t.id == "a"
        assert t.start_date == datetime(2024, 1, 1)
        # Date-only end covers its whole final day
        assert t.end_date == datetime(2024, 1, 4)
        assert t.inclusive_end == datetime(2024, 1, 3, 23, 59, 59)
        assert t.dependencies == ["x", "y"]
        assert t.progress == 40
        assert t.level == 2
        assert t.custom_class == "hot"
        assert not t.invalid
        assert groups == []
        assert warnings == []

    def test_end_with_time_is_not_extended(self):
        tasks, _, _ = normalize_tasks([{"name": "T", "start": "2024-01-01", "end": "2024-01-03 12:00"}])
        assert tasks[0].end_date == datetime(2024, 1, 3, 12)

    def test_exclusive_end_option(self):
        tasks, _, _ = normalize_tasks([{"name": "T", "start": "2024-01-01", "end": "2024-01-03"}], inclusive_end=False)
        assert tasks[0].end_date == datetime(2024, 1, 3)

    def test_start_only_is_invalid(self):
        tasks, _, _ = normalize_tasks([{"name": "T", "start": "2024-01-01"}])
        t = tasks[0]
        assert t.invalid
        assert t.start_date == datetime(2024, 1, 1)
        assert t.inclusive_end.date() == datetime(2024, 1, 3).date()

    def test_end_only_is_invalid(self):
        tasks, _, _ = normalize_tasks([{"name": "T", "end": "2024-01-10"}])
        t = tasks[0]
        assert t.invalid
        assert t.start_date == datetime(2024, 1, 8)

    def test_no_dates_defaults_to_today(self):
        tasks, _, _ = normalize_tasks([{"name": "T"}])
        t = tasks[0]
        assert t.invalid
        assert t.start_date.date() == datetime.now().date()

    def test_span_over_ten_years_drops_end(self):
        tasks, _, warnings = normalize_tasks([{"name": "T", "start": "2000-01-01", "end": "2020-01-01"}])
        assert tasks[0].invalid
        assert tasks[0].end_date == datetime(2000, 1, 4)
        assert "10 years" in warnings[0].message

    def test_unparseable_date_warns(self):
        tasks, _, warnings = normalize_tasks([{"name": "T", "start": "soon", "end": "2024-01-03"}])
        assert tasks[0].invalid
        assert warnings[0].task_name == "T"
        assert "start" in warnings[0].message

    def test_progress_clamped_and_invalid_warns(self):
        tasks, _, warnings = normalize_tasks([
            {"name": "A", "start": "2024-01-01", "end": "2024-01-02", "progress": 150},
            {"name": "B", "start": "2024-01-01", "end": "2024-01-02", "progress": "lots"},
        ])
        assert tasks[0].progress == 100
        assert tasks[1].progress == 0
        assert len(warnings) == 1
        assert str(warnings[0]).startswith("#1 B:")

    def test_generated_id(self):
        tasks, _, _ = normalize_tasks([{"name": "Write docs", "start": "2024-01-01", "end": "2024-01-02"}])
        assert tasks[0].id.startswith("Write docs_")
        assert len(tasks[0].id) == len("Write docs_") + 10

    def test_duplicate_ids_regenerated(self):
        tasks, _, warnings = normalize_tasks([
            {"id": "a", "name": "One", "start": "2024-01-01", "end": "2024-01-02"},
            {"id": "a", "name": "Two", "start": "2024-01-01", "end": "2024-01-02"},
        ])
        assert tasks[0].id == "a"
        assert tasks[1].id != "a"
        assert "Duplicate" in warnings[0].message

    def test_record_not_mutated(self):
        record = {"name": "T", "start": "2024-01-01", "end": "2024-01-02"}
        normalize_tasks([record])
        assert record == {"name": "T", "start": "2024-01-01", "end": "2024-01-02"}


class TestGroups:
    def test_group_flattening_keeps_order(self):
        tasks, groups, _ = normalize_tasks([
            {"name": "Loose", "start": "2024-01-01", "end": "2024-01-02"},
            {"name": "Phase", "taskList": [
                {"name": "P1", "start": "2024-01-01", "end": "2024-01-02"},
                {"name": "P2", "start": "2024-01-02", "end": "2024-01-03"},
            ]},
        ])
        assert [t.name for t in tasks] == ["Loose", "P1", "P2"]
        assert [t.index for t in tasks] == [0, 1, 2]
        assert tasks[1].group == "Phase"
        assert groups[0].first_index == 1
        assert groups[0].last_index == 2

    def test_non_mapping_entry_warns(self):
        tasks, _, warnings = normalize_tasks(["oops"])
        assert tasks == []
        assert len(warnings) == 1


class TestParseDependencies:
    def test_comma_string(self):
        assert parse_dependencies(" a, b ,,a ") == ["a", "b"]

    def test_list_and_empty(self):
        assert parse_dependencies(["a", "b"]) == ["a", "b"]
        assert parse_dependencies(None) == []
        assert parse_dependencies("") == []


def test_generate_id_is_random():
    assert generate_id("t") != generate_id("t")
