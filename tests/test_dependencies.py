"""Tests for the dependency graph."""

from tui_gantt.dependencies import DependencyGraph
from tui_gantt.tasks import normalize_tasks


def _graph(*specs):
    records = [
        {"id": tid, "name": tid, "start": "2024-01-01", "end": "2024-01-02", "dependencies": deps}
        for tid, deps in specs
    ]
    tasks, _, _ = normalize_tasks(records)
    return DependencyGraph.build(tasks)


class TestDependencyGraph:
    def test_direct_dependents(self):
        g = _graph(("a", ""), ("b", "a"), ("c", "a"))
        assert g.dependents("a") == ["b", "c"]
        assert g.dependents("b") == []

    def test_transitive_breadth_first(self):
        g = _graph(("a", ""), ("b", "a"), ("c", "b"), ("d", "a"))
        assert g.all_dependents("a") == ["b", "d", "c"]

    def test_diamond_has_no_duplicates(self):
        g = _graph(("a", ""), ("b", "a"), ("c", "a"), ("d", "b, c"))
        assert g.all_dependents("a") == ["b", "c", "d"]

    def test_cycle_terminates(self):
        g = _graph(("a", "c"), ("b", "a"), ("c", "b"))
        assert sorted(g.all_dependents("a")) == ["b", "c"]

    def test_self_reference(self):
        g = _graph(("a", "a"))
        assert g.all_dependents("a") == []

    def test_exclude_blocks_traversal(self):
        g = _graph(("a", ""), ("b", "a"), ("c", "b"))
        assert g.all_dependents("a", exclude={"b"}) == []

    def test_predecessors_skip_unknown_ids(self):
        g = _graph(("a", ""), ("b", "a, ghost"))
        assert g.predecessors("b") == ["a"]
        assert g.predecessors("nobody") == []
