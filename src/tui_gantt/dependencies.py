"""Task dependency graph: who depends on whom."""

from __future__ import annotations

from collections import deque
from typing import Iterable

from tui_gantt.models import Task


class DependencyGraph:
    """Forward adjacency map (id -> ids that depend on it).

    Cycles and self-references are allowed in the input; traversal is bounded
    by a visited set.
    """

    def __init__(self, dependency_map: dict[str, list[str]], predecessor_map: dict[str, list[str]]) -> None:
        self.dependency_map = dependency_map
        self._predecessors = predecessor_map

    @classmethod
    def build(cls, tasks: Iterable[Task]) -> DependencyGraph:
        dependency_map: dict[str, list[str]] = {}
        predecessor_map: dict[str, list[str]] = {}
        for task in tasks:
            predecessor_map[task.id] = list(task.dependencies)
            for dep in task.dependencies:
                dependents = dependency_map.setdefault(dep, [])
                if task.id not in dependents:
                    dependents.append(task.id)
        return cls(dependency_map, predecessor_map)

    def dependents(self, task_id: str) -> list[str]:
        """Direct dependents of a task."""
        return list(self.dependency_map.get(task_id, []))

    def predecessors(self, task_id: str) -> list[str]:
        """Declared dependencies of a task that exist in the graph."""
        return [d for d in self._predecessors.get(task_id, []) if d in self._predecessors]

    def all_dependents(self, task_id: str, exclude: set[str] | None = None) -> list[str]:
        """Every transitive dependent of *task_id*, breadth-first, without duplicates.

        *task_id* itself is never returned. Ids in *exclude* are neither
        returned nor traversed through.
        """
        exclude = exclude or set()
        visited: set[str] = {task_id}
        out: list[str] = []
        queue = deque(self.dependency_map.get(task_id, []))
        while queue:
            current = queue.popleft()
            if current in visited or current in exclude:
                continue
            visited.add(current)
            out.append(current)
            queue.extend(self.dependency_map.get(current, []))
        return out
