"""Demo task list for --demo mode.

Dates are generated relative to today so the current date always falls
inside the active phase.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any


def _d(today: date, offset: int) -> str:
    return (today + timedelta(days=offset)).isoformat()


def demo_records(today: date | None = None) -> list[dict[str, Any]]:
    """Return grouped demo task records: two phases plus an unscheduled task."""
    today = today or date.today()

    design = {
        "name": "Phase 1: Design",
        "taskList": [
            {"id": "req", "name": "Requirements", "start": _d(today, -12), "end": _d(today, -8),
             "progress": 100, "level": 0},
            {"id": "arch", "name": "Architecture", "start": _d(today, -7), "end": _d(today, -3),
             "progress": 100, "dependencies": "req", "level": 1},
            {"id": "ux", "name": "UX Review", "start": _d(today, -5), "end": _d(today, -1),
             "progress": 60, "dependencies": "req", "level": 2, "overdue": True},
        ],
    }
    build = {
        "name": "Phase 2: Build",
        "taskList": [
            {"id": "core", "name": "Core Engine", "start": _d(today, -2), "end": _d(today, 6),
             "progress": 40, "dependencies": "arch", "level": 1},
            {"id": "ui", "name": "Terminal UI", "start": _d(today, 1), "end": _d(today, 9),
             "progress": 10, "dependencies": "core, ux", "level": 2},
            {"id": "tests", "name": "Test Suite", "start": _d(today, 3), "end": _d(today, 12),
             "progress": 0, "dependencies": "core", "level": 3},
            {"id": "release", "name": "Release", "start": _d(today, 13), "end": _d(today, 14),
             "progress": 0, "dependencies": "ui, tests"},
        ],
    }
    # Start without an end: rendered as an invalid (not draggable) bar
    backlog = {"id": "docs", "name": "Documentation (unscheduled)", "start": _d(today, 8)}
    return [design, build, backlog]
