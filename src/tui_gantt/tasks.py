"""Normalize host task records into chart tasks."""

from __future__ import annotations

import random
import string
from typing import Any, Iterable

from tui_gantt import date_utils
from tui_gantt.models import Task, TaskGroup, TaskWarning

DEFAULT_SPAN_DAYS = 2
MAX_SPAN_YEARS = 10

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id(name: str) -> str:
    """Build a task id from its name plus a random base-36 suffix."""
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(10))
    return f"{name}_{suffix}"


def parse_dependencies(value: Any) -> list[str]:
    """Parse a comma-separated string (or a list) into unique, non-blank ids."""
    if not value:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(v) for v in value]
    result: list[str] = []
    for item in items:
        item = item.strip()
        if item and item not in result:
            result.append(item)
    return result


def _parse_progress(value: Any, index: int, name: str, warnings: list[TaskWarning]) -> int:
    if value is None or value == "":
        return 0
    try:
        progress = int(float(value))
    except (TypeError, ValueError):
        warnings.append(TaskWarning(index, name, f"Invalid progress: '{value}', defaulting to 0"))
        return 0
    return max(0, min(100, progress))


def _parse_level(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _parse_date(value: Any, label: str, index: int, name: str, warnings: list[TaskWarning]):
    if value is None or value == "":
        return None
    parsed = date_utils.parse(value)
    if parsed is None:
        warnings.append(TaskWarning(index, name, f"Invalid {label} date: '{value}'"))
    return parsed


def normalize_task(
    record: dict[str, Any],
    index: int,
    warnings: list[TaskWarning],
    group: str = "",
    inclusive_end: bool = True,
) -> Task:
    """Resolve one input record into a Task, recording recoverable problems."""
    name = str(record.get("name", ""))
    start = _parse_date(record.get("start"), "start", index, name, warnings)
    end = _parse_date(record.get("end"), "end", index, name, warnings)

    if start is not None and end is not None:
        if date_utils.diff(end, start, date_utils.YEAR) > MAX_SPAN_YEARS:
            warnings.append(TaskWarning(index, name, f"Span exceeds {MAX_SPAN_YEARS} years"))
            end = None

    invalid = start is None or end is None

    if start is None and end is None:
        start = date_utils.today()
        end = date_utils.add(start, DEFAULT_SPAN_DAYS, date_utils.DAY)
    elif start is None:
        start = date_utils.add(end, -DEFAULT_SPAN_DAYS, date_utils.DAY)
    elif end is None:
        end = date_utils.add(start, DEFAULT_SPAN_DAYS, date_utils.DAY)

    # A date-only end covers its whole final day
    if inclusive_end and all(v == 0 for v in date_utils.get_date_values(end)[3:]):
        end = date_utils.add(end, 24, date_utils.HOUR)

    task_id = str(record.get("id") or "") or generate_id(name)

    return Task(
        id=task_id,
        name=name,
        index=index,
        start_date=start,
        end_date=end,
        start=record.get("start"),
        end=record.get("end"),
        dependencies=parse_dependencies(record.get("dependencies")),
        progress=_parse_progress(record.get("progress"), index, name, warnings),
        level=_parse_level(record.get("level")),
        custom_class=str(record.get("custom_class") or ""),
        overdue=bool(record.get("overdue", False)),
        group=group,
        invalid=invalid,
        record=record,
    )


def _group_tasks(record: dict[str, Any]) -> list[dict[str, Any]] | None:
    for key in ("tasks", "taskList"):
        value = record.get(key)
        if isinstance(value, list):
            return value
    return None


def normalize_tasks(
    records: Iterable[dict[str, Any]],
    inclusive_end: bool = True,
) -> tuple[list[Task], list[TaskGroup], list[TaskWarning]]:
    """Flatten groups and normalize every record in stable input order.

    Returns (tasks, groups, warnings). Never raises on bad task data.
    """
    tasks: list[Task] = []
    groups: list[TaskGroup] = []
    warnings: list[TaskWarning] = []
    seen_ids: set[str] = set()

    def _add(record: dict[str, Any], group: str) -> None:
        task = normalize_task(record, len(tasks), warnings, group=group, inclusive_end=inclusive_end)
        if task.id in seen_ids:
            warnings.append(TaskWarning(task.index, task.name, f"Duplicate id '{task.id}', regenerated"))
            task.id = generate_id(task.name)
        seen_ids.add(task.id)
        tasks.append(task)

    for record in records:
        if not isinstance(record, dict):
            warnings.append(TaskWarning(len(tasks), "", f"Ignored non-mapping task entry: {record!r}"))
            continue
        children = _group_tasks(record)
        if children is None:
            _add(record, "")
            continue
        group_name = str(record.get("name", ""))
        first = len(tasks)
        for child in children:
            if isinstance(child, dict):
                _add(child, group_name)
        if len(tasks) > first:
            groups.append(
                TaskGroup(group_name, first, len(tasks) - first, overdue=bool(record.get("overdue", False)))
            )

    return tasks, groups, warnings
