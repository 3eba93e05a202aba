"""
Task query engine: filtering, sorting and summary counts.

Everything here is pure and works on any sequence of task-shaped objects
(ORM rows on the server, RemoteTask records in the API client). Inputs are
never mutated; every function returns a new list or value.
"""
import unicodedata
from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import Iterable, List, Optional, Sequence

from .choices import SEVERITY_RANK, SortKey, TaskPriority, TaskStatus


@dataclass(frozen=True)
class DueRange:
    """Inclusive due-date window. Either end may be open."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass(frozen=True)
class TaskFilter:
    """
    Query constraints over a task collection.

    Every field is optional and empty values impose no constraint. A
    due_range that is present excludes undated tasks even when both of its
    ends are open.
    """
    status: Optional[str] = None
    priority: Optional[str] = None
    category: Optional[str] = None
    search: Optional[str] = None
    due_range: Optional[DueRange] = None

    @classmethod
    def from_params(
        cls,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        due_from: Optional[datetime] = None,
        due_to: Optional[datetime] = None,
    ) -> "TaskFilter":
        due_range = None
        if due_from is not None or due_to is not None:
            due_range = DueRange(start=due_from, end=due_to)
        return cls(
            status=status or None,
            priority=priority or None,
            category=category or None,
            search=search or None,
            due_range=due_range,
        )


@dataclass(frozen=True)
class TaskStats:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    todo: int = 0
    high_priority: int = 0


def as_utc(value) -> datetime:
    """Bare dates and naive datetimes are read as UTC."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _matches_search(task, term: str) -> bool:
    needle = term.casefold()
    return (
        needle in (task.title or "").casefold()
        or needle in (task.description or "").casefold()
    )


def _in_due_range(task, due_range: DueRange) -> bool:
    if task.due_date is None:
        return False
    due = as_utc(task.due_date)
    if due_range.start is not None and due < as_utc(due_range.start):
        return False
    if due_range.end is not None and due > as_utc(due_range.end):
        return False
    return True


def matches(task, criteria: TaskFilter) -> bool:
    """True when the task satisfies every active constraint in criteria."""
    if criteria.status and task.status != criteria.status:
        return False
    if criteria.priority and task.priority != criteria.priority:
        return False
    if criteria.category and task.category != criteria.category:
        return False
    if criteria.search and not _matches_search(task, criteria.search):
        return False
    if criteria.due_range is not None and not _in_due_range(task, criteria.due_range):
        return False
    return True


def filter_tasks(tasks: Iterable, criteria: Optional[TaskFilter] = None) -> List:
    """Return the tasks matching criteria, in their original order."""
    if criteria is None:
        return list(tasks)
    return [task for task in tasks if matches(task, criteria)]


def resolve_sort_key(value) -> SortKey:
    """Map user input onto a SortKey; anything unrecognized means date."""
    try:
        return SortKey(value)
    except ValueError:
        return SortKey.DATE


def _title_key(task):
    title = task.title or ""
    decomposed = unicodedata.normalize("NFKD", title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), title)


def _severity(task) -> int:
    return SEVERITY_RANK.get(task.priority, len(SEVERITY_RANK))


def sort_tasks(tasks: Iterable, key=SortKey.DATE) -> List:
    """
    Return a new list ordered by key.

    - date: newest created first
    - priority: high, medium, low
    - title: alphabetical, ignoring case and accents

    Sorting is stable, so ties keep their incoming order.
    """
    key = resolve_sort_key(key)

    if key == SortKey.PRIORITY:
        return sorted(tasks, key=_severity)
    if key == SortKey.TITLE:
        return sorted(tasks, key=_title_key)
    return sorted(tasks, key=lambda task: as_utc(task.created_at), reverse=True)


def task_stats(tasks: Sequence) -> TaskStats:
    total = completed = in_progress = todo = high_priority = 0

    for task in tasks:
        total += 1
        if task.status == TaskStatus.COMPLETED:
            completed += 1
        elif task.status == TaskStatus.IN_PROGRESS:
            in_progress += 1
        elif task.status == TaskStatus.TODO:
            todo += 1
        if task.priority == TaskPriority.HIGH:
            high_priority += 1

    return TaskStats(
        total=total,
        completed=completed,
        in_progress=in_progress,
        todo=todo,
        high_priority=high_priority,
    )
