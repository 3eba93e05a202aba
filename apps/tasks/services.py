"""
Task access layer.

Every read and write is scoped to the calling owner through owner_scope().
Tasks belonging to someone else are reported exactly like tasks that do
not exist. Equality constraints are pushed to the database; free-text
search and the due-date window run in memory through the query engine.
"""
import logging
from datetime import date, datetime, timezone as dt_timezone
from typing import List, Optional
from uuid import UUID

from django.db.models import Q
from django.utils.dateparse import parse_date, parse_datetime

from apps.core.exceptions import NotFound, Unauthorized, ValidationError
from .choices import TaskPriority, TaskStatus
from .models import Task
from .query import TaskFilter, TaskStats, filter_tasks, sort_tasks, task_stats

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('title', 'description', 'status', 'priority', 'due_date', 'category')


def owner_scope(owner_id) -> Q:
    """Predicate selecting the tasks a caller may see."""
    return Q(owner_id=owner_id)


def store_predicate(criteria: TaskFilter) -> Q:
    """The part of a filter the database can evaluate directly."""
    predicate = Q()
    if criteria.status:
        predicate &= Q(status=criteria.status)
    if criteria.priority:
        predicate &= Q(priority=criteria.priority)
    if criteria.category:
        predicate &= Q(category=criteria.category)
    return predicate


def _require_owner(owner_id):
    if not owner_id:
        raise Unauthorized("Authentication required")
    return owner_id


def _parse_task_id(task_id) -> Optional[UUID]:
    if isinstance(task_id, UUID):
        return task_id
    try:
        return UUID(str(task_id))
    except ValueError:
        return None


def _get_owned_task(owner_id, task_id) -> Task:
    pk = _parse_task_id(task_id)
    if pk is None:
        raise NotFound("Task not found")
    try:
        return Task.objects.get(owner_scope(owner_id), id=pk)
    except Task.DoesNotExist:
        raise NotFound("Task not found")


def _clean_due_date(value) -> Optional[datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, str):
        parsed = parse_datetime(value) or parse_date(value)
        if parsed is None:
            raise ValidationError(f"Invalid due date: {value}")
        value = parsed
    if not isinstance(value, datetime):
        if not isinstance(value, date):
            raise ValidationError(f"Invalid due date: {value}")
        value = datetime.combine(value, datetime.min.time())
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt_timezone.utc)
    return value


def _check_length(name: str, value: str) -> str:
    limit = Task._meta.get_field(name).max_length
    if len(value) > limit:
        raise ValidationError(f"{name.capitalize()} must be at most {limit} characters")
    return value


def _clean_criteria(criteria: TaskFilter) -> TaskFilter:
    """Reject unknown status/priority values; blanks are no constraint."""
    if criteria.status:
        _clean_choice('status', criteria.status, TaskStatus)
    if criteria.priority:
        _clean_choice('priority', criteria.priority, TaskPriority)
    return criteria


def _clean_choice(name: str, value, choices) -> str:
    if value not in choices.values:
        raise ValidationError(f"Invalid {name}: {value}")
    return choices(value).value


def _clean_fields(fields: dict, creating: bool) -> dict:
    """
    Validate the editable subset of fields.

    On create a None status/priority means "use the default"; on update a
    present key always has to carry a valid value.
    """
    cleaned = {}
    for name, value in fields.items():
        if name not in EDITABLE_FIELDS:
            continue

        if name == 'title':
            if not isinstance(value, str) or not value.strip():
                raise ValidationError("Title is required")
            cleaned['title'] = _check_length('title', value.strip())
        elif name == 'status':
            if value is None and creating:
                continue
            cleaned['status'] = _clean_choice('status', value, TaskStatus)
        elif name == 'priority':
            if value is None and creating:
                continue
            cleaned['priority'] = _clean_choice('priority', value, TaskPriority)
        elif name == 'due_date':
            cleaned['due_date'] = _clean_due_date(value)
        elif name == 'category':
            cleaned['category'] = _check_length('category', value or '')
        else:
            cleaned[name] = value or ''
    return cleaned


def _fetch_snapshot(owner_id, criteria: TaskFilter) -> List[Task]:
    _clean_criteria(criteria)
    queryset = Task.objects.filter(owner_scope(owner_id), store_predicate(criteria))
    return filter_tasks(list(queryset), criteria)


# =============================================================================
# Queries
# =============================================================================

def list_tasks(owner_id, criteria: TaskFilter = None, sort_key=None) -> List[Task]:
    """
    List the owner's tasks matching criteria, ordered by sort_key.

    sort_key defaults to newest first; unknown keys fall back to it.
    """
    _require_owner(owner_id)
    criteria = criteria or TaskFilter()
    return sort_tasks(_fetch_snapshot(owner_id, criteria), sort_key)


def get_task(owner_id, task_id) -> Task:
    _require_owner(owner_id)
    return _get_owned_task(owner_id, task_id)


def get_task_stats(owner_id, criteria: TaskFilter = None) -> TaskStats:
    """Summary counts over the owner's tasks, optionally narrowed by criteria."""
    _require_owner(owner_id)
    return task_stats(_fetch_snapshot(owner_id, criteria or TaskFilter()))


# =============================================================================
# Mutations
# =============================================================================

def create_task(owner_id, fields: dict) -> Task:
    """
    Create a task for owner_id.

    Title is required. Status defaults to todo and priority to medium.
    """
    _require_owner(owner_id)
    cleaned = _clean_fields(fields, creating=True)
    if 'title' not in cleaned:
        raise ValidationError("Title is required")

    task = Task.objects.create(owner_id=owner_id, **cleaned)
    logger.info(f"Created task {task.id} for owner {owner_id}")
    return task


def update_task(owner_id, task_id, fields: dict) -> Task:
    _require_owner(owner_id)
    task = _get_owned_task(owner_id, task_id)
    cleaned = _clean_fields(fields, creating=False)

    for attr, value in cleaned.items():
        setattr(task, attr, value)
    task.save()
    logger.info(f"Updated task {task.id} fields={sorted(cleaned)}")
    return task


def delete_task(owner_id, task_id) -> None:
    _require_owner(owner_id)
    pk = _parse_task_id(task_id)
    if pk is None:
        raise NotFound("Task not found")

    deleted, _ = Task.objects.filter(owner_scope(owner_id), id=pk).delete()
    if not deleted:
        raise NotFound("Task not found")
    logger.info(f"Deleted task {pk} for owner {owner_id}")
