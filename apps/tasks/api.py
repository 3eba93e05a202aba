"""
Tasks API endpoints.

Every route runs behind JWTAuth; request.auth is the calling User and all
service calls are scoped to that user's id.
"""
from typing import List, Optional
from datetime import datetime
from django.http import HttpRequest
from ninja import Router

from apps.identity.jwt_auth import JWTAuth
from . import services
from .query import TaskFilter
from .schemas import MessageOut, TaskIn, TaskOut, TaskStatsOut, TaskUpdate

router = Router(tags=["Tasks"], auth=JWTAuth())


@router.get("", response=List[TaskOut], by_alias=True)
def list_tasks(
    request: HttpRequest,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    due_from: Optional[datetime] = None,
    due_to: Optional[datetime] = None,
    sort: Optional[str] = None,
):
    """
    List the caller's tasks.

    Query Parameters:
    - status, priority, category: exact match (unknown status/priority is a 400)
    - search: case-insensitive match in title or description
    - due_from, due_to: inclusive due-date window (undated tasks are dropped)
    - sort: date (default, newest first), priority or title
    """
    criteria = TaskFilter.from_params(
        status=status,
        priority=priority,
        category=category,
        search=search,
        due_from=due_from,
        due_to=due_to,
    )
    return services.list_tasks(request.auth.id, criteria, sort)


@router.get("/stats", response=TaskStatsOut, by_alias=True)
def get_stats(
    request: HttpRequest,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    due_from: Optional[datetime] = None,
    due_to: Optional[datetime] = None,
):
    """
    Summary counts over the caller's tasks, narrowed by the same filters as
    the list endpoint.
    """
    criteria = TaskFilter.from_params(
        status=status,
        priority=priority,
        category=category,
        search=search,
        due_from=due_from,
        due_to=due_to,
    )
    return services.get_task_stats(request.auth.id, criteria)


@router.get("/{task_id}", response=TaskOut, by_alias=True)
def get_task(request: HttpRequest, task_id: str):
    return services.get_task(request.auth.id, task_id)


@router.post("", response={201: TaskOut}, by_alias=True)
def create_task(request: HttpRequest, payload: TaskIn):
    """
    Create a task. Title is required; status defaults to todo and priority
    to medium.
    """
    task = services.create_task(request.auth.id, payload.model_dump())
    return 201, task


@router.put("/{task_id}", response=TaskOut, by_alias=True)
def update_task(request: HttpRequest, task_id: str, payload: TaskUpdate):
    """
    Update the fields present in the body. Owner and timestamps are not
    writable.
    """
    return services.update_task(request.auth.id, task_id, payload.model_dump(exclude_unset=True))


@router.delete("/{task_id}", response=MessageOut)
def delete_task(request: HttpRequest, task_id: str):
    services.delete_task(request.auth.id, task_id)
    return {"message": "Task deleted successfully"}
