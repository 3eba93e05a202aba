"""
API Schemas for Tasks app.

Field names follow the model; the wire names used by existing clients
(_id, userId, dueDate, createdAt, ...) are aliases. Routes returning these
schemas set by_alias=True.
"""
from typing import Optional
from uuid import UUID
from datetime import datetime
from ninja import Schema
from pydantic import Field

from .choices import TaskPriority, TaskStatus


# =============================================================================
# Request Schemas
# =============================================================================

class TaskIn(Schema):
    """Body for POST /tasks. Title is checked by the service, not here."""
    title: Optional[str] = None
    description: Optional[str] = ""
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = Field(None, alias='dueDate')
    category: Optional[str] = ""


class TaskUpdate(Schema):
    """Body for PUT /tasks/{id}. Only fields present in the body are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = Field(None, alias='dueDate')
    category: Optional[str] = None


# =============================================================================
# Response Schemas
# =============================================================================

class TaskOut(Schema):
    id: UUID = Field(..., serialization_alias='_id')
    title: str
    description: str
    status: str
    priority: str
    due_date: Optional[datetime] = Field(None, serialization_alias='dueDate')
    category: str
    owner_id: UUID = Field(..., serialization_alias='userId')
    created_at: datetime = Field(..., serialization_alias='createdAt')
    updated_at: datetime = Field(..., serialization_alias='updatedAt')


class TaskStatsOut(Schema):
    total: int
    completed: int
    in_progress: int = Field(..., serialization_alias='inProgress')
    todo: int
    high_priority: int = Field(..., serialization_alias='highPriority')


class MessageOut(Schema):
    message: str
