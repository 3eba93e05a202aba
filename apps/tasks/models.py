import uuid
from django.db import models

from .choices import TaskPriority, TaskStatus


class Task(models.Model):
    """
    A single item on a user's personal task list.

    Ownership is stored as a bare UUID (no FK) so the tasks app stays
    independent of identity; every query goes through owner_scope().
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.UUIDField(db_index=True, editable=False)

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=TaskStatus.choices,
        default=TaskStatus.TODO
    )
    priority = models.CharField(
        max_length=10,
        choices=TaskPriority.choices,
        default=TaskPriority.MEDIUM
    )
    category = models.CharField(max_length=100, blank=True, default='')
    due_date = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['owner_id', 'status'], name='task_owner_status_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"
