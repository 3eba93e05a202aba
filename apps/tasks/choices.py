from django.db import models


class TaskStatus(models.TextChoices):
    TODO = 'todo', 'To Do'
    IN_PROGRESS = 'in-progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'


class TaskPriority(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'


class SortKey(models.TextChoices):
    DATE = 'date', 'Newest first'
    PRIORITY = 'priority', 'Highest priority first'
    TITLE = 'title', 'Title (A-Z)'


# Lower rank sorts first.
SEVERITY_RANK = {
    TaskPriority.HIGH.value: 0,
    TaskPriority.MEDIUM.value: 1,
    TaskPriority.LOW.value: 2,
}
