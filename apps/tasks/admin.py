from django.contrib import admin
from .models import Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'status', 'priority', 'category', 'due_date', 'owner_id', 'created_at']
    list_filter = ['status', 'priority', 'category']
    search_fields = ['title', 'description']
    readonly_fields = ['owner_id', 'created_at', 'updated_at']
