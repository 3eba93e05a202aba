from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['email', 'name', 'is_active', 'is_staff', 'date_joined']
    search_fields = ['email', 'name']
    ordering = ['email']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {'fields': ('name',)}),
    )
