# ==========================================
# apps/activity/admin.py
# ==========================================

from django.contrib import admin
from .models import ActivityLog


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    """Read-only view of the activity log."""

    list_display = ['created_at', 'action', 'entity_type', 'entity_id', 'user_name', 'details']
    list_filter = ['action', 'entity_type', 'created_at']
    search_fields = ['details', 'user_name', 'entity_id']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
