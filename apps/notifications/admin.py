# ==========================================
# apps/notifications/admin.py
# ==========================================

from django.contrib import admin
from .models import NotificationSettings


@admin.register(NotificationSettings)
class NotificationSettingsAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'admin_emails', 'accountant_emails', 'updated_at']
    readonly_fields = ['updated_at']

    def has_add_permission(self, request):
        # Single row, created on first load
        return not NotificationSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
