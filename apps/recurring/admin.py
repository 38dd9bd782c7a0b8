# ==========================================
# apps/recurring/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import RecurringExpense
from .services import set_active


@admin.register(RecurringExpense)
class RecurringExpenseAdmin(admin.ModelAdmin):
    list_display = [
        'description',
        'amount',
        'frequency',
        'provider',
        'start_date',
        'last_generated',
        'active_badge',
    ]
    list_filter = ['frequency', 'is_active']
    search_fields = ['description', 'provider__name', 'concept__name']
    list_select_related = ['provider']
    readonly_fields = ['id', 'generated_dates', 'last_generated', 'created_by', 'created_at', 'updated_at']
    actions = ['activate_templates', 'deactivate_templates']

    def active_badge(self, obj):
        color = '#6B8E5E' if obj.is_active else '#B85C5C'
        label = 'Active' if obj.is_active else 'Paused'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, label
        )
    active_badge.short_description = 'Status'

    @admin.action(description='Activate selected templates')
    def activate_templates(self, request, queryset):
        for template in queryset:
            set_active(template=template, active=True)
        self.message_user(request, f'Activated {queryset.count()} template(s).')

    @admin.action(description='Pause selected templates')
    def deactivate_templates(self, request, queryset):
        for template in queryset:
            set_active(template=template, active=False)
        self.message_user(request, f'Paused {queryset.count()} template(s).')
