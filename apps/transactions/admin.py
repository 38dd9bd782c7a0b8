# ==========================================
# apps/transactions/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Transaction, Payment, TransactionAuditLog, PaymentStatus, TransactionType


STATUS_COLORS = {
    PaymentStatus.PENDIENTE: ('#E5C49A', '#2C1810'),
    PaymentStatus.PARCIAL: ('#A47449', 'white'),
    PaymentStatus.PAGADO: ('#6B8E5E', 'white'),
}


class PaymentInline(admin.TabularInline):
    """Payments are registered through the API so totals stay in sync."""
    model = Payment
    extra = 0
    fields = ['amount', 'date', 'notes', 'created_by', 'created_at']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """
    Admin interface for income/expense records.

    Status, paid total and balance are read-only here; they follow the
    payments.
    """

    list_display = [
        'date',
        'type_badge',
        'amount',
        'total_paid',
        'balance',
        'status_badge',
        'concept',
        'provider',
        'is_recurring',
        'is_active',
    ]
    list_filter = ['type', 'status', 'is_active', 'date', 'general']
    search_fields = ['description', 'division', 'concept__name', 'provider__name']
    list_select_related = ['concept', 'provider']
    date_hierarchy = 'date'
    readonly_fields = [
        'id', 'status', 'total_paid', 'balance', 'attachments',
        'recurring_expense', 'occurrence_date', 'created_by',
        'created_at', 'updated_at',
    ]
    inlines = [PaymentInline]

    def type_badge(self, obj):
        color = '#6B8E5E' if obj.type == TransactionType.ENTRADA else '#B85C5C'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_type_display()
        )
    type_badge.short_description = 'Type'

    def status_badge(self, obj):
        bg, fg = STATUS_COLORS.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def is_recurring(self, obj):
        return obj.is_recurring
    is_recurring.boolean = True
    is_recurring.short_description = 'Recurring'


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['transaction', 'amount', 'date', 'created_by', 'created_at']
    list_filter = ['date']
    search_fields = ['notes', 'transaction__description']
    readonly_fields = ['id', 'transaction', 'amount', 'attachments', 'created_by', 'created_at']
    list_select_related = ['transaction', 'created_by']

    def has_add_permission(self, request):
        return False


@admin.register(TransactionAuditLog)
class TransactionAuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'action', 'transaction_id', 'user', 'reason']
    list_filter = ['action', 'created_at']
    search_fields = ['transaction_id', 'reason', 'user__email']
    readonly_fields = ['action', 'transaction_id', 'user', 'reason', 'snapshot', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
