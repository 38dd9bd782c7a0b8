from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class TransactionType(models.TextChoices):
    ENTRADA = 'entrada', 'Entrada'
    SALIDA = 'salida', 'Salida'


class PaymentStatus(models.TextChoices):
    PENDIENTE = 'pendiente', 'Pendiente'
    PARCIAL = 'parcial', 'Parcial'
    PAGADO = 'pagado', 'Pagado'


class Transaction(models.Model):
    """Income (entrada) or expense (salida) record, settled by payments."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    type = models.CharField(max_length=10, choices=TransactionType.choices)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    date = models.DateField()
    description = models.CharField(max_length=500, blank=True)
    division = models.CharField(max_length=100, blank=True)

    # Classification
    general = models.ForeignKey(
        'catalogs.General',
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    concept = models.ForeignKey(
        'catalogs.Concept',
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    subconcept = models.ForeignKey(
        'catalogs.Subconcept',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transactions'
    )
    # Preset description picked from the concept's catalog
    description_item = models.ForeignKey(
        'catalogs.Description',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transactions'
    )
    # Required for salida
    provider = models.ForeignKey(
        'catalogs.Provider',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transactions'
    )

    # Payment state, kept in sync with payments by the status updater
    status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDIENTE
    )
    total_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    # [{"file_name", "file_url", "file_type", "file_size", "uploaded_at"}]
    attachments = models.JSONField(default=list, blank=True)

    # Recurring origin
    recurring_expense = models.ForeignKey(
        'recurring.RecurringExpense',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transactions'
    )
    occurrence_date = models.DateField(null=True, blank=True)

    # Soft delete (transactions with payments are never hard-deleted)
    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions_created'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'transactions'
        indexes = [
            models.Index(fields=['type', 'date']),
            models.Index(fields=['status']),
            models.Index(fields=['concept', 'date']),
            models.Index(fields=['provider', 'date']),
            models.Index(fields=['is_active', 'date']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['recurring_expense', 'occurrence_date'],
                name='unique_recurring_occurrence',
            ),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.get_type_display()} {self.amount} ({self.status})"

    @property
    def is_recurring(self):
        return self.recurring_expense_id is not None


class Payment(models.Model):
    """Partial or full payment recorded against a transaction."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.PROTECT,
        related_name='payments'
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    date = models.DateField()
    notes = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['transaction', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.amount} on {self.date} for {self.transaction_id}"


class AuditAction(models.TextChoices):
    CREATED = 'created', 'Created'
    UPDATED = 'updated', 'Updated'
    DELETED = 'deleted', 'Deleted'
    DEACTIVATED = 'deactivated', 'Deactivated'


class TransactionAuditLog(models.Model):
    """Who changed which transaction and why. Survives hard deletes."""

    id = models.BigAutoField(primary_key=True)
    action = models.CharField(max_length=12, choices=AuditAction.choices)
    transaction_id = models.UUIDField(db_index=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transaction_audit_entries'
    )
    reason = models.TextField(blank=True)
    snapshot = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'transaction_audit_log'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action} {self.transaction_id}"
