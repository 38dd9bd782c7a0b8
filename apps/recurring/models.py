from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class Frequency(models.TextChoices):
    DAILY = 'daily', 'Diario'
    WEEKLY = 'weekly', 'Semanal'
    BIWEEKLY = 'biweekly', 'Quincenal'
    MONTHLY = 'monthly', 'Mensual'


class RecurringExpense(models.Model):
    """
    Expense template materialized as pending salida transactions on each
    due date of its frequency.

    ``generated_dates`` holds the ISO dates already materialized, so a
    date is never generated twice for the same template.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    general = models.ForeignKey(
        'catalogs.General',
        on_delete=models.PROTECT,
        related_name='recurring_expenses'
    )
    concept = models.ForeignKey(
        'catalogs.Concept',
        on_delete=models.PROTECT,
        related_name='recurring_expenses'
    )
    subconcept = models.ForeignKey(
        'catalogs.Subconcept',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='recurring_expenses'
    )
    provider = models.ForeignKey(
        'catalogs.Provider',
        on_delete=models.PROTECT,
        related_name='recurring_expenses'
    )

    description = models.CharField(max_length=500)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    division = models.CharField(max_length=100, blank=True)

    frequency = models.CharField(
        max_length=10,
        choices=Frequency.choices,
        default=Frequency.MONTHLY
    )
    start_date = models.DateField()
    is_active = models.BooleanField(default=True)

    # Scheduler bookkeeping
    generated_dates = models.JSONField(default=list, blank=True)
    last_generated = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recurring_expenses_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'recurring_expenses'
        indexes = [
            models.Index(fields=['is_active', 'start_date']),
        ]
        ordering = ['description']

    def __str__(self):
        return f"{self.description} ({self.get_frequency_display()})"

    def has_generated(self, day) -> bool:
        return day.isoformat() in (self.generated_dates or [])
