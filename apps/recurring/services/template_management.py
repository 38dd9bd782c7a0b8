"""Recurring expense templates - create, update, activate, delete."""

import logging
from datetime import date as date_type
from typing import Optional

from django.db import transaction, IntegrityError
from django.db.models import ProtectedError, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.recurring.models import RecurringExpense, Frequency
from apps.transactions.models import Transaction, TransactionType
from apps.transactions.services import (
    resolve_classification,
    to_money,
    TransactionValidationError,
)
from .exceptions import InvalidRecurringExpenseError

logger = logging.getLogger(__name__)

DELETED = 'deleted'
DEACTIVATED = 'deactivated'

CLASSIFICATION_FIELDS = ('general_id', 'concept_id', 'subconcept_id', 'provider_id')


def _validated(field, value):
    if field == 'description':
        value = (value or '').strip()
        if not value:
            raise InvalidRecurringExpenseError("Description is required", field='description')
    elif field == 'amount':
        try:
            value = to_money(value)
        except ValueError as e:
            raise InvalidRecurringExpenseError(str(e), field='amount')
        if value <= 0:
            raise InvalidRecurringExpenseError("Amount must be greater than zero", field='amount')
    elif field == 'frequency':
        if value not in Frequency.values:
            raise InvalidRecurringExpenseError(
                "Frequency must be one of: daily, weekly, biweekly, monthly",
                field='frequency',
            )
    elif field == 'start_date':
        if value is None:
            raise InvalidRecurringExpenseError("Start date is required", field='start_date')
    elif field == 'division':
        value = (value or '').strip()
    return value


def _classification(**ids) -> dict:
    # Generated transactions are expenses, so the template follows salida rules
    try:
        return resolve_classification(type=TransactionType.SALIDA, **ids)
    except TransactionValidationError as e:
        raise InvalidRecurringExpenseError(str(e), field=e.field)


def create_recurring_expense(
    *,
    general_id,
    concept_id,
    provider_id,
    description: str,
    amount,
    frequency: str,
    start_date: date_type,
    subconcept_id=None,
    division: str = '',
    is_active: bool = True,
    user: Optional[User] = None
) -> RecurringExpense:
    """
    Create a template.

    Raises:
        InvalidRecurringExpenseError: On invalid values or classification
    """
    values = {
        field: _validated(field, value)
        for field, value in (
            ('description', description),
            ('amount', amount),
            ('frequency', frequency),
            ('start_date', start_date),
            ('division', division),
        )
    }
    classification = _classification(
        general_id=general_id,
        concept_id=concept_id,
        subconcept_id=subconcept_id,
        provider_id=provider_id,
    )

    template = RecurringExpense.objects.create(
        is_active=is_active,
        created_by=user,
        **values,
        **classification,
    )
    logger.info(
        "Recurring expense %s created (%s, %s from %s)",
        template.id, template.frequency, template.amount, template.start_date
    )
    return template


@transaction.atomic
def update_recurring_expense(*, template: RecurringExpense, **changes) -> RecurringExpense:
    """
    Update a template. Only future generation is affected; transactions
    already generated keep their values.

    Raises:
        InvalidRecurringExpenseError: On invalid values or classification
    """
    template = RecurringExpense.objects.select_for_update().get(pk=template.pk)

    for field in ('description', 'amount', 'frequency', 'start_date', 'division'):
        if field in changes:
            setattr(template, field, _validated(field, changes[field]))

    if any(field in changes for field in CLASSIFICATION_FIELDS):
        ids = {
            field: changes.get(field, getattr(template, field))
            for field in CLASSIFICATION_FIELDS
        }
        for name, item in _classification(**ids).items():
            setattr(template, name, item)

    template.save()
    return template


@transaction.atomic
def set_active(*, template: RecurringExpense, active: bool) -> RecurringExpense:
    """
    Suspend or resume generation.

    Deactivating leaves already generated transactions untouched. Resuming
    moves last_generated to now, so the suspended period isn't backfilled.
    """
    template = RecurringExpense.objects.select_for_update().get(pk=template.pk)
    if template.is_active == active:
        return template

    template.is_active = active
    update_fields = ['is_active', 'updated_at']
    if active:
        template.last_generated = timezone.now()
        update_fields.append('last_generated')
    template.save(update_fields=update_fields)

    logger.info(
        "Recurring expense %s %s",
        template.id, 'activated' if active else 'deactivated'
    )
    return template


def delete_recurring_expense(*, template: RecurringExpense) -> str:
    """
    Delete a template that never generated anything, otherwise deactivate it.

    Returns:
        'deleted' or 'deactivated'
    """
    with transaction.atomic():
        locked = RecurringExpense.objects.select_for_update().get(pk=template.pk)
        try:
            with transaction.atomic():
                locked.delete()
            return DELETED
        except (ProtectedError, IntegrityError):
            locked.is_active = False
            locked.save(update_fields=['is_active', 'updated_at'])
            logger.info("Deactivated recurring expense %s with generated transactions", locked.pk)
            return DEACTIVATED


def get_generated_transactions(template: RecurringExpense) -> QuerySet:
    """Transactions materialized from a template, latest occurrence first."""
    return Transaction.objects.filter(
        recurring_expense=template
    ).select_related('concept', 'provider').order_by('-occurrence_date')
