"""Transaction management service - create, update, delete with audit trail."""

import logging
from datetime import date as date_type
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.accounts.models import User, Capability
from apps.activity.models import ActivityAction, EntityType
from apps.activity.services import log_activity
from apps.catalogs.models import General, Concept, Subconcept, Description, Provider
from apps.catalogs.services import get_active_item, CatalogItemNotFoundError
from apps.transactions.models import (
    Transaction,
    TransactionType,
    PaymentStatus,
    TransactionAuditLog,
    AuditAction,
)
from .attachments import (
    TRANSACTION_FOLDER,
    validate_attachment,
    store_attachments,
    delete_attachments,
)
from .exceptions import (
    TransactionValidationError,
    TransactionNotFoundError,
    PermissionDeniedError,
)
from .payment_status import to_money, ZERO
from .status_updater import recompute

logger = logging.getLogger(__name__)

DELETED = 'deleted'
DEACTIVATED = 'deactivated'

EDITABLE_FIELDS = (
    'amount', 'date', 'description', 'division',
    'general_id', 'concept_id', 'subconcept_id', 'description_item_id', 'provider_id',
)

CLASSIFICATION_KEYS = {
    'general_id': 'general_id',
    'concept_id': 'concept_id',
    'subconcept_id': 'subconcept_id',
    'description_item_id': 'description_id',
    'provider_id': 'provider_id',
}


def _notify_expense(transaction_id):
    from apps.notifications.services import notify_expense_created
    notify_expense_created(transaction_id=transaction_id)


def _snapshot(tx: Transaction) -> dict:
    return {
        'type': tx.type,
        'amount': str(tx.amount),
        'date': tx.date.isoformat() if tx.date else None,
        'description': tx.description,
        'division': tx.division,
        'general_id': str(tx.general_id) if tx.general_id else None,
        'concept_id': str(tx.concept_id) if tx.concept_id else None,
        'subconcept_id': str(tx.subconcept_id) if tx.subconcept_id else None,
        'description_item_id': str(tx.description_item_id) if tx.description_item_id else None,
        'provider_id': str(tx.provider_id) if tx.provider_id else None,
        'status': tx.status,
        'total_paid': str(tx.total_paid),
        'balance': str(tx.balance),
        'recurring_expense_id': str(tx.recurring_expense_id) if tx.recurring_expense_id else None,
    }


def _audit(tx: Transaction, action: str, user: Optional[User], reason: str = '', snapshot=None):
    TransactionAuditLog.objects.create(
        action=action,
        transaction_id=tx.id,
        user=user,
        reason=reason,
        snapshot=snapshot if snapshot is not None else _snapshot(tx),
    )


def _log(action: str, tx: Transaction, user: Optional[User], details: str, data=None):
    log_activity(
        action=action,
        entity_type=EntityType.TRANSACTION,
        entity_id=tx.id,
        user=user,
        details=details,
        data=data,
    )


def _validated_amount(amount):
    try:
        amount = to_money(amount)
    except ValueError as e:
        raise TransactionValidationError(str(e), field='amount')
    if amount < ZERO:
        raise TransactionValidationError("Amount can't be negative", field='amount')
    return amount


def _resolve(model, item_id, field, label=None):
    try:
        return get_active_item(model, item_id, label=label or field)
    except CatalogItemNotFoundError as exc:
        raise TransactionValidationError(str(exc), field=field)


def resolve_classification(
    *,
    type: str,
    general_id,
    concept_id,
    subconcept_id=None,
    provider_id=None,
    description_id=None
) -> dict:
    """
    Load and cross-check the catalog entries a transaction points at.

    The concept must belong to the general, the subconcept and the preset
    description to the concept, and the general must apply to the
    transaction type. A provider is required for expenses.

    Raises:
        TransactionValidationError: On any missing, inactive or mismatched entry
    """
    if type not in TransactionType.values:
        raise TransactionValidationError("Type must be entrada or salida", field='type')

    general = _resolve(General, general_id, 'general')
    if not general.applies_to(type):
        raise TransactionValidationError(
            f"General '{general.name}' doesn't apply to {type}",
            field='general',
        )

    concept = _resolve(Concept, concept_id, 'concept')
    if concept.general_id != general.id:
        raise TransactionValidationError(
            f"Concept '{concept.name}' doesn't belong to '{general.name}'",
            field='concept',
        )

    subconcept = None
    if subconcept_id:
        subconcept = _resolve(Subconcept, subconcept_id, 'subconcept')
        if subconcept.concept_id != concept.id:
            raise TransactionValidationError(
                f"Subconcept '{subconcept.name}' doesn't belong to '{concept.name}'",
                field='subconcept',
            )

    description_item = None
    if description_id:
        description_item = _resolve(Description, description_id, 'description_item', label='description')
        if description_item.concept_id != concept.id:
            raise TransactionValidationError(
                f"Description '{description_item.name}' doesn't belong to '{concept.name}'",
                field='description_item',
            )

    provider = None
    if provider_id:
        provider = _resolve(Provider, provider_id, 'provider')
    elif type == TransactionType.SALIDA:
        raise TransactionValidationError("Provider is required for expenses", field='provider')

    return {
        'general': general,
        'concept': concept,
        'subconcept': subconcept,
        'description_item': description_item,
        'provider': provider,
    }


def create_transaction(
    *,
    type: str,
    amount,
    date: date_type,
    general_id,
    concept_id,
    subconcept_id=None,
    provider_id=None,
    description_id=None,
    description: str = '',
    division: str = '',
    files: Optional[list] = None,
    user: Optional[User] = None,
    recurring_expense=None,
    occurrence_date: Optional[date_type] = None,
    notify: bool = True
) -> Transaction:
    """
    Create an entrada/salida record. New records always start pendiente
    with the whole amount as balance.

    Expense notifications go out after commit unless notify=False.

    Raises:
        TransactionValidationError: On invalid amount, date, classification
            or attachment
    """
    amount = _validated_amount(amount)
    if date is None:
        raise TransactionValidationError("Date is required", field='date')

    classification = resolve_classification(
        type=type,
        general_id=general_id,
        concept_id=concept_id,
        subconcept_id=subconcept_id,
        provider_id=provider_id,
        description_id=description_id,
    )

    files = files or []
    for file in files:
        validate_attachment(file, settings.TRANSACTION_ATTACHMENT_MAX_SIZE)

    with transaction.atomic():
        tx = Transaction.objects.create(
            type=type,
            amount=amount,
            date=date,
            description=(description or '').strip(),
            division=(division or '').strip(),
            status=PaymentStatus.PENDIENTE,
            total_paid=ZERO,
            balance=amount,
            recurring_expense=recurring_expense,
            occurrence_date=occurrence_date,
            created_by=user,
            **classification,
        )

        if files:
            tx.attachments = store_attachments(files, tx.id, TRANSACTION_FOLDER)
            tx.save(update_fields=['attachments'])

        _audit(tx, AuditAction.CREATED, user)
        _log(
            ActivityAction.CREATE, tx, user,
            f"Created {tx.type} of ${tx.amount:,.2f}",
        )

        if notify and tx.type == TransactionType.SALIDA:
            tx_id = tx.id
            transaction.on_commit(lambda: _notify_expense(tx_id))

    logger.info("Transaction %s created: %s %s", tx.id, tx.type, tx.amount)
    return tx


def update_transaction(*, transaction_id, user: Optional[User] = None, **changes) -> Transaction:
    """
    Update editable fields of an active transaction.

    The type can't change. Lowering the amount below what's already paid
    is rejected; otherwise status is recomputed against the new amount.

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist or is inactive
        TransactionValidationError: On invalid values
    """
    with transaction.atomic():
        try:
            tx = Transaction.objects.select_for_update().get(pk=transaction_id, is_active=True)
        except (Transaction.DoesNotExist, ValueError, DjangoValidationError):
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")

        before = _snapshot(tx)
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}

        if 'amount' in changes:
            changes['amount'] = _validated_amount(changes['amount'])
            if changes['amount'] < tx.total_paid:
                raise TransactionValidationError(
                    f"Amount can't be lower than the ${tx.total_paid:,.2f} already paid",
                    field='amount',
                )

        if CLASSIFICATION_KEYS.keys() & changes.keys():
            classification = resolve_classification(
                type=tx.type,
                **{
                    argument: changes.get(key, getattr(tx, key))
                    for key, argument in CLASSIFICATION_KEYS.items()
                }
            )
            for key in CLASSIFICATION_KEYS:
                changes.pop(key, None)
            changes.update(classification)

        for field, value in changes.items():
            if field in ('description', 'division'):
                value = (value or '').strip()
            setattr(tx, field, value)
        tx.save()

        recompute(tx.id)
        tx.refresh_from_db()

        _audit(tx, AuditAction.UPDATED, user, snapshot={'before': before, 'after': _snapshot(tx)})
        _log(
            ActivityAction.UPDATE, tx, user,
            f"Updated {tx.type} {tx.id}",
            data={'fields': sorted(changes)},
        )

    logger.info("Transaction %s updated", tx.id)
    return tx


def delete_transaction(*, transaction_id, user: User, reason: str) -> str:
    """
    Delete a transaction, or deactivate it if it already has payments.

    A reason is mandatory and kept in the audit log together with a
    snapshot of the row.

    Returns:
        str: 'deleted' or 'deactivated'

    Raises:
        PermissionDeniedError: If the user can't delete transactions
        TransactionValidationError: If no reason is given
        TransactionNotFoundError: If the transaction doesn't exist or is inactive
    """
    if not user.has_capability(Capability.DELETE_TRANSACTIONS):
        raise PermissionDeniedError("You don't have permission to delete transactions")

    reason = (reason or '').strip()
    if not reason:
        raise TransactionValidationError("A reason is required to delete a transaction", field='reason')

    with transaction.atomic():
        try:
            tx = Transaction.objects.select_for_update().get(pk=transaction_id, is_active=True)
        except (Transaction.DoesNotExist, ValueError, DjangoValidationError):
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")

        if tx.payments.exists():
            tx.is_active = False
            tx.save(update_fields=['is_active', 'updated_at'])
            _audit(tx, AuditAction.DEACTIVATED, user, reason)
            _log(
                ActivityAction.DEACTIVATE, tx, user,
                f"Deactivated {tx.type} {tx.id}: {reason}",
                data={'reason': reason},
            )
            result = DEACTIVATED
        else:
            _audit(tx, AuditAction.DELETED, user, reason)
            _log(
                ActivityAction.DELETE, tx, user,
                f"Deleted {tx.type} {tx.id}: {reason}",
                data={'reason': reason, 'snapshot': _snapshot(tx)},
            )
            attachments = list(tx.attachments or [])
            tx_id = tx.id
            tx.delete()
            if attachments:
                transaction.on_commit(
                    lambda: delete_attachments(attachments, tx_id, TRANSACTION_FOLDER)
                )
            result = DELETED

    logger.info("Transaction %s %s by %s: %s", transaction_id, result, user.email, reason)
    return result
