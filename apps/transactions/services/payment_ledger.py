"""Payment ledger - recording and removing payments against a transaction."""

import logging
from datetime import date as date_type
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Sum

from apps.accounts.models import User, Capability
from apps.activity.models import ActivityAction, EntityType
from apps.activity.services import log_activity
from apps.transactions.models import Transaction, Payment
from .attachments import (
    PAYMENT_FOLDER,
    validate_attachment,
    store_attachments,
    delete_attachments,
)
from .exceptions import (
    TransactionValidationError,
    TransactionNotFoundError,
    PaymentNotFoundError,
    PermissionDeniedError,
)
from .payment_status import to_money, ZERO
from .status_updater import recompute, get_summary

logger = logging.getLogger(__name__)


def _notify_payment(payment_id):
    # Imported here, notifications depends on transactions models
    from apps.notifications.services import notify_payment_registered
    notify_payment_registered(payment_id=payment_id)


def list_payments(transaction_id):
    """Payments of a transaction, newest first."""
    return Payment.objects.filter(
        transaction_id=transaction_id
    ).select_related('created_by').order_by('-created_at')


def get_payment_summary(transaction_id) -> dict:
    """
    Current totals of a transaction.

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist
    """
    return get_summary(transaction_id)


def add_payment(
    *,
    transaction_id,
    amount,
    date: date_type,
    notes: str = '',
    files: Optional[list] = None,
    user: Optional[User] = None
) -> Payment:
    """
    Record a payment and update the transaction's status.

    The transaction row stays locked from the balance check until the
    payment is inserted and totals recomputed, so two concurrent payments
    can't both fit into the same remaining balance.

    Attachment upload is best-effort: the payment is recorded even if a
    file can't be stored.

    Raises:
        TransactionValidationError: If amount is not positive, exceeds the
            remaining balance, or an attachment has a bad type/size
        TransactionNotFoundError: If the transaction doesn't exist
    """
    try:
        amount = to_money(amount)
    except ValueError as e:
        raise TransactionValidationError(str(e), field='amount')
    if amount <= ZERO:
        raise TransactionValidationError("Amount must be greater than zero", field='amount')
    if date is None:
        raise TransactionValidationError("Payment date is required", field='date')

    files = files or []
    for file in files:
        validate_attachment(file, settings.PAYMENT_ATTACHMENT_MAX_SIZE)

    with transaction.atomic():
        try:
            tx = Transaction.objects.select_for_update().get(
                pk=transaction_id,
                is_active=True
            )
        except (Transaction.DoesNotExist, ValueError, DjangoValidationError):
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")

        total_paid = tx.payments.aggregate(total=Sum('amount'))['total'] or ZERO
        remaining = to_money(tx.amount) - total_paid
        if amount > remaining:
            raise TransactionValidationError(
                f"Amount exceeds the remaining balance of ${remaining:,.2f}",
                field='amount',
            )

        payment = Payment.objects.create(
            transaction=tx,
            amount=amount,
            date=date,
            notes=notes or '',
            created_by=user,
        )

        if files:
            payment.attachments = store_attachments(files, tx.id, PAYMENT_FOLDER)
            payment.save(update_fields=['attachments'])

        summary = recompute(tx.id)

        log_activity(
            action=ActivityAction.CREATE,
            entity_type=EntityType.PAYMENT,
            entity_id=payment.id,
            user=user,
            details=f"Recorded payment of ${amount:,.2f} on {tx.type} {tx.id}",
            data={'transaction_id': str(tx.id), 'amount': str(amount), 'status': summary['status']},
        )

        payment_id = payment.id
        transaction.on_commit(lambda: _notify_payment(payment_id))

    logger.info(
        "Payment %s of %s recorded on transaction %s (status=%s)",
        payment.id, amount, tx.id, summary['status']
    )
    return payment


def remove_payment(*, payment_id, user: User) -> dict:
    """
    Delete a payment and recompute the transaction's status.

    Stored attachment files are removed after commit; a failed file removal
    is logged and doesn't undo the deletion.

    Returns:
        dict: The transaction's recomputed summary

    Raises:
        PermissionDeniedError: If the user can't delete payments
        PaymentNotFoundError: If the payment doesn't exist
    """
    if not user.has_capability(Capability.DELETE_PAYMENTS):
        raise PermissionDeniedError("You don't have permission to delete payments")

    with transaction.atomic():
        try:
            payment = Payment.objects.get(pk=payment_id)
        except (Payment.DoesNotExist, ValueError, DjangoValidationError):
            raise PaymentNotFoundError(f"Payment {payment_id} not found")

        # Lock the parent first, same order as add_payment
        Transaction.objects.select_for_update().get(pk=payment.transaction_id)

        transaction_id = payment.transaction_id
        amount = payment.amount
        attachments = list(payment.attachments or [])
        payment.delete()

        summary = recompute(transaction_id)

        log_activity(
            action=ActivityAction.DELETE,
            entity_type=EntityType.PAYMENT,
            entity_id=payment_id,
            user=user,
            details=f"Deleted payment of ${amount:,.2f} from transaction {transaction_id}",
            data={'transaction_id': str(transaction_id), 'amount': str(amount), 'status': summary['status']},
        )

        if attachments:
            transaction.on_commit(
                lambda: delete_attachments(attachments, transaction_id, PAYMENT_FOLDER)
            )

    logger.info(
        "Payment %s removed from transaction %s by %s",
        payment_id, transaction_id, user.email
    )
    return summary
