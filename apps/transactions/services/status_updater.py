"""Keeps a transaction's status, total_paid and balance in sync with its payments."""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.transactions.models import Transaction
from .exceptions import TransactionNotFoundError
from .payment_status import derive_status, to_money, ZERO

logger = logging.getLogger(__name__)


def _summary(tx: Transaction, payments: list) -> dict:
    total_paid = sum((p.amount for p in payments), ZERO)
    total_amount = to_money(tx.amount)
    return {
        'total_amount': total_amount,
        'total_paid': to_money(total_paid),
        'balance': to_money(total_amount - total_paid),
        'status': derive_status(total_amount, total_paid),
        'payments': payments,
    }


def _load(transaction_id, *, for_update: bool):
    queryset = Transaction.objects.all()
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=transaction_id)
    except (Transaction.DoesNotExist, ValueError, DjangoValidationError):
        raise TransactionNotFoundError(f"Transaction {transaction_id} not found")


@transaction.atomic
def recompute(transaction_id) -> dict:
    """
    Recalculate payment totals and status from the payment rows.

    The transaction row is written only when a stored value differs from
    the recalculated one, so calling this twice in a row writes at most once.
    Runs inside the caller's transaction when there is one, which lets
    add/remove payment see their own insert or delete.

    Returns:
        dict: total_amount, total_paid, balance, status and payments
            (newest first)

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist
    """
    tx = _load(transaction_id, for_update=True)
    payments = list(tx.payments.order_by('-created_at'))
    summary = _summary(tx, payments)

    changed = []
    for field in ('status', 'total_paid', 'balance'):
        if getattr(tx, field) != summary[field]:
            setattr(tx, field, summary[field])
            changed.append(field)

    if changed:
        tx.save(update_fields=changed + ['updated_at'])
        logger.info(
            "Transaction %s recomputed: status=%s paid=%s balance=%s",
            tx.id, summary['status'], summary['total_paid'], summary['balance']
        )

    return summary


def get_summary(transaction_id) -> dict:
    """Read-only version of recompute(); nothing is written."""
    tx = _load(transaction_id, for_update=False)
    return _summary(tx, list(tx.payments.order_by('-created_at')))
