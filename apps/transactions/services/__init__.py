"""
Transactions services - Business logic layer.

This package contains all business operations for the transactions app:
- Transaction create/update/delete with audit trail
- Payment ledger (add/remove/list) with balance checks
- Status recomputation from payments
- Attachment storage
"""

from .transaction_management import (
    DELETED,
    DEACTIVATED,
    resolve_classification,
    create_transaction,
    update_transaction,
    delete_transaction,
)
from .payment_ledger import (
    list_payments,
    get_payment_summary,
    add_payment,
    remove_payment,
)
from .status_updater import recompute
from .payment_status import derive_status, to_decimal, to_money
from .attachments import (
    PAYMENT_FOLDER,
    TRANSACTION_FOLDER,
    validate_attachment,
    store_attachment,
    delete_attachment,
)

from .exceptions import (
    TransactionsServiceError,
    TransactionValidationError,
    TransactionNotFoundError,
    PaymentNotFoundError,
    PermissionDeniedError,
    ExternalServiceError,
)

__all__ = [
    'DELETED',
    'DEACTIVATED',
    'resolve_classification',
    'create_transaction',
    'update_transaction',
    'delete_transaction',
    'list_payments',
    'get_payment_summary',
    'add_payment',
    'remove_payment',
    'recompute',
    'derive_status',
    'to_decimal',
    'to_money',
    'PAYMENT_FOLDER',
    'TRANSACTION_FOLDER',
    'validate_attachment',
    'store_attachment',
    'delete_attachment',
    # Exceptions
    'TransactionsServiceError',
    'TransactionValidationError',
    'TransactionNotFoundError',
    'PaymentNotFoundError',
    'PermissionDeniedError',
    'ExternalServiceError',
]
