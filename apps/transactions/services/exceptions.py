"""
Domain exceptions for transactions app.

The hierarchy mirrors what callers need to distinguish: bad input (shown
next to the offending form field), missing rows, missing capability, and
failures of an external collaborator (storage, mail).
"""


class TransactionsServiceError(Exception):
    """Base exception for transaction/payment service errors."""
    pass


class TransactionValidationError(TransactionsServiceError):
    """Input rejected: non-positive amount, missing field, amount over balance."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field

    @property
    def detail(self):
        if self.field:
            return {self.field: [str(self)]}
        return {'detail': str(self)}


class TransactionNotFoundError(TransactionsServiceError):
    """Transaction does not exist (or was deleted concurrently)."""
    pass


class PaymentNotFoundError(TransactionsServiceError):
    """Payment does not exist."""
    pass


class PermissionDeniedError(TransactionsServiceError):
    """User's role lacks the capability for this operation."""
    pass


class ExternalServiceError(TransactionsServiceError):
    """Storage or another external collaborator failed."""
    pass
