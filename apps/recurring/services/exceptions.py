"""
Domain exceptions for recurring app.
"""


class RecurringServiceError(Exception):
    """Base exception for recurring expense errors."""
    pass


class InvalidRecurringExpenseError(RecurringServiceError):
    """Template data rejected (amount, frequency, classification)."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field

    @property
    def detail(self):
        if self.field:
            return {self.field: [str(self)]}
        return {'detail': str(self)}
