"""
Domain exceptions for notifications app.
"""


class NotificationsServiceError(Exception):
    """Base exception for notification errors."""
    pass


class InvalidRecipientError(NotificationsServiceError):
    """An email address in the input is not valid."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field

    @property
    def detail(self):
        if self.field:
            return {self.field: [str(self)]}
        return {'detail': str(self)}


class EmailDeliveryError(NotificationsServiceError):
    """The mail backend failed to send."""
    pass
