"""
Notifications services - Business logic layer.

This package contains all business operations for the notifications app:
- Recipient settings (admin / accountant lists)
- Email sending through Django's mail backend
- Payment and expense notifications
"""

from .recipients import (
    normalize_emails,
    get_notification_settings,
    save_notification_settings,
)
from .mailer import (
    send_email,
    notify_payment_registered,
    notify_expense_created,
)

from .exceptions import (
    NotificationsServiceError,
    InvalidRecipientError,
    EmailDeliveryError,
)

__all__ = [
    'normalize_emails',
    'get_notification_settings',
    'save_notification_settings',
    'send_email',
    'notify_payment_registered',
    'notify_expense_created',
    # Exceptions
    'NotificationsServiceError',
    'InvalidRecipientError',
    'EmailDeliveryError',
]
