"""Notification recipient settings."""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction

from apps.notifications.models import NotificationSettings
from .exceptions import InvalidRecipientError

logger = logging.getLogger(__name__)


def normalize_emails(value, *, field: str = None) -> list:
    """
    Turn a list or a comma-separated string into a clean list of addresses.

    Blank entries are dropped and duplicates removed (case-insensitive),
    keeping the first spelling.

    Raises:
        InvalidRecipientError: If an entry is not a valid email address
    """
    if value is None:
        return []
    items = value.split(',') if isinstance(value, str) else list(value)

    emails = []
    seen = set()
    for item in items:
        email = str(item or '').strip()
        if not email:
            continue
        try:
            validate_email(email)
        except DjangoValidationError:
            raise InvalidRecipientError(f"Invalid email address: {email}", field=field)
        if email.lower() in seen:
            continue
        seen.add(email.lower())
        emails.append(email)
    return emails


def get_notification_settings() -> NotificationSettings:
    return NotificationSettings.load()


@transaction.atomic
def save_notification_settings(*, admin_emails=None, accountant_emails=None) -> NotificationSettings:
    """
    Replace the recipient lists. A list left as None keeps its current value.

    Raises:
        InvalidRecipientError: If an address is invalid
    """
    settings_row = NotificationSettings.load()
    if admin_emails is not None:
        settings_row.admin_emails = normalize_emails(admin_emails, field='admin_emails')
    if accountant_emails is not None:
        settings_row.accountant_emails = normalize_emails(accountant_emails, field='accountant_emails')
    settings_row.save()

    logger.info(
        "Notification recipients updated: %d admin, %d accountant",
        len(settings_row.admin_emails), len(settings_row.accountant_emails)
    )
    return settings_row
