"""
Activity services - Business logic layer.

This package contains all business operations for the activity app:
- Recording user actions on catalogs, transactions, payments and roles
- Filtered listing of the activity log
"""

from .activity_log import log_activity, list_activity

from .exceptions import (
    ActivityServiceError,
    InvalidActivityEntryError,
)

__all__ = [
    'log_activity',
    'list_activity',
    # Exceptions
    'ActivityServiceError',
    'InvalidActivityEntryError',
]
