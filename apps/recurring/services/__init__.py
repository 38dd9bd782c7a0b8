"""
Recurring services - Business logic layer.

This package contains all business operations for the recurring app:
- Template create/update/activate/delete
- Due-date rules per frequency
- Scheduler that materializes due occurrences as transactions
"""

from .template_management import (
    DELETED,
    DEACTIVATED,
    create_recurring_expense,
    update_recurring_expense,
    set_active,
    delete_recurring_expense,
    get_generated_transactions,
)
from .schedule import is_due, due_dates
from .scheduler import SchedulerReport, RECURRING_SUFFIX, local_date, run_scheduler

from .exceptions import (
    RecurringServiceError,
    InvalidRecurringExpenseError,
)

__all__ = [
    'DELETED',
    'DEACTIVATED',
    'create_recurring_expense',
    'update_recurring_expense',
    'set_active',
    'delete_recurring_expense',
    'get_generated_transactions',
    'is_due',
    'due_dates',
    'SchedulerReport',
    'RECURRING_SUFFIX',
    'local_date',
    'run_scheduler',
    # Exceptions
    'RecurringServiceError',
    'InvalidRecurringExpenseError',
]
