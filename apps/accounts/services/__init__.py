"""
Accounts services - Business logic layer.

This package contains all business operations for the accounts app:
- Effective role permissions (defaults plus stored overrides)
- Granting, revoking and resetting role capabilities
"""

from .role_permissions import (
    get_role_permissions,
    list_role_permissions,
    update_role_permissions,
    reset_role_permissions,
)

from .exceptions import (
    AccountsServiceError,
    InvalidRolePermissionError,
    RolePermissionDeniedError,
)

__all__ = [
    'get_role_permissions',
    'list_role_permissions',
    'update_role_permissions',
    'reset_role_permissions',
    # Exceptions
    'AccountsServiceError',
    'InvalidRolePermissionError',
    'RolePermissionDeniedError',
]
