"""Domain exceptions for accounts app."""


class AccountsServiceError(Exception):
    """Base exception for all accounts service errors."""
    pass


class InvalidRolePermissionError(AccountsServiceError):
    """Unknown role or capability, or a change that would lock out settings."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field

    @property
    def detail(self):
        if self.field:
            return {self.field: [str(self)]}
        return {'detail': str(self)}


class RolePermissionDeniedError(AccountsServiceError):
    """User can't change role permissions."""
    pass
