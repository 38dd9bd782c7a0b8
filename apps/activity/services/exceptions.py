"""Domain exceptions for activity app."""


class ActivityServiceError(Exception):
    """Base exception for all activity log errors."""
    pass


class InvalidActivityEntryError(ActivityServiceError):
    """Unknown action or entity type passed to the activity log."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field

    @property
    def detail(self):
        if self.field:
            return {self.field: [str(self)]}
        return {'detail': str(self)}
