"""Domain exceptions for catalogs app."""


class CatalogsServiceError(Exception):
    """Base exception for all catalog service errors."""
    pass


class InvalidCatalogDataError(CatalogsServiceError):
    """Catalog payload is missing a field or carries an invalid value."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field

    @property
    def detail(self):
        if self.field:
            return {self.field: [str(self)]}
        return {'detail': str(self)}


class CatalogItemNotFoundError(CatalogsServiceError):
    """Catalog entry does not exist or is inactive."""
    pass


class CatalogPermissionError(CatalogsServiceError):
    """User lacks the capability for this catalog operation."""
    pass


class CsvImportError(CatalogsServiceError):
    """CSV file cannot be read at all (bad encoding, missing header)."""
    pass
