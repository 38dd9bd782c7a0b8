"""
Catalogs services - Business logic layer.

This package contains all business operations for the catalogs app:
- Catalog CRUD and delete-or-deactivate
- Lookups for active entries by parent and transaction type
- Preset descriptions per concept
- CSV bulk import of catalogs and providers
- Near-duplicate name detection
"""

from .catalog_management import (
    DELETED,
    DEACTIVATED,
    get_active_item,
    create_general,
    create_concept,
    create_subconcept,
    create_description,
    create_provider,
    update_catalog_item,
    delete_or_deactivate,
    get_generals_for_type,
    get_concepts_for_general,
    get_subconcepts_for_concept,
    get_descriptions_for_concept,
)
from .csv_import import import_catalog_csv, import_provider_csv
from .duplicates import normalize_name, find_similar_items

from .exceptions import (
    CatalogsServiceError,
    InvalidCatalogDataError,
    CatalogItemNotFoundError,
    CatalogPermissionError,
    CsvImportError,
)

__all__ = [
    'DELETED',
    'DEACTIVATED',
    'get_active_item',
    'create_general',
    'create_concept',
    'create_subconcept',
    'create_description',
    'create_provider',
    'update_catalog_item',
    'delete_or_deactivate',
    'get_generals_for_type',
    'get_concepts_for_general',
    'get_subconcepts_for_concept',
    'get_descriptions_for_concept',
    'import_catalog_csv',
    'import_provider_csv',
    'normalize_name',
    'find_similar_items',
    # Exceptions
    'CatalogsServiceError',
    'InvalidCatalogDataError',
    'CatalogItemNotFoundError',
    'CatalogPermissionError',
    'CsvImportError',
]
