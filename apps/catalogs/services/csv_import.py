"""
Bulk catalog and provider import from CSV.

Catalog files::

    tipo,nombre,descripcion,general_nombre,concepto_nombre

``tipo`` is one of ``general``, ``concepto`` or ``subconcepto``. Rows are
processed in three passes (generals, then concepts, then subconcepts) so a
concept may reference a general that appears further down the file.

Provider files::

    nombre,rfc,telefono,direccion,contacto_nombre,contacto_email,
    contacto_telefono,banco,numero_cuenta,clabe

The first four columns are required on every row; the rest are optional.
A bank account is stored when any of banco, numero_cuenta or clabe is set.
"""

import csv
import io
import logging
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Q

from apps.accounts.models import User
from apps.activity.models import ActivityAction, EntityType
from apps.activity.services import log_activity
from apps.catalogs.models import CatalogType, General, Concept, Subconcept, Provider
from .exceptions import CsvImportError

logger = logging.getLogger(__name__)

ROW_GENERAL = 'general'
ROW_CONCEPT = 'concepto'
ROW_SUBCONCEPT = 'subconcepto'
ROW_TYPES = (ROW_GENERAL, ROW_CONCEPT, ROW_SUBCONCEPT)

REQUIRED_HEADERS = {'tipo', 'nombre'}

ROW_PROVIDER = 'proveedor'
PROVIDER_REQUIRED_HEADERS = ('nombre', 'rfc', 'telefono', 'direccion')
RFC_MAX_LENGTH = 13


def _read_rows(file, required_headers=REQUIRED_HEADERS):
    """Decode the upload and return (line_number, row) pairs with normalised keys."""
    raw = file.read()
    if isinstance(raw, bytes):
        try:
            raw = raw.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise CsvImportError("CSV file must be UTF-8 encoded")

    reader = csv.DictReader(io.StringIO(raw))
    headers = {(h or '').strip().lower() for h in (reader.fieldnames or [])}
    missing = set(required_headers) - headers
    if missing:
        raise CsvImportError(f"Missing required columns: {', '.join(sorted(missing))}")

    rows = []
    # Header is line 1
    for line_number, row in enumerate(reader, start=2):
        normalised = {
            (key or '').strip().lower(): (value or '').strip()
            for key, value in row.items()
            if key is not None
        }
        if not any(normalised.values()):
            continue
        rows.append((line_number, normalised))
    return rows


class _ImportResult:
    def __init__(self, kinds=ROW_TYPES):
        self.created = {kind: 0 for kind in kinds}
        self.skipped = 0
        self.errors = []

    def error(self, line_number, message):
        self.errors.append({'row': line_number, 'message': message})

    def as_dict(self):
        return {
            'created': dict(self.created),
            'skipped': self.skipped,
            'errors': list(self.errors),
        }


def _find_by_name(queryset, name):
    return queryset.filter(name__iexact=name, is_active=True).first()


@transaction.atomic
def import_catalog_csv(
    *,
    file,
    general_type: str = CatalogType.ENTRADA,
    user: Optional[User] = None
) -> dict:
    """
    Import generals, concepts and subconcepts from a CSV upload.

    Entries whose name already exists under the same parent are reused and
    counted as skipped. Row-level problems (unknown ``tipo``, missing name,
    unresolvable parent) are collected and do not stop the import.

    Args:
        file: File-like object (bytes or text)
        general_type: Type assigned to new generals; concepts inherit
            the type of their general
        user: User running the import, for the activity log

    Returns:
        dict with ``created`` counts per row type, ``skipped`` and ``errors``

    Raises:
        CsvImportError: If the file can't be decoded or lacks required columns
    """
    rows = _read_rows(file)
    result = _ImportResult()

    by_type = {row_type: [] for row_type in ROW_TYPES}
    for line_number, row in rows:
        row_type = row.get('tipo', '').lower()
        if row_type not in ROW_TYPES:
            result.error(line_number, f"Unknown tipo '{row.get('tipo', '')}'. Use: general, concepto, subconcepto")
            continue
        if not row.get('nombre'):
            result.error(line_number, "nombre is required")
            continue
        by_type[row_type].append((line_number, row))

    # Pass 1: generals
    for line_number, row in by_type[ROW_GENERAL]:
        if _find_by_name(General.objects.all(), row['nombre']):
            result.skipped += 1
            continue
        General.objects.create(
            name=row['nombre'],
            description=row.get('descripcion', ''),
            type=general_type,
        )
        result.created[ROW_GENERAL] += 1

    # Pass 2: concepts
    for line_number, row in by_type[ROW_CONCEPT]:
        general_name = row.get('general_nombre', '')
        if not general_name:
            result.error(line_number, "Concepts require general_nombre")
            continue
        general = _find_by_name(General.objects.all(), general_name)
        if general is None:
            result.error(line_number, f"General '{general_name}' not found")
            continue
        if _find_by_name(general.concepts.all(), row['nombre']):
            result.skipped += 1
            continue
        Concept.objects.create(
            general=general,
            name=row['nombre'],
            description=row.get('descripcion', ''),
            type=general.type,
        )
        result.created[ROW_CONCEPT] += 1

    # Pass 3: subconcepts
    for line_number, row in by_type[ROW_SUBCONCEPT]:
        general_name = row.get('general_nombre', '')
        concept_name = row.get('concepto_nombre', '')
        if not general_name or not concept_name:
            result.error(line_number, "Subconcepts require general_nombre and concepto_nombre")
            continue
        general = _find_by_name(General.objects.all(), general_name)
        if general is None:
            result.error(line_number, f"General '{general_name}' not found")
            continue
        concept = _find_by_name(general.concepts.all(), concept_name)
        if concept is None:
            result.error(line_number, f"Concept '{concept_name}' not found")
            continue
        if _find_by_name(concept.subconcepts.all(), row['nombre']):
            result.skipped += 1
            continue
        Subconcept.objects.create(
            concept=concept,
            name=row['nombre'],
            description=row.get('descripcion', ''),
        )
        result.created[ROW_SUBCONCEPT] += 1

    log_activity(
        action=ActivityAction.IMPORT,
        entity_type=EntityType.CATALOG,
        user=user,
        details=f"Imported {sum(result.created.values())} catalog entries from CSV",
        data={'created': result.created, 'skipped': result.skipped, 'errors': len(result.errors)},
    )
    logger.info(
        "Catalog CSV import: created=%s skipped=%s errors=%s",
        result.created, result.skipped, len(result.errors),
    )
    return result.as_dict()


def _provider_row_errors(row) -> list:
    problems = [
        f"{column} is required"
        for column in PROVIDER_REQUIRED_HEADERS
        if not row.get(column)
    ]
    if len(row.get('rfc', '')) > RFC_MAX_LENGTH:
        problems.append(f"rfc can't be longer than {RFC_MAX_LENGTH} characters")
    if row.get('contacto_email'):
        try:
            validate_email(row['contacto_email'])
        except DjangoValidationError:
            problems.append(f"Invalid contacto_email '{row['contacto_email']}'")
    return problems


def _bank_accounts(row) -> list:
    account = {
        'bank': row.get('banco', ''),
        'account_number': row.get('numero_cuenta', ''),
        'clabe': row.get('clabe', ''),
    }
    return [account] if any(account.values()) else []


@transaction.atomic
def import_provider_csv(*, file, user: Optional[User] = None) -> dict:
    """
    Import providers from a CSV upload.

    A row whose name or RFC matches an active provider is counted as
    skipped; later rows in the same file are checked against earlier ones
    the same way. Rows missing a required value are reported and skipped.

    Returns:
        dict with ``created`` ({'proveedor': n}), ``skipped`` and ``errors``

    Raises:
        CsvImportError: If the file can't be decoded or lacks required columns
    """
    rows = _read_rows(file, required_headers=PROVIDER_REQUIRED_HEADERS)
    result = _ImportResult(kinds=(ROW_PROVIDER,))

    for line_number, row in rows:
        problems = _provider_row_errors(row)
        if problems:
            result.error(line_number, '; '.join(problems))
            continue

        rfc = row['rfc'].upper()
        exists = Provider.objects.filter(
            Q(name__iexact=row['nombre']) | Q(rfc__iexact=rfc),
            is_active=True,
        ).exists()
        if exists:
            result.skipped += 1
            continue

        Provider.objects.create(
            name=row['nombre'],
            rfc=rfc,
            phone=row['telefono'],
            address=row['direccion'],
            contact_name=row.get('contacto_nombre', ''),
            email=row.get('contacto_email', ''),
            contact_phone=row.get('contacto_telefono', ''),
            bank_accounts=_bank_accounts(row),
        )
        result.created[ROW_PROVIDER] += 1

    log_activity(
        action=ActivityAction.IMPORT,
        entity_type=EntityType.PROVIDER,
        user=user,
        details=f"Imported {result.created[ROW_PROVIDER]} providers from CSV",
        data={'created': result.created, 'skipped': result.skipped, 'errors': len(result.errors)},
    )
    logger.info(
        "Provider CSV import: created=%s skipped=%s errors=%s",
        result.created[ROW_PROVIDER], result.skipped, len(result.errors),
    )
    return result.as_dict()
