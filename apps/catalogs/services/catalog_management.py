"""Catalog management service - generals, concepts, subconcepts, descriptions, providers."""

import logging

from django.db import transaction, IntegrityError
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError, Q, QuerySet
from uuid import UUID
from typing import Optional

from apps.accounts.models import User, Capability
from apps.activity.models import ActivityAction, EntityType
from apps.activity.services import log_activity
from apps.catalogs.models import (
    CatalogType,
    General,
    Concept,
    Subconcept,
    Description,
    Provider,
)
from .exceptions import (
    InvalidCatalogDataError,
    CatalogItemNotFoundError,
    CatalogPermissionError,
)

logger = logging.getLogger(__name__)

DELETED = 'deleted'
DEACTIVATED = 'deactivated'

TYPED_MODELS = (General, Concept)

ENTITY_TYPES = {
    General: EntityType.GENERAL,
    Concept: EntityType.CONCEPT,
    Subconcept: EntityType.SUBCONCEPT,
    Description: EntityType.DESCRIPTION,
    Provider: EntityType.PROVIDER,
}


def _require_name(name: str) -> str:
    name = (name or '').strip()
    if not name:
        raise InvalidCatalogDataError("Name is required", field='name')
    return name


def _require_type(type_: str) -> str:
    if type_ not in CatalogType.values:
        raise InvalidCatalogDataError(
            "Type must be one of: entrada, salida, ambos",
            field='type',
        )
    return type_


def _log(action: str, item, user: Optional[User], data=None):
    entity_type = ENTITY_TYPES[type(item)]
    verb = {
        ActivityAction.CREATE: 'Created',
        ActivityAction.UPDATE: 'Updated',
        ActivityAction.DELETE: 'Deleted',
        ActivityAction.DEACTIVATE: 'Deactivated',
    }[action]
    log_activity(
        action=action,
        entity_type=entity_type,
        entity_id=item.pk,
        user=user,
        details=f"{verb} {entity_type} '{item.name}'",
        data=data,
    )


def get_active_item(model, item_id: Optional[UUID], *, label: str = None):
    """
    Fetch an active catalog row by id.

    Raises:
        CatalogItemNotFoundError: If the row doesn't exist or is inactive
    """
    label = label or model._meta.verbose_name
    if not item_id:
        raise CatalogItemNotFoundError(f"{label.capitalize()} is required")
    try:
        return model.objects.get(id=item_id, is_active=True)
    except (model.DoesNotExist, ValueError, DjangoValidationError):
        raise CatalogItemNotFoundError(f"{label.capitalize()} not found or inactive")


@transaction.atomic
def create_general(
    *,
    name: str,
    type: str,
    description: str = '',
    user: Optional[User] = None
) -> General:
    general = General.objects.create(
        name=_require_name(name),
        type=_require_type(type),
        description=description,
    )
    _log(ActivityAction.CREATE, general, user)
    return general


@transaction.atomic
def create_concept(
    *,
    general_id: UUID,
    name: str,
    type: str,
    description: str = '',
    user: Optional[User] = None
) -> Concept:
    """
    Create a concept under an active general.

    Raises:
        InvalidCatalogDataError: If name or type is invalid
        CatalogItemNotFoundError: If the general doesn't exist or is inactive
    """
    name = _require_name(name)
    type_ = _require_type(type)
    general = get_active_item(General, general_id, label='general')
    concept = Concept.objects.create(
        general=general,
        name=name,
        type=type_,
        description=description,
    )
    _log(ActivityAction.CREATE, concept, user)
    return concept


@transaction.atomic
def create_subconcept(
    *,
    concept_id: UUID,
    name: str,
    description: str = '',
    user: Optional[User] = None
) -> Subconcept:
    name = _require_name(name)
    concept = get_active_item(Concept, concept_id, label='concept')
    subconcept = Subconcept.objects.create(
        concept=concept,
        name=name,
        description=description,
    )
    _log(ActivityAction.CREATE, subconcept, user)
    return subconcept


@transaction.atomic
def create_description(
    *,
    concept_id: UUID,
    name: str,
    description: str = '',
    user: Optional[User] = None
) -> Description:
    """
    Create a preset description under an active concept.

    Raises:
        InvalidCatalogDataError: If name is blank
        CatalogItemNotFoundError: If the concept doesn't exist or is inactive
    """
    name = _require_name(name)
    concept = get_active_item(Concept, concept_id, label='concept')
    item = Description.objects.create(
        concept=concept,
        name=name,
        description=description,
    )
    _log(ActivityAction.CREATE, item, user)
    return item


@transaction.atomic
def create_provider(
    *,
    name: str,
    rfc: str = '',
    contact_name: str = '',
    email: str = '',
    phone: str = '',
    address: str = '',
    contact_phone: str = '',
    bank_accounts: Optional[list] = None,
    description: str = '',
    user: Optional[User] = None
) -> Provider:
    provider = Provider.objects.create(
        name=_require_name(name),
        rfc=(rfc or '').strip().upper(),
        contact_name=contact_name,
        email=email,
        phone=phone,
        address=address,
        contact_phone=contact_phone,
        bank_accounts=bank_accounts or [],
        description=description,
    )
    _log(ActivityAction.CREATE, provider, user)
    return provider


@transaction.atomic
def update_catalog_item(*, item, user: Optional[User] = None, **changes):
    """
    Apply field changes to a catalog row.

    Only concrete, editable fields are accepted; ``type`` is validated for
    generals and concepts.

    Raises:
        InvalidCatalogDataError: If a value is invalid
    """
    if 'name' in changes:
        changes['name'] = _require_name(changes['name'])
    if 'type' in changes and isinstance(item, TYPED_MODELS):
        _require_type(changes['type'])

    editable = {f.name for f in item._meta.concrete_fields if f.editable and not f.primary_key}
    update_fields = []
    for field, value in changes.items():
        if field not in editable:
            continue
        setattr(item, field, value)
        update_fields.append(field)

    if update_fields:
        item.save(update_fields=update_fields + ['updated_at'])
        _log(ActivityAction.UPDATE, item, user, data={'fields': sorted(update_fields)})
    return item


def delete_or_deactivate(*, item, user: User) -> str:
    """
    Delete a catalog row, or deactivate it when something still references it.

    The reference check and the delete run in one database transaction with
    the row locked, so a reference created concurrently either blocks on the
    lock or makes the delete fail and fall back to deactivation.

    Args:
        item: General, Concept, Subconcept, Description or Provider instance
        user: User requesting the deletion

    Returns:
        'deleted' or 'deactivated'

    Raises:
        CatalogPermissionError: If user lacks the delete capability
    """
    if not user.has_capability(Capability.DELETE_CATALOG_ITEMS):
        raise CatalogPermissionError("You do not have permission to delete catalog items")

    model = type(item)
    with transaction.atomic():
        locked = model.objects.select_for_update().get(pk=item.pk)
        try:
            with transaction.atomic():
                locked.delete()
                # delete() clears the pk; log under the original id
                locked.pk = item.pk
                _log(ActivityAction.DELETE, locked, user)
            return DELETED
        except (ProtectedError, IntegrityError):
            locked.is_active = False
            locked.save(update_fields=['is_active', 'updated_at'])
            _log(ActivityAction.DEACTIVATE, locked, user)
            logger.info("Deactivated referenced %s %s", model.__name__, locked.pk)
            return DEACTIVATED


def get_generals_for_type(transaction_type: str) -> QuerySet:
    """Active generals usable for a transaction type (includes 'ambos')."""
    return General.objects.filter(
        Q(type=transaction_type) | Q(type=CatalogType.AMBOS),
        is_active=True,
    ).order_by('name')


def get_concepts_for_general(general_id: UUID) -> QuerySet:
    return Concept.objects.filter(general_id=general_id, is_active=True).order_by('name')


def get_subconcepts_for_concept(concept_id: UUID) -> QuerySet:
    return Subconcept.objects.filter(concept_id=concept_id, is_active=True).order_by('name')


def get_descriptions_for_concept(concept_id: UUID) -> QuerySet:
    return Description.objects.filter(concept_id=concept_id, is_active=True).order_by('name')
