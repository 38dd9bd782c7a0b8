"""Activity log - who did what to which catalog entry, transaction or role."""

import logging
from datetime import date as date_type
from typing import Optional

from django.db.models import Q, QuerySet

from apps.accounts.models import User
from apps.activity.models import ActivityAction, EntityType, ActivityLog
from .exceptions import InvalidActivityEntryError

logger = logging.getLogger(__name__)

DETAILS_MAX_LENGTH = 500


def log_activity(
    *,
    action: str,
    entity_type: str,
    entity_id=None,
    user: Optional[User] = None,
    details: str = '',
    data: Optional[dict] = None
) -> ActivityLog:
    """
    Record one user action.

    Call it inside the same database transaction as the change it
    describes, so a rolled back change leaves no entry behind.

    Args:
        action: One of ActivityAction
        entity_type: One of EntityType
        entity_id: Id of the affected row (stored as text)
        user: Acting user; None for system jobs
        details: Short human readable summary
        data: Extra JSON-serializable context (snapshot, counts, reason)

    Raises:
        InvalidActivityEntryError: If action or entity_type is unknown
    """
    if action not in ActivityAction.values:
        raise InvalidActivityEntryError(f"Unknown action '{action}'", field='action')
    if entity_type not in EntityType.values:
        raise InvalidActivityEntryError(f"Unknown entity type '{entity_type}'", field='entity_type')

    entry = ActivityLog.objects.create(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else '',
        user=user,
        user_name=user.get_display_name() if user else '',
        details=(details or '')[:DETAILS_MAX_LENGTH],
        data=data or {},
    )
    logger.debug("Activity %s %s %s by %s", action, entity_type, entry.entity_id, entry.user_name or 'system')
    return entry


def list_activity(
    *,
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id=None,
    user_id=None,
    date_from: Optional[date_type] = None,
    date_to: Optional[date_type] = None,
    search: Optional[str] = None
) -> QuerySet:
    """
    Activity entries matching every given filter, newest first.

    Dates are inclusive calendar days. ``search`` matches details, the
    user's name, entity type, action or entity id (case-insensitive).
    """
    queryset = ActivityLog.objects.select_related('user')

    if action:
        queryset = queryset.filter(action=action)
    if entity_type:
        queryset = queryset.filter(entity_type=entity_type)
    if entity_id:
        queryset = queryset.filter(entity_id=str(entity_id))
    if user_id:
        queryset = queryset.filter(user_id=user_id)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    search = (search or '').strip()
    if search:
        queryset = queryset.filter(
            Q(details__icontains=search) |
            Q(user_name__icontains=search) |
            Q(entity_type__icontains=search) |
            Q(action__icontains=search) |
            Q(entity_id__icontains=search)
        )

    return queryset.order_by('-created_at', '-id')
