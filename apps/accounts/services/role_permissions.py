"""Role permission overrides layered over the default role capabilities."""

import logging

from django.db import transaction

from apps.accounts.models import (
    User,
    Role,
    Capability,
    ROLE_CAPABILITIES,
    RolePermission,
)
from apps.activity.models import ActivityAction, EntityType
from apps.activity.services import log_activity
from .exceptions import InvalidRolePermissionError, RolePermissionDeniedError

logger = logging.getLogger(__name__)


def _require_role(role: str) -> str:
    if role not in Role.values:
        raise InvalidRolePermissionError(f"Unknown role '{role}'", field='role')
    return role


def _require_settings_capability(user: User):
    if not user.has_capability(Capability.MANAGE_SETTINGS):
        raise RolePermissionDeniedError("You don't have permission to change role permissions")


def get_role_permissions(role: str) -> dict:
    """
    Effective permissions of a role.

    Returns:
        dict with ``role``, ``label``, ``capabilities`` (every capability
        mapped to True/False) and ``overridden`` (capabilities that differ
        from the role's default)

    Raises:
        InvalidRolePermissionError: If the role is unknown
    """
    _require_role(role)
    effective = RolePermission.objects.capabilities_for(role)
    overridden = sorted(
        RolePermission.objects.filter(role=role).values_list('capability', flat=True)
    )
    return {
        'role': role,
        'label': Role(role).label,
        'capabilities': {capability: capability in effective for capability in Capability.ALL},
        'overridden': overridden,
    }


def list_role_permissions() -> list:
    return [get_role_permissions(role) for role in Role.values]


@transaction.atomic
def update_role_permissions(*, role: str, permissions: dict, user: User) -> dict:
    """
    Grant or revoke capabilities for a role.

    Capabilities not named in ``permissions`` keep their current value.
    A value equal to the role's default removes the stored override, so
    the role follows the default again.

    Administrativo always keeps manage_settings; otherwise nobody but a
    superuser could undo the change.

    Raises:
        RolePermissionDeniedError: If user lacks manage_settings
        InvalidRolePermissionError: On unknown role or capability, or a
            non-boolean value
    """
    _require_settings_capability(user)
    _require_role(role)

    if not permissions:
        raise InvalidRolePermissionError("At least one capability is required", field='permissions')

    unknown = sorted(set(permissions) - set(Capability.ALL))
    if unknown:
        raise InvalidRolePermissionError(
            f"Unknown capabilities: {', '.join(unknown)}",
            field='permissions',
        )
    for capability, granted in permissions.items():
        if not isinstance(granted, bool):
            raise InvalidRolePermissionError(
                f"Value for {capability} must be true or false",
                field='permissions',
            )

    if role == Role.ADMINISTRATIVO and permissions.get(Capability.MANAGE_SETTINGS) is False:
        raise InvalidRolePermissionError(
            "Administrativo can't lose manage_settings",
            field='permissions',
        )

    defaults = ROLE_CAPABILITIES.get(role, frozenset())
    for capability, granted in permissions.items():
        if granted == (capability in defaults):
            RolePermission.objects.filter(role=role, capability=capability).delete()
        else:
            RolePermission.objects.update_or_create(
                role=role,
                capability=capability,
                defaults={'granted': granted, 'updated_by': user},
            )

    log_activity(
        action=ActivityAction.UPDATE,
        entity_type=EntityType.ROLE_PERMISSIONS,
        entity_id=role,
        user=user,
        details=f"Updated permissions of role {role}",
        data={'permissions': permissions},
    )
    logger.info("Role %s permissions updated by %s: %s", role, user.email, permissions)
    return get_role_permissions(role)


@transaction.atomic
def reset_role_permissions(*, role: str, user: User) -> dict:
    """
    Drop every stored override of a role, restoring its defaults.

    Raises:
        RolePermissionDeniedError: If user lacks manage_settings
        InvalidRolePermissionError: If the role is unknown
    """
    _require_settings_capability(user)
    _require_role(role)

    removed, _ = RolePermission.objects.filter(role=role).delete()

    log_activity(
        action=ActivityAction.UPDATE,
        entity_type=EntityType.ROLE_PERMISSIONS,
        entity_id=role,
        user=user,
        details=f"Reset permissions of role {role} to defaults",
        data={'removed_overrides': removed},
    )
    logger.info("Role %s permissions reset by %s (%s overrides removed)", role, user.email, removed)
    return get_role_permissions(role)
