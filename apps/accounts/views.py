from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError, PermissionDenied, NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .models import Capability
from .permissions import HasCapability
from .serializers import (
    UserSerializer,
    RolePermissionsSerializer,
    RolePermissionsUpdateSerializer,
)
from .services import (
    get_role_permissions,
    list_role_permissions,
    update_role_permissions,
    reset_role_permissions,
)
from .services.exceptions import InvalidRolePermissionError, RolePermissionDeniedError


class CanManageSettings(HasCapability):
    required_capability = Capability.MANAGE_SETTINGS


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile and capabilities.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    responses={200: RolePermissionsSerializer(many=True)},
    description="Effective capabilities of every role.",
    tags=['roles'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanManageSettings])
def role_list(request):
    """GET /api/auth/roles/"""
    return Response(RolePermissionsSerializer(list_role_permissions(), many=True).data)


@extend_schema(
    methods=['GET'],
    responses={200: RolePermissionsSerializer},
    tags=['roles'],
)
@extend_schema(
    methods=['PUT'],
    request=RolePermissionsUpdateSerializer,
    responses={200: RolePermissionsSerializer},
    tags=['roles'],
)
@extend_schema(
    methods=['DELETE'],
    responses={200: RolePermissionsSerializer},
    description="Drop the role's overrides and go back to its defaults.",
    tags=['roles'],
)
@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, CanManageSettings])
def role_permissions(request, role):
    """
    GET    /api/auth/roles/{role}/permissions/
    PUT    /api/auth/roles/{role}/permissions/  - {"permissions": {capability: bool}}
    DELETE /api/auth/roles/{role}/permissions/  - reset to defaults
    """
    try:
        if request.method == 'GET':
            result = get_role_permissions(role)
        elif request.method == 'PUT':
            input_serializer = RolePermissionsUpdateSerializer(data=request.data)
            input_serializer.is_valid(raise_exception=True)
            result = update_role_permissions(
                role=role,
                permissions=input_serializer.validated_data['permissions'],
                user=request.user,
            )
        else:
            result = reset_role_permissions(role=role, user=request.user)
    except InvalidRolePermissionError as e:
        if e.field == 'role':
            raise NotFound(str(e))
        raise ValidationError(e.detail)
    except RolePermissionDeniedError as e:
        raise PermissionDenied(str(e))

    return Response(RolePermissionsSerializer(result).data)
