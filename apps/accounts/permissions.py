"""
Capability-based permission classes shared by all API apps.

Usage:
    class TransactionViewSet(viewsets.ModelViewSet):
        permission_classes = [IsAuthenticated, HasCapability.of(Capability.MANAGE_TRANSACTIONS)]
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS


class HasCapability(BasePermission):
    """
    Permission: user's role must grant ``required_capability``.

    Subclasses set ``required_capability``; ``HasCapability.of(name)`` builds
    one on the fly.
    """

    required_capability = None
    message = 'Your role does not allow this action.'

    @classmethod
    def of(cls, capability):
        return type(
            f'Has_{capability}',
            (cls,),
            {'required_capability': capability},
        )

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.has_capability(self.required_capability)


class ReadOnlyOrCapability(HasCapability):
    """
    Permission: any authenticated user may read; writes need the capability.
    """

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
