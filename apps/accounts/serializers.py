from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Current user with role and the capabilities it grants."""

    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'role',
            'capabilities',
            'created_at',
            'last_login',
        ]
        read_only_fields = ['id', 'email', 'role', 'created_at', 'last_login']

    def get_capabilities(self, obj) -> list:
        return sorted(obj.capabilities)


class RolePermissionsSerializer(serializers.Serializer):
    """Effective capabilities of a role and which of them are overridden."""

    role = serializers.CharField()
    label = serializers.CharField()
    capabilities = serializers.DictField(child=serializers.BooleanField())
    overridden = serializers.ListField(child=serializers.CharField())


class RolePermissionsUpdateSerializer(serializers.Serializer):
    """Body: {"permissions": {"view_reports": true, "manage_catalogs": false}}"""

    permissions = serializers.DictField(child=serializers.BooleanField(), allow_empty=False)
