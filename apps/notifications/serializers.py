from rest_framework import serializers

from .models import NotificationSettings


class RecipientListField(serializers.Field):
    """Accepts a list of addresses or one comma-separated string."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            return data
        if isinstance(data, (list, tuple)) and all(isinstance(item, str) for item in data):
            return list(data)
        raise serializers.ValidationError("Expected a list of emails or a comma-separated string.")

    def to_representation(self, value):
        return list(value or [])


# =============================================================================
# Input Serializers
# =============================================================================

class SendEmailInputSerializer(serializers.Serializer):
    to = RecipientListField()
    subject = serializers.CharField(max_length=300)
    html = serializers.CharField()


# =============================================================================
# Output Serializers
# =============================================================================

class NotificationSettingsSerializer(serializers.ModelSerializer):
    admin_emails = RecipientListField(required=False)
    accountant_emails = RecipientListField(required=False)

    class Meta:
        model = NotificationSettings
        fields = ['admin_emails', 'accountant_emails', 'updated_at']
        read_only_fields = ['updated_at']


class SendEmailResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    sent = serializers.IntegerField()
