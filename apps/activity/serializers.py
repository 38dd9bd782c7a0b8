from rest_framework import serializers
from .models import ActivityAction, EntityType, ActivityLog


class ActivityFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the activity log.

    Query Parameters:
        action (str): create/update/delete/deactivate/import
        entity_type (str): general, concept, ..., transaction, payment
        entity_id (str): Affected row
        user (UUID): Acting user
        date_from, date_to (date): Inclusive date range
        search (str): Free text over details, user name and ids
    """

    action = serializers.ChoiceField(choices=ActivityAction.choices, required=False)
    entity_type = serializers.ChoiceField(choices=EntityType.choices, required=False)
    entity_id = serializers.CharField(max_length=64, required=False)
    user = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(max_length=100, required=False)

    def validate(self, data):
        if data.get('date_from') and data.get('date_to') and data['date_from'] > data['date_to']:
            raise serializers.ValidationError({'date_to': "date_to must be on or after date_from"})
        return data


class ActivityLogSerializer(serializers.ModelSerializer):

    class Meta:
        model = ActivityLog
        fields = [
            'id',
            'action',
            'entity_type',
            'entity_id',
            'user',
            'user_name',
            'details',
            'data',
            'created_at',
        ]
        read_only_fields = fields
