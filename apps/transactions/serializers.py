from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from .models import Transaction, Payment, TransactionType, PaymentStatus
from .services import validate_attachment, TransactionValidationError


def _check_files(files, max_size):
    for file in files:
        try:
            validate_attachment(file, max_size)
        except TransactionValidationError as e:
            raise serializers.ValidationError(str(e))
    return files


# =============================================================================
# Input Serializers
# =============================================================================

class TransactionFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for transaction listings.

    Query Parameters:
        type (str): entrada/salida
        status (str): pendiente/parcial/pagado
        general, concept, subconcept, description_item, provider (UUID): Classification
        division (str): Division name (exact, case-insensitive)
        date_from, date_to (date): Inclusive date range
        recurring (bool): Only generated (true) or only manual (false)
        recurring_expense (UUID): Generated by a given template
        include_inactive (bool): Include soft-deleted records
        search (str): Description contains
    """

    type = serializers.ChoiceField(choices=TransactionType.choices, required=False)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    general = serializers.UUIDField(required=False)
    concept = serializers.UUIDField(required=False)
    subconcept = serializers.UUIDField(required=False)
    description_item = serializers.UUIDField(required=False)
    provider = serializers.UUIDField(required=False)
    division = serializers.CharField(max_length=100, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    recurring = serializers.BooleanField(required=False, allow_null=True, default=None)
    recurring_expense = serializers.UUIDField(required=False)
    include_inactive = serializers.BooleanField(required=False, default=False)
    search = serializers.CharField(max_length=100, required=False)

    def validate(self, data):
        if data.get('date_from') and data.get('date_to') and data['date_from'] > data['date_to']:
            raise serializers.ValidationError({'date_to': "date_to must be on or after date_from"})
        return data


class TransactionCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=TransactionType.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))
    date = serializers.DateField()
    general = serializers.UUIDField()
    concept = serializers.UUIDField()
    subconcept = serializers.UUIDField(required=False, allow_null=True)
    description_item = serializers.UUIDField(required=False, allow_null=True)
    provider = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    division = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    attachments = serializers.ListField(
        child=serializers.FileField(),
        required=False,
        default=list,
    )

    def validate_attachments(self, value):
        return _check_files(value, settings.TRANSACTION_ATTACHMENT_MAX_SIZE)


class TransactionUpdateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)
    date = serializers.DateField(required=False)
    general = serializers.UUIDField(required=False)
    concept = serializers.UUIDField(required=False)
    subconcept = serializers.UUIDField(required=False, allow_null=True)
    description_item = serializers.UUIDField(required=False, allow_null=True)
    provider = serializers.UUIDField(required=False, allow_null=True)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    division = serializers.CharField(max_length=100, required=False, allow_blank=True)


class TransactionDeleteSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    date = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    attachments = serializers.ListField(
        child=serializers.FileField(),
        required=False,
        default=list,
    )

    def validate_attachments(self, value):
        return _check_files(value, settings.PAYMENT_ATTACHMENT_MAX_SIZE)


# =============================================================================
# Output Serializers
# =============================================================================

class AttachmentSerializer(serializers.Serializer):
    file_name = serializers.CharField()
    file_url = serializers.CharField()
    file_type = serializers.CharField()
    file_size = serializers.IntegerField()
    uploaded_at = serializers.CharField()


class PaymentSerializer(serializers.ModelSerializer):
    attachments = AttachmentSerializer(many=True, read_only=True)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            'id', 'transaction', 'amount', 'date', 'notes',
            'attachments', 'created_by', 'created_by_name', 'created_at',
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj) -> str:
        return obj.created_by.get_display_name() if obj.created_by else ''


class TransactionSerializer(serializers.ModelSerializer):
    general_name = serializers.CharField(source='general.name', read_only=True)
    concept_name = serializers.CharField(source='concept.name', read_only=True)
    subconcept_name = serializers.CharField(source='subconcept.name', read_only=True, default=None)
    description_item_name = serializers.CharField(source='description_item.name', read_only=True, default=None)
    provider_name = serializers.CharField(source='provider.name', read_only=True, default=None)
    attachments = AttachmentSerializer(many=True, read_only=True)
    is_recurring = serializers.BooleanField(read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id', 'type', 'amount', 'date', 'description', 'division',
            'general', 'general_name',
            'concept', 'concept_name',
            'subconcept', 'subconcept_name',
            'description_item', 'description_item_name',
            'provider', 'provider_name',
            'status', 'total_paid', 'balance',
            'attachments',
            'recurring_expense', 'occurrence_date', 'is_recurring',
            'is_active', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PaymentSummarySerializer(serializers.Serializer):
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = serializers.ChoiceField(choices=PaymentStatus.choices)
    payments = PaymentSerializer(many=True)


class DeleteResultSerializer(serializers.Serializer):
    result = serializers.ChoiceField(choices=['deleted', 'deactivated'])
