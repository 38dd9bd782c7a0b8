from decimal import Decimal

from rest_framework import serializers

from apps.transactions.serializers import TransactionSerializer
from .models import RecurringExpense, Frequency


# =============================================================================
# Input Serializers
# =============================================================================

class RecurringExpenseFilterSerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    frequency = serializers.ChoiceField(choices=Frequency.choices, required=False)
    search = serializers.CharField(max_length=100, required=False)


class RecurringExpenseInputSerializer(serializers.Serializer):
    general = serializers.UUIDField()
    concept = serializers.UUIDField()
    subconcept = serializers.UUIDField(required=False, allow_null=True)
    provider = serializers.UUIDField()
    description = serializers.CharField(max_length=500)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    division = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    frequency = serializers.ChoiceField(choices=Frequency.choices)
    start_date = serializers.DateField()
    is_active = serializers.BooleanField(required=False, default=True)


class SchedulerRunInputSerializer(serializers.Serializer):
    """
    Optional body of the cron endpoint.

    Fields:
        at (datetime): Run as of this instant instead of now
        dry_run (bool): Roll back after computing
    """

    at = serializers.DateTimeField(required=False, allow_null=True, default=None)
    dry_run = serializers.BooleanField(required=False, default=False)


# =============================================================================
# Output Serializers
# =============================================================================

class RecurringExpenseSerializer(serializers.ModelSerializer):
    general_name = serializers.CharField(source='general.name', read_only=True)
    concept_name = serializers.CharField(source='concept.name', read_only=True)
    subconcept_name = serializers.CharField(source='subconcept.name', read_only=True, default=None)
    provider_name = serializers.CharField(source='provider.name', read_only=True)
    generated_count = serializers.SerializerMethodField()

    class Meta:
        model = RecurringExpense
        fields = [
            'id',
            'general', 'general_name',
            'concept', 'concept_name',
            'subconcept', 'subconcept_name',
            'provider', 'provider_name',
            'description',
            'amount',
            'division',
            'frequency',
            'start_date',
            'is_active',
            'generated_dates',
            'generated_count',
            'last_generated',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_generated_count(self, obj) -> int:
        return len(obj.generated_dates or [])


class SchedulerFailureSerializer(serializers.Serializer):
    template_id = serializers.CharField()
    message = serializers.CharField()


class SchedulerReportSerializer(serializers.Serializer):
    run_at = serializers.DateTimeField()
    dry_run = serializers.BooleanField()
    created_count = serializers.IntegerField()
    created = TransactionSerializer(many=True)
    failures = serializers.SerializerMethodField()

    def get_failures(self, obj) -> list:
        return [
            {'template_id': template_id, 'message': message}
            for template_id, message in obj.failures
        ]
