from rest_framework import serializers
from .models import CatalogType, General, Concept, Subconcept, Description, Provider


# =============================================================================
# Input Serializers
# =============================================================================

class CatalogFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for catalog listings.

    Query Parameters:
        type (str): entrada/salida - generals or concepts usable for that type
        general (UUID): Concepts of a general
        concept (UUID): Subconcepts or descriptions of a concept
        include_inactive (bool): Include soft-deleted entries
        search (str): Name contains
    """

    type = serializers.ChoiceField(choices=CatalogType.choices, required=False)
    general = serializers.UUIDField(required=False)
    concept = serializers.UUIDField(required=False)
    include_inactive = serializers.BooleanField(required=False, default=False)
    search = serializers.CharField(max_length=100, required=False)


class CsvImportInputSerializer(serializers.Serializer):
    file = serializers.FileField()
    general_type = serializers.ChoiceField(
        choices=CatalogType.choices,
        required=False,
        default=CatalogType.ENTRADA,
    )


class ProviderCsvImportInputSerializer(serializers.Serializer):
    file = serializers.FileField()


class SimilarNameQuerySerializer(serializers.Serializer):
    """
    Query parameters for the near-duplicate check.

    Query Parameters:
        name (str): Candidate name
        parent (UUID): General for concepts, concept for subconcepts and descriptions
        exclude (UUID): Entry being edited
    """

    name = serializers.CharField(max_length=200)
    parent = serializers.UUIDField(required=False)
    exclude = serializers.UUIDField(required=False)


class BankAccountSerializer(serializers.Serializer):
    bank = serializers.CharField(max_length=100, allow_blank=True, required=False, default='')
    account_number = serializers.CharField(max_length=30, allow_blank=True, required=False, default='')
    clabe = serializers.CharField(max_length=18, allow_blank=True, required=False, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class GeneralSerializer(serializers.ModelSerializer):

    class Meta:
        model = General
        fields = ['id', 'name', 'description', 'type', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']


class ConceptSerializer(serializers.ModelSerializer):
    general_name = serializers.CharField(source='general.name', read_only=True)

    class Meta:
        model = Concept
        fields = [
            'id',
            'general',
            'general_name',
            'name',
            'description',
            'type',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'general_name', 'is_active', 'created_at', 'updated_at']


class SubconceptSerializer(serializers.ModelSerializer):
    concept_name = serializers.CharField(source='concept.name', read_only=True)

    class Meta:
        model = Subconcept
        fields = [
            'id',
            'concept',
            'concept_name',
            'name',
            'description',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'concept_name', 'is_active', 'created_at', 'updated_at']


class DescriptionSerializer(serializers.ModelSerializer):
    concept_name = serializers.CharField(source='concept.name', read_only=True)

    class Meta:
        model = Description
        fields = [
            'id',
            'concept',
            'concept_name',
            'name',
            'description',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'concept_name', 'is_active', 'created_at', 'updated_at']


class ProviderSerializer(serializers.ModelSerializer):
    bank_accounts = BankAccountSerializer(many=True, required=False)

    class Meta:
        model = Provider
        fields = [
            'id',
            'name',
            'description',
            'rfc',
            'contact_name',
            'email',
            'phone',
            'address',
            'contact_phone',
            'bank_accounts',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']


class DeleteResultSerializer(serializers.Serializer):
    result = serializers.ChoiceField(choices=['deleted', 'deactivated'])


class CsvImportResultSerializer(serializers.Serializer):
    created = serializers.DictField(child=serializers.IntegerField())
    skipped = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.DictField())


class SimilarItemSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    score = serializers.IntegerField()
    match_type = serializers.CharField()
