from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes, parser_classes
from rest_framework.exceptions import ValidationError, PermissionDenied
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Capability
from apps.accounts.permissions import HasCapability, ReadOnlyOrCapability
from .models import General, Concept, Subconcept, Description, Provider
from .serializers import (
    CatalogFilterSerializer,
    CsvImportInputSerializer,
    ProviderCsvImportInputSerializer,
    SimilarNameQuerySerializer,
    SimilarItemSerializer,
    GeneralSerializer,
    ConceptSerializer,
    SubconceptSerializer,
    DescriptionSerializer,
    ProviderSerializer,
    DeleteResultSerializer,
    CsvImportResultSerializer,
)
from .services import (
    create_general,
    create_concept,
    create_subconcept,
    create_description,
    create_provider,
    update_catalog_item,
    delete_or_deactivate,
    get_generals_for_type,
    import_catalog_csv,
    import_provider_csv,
    find_similar_items,
)
from .services.exceptions import (
    InvalidCatalogDataError,
    CatalogItemNotFoundError,
    CatalogPermissionError,
    CsvImportError,
)


class CatalogPagination(PageNumberPagination):
    """Catalog lists are short; large pages keep selectors in one request."""
    page_size = 100
    page_size_query_param = 'page_size'
    max_page_size = 500


class CanManageCatalogs(ReadOnlyOrCapability):
    required_capability = Capability.MANAGE_CATALOGS


class CatalogViewSet(viewsets.ModelViewSet):
    """
    Shared CRUD behaviour for catalog entries.

    list: Active entries (``include_inactive=true`` for all)
    create: Create through the service layer
    update: Update editable fields
    destroy: Delete when unreferenced, otherwise deactivate
    similar: Near-duplicate names
    """

    permission_classes = [IsAuthenticated, CanManageCatalogs]
    pagination_class = CatalogPagination

    def get_queryset(self):
        queryset = super().get_queryset()

        filter_serializer = CatalogFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if self.action == 'list' and not params.get('include_inactive'):
            queryset = queryset.filter(is_active=True)
        if params.get('search'):
            queryset = queryset.filter(name__icontains=params['search'])

        return self.filter_catalog(queryset, params)

    def filter_catalog(self, queryset, params):
        return queryset

    def create_item(self, data):
        raise NotImplementedError

    def perform_create(self, serializer):
        try:
            serializer.instance = self.create_item(serializer.validated_data)
        except InvalidCatalogDataError as e:
            raise ValidationError(e.detail)
        except CatalogItemNotFoundError as e:
            raise ValidationError(str(e))

    def perform_update(self, serializer):
        try:
            serializer.instance = update_catalog_item(
                item=serializer.instance,
                user=self.request.user,
                **serializer.validated_data
            )
        except InvalidCatalogDataError as e:
            raise ValidationError(e.detail)

    @extend_schema(responses={200: DeleteResultSerializer})
    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        try:
            result = delete_or_deactivate(item=item, user=request.user)
        except CatalogPermissionError as e:
            raise PermissionDenied(str(e))
        return Response({'result': result}, status=status.HTTP_200_OK)

    @extend_schema(
        parameters=[SimilarNameQuerySerializer],
        responses={200: SimilarItemSerializer(many=True)},
    )
    @action(detail=False, methods=['get'])
    def similar(self, request):
        """
        Active entries with a name close to ``name``; use before creating
        or renaming to avoid near-duplicates.

        GET /api/catalogs/<kind>/similar/?name=...&parent=...
        """
        query_serializer = SimilarNameQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        matches = find_similar_items(
            self.queryset.model,
            name=params['name'],
            parent_id=params.get('parent'),
            exclude_id=params.get('exclude'),
        )
        data = [
            {'id': item.id, 'name': item.name, 'score': score, 'match_type': match_type}
            for item, score, match_type in matches
        ]
        return Response(SimilarItemSerializer(data, many=True).data)


class GeneralViewSet(CatalogViewSet):
    queryset = General.objects.all()
    serializer_class = GeneralSerializer

    def filter_catalog(self, queryset, params):
        if params.get('type'):
            return queryset & get_generals_for_type(params['type'])
        return queryset

    def create_item(self, data):
        return create_general(
            name=data['name'],
            type=data['type'],
            description=data.get('description', ''),
            user=self.request.user,
        )


class ConceptViewSet(CatalogViewSet):
    queryset = Concept.objects.select_related('general')
    serializer_class = ConceptSerializer

    def filter_catalog(self, queryset, params):
        if params.get('general'):
            queryset = queryset.filter(general_id=params['general'])
        if params.get('type'):
            queryset = queryset.filter(type__in=[params['type'], 'ambos'])
        return queryset

    def create_item(self, data):
        return create_concept(
            general_id=data['general'].id,
            name=data['name'],
            type=data['type'],
            description=data.get('description', ''),
            user=self.request.user,
        )


class SubconceptViewSet(CatalogViewSet):
    queryset = Subconcept.objects.select_related('concept')
    serializer_class = SubconceptSerializer

    def filter_catalog(self, queryset, params):
        if params.get('concept'):
            queryset = queryset.filter(concept_id=params['concept'])
        return queryset

    def create_item(self, data):
        return create_subconcept(
            concept_id=data['concept'].id,
            name=data['name'],
            description=data.get('description', ''),
            user=self.request.user,
        )


class DescriptionViewSet(CatalogViewSet):
    queryset = Description.objects.select_related('concept')
    serializer_class = DescriptionSerializer

    def filter_catalog(self, queryset, params):
        if params.get('concept'):
            queryset = queryset.filter(concept_id=params['concept'])
        return queryset

    def create_item(self, data):
        return create_description(
            concept_id=data['concept'].id,
            name=data['name'],
            description=data.get('description', ''),
            user=self.request.user,
        )


class ProviderViewSet(CatalogViewSet):
    queryset = Provider.objects.all()
    serializer_class = ProviderSerializer

    def create_item(self, data):
        return create_provider(
            name=data['name'],
            rfc=data.get('rfc', ''),
            contact_name=data.get('contact_name', ''),
            email=data.get('email', ''),
            phone=data.get('phone', ''),
            address=data.get('address', ''),
            contact_phone=data.get('contact_phone', ''),
            bank_accounts=data.get('bank_accounts', []),
            description=data.get('description', ''),
            user=self.request.user,
        )

    @extend_schema(
        request=ProviderCsvImportInputSerializer,
        responses={200: CsvImportResultSerializer},
    )
    @action(
        detail=False,
        methods=['post'],
        url_path='import',
        parser_classes=[MultiPartParser, FormParser],
    )
    def import_csv(self, request):
        """
        Bulk import providers from a CSV file.

        POST /api/catalogs/providers/import/  (multipart, field "file")
        """
        input_serializer = ProviderCsvImportInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            result = import_provider_csv(
                file=input_serializer.validated_data['file'],
                user=request.user,
            )
        except CsvImportError as e:
            raise ValidationError({'file': [str(e)]})

        return Response(CsvImportResultSerializer(result).data)


@extend_schema(
    request=CsvImportInputSerializer,
    responses={200: CsvImportResultSerializer},
    description="Bulk import generals, concepts and subconcepts from a CSV file.",
    tags=['catalogs'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, HasCapability.of(Capability.MANAGE_CATALOGS)])
@parser_classes([MultiPartParser, FormParser])
def import_csv(request):
    """Import catalog entries from an uploaded CSV."""
    input_serializer = CsvImportInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        result = import_catalog_csv(
            file=input_serializer.validated_data['file'],
            general_type=input_serializer.validated_data['general_type'],
            user=request.user,
        )
    except CsvImportError as e:
        raise ValidationError({'file': [str(e)]})

    return Response(CsvImportResultSerializer(result).data)
