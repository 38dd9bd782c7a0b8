from django.db.models import Q
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes, authentication_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Capability
from apps.accounts.permissions import ReadOnlyOrCapability
from apps.transactions.serializers import TransactionSerializer
from .models import RecurringExpense
from .permissions import HasCronSecret
from .serializers import (
    RecurringExpenseFilterSerializer,
    RecurringExpenseInputSerializer,
    RecurringExpenseSerializer,
    SchedulerRunInputSerializer,
    SchedulerReportSerializer,
)
from .services import (
    create_recurring_expense,
    update_recurring_expense,
    set_active,
    delete_recurring_expense,
    get_generated_transactions,
    run_scheduler,
)
from .services.exceptions import InvalidRecurringExpenseError


class RecurringPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class CanManageRecurring(ReadOnlyOrCapability):
    required_capability = Capability.MANAGE_TRANSACTIONS


def _service_kwargs(data):
    """Map API field names to service keyword arguments."""
    kwargs = {}
    for key, value in data.items():
        if key in ('general', 'concept', 'subconcept', 'provider'):
            kwargs[f'{key}_id'] = value
        else:
            kwargs[key] = value
    return kwargs


class RecurringExpenseViewSet(viewsets.ModelViewSet):
    """
    Recurring expense templates.

    list: Templates (filter by is_active, frequency)
    create: Create a template
    retrieve: Get a template
    update: Update a template (affects future generation only)
    destroy: Delete, or deactivate if it generated transactions
    toggle: Activate/deactivate
    transactions: Transactions generated from the template
    """

    queryset = RecurringExpense.objects.select_related(
        'general',
        'concept',
        'subconcept',
        'provider',
    )
    serializer_class = RecurringExpenseSerializer
    permission_classes = [IsAuthenticated, CanManageRecurring]
    pagination_class = RecurringPagination

    def get_queryset(self):
        queryset = super().get_queryset()

        filter_serializer = RecurringExpenseFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if params.get('is_active') is not None:
            queryset = queryset.filter(is_active=params['is_active'])
        if params.get('frequency'):
            queryset = queryset.filter(frequency=params['frequency'])
        if params.get('search'):
            queryset = queryset.filter(
                Q(description__icontains=params['search']) |
                Q(provider__name__icontains=params['search'])
            )
        return queryset

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return RecurringExpenseInputSerializer
        return RecurringExpenseSerializer

    @extend_schema(request=RecurringExpenseInputSerializer, responses={201: RecurringExpenseSerializer})
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            template = create_recurring_expense(
                user=request.user,
                **_service_kwargs(serializer.validated_data)
            )
        except InvalidRecurringExpenseError as e:
            raise ValidationError(e.detail)

        return Response(RecurringExpenseSerializer(template).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=RecurringExpenseInputSerializer, responses={200: RecurringExpenseSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        template = self.get_object()
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        changes = _service_kwargs(serializer.validated_data)
        active = changes.pop('is_active', None)
        try:
            template = update_recurring_expense(template=template, **changes)
        except InvalidRecurringExpenseError as e:
            raise ValidationError(e.detail)
        if active is not None:
            template = set_active(template=template, active=active)

        return Response(RecurringExpenseSerializer(template).data)

    def destroy(self, request, *args, **kwargs):
        result = delete_recurring_expense(template=self.get_object())
        return Response({'result': result}, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: RecurringExpenseSerializer})
    @action(detail=True, methods=['post'])
    def toggle(self, request, pk=None):
        """
        Flip is_active.

        POST /api/recurring/{id}/toggle/
        """
        template = self.get_object()
        template = set_active(template=template, active=not template.is_active)
        return Response(RecurringExpenseSerializer(template).data)

    @extend_schema(responses={200: TransactionSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def transactions(self, request, pk=None):
        """
        GET /api/recurring/{id}/transactions/
        """
        template = self.get_object()
        serializer = TransactionSerializer(get_generated_transactions(template), many=True)
        return Response(serializer.data)


@extend_schema(
    request=SchedulerRunInputSerializer,
    responses={200: SchedulerReportSerializer},
    description="Run the recurring expense scheduler. Called by cron with the shared secret.",
    tags=['recurring'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([HasCronSecret])
def run_recurring(request):
    """
    POST /api/recurring/run/
    Header: Authorization: Bearer <CRON_SECRET>
    """
    input_serializer = SchedulerRunInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    report = run_scheduler(
        input_serializer.validated_data.get('at'),
        dry_run=input_serializer.validated_data['dry_run'],
    )
    return Response(SchedulerReportSerializer(report).data)
