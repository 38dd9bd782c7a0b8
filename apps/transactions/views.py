from django.db.models import Q
from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError, NotFound, PermissionDenied
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Capability
from apps.accounts.permissions import ReadOnlyOrCapability
from .models import Transaction, Payment
from .serializers import (
    TransactionFilterSerializer,
    TransactionCreateSerializer,
    TransactionUpdateSerializer,
    TransactionDeleteSerializer,
    PaymentCreateSerializer,
    TransactionSerializer,
    PaymentSerializer,
    PaymentSummarySerializer,
    DeleteResultSerializer,
)
from .services import (
    create_transaction,
    update_transaction,
    delete_transaction,
    list_payments,
    get_payment_summary,
    add_payment,
    remove_payment,
)
from .services.exceptions import (
    TransactionValidationError,
    TransactionNotFoundError,
    PaymentNotFoundError,
    PermissionDeniedError,
)


class TransactionPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 500


class CanManageTransactions(ReadOnlyOrCapability):
    required_capability = Capability.MANAGE_TRANSACTIONS


class TransactionViewSet(viewsets.ModelViewSet):
    """
    Income and expense records.

    list: Filterable by type, status, classification, provider and date range
    create: Create a record (multipart when attaching files)
    retrieve: Get a record
    update: Update amount, date, classification or notes
    destroy: Delete with a mandatory reason (deactivates if it has payments)
    summary: Totals, balance and payments
    payments: List or register payments
    """

    queryset = Transaction.objects.select_related(
        'general',
        'concept',
        'subconcept',
        'description_item',
        'provider',
        'created_by',
    )
    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated, CanManageTransactions]
    pagination_class = TransactionPagination
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        queryset = super().get_queryset()

        filter_serializer = TransactionFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if self.action != 'list' or not params.get('include_inactive'):
            queryset = queryset.filter(is_active=True)

        for field in ('type', 'status'):
            if params.get(field):
                queryset = queryset.filter(**{field: params[field]})
        for field in ('general', 'concept', 'subconcept', 'description_item', 'provider', 'recurring_expense'):
            if params.get(field):
                queryset = queryset.filter(**{f'{field}_id': params[field]})

        if params.get('division'):
            queryset = queryset.filter(division__iexact=params['division'])

        if 'date_from' in params:
            queryset = queryset.filter(date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(date__lte=params['date_to'])

        if params.get('recurring') is not None:
            queryset = queryset.filter(recurring_expense__isnull=not params['recurring'])

        if params.get('search'):
            queryset = queryset.filter(
                Q(description__icontains=params['search']) |
                Q(division__icontains=params['search'])
            )

        return queryset

    def get_serializer_class(self):
        if self.action == 'create':
            return TransactionCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return TransactionUpdateSerializer
        return TransactionSerializer

    @extend_schema(request=TransactionCreateSerializer, responses={201: TransactionSerializer})
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            tx = create_transaction(
                type=data['type'],
                amount=data['amount'],
                date=data['date'],
                general_id=data['general'],
                concept_id=data['concept'],
                subconcept_id=data.get('subconcept'),
                description_id=data.get('description_item'),
                provider_id=data.get('provider'),
                description=data.get('description', ''),
                division=data.get('division', ''),
                files=data.get('attachments', []),
                user=request.user,
            )
        except TransactionValidationError as e:
            raise ValidationError(e.detail)

        return Response(TransactionSerializer(tx).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=TransactionUpdateSerializer, responses={200: TransactionSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        changes = {
            (f'{key}_id' if key in ('general', 'concept', 'subconcept', 'description_item', 'provider') else key): value
            for key, value in serializer.validated_data.items()
        }
        try:
            tx = update_transaction(transaction_id=instance.id, user=request.user, **changes)
        except TransactionValidationError as e:
            raise ValidationError(e.detail)
        except TransactionNotFoundError as e:
            raise NotFound(str(e))

        return Response(TransactionSerializer(tx).data)

    @extend_schema(request=TransactionDeleteSerializer, responses={200: DeleteResultSerializer})
    def destroy(self, request, *args, **kwargs):
        """
        DELETE /api/transactions/{id}/
        Body: {"reason": "..."}
        """
        instance = self.get_object()
        try:
            result = delete_transaction(
                transaction_id=instance.id,
                user=request.user,
                reason=request.data.get('reason', ''),
            )
        except PermissionDeniedError as e:
            raise PermissionDenied(str(e))
        except TransactionValidationError as e:
            raise ValidationError(e.detail)
        except TransactionNotFoundError as e:
            raise NotFound(str(e))

        return Response({'result': result}, status=status.HTTP_200_OK)

    @extend_schema(responses={200: PaymentSummarySerializer})
    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        """
        Totals and payments of a transaction.

        GET /api/transactions/{id}/summary/
        """
        tx = self.get_object()
        try:
            summary = get_payment_summary(tx.id)
        except TransactionNotFoundError as e:
            raise NotFound(str(e))
        return Response(PaymentSummarySerializer(summary).data)

    @extend_schema(
        methods=['GET'],
        responses={200: PaymentSerializer(many=True)},
    )
    @extend_schema(
        methods=['POST'],
        request=PaymentCreateSerializer,
        responses={201: PaymentSerializer},
    )
    @action(detail=True, methods=['get', 'post'])
    def payments(self, request, pk=None):
        """
        GET  /api/transactions/{id}/payments/  - newest first
        POST /api/transactions/{id}/payments/  - {"amount", "date", "notes", attachments[]}
        """
        tx = self.get_object()

        if request.method == 'GET':
            return Response(PaymentSerializer(list_payments(tx.id), many=True).data)

        input_serializer = PaymentCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        try:
            payment = add_payment(
                transaction_id=tx.id,
                amount=data['amount'],
                date=data['date'],
                notes=data.get('notes', ''),
                files=data.get('attachments', []),
                user=request.user,
            )
        except TransactionValidationError as e:
            raise ValidationError(e.detail)
        except TransactionNotFoundError as e:
            raise NotFound(str(e))

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class PaymentViewSet(mixins.RetrieveModelMixin,
                     mixins.DestroyModelMixin,
                     viewsets.GenericViewSet):
    """
    Single payments.

    retrieve: Get a payment
    destroy: Delete a payment and recompute the transaction's status
    """

    queryset = Payment.objects.select_related('transaction', 'created_by')
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: PaymentSummarySerializer})
    def destroy(self, request, *args, **kwargs):
        try:
            summary = remove_payment(payment_id=kwargs['pk'], user=request.user)
        except PermissionDeniedError as e:
            raise PermissionDenied(str(e))
        except PaymentNotFoundError as e:
            raise NotFound(str(e))

        return Response(PaymentSummarySerializer(summary).data, status=status.HTTP_200_OK)
