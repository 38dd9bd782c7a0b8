from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Capability
from apps.accounts.permissions import HasCapability
from .models import ActivityLog
from .serializers import ActivityFilterSerializer, ActivityLogSerializer
from .services import list_activity


class ActivityPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 500


class CanViewActivity(HasCapability):
    required_capability = Capability.MANAGE_SETTINGS


class ActivityLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only activity log.

    list: Newest first, filterable by action, entity, user and date range
    retrieve: Single entry
    """

    queryset = ActivityLog.objects.select_related('user')
    serializer_class = ActivityLogSerializer
    permission_classes = [IsAuthenticated, CanViewActivity]
    pagination_class = ActivityPagination

    @extend_schema(parameters=[ActivityFilterSerializer])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def get_queryset(self):
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = ActivityFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return list_activity(
            action=params.get('action'),
            entity_type=params.get('entity_type'),
            entity_id=params.get('entity_id'),
            user_id=params.get('user'),
            date_from=params.get('date_from'),
            date_to=params.get('date_to'),
            search=params.get('search'),
        )
