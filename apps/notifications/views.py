from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.models import Capability
from apps.accounts.permissions import ReadOnlyOrCapability
from .serializers import (
    SendEmailInputSerializer,
    SendEmailResultSerializer,
    NotificationSettingsSerializer,
)
from .services import (
    send_email,
    get_notification_settings,
    save_notification_settings,
)
from .services.exceptions import InvalidRecipientError, EmailDeliveryError


class BadGateway(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'External service failed.'
    default_code = 'bad_gateway'


class CanManageSettings(ReadOnlyOrCapability):
    required_capability = Capability.MANAGE_SETTINGS


@extend_schema(
    request=SendEmailInputSerializer,
    responses={200: SendEmailResultSerializer},
    description="Send an HTML email through the configured mail backend.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_email_view(request):
    """
    POST /api/email/send/
    Body: {"to": "a@x.com" | ["a@x.com"], "subject": "...", "html": "..."}
    """
    input_serializer = SendEmailInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)
    data = input_serializer.validated_data

    try:
        sent = send_email(to=data['to'], subject=data['subject'], html=data['html'])
    except InvalidRecipientError as e:
        raise ValidationError(e.detail)
    except EmailDeliveryError as e:
        raise BadGateway(str(e))

    if not sent:
        raise ValidationError({'to': ['At least one recipient is required.']})

    return Response({'success': True, 'sent': sent})


@extend_schema(
    methods=['GET'],
    responses={200: NotificationSettingsSerializer},
    tags=['notifications'],
)
@extend_schema(
    methods=['PUT'],
    request=NotificationSettingsSerializer,
    responses={200: NotificationSettingsSerializer},
    tags=['notifications'],
)
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, CanManageSettings])
def notification_settings(request):
    """
    GET /api/notifications/settings/
    PUT /api/notifications/settings/
    Body: {"admin_emails": [...] | "a@x.com, b@x.com", "accountant_emails": ...}
    """
    if request.method == 'GET':
        return Response(NotificationSettingsSerializer(get_notification_settings()).data)

    input_serializer = NotificationSettingsSerializer(data=request.data, partial=True)
    input_serializer.is_valid(raise_exception=True)

    try:
        settings_row = save_notification_settings(
            admin_emails=input_serializer.validated_data.get('admin_emails'),
            accountant_emails=input_serializer.validated_data.get('accountant_emails'),
        )
    except InvalidRecipientError as e:
        raise ValidationError(e.detail)

    return Response(NotificationSettingsSerializer(settings_row).data)
