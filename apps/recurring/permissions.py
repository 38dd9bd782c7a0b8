import hmac

from django.conf import settings
from rest_framework.permissions import BasePermission


class HasCronSecret(BasePermission):
    """
    Permission: request carries ``Authorization: Bearer <CRON_SECRET>``.

    Always denies when no secret is configured.
    """

    message = 'Invalid or missing cron secret.'

    def has_permission(self, request, view):
        secret = getattr(settings, 'CRON_SECRET', '')
        if not secret:
            return False
        header = request.META.get('HTTP_AUTHORIZATION', '')
        scheme, _, token = header.partition(' ')
        if scheme.lower() != 'bearer':
            return False
        return hmac.compare_digest(token.strip().encode(), secret.encode())
