from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class ActivityAction(models.TextChoices):
    CREATE = 'create', 'Create'
    UPDATE = 'update', 'Update'
    DELETE = 'delete', 'Delete'
    DEACTIVATE = 'deactivate', 'Deactivate'
    IMPORT = 'import', 'Import'


class EntityType(models.TextChoices):
    CATALOG = 'catalog', 'Catalog'
    GENERAL = 'general', 'General'
    CONCEPT = 'concept', 'Concept'
    SUBCONCEPT = 'subconcept', 'Subconcept'
    DESCRIPTION = 'description', 'Description'
    PROVIDER = 'provider', 'Provider'
    TRANSACTION = 'transaction', 'Transaction'
    PAYMENT = 'payment', 'Payment'
    ROLE_PERMISSIONS = 'role_permissions', 'Role permissions'


class ActivityLog(models.Model):
    """
    One user action on a catalog entry, transaction, payment or role.

    Entries keep the entity id as text and a copy of the user's name, so
    they stay readable after the entity or the user is gone.
    """

    id = models.BigAutoField(primary_key=True)
    action = models.CharField(max_length=12, choices=ActivityAction.choices)
    entity_type = models.CharField(max_length=20, choices=EntityType.choices)
    entity_id = models.CharField(max_length=64, blank=True)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activity_entries'
    )
    user_name = models.CharField(max_length=255, blank=True)

    # Human readable summary, e.g. "Created concept 'Arbitraje'"
    details = models.CharField(max_length=500, blank=True)
    data = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'activity_log'
        indexes = [
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['entity_type', 'created_at']),
            models.Index(fields=['user', 'created_at']),
        ]
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.action} {self.entity_type} {self.entity_id}".strip()
