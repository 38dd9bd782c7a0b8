from django.db import models
import uuid


class CatalogType(models.TextChoices):
    ENTRADA = 'entrada', 'Entrada'
    SALIDA = 'salida', 'Salida'
    AMBOS = 'ambos', 'Ambos'


class CatalogItem(models.Model):
    """Shared fields of every catalog entry (soft-deleted through is_active)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['name']

    def __str__(self):
        return self.name


class General(CatalogItem):
    """Top-level income/expense category."""

    type = models.CharField(max_length=10, choices=CatalogType.choices)

    class Meta(CatalogItem.Meta):
        db_table = 'catalog_generals'
        indexes = [
            models.Index(fields=['type', 'is_active']),
        ]

    def applies_to(self, transaction_type):
        return self.type in (transaction_type, CatalogType.AMBOS)


class Concept(CatalogItem):
    """Classification under a General."""

    general = models.ForeignKey(
        General,
        on_delete=models.PROTECT,
        related_name='concepts'
    )
    type = models.CharField(max_length=10, choices=CatalogType.choices)

    class Meta(CatalogItem.Meta):
        db_table = 'catalog_concepts'
        indexes = [
            models.Index(fields=['general', 'is_active']),
        ]

    def applies_to(self, transaction_type):
        return self.type in (transaction_type, CatalogType.AMBOS)


class Subconcept(CatalogItem):
    """Finest-grained classification under a Concept."""

    concept = models.ForeignKey(
        Concept,
        on_delete=models.PROTECT,
        related_name='subconcepts'
    )

    class Meta(CatalogItem.Meta):
        db_table = 'catalog_subconcepts'
        indexes = [
            models.Index(fields=['concept', 'is_active']),
        ]


class Description(CatalogItem):
    """Preset transaction description offered for a Concept."""

    concept = models.ForeignKey(
        Concept,
        on_delete=models.PROTECT,
        related_name='descriptions'
    )

    class Meta(CatalogItem.Meta):
        db_table = 'catalog_descriptions'
        indexes = [
            models.Index(fields=['concept', 'is_active']),
        ]


class Provider(CatalogItem):
    """Supplier paid by expense (salida) transactions."""

    rfc = models.CharField(max_length=13, blank=True)
    contact_name = models.CharField(max_length=200, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.CharField(max_length=300, blank=True)
    contact_phone = models.CharField(max_length=30, blank=True)

    # [{"bank": ..., "account_number": ..., "clabe": ...}]
    bank_accounts = models.JSONField(default=list, blank=True)

    class Meta(CatalogItem.Meta):
        db_table = 'catalog_providers'

    @property
    def primary_bank_account(self):
        return self.bank_accounts[0] if self.bank_accounts else None
