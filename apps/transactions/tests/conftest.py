import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, Role
from apps.catalogs.models import CatalogType, General, Concept, Subconcept, Description, Provider
from apps.transactions.services import create_transaction


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create an administrativo user (can delete payments)."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        role=Role.ADMINISTRATIVO,
    )


@pytest.fixture
def accountant(db):
    """Create a contador user (records payments, can't delete them)."""
    return User.objects.create_user(
        email='contador@example.com',
        password='TestPass123!',
        role=Role.CONTADOR,
    )


@pytest.fixture
def director(db):
    """Create a read-only director_general user."""
    return User.objects.create_user(
        email='director@example.com',
        password='TestPass123!',
        role=Role.DIRECTOR_GENERAL,
    )


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def accountant_client(accountant):
    return _client_for(accountant)


@pytest.fixture
def director_client(director):
    return _client_for(director)


@pytest.fixture
def general(db):
    return General.objects.create(name='Operación', type=CatalogType.SALIDA)


@pytest.fixture
def income_general(db):
    return General.objects.create(name='Ingresos', type=CatalogType.ENTRADA)


@pytest.fixture
def concept(general):
    return Concept.objects.create(general=general, name='Arbitraje', type=CatalogType.SALIDA)


@pytest.fixture
def income_concept(income_general):
    return Concept.objects.create(general=income_general, name='Cuotas', type=CatalogType.ENTRADA)


@pytest.fixture
def subconcept(concept):
    return Subconcept.objects.create(concept=concept, name='Liga local')


@pytest.fixture
def preset_description(concept):
    return Description.objects.create(concept=concept, name='Pago de arbitraje por jornada')


@pytest.fixture
def provider(db):
    return Provider.objects.create(name='Arbitros SA')


@pytest.fixture
def expense(accountant, general, concept, provider):
    """A 1000.00 salida with no payments."""
    return create_transaction(
        type='salida',
        amount=Decimal('1000.00'),
        date=date(2024, 3, 1),
        general_id=general.id,
        concept_id=concept.id,
        provider_id=provider.id,
        description='Arbitraje jornada 1',
        division='Varonil',
        user=accountant,
        notify=False,
    )


@pytest.fixture
def income(accountant, income_general, income_concept):
    """A 250.00 entrada with no payments."""
    return create_transaction(
        type='entrada',
        amount=Decimal('250.00'),
        date=date(2024, 3, 5),
        general_id=income_general.id,
        concept_id=income_concept.id,
        user=accountant,
        notify=False,
    )
