import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, Role
from apps.catalogs.models import CatalogType, General, Concept, Provider
from apps.recurring.models import RecurringExpense, Frequency


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
def accountant(db):
    """Create a contador user."""
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
def accountant_client(accountant):
    return _client_for(accountant)


@pytest.fixture
def director_client(director):
    return _client_for(director)


@pytest.fixture
def cron_client():
    """API client carrying the cron secret from test settings."""
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer test-cron-secret')
    return client


@pytest.fixture
def general(db):
    return General.objects.create(name='Operación', type=CatalogType.SALIDA)


@pytest.fixture
def concept(general):
    return Concept.objects.create(general=general, name='Renta', type=CatalogType.SALIDA)


@pytest.fixture
def provider(db):
    return Provider.objects.create(name='Inmobiliaria Centro')


@pytest.fixture
def make_template(accountant, general, concept, provider):
    """Factory for templates with sensible defaults."""
    def _make(**overrides):
        values = {
            'general': general,
            'concept': concept,
            'provider': provider,
            'description': 'Renta cancha',
            'amount': Decimal('500.00'),
            'division': 'Femenil',
            'frequency': Frequency.MONTHLY,
            'start_date': date(2024, 1, 1),
            'created_by': accountant,
        }
        values.update(overrides)
        return RecurringExpense.objects.create(**values)
    return _make


@pytest.fixture
def monthly_template(make_template):
    """Monthly 500.00 template starting 2024-01-01."""
    return make_template()
