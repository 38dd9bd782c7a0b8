import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, Role
from apps.catalogs.models import CatalogType, General, Concept, Subconcept, Description, Provider


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
    """Create an administrativo user."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        role=Role.ADMINISTRATIVO,
    )


@pytest.fixture
def accountant(db):
    """Create a contador user (manages catalogs, can't delete)."""
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
def general_expense(db):
    """Create a salida general."""
    return General.objects.create(name='Operación', type=CatalogType.SALIDA)


@pytest.fixture
def general_income(db):
    """Create an entrada general."""
    return General.objects.create(name='Ingresos', type=CatalogType.ENTRADA)


@pytest.fixture
def general_both(db):
    """Create a general usable for both types."""
    return General.objects.create(name='Varios', type=CatalogType.AMBOS)


@pytest.fixture
def concept(general_expense):
    """Create a concept under the salida general."""
    return Concept.objects.create(
        general=general_expense,
        name='Arbitraje',
        type=CatalogType.SALIDA,
    )


@pytest.fixture
def subconcept(concept):
    """Create a subconcept under the concept."""
    return Subconcept.objects.create(concept=concept, name='Liga local')


@pytest.fixture
def provider(db):
    """Create a provider with one bank account."""
    return Provider.objects.create(
        name='Arbitros SA',
        rfc='ARB010101AAA',
        bank_accounts=[{'bank': 'BBVA', 'account_number': '0123456789', 'clabe': ''}],
    )


@pytest.fixture
def preset_description(concept):
    """Create a preset description under the concept."""
    return Description.objects.create(concept=concept, name='Pago de arbitraje por jornada')
