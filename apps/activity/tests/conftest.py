import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, Role


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
    """Create an administrativo user (manages settings)."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Admin User',
        role=Role.ADMINISTRATIVO,
    )


@pytest.fixture
def accountant(db):
    """Create a contador user (no access to the activity log)."""
    return User.objects.create_user(
        email='contador@example.com',
        password='TestPass123!',
        display_name='Contador',
        role=Role.CONTADOR,
    )


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def accountant_client(accountant):
    return _client_for(accountant)
