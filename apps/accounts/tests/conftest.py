import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, Role


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
        display_name='Admin User',
        role=Role.ADMINISTRATIVO,
    )


@pytest.fixture
def accountant(db):
    """Create a contador user."""
    return User.objects.create_user(
        email='contador@example.com',
        password='TestPass123!',
        display_name='Contador',
        role=Role.CONTADOR,
    )


@pytest.fixture
def director(db):
    """Create a director_general user."""
    return User.objects.create_user(
        email='director@example.com',
        password='TestPass123!',
        role=Role.DIRECTOR_GENERAL,
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        role=Role.ADMINISTRATIVO,
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, accountant):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(accountant)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
