import pytest
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, Role
from apps.catalogs.models import CatalogType, General, Concept, Provider
from apps.notifications.models import NotificationSettings
from apps.transactions.services import create_transaction, add_payment


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
    """Create a contador user."""
    return User.objects.create_user(
        email='contador@example.com',
        password='TestPass123!',
        role=Role.CONTADOR,
    )


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def accountant_client(accountant):
    return _client_for(accountant)


@pytest.fixture
def recipients(db):
    """Recipient lists with one admin and two accountants."""
    settings_row = NotificationSettings.load()
    settings_row.admin_emails = ['tesoreria@example.com']
    settings_row.accountant_emails = ['conta1@example.com', 'conta2@example.com']
    settings_row.save()
    return settings_row


@pytest.fixture
def expense(accountant):
    """A 1,200.00 expense for 'Uniformes', created without notifying."""
    general = General.objects.create(name='Operación', type=CatalogType.SALIDA)
    concept = Concept.objects.create(general=general, name='Uniformes', type=CatalogType.SALIDA)
    provider = Provider.objects.create(name='Deportes del Norte')
    return create_transaction(
        type='salida',
        amount='1200.00',
        date=date(2024, 4, 10),
        general_id=general.id,
        concept_id=concept.id,
        provider_id=provider.id,
        description='Uniformes temporada',
        user=accountant,
        notify=False,
    )


@pytest.fixture
def payment(expense, accountant, django_capture_on_commit_callbacks):
    """A 200.00 payment on the expense; its own notification is discarded."""
    with django_capture_on_commit_callbacks(execute=False):
        return add_payment(
            transaction_id=expense.id,
            amount='200.00',
            date=date(2024, 4, 12),
            user=accountant,
        )
