import pytest
from datetime import datetime
from django.urls import reverse
from rest_framework import status

from apps.recurring.models import RecurringExpense
from apps.recurring.services import run_scheduler
from apps.transactions.models import Transaction


@pytest.mark.django_db
class TestRecurringExpenseEndpoints:
    """Tests for /api/recurring/"""

    def _payload(self, general, concept, provider, **overrides):
        payload = {
            'general': str(general.id),
            'concept': str(concept.id),
            'provider': str(provider.id),
            'description': 'Luz estadio',
            'amount': '820.00',
            'division': 'Varonil',
            'frequency': 'weekly',
            'start_date': '2024-01-01',
        }
        payload.update(overrides)
        return payload

    def test_create(self, accountant_client, general, concept, provider):
        """Accountants can create templates."""
        url = reverse('recurring:recurring-expense-list')
        response = accountant_client.post(
            url, self._payload(general, concept, provider), format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['concept_name'] == 'Renta'
        assert response.data['provider_name'] == 'Inmobiliaria Centro'
        assert response.data['is_active'] is True
        assert response.data['generated_count'] == 0

    def test_create_requires_provider(self, accountant_client, general, concept, provider):
        """Missing provider is a 400."""
        url = reverse('recurring:recurring-expense-list')
        payload = self._payload(general, concept, provider)
        del payload['provider']

        response = accountant_client.post(url, payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'provider' in response.data

    def test_create_inactive_concept(self, accountant_client, general, concept, provider):
        """Inactive catalog entries are rejected."""
        concept.is_active = False
        concept.save()
        url = reverse('recurring:recurring-expense-list')

        response = accountant_client.post(
            url, self._payload(general, concept, provider), format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'concept' in response.data

    def test_director_cannot_create(self, director_client, general, concept, provider):
        """Read-only roles get 403 on writes."""
        url = reverse('recurring:recurring-expense-list')
        response = director_client.post(
            url, self._payload(general, concept, provider), format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_director_can_list(self, director_client, monthly_template):
        """Read-only roles can list."""
        url = reverse('recurring:recurring-expense-list')
        response = director_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1

    def test_list_filters_active(self, accountant_client, make_template):
        """is_active filter narrows the list."""
        make_template(description='Activa')
        make_template(description='Pausada', is_active=False)
        url = reverse('recurring:recurring-expense-list')

        response = accountant_client.get(url, {'is_active': 'false'})

        assert response.status_code == status.HTTP_200_OK
        assert [row['description'] for row in response.data['results']] == ['Pausada']

    def test_unauthenticated(self, api_client):
        """Anonymous requests are rejected."""
        url = reverse('recurring:recurring-expense-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_patch_amount(self, accountant_client, monthly_template):
        """PATCH changes future generation values."""
        url = reverse('recurring:recurring-expense-detail', kwargs={'pk': monthly_template.id})
        response = accountant_client.patch(url, {'amount': '650.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount'] == '650.00'

    def test_patch_does_not_touch_generated(self, accountant_client, monthly_template):
        """Already generated transactions keep the old amount."""
        run_scheduler(datetime(2024, 1, 1))
        url = reverse('recurring:recurring-expense-detail', kwargs={'pk': monthly_template.id})

        accountant_client.patch(url, {'amount': '650.00'}, format='json')

        tx = Transaction.objects.get(recurring_expense=monthly_template)
        assert str(tx.amount) == '500.00'

    def test_toggle(self, accountant_client, monthly_template):
        """Toggle flips is_active both ways."""
        url = reverse('recurring:recurring-expense-toggle', kwargs={'pk': monthly_template.id})

        response = accountant_client.post(url)
        assert response.data['is_active'] is False

        response = accountant_client.post(url)
        assert response.data['is_active'] is True
        assert response.data['last_generated'] is not None

    def test_transactions_action(self, accountant_client, monthly_template):
        """Lists generated transactions, latest first."""
        run_scheduler(datetime(2024, 3, 1))
        url = reverse('recurring:recurring-expense-transactions', kwargs={'pk': monthly_template.id})

        response = accountant_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [row['date'] for row in response.data] == ['2024-03-01', '2024-02-01', '2024-01-01']

    def test_delete_unused(self, accountant_client, monthly_template):
        """Unused templates are deleted."""
        url = reverse('recurring:recurring-expense-detail', kwargs={'pk': monthly_template.id})
        response = accountant_client.delete(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['result'] == 'deleted'
        assert not RecurringExpense.objects.exists()

    def test_delete_used_deactivates(self, accountant_client, monthly_template):
        """Templates with generated transactions are deactivated."""
        run_scheduler(datetime(2024, 1, 1))
        url = reverse('recurring:recurring-expense-detail', kwargs={'pk': monthly_template.id})

        response = accountant_client.delete(url)

        assert response.data['result'] == 'deactivated'
        assert Transaction.objects.filter(recurring_expense=monthly_template).count() == 1


@pytest.mark.django_db
class TestRunRecurringEndpoint:
    """Tests for POST /api/recurring/run/"""

    def test_run_with_secret(self, cron_client, monthly_template):
        """Cron secret runs the scheduler and returns the report."""
        url = reverse('recurring:run')
        response = cron_client.post(url, {'at': '2024-02-01T12:00:00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['created_count'] == 2
        assert response.data['failures'] == []
        assert Transaction.objects.count() == 2

    def test_run_dry_run(self, cron_client, monthly_template):
        """dry_run reports without saving."""
        url = reverse('recurring:run')
        response = cron_client.post(
            url, {'at': '2024-02-01T12:00:00', 'dry_run': True}, format='json'
        )

        assert response.data['created_count'] == 2
        assert response.data['dry_run'] is True
        assert not Transaction.objects.exists()

    def test_run_without_secret(self, api_client, monthly_template):
        """No Authorization header is refused."""
        url = reverse('recurring:run')
        response = api_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Transaction.objects.exists()

    def test_run_wrong_secret(self, api_client, monthly_template):
        """A wrong secret is refused."""
        api_client.credentials(HTTP_AUTHORIZATION='Bearer nope')
        url = reverse('recurring:run')
        response = api_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_run_user_token_is_not_enough(self, accountant_client):
        """A user JWT is not the cron secret."""
        url = reverse('recurring:run')
        response = accountant_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_run_refused_when_secret_unset(self, cron_client, settings):
        """An empty CRON_SECRET disables the endpoint."""
        settings.CRON_SECRET = ''
        url = reverse('recurring:run')
        response = cron_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
