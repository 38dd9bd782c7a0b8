import pytest
from datetime import date, datetime
from decimal import Decimal
from io import StringIO
from zoneinfo import ZoneInfo

from django.core.management import call_command

from apps.catalogs.models import Provider
from apps.recurring.models import RecurringExpense, Frequency
from apps.recurring.services import (
    run_scheduler,
    set_active,
    delete_recurring_expense,
    create_recurring_expense,
    get_generated_transactions,
    DELETED,
    DEACTIVATED,
)
from apps.recurring.services.exceptions import InvalidRecurringExpenseError
from apps.transactions.models import Transaction, PaymentStatus, TransactionType


def _at(year, month, day, hour=0):
    """Naive run instant, read in the scheduler's time zone."""
    return datetime(year, month, day, hour, 0)


@pytest.mark.django_db
class TestRunScheduler:
    """Tests for run_scheduler"""

    def test_monthly_backlog_generated(self, monthly_template):
        """First run on 2024-03-01 creates Jan, Feb and Mar occurrences."""
        report = run_scheduler(_at(2024, 3, 1))

        dates = sorted(tx.date for tx in report.created)
        assert dates == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]
        assert report.failures == []
        for tx in Transaction.objects.filter(recurring_expense=monthly_template):
            assert tx.status == PaymentStatus.PENDIENTE
            assert tx.type == TransactionType.SALIDA
            assert tx.amount == Decimal('500.00')
            assert tx.description == 'Renta cancha (Recurrente)'
            assert tx.occurrence_date == tx.date

        monthly_template.refresh_from_db()
        assert monthly_template.generated_dates == ['2024-01-01', '2024-02-01', '2024-03-01']
        assert monthly_template.last_generated is not None

    def test_second_run_same_instant_creates_nothing(self, monthly_template):
        """Re-running for the same instant is a no-op."""
        run_scheduler(_at(2024, 3, 1))
        report = run_scheduler(_at(2024, 3, 1))

        assert report.created == []
        assert Transaction.objects.filter(recurring_expense=monthly_template).count() == 3

    def test_later_run_only_adds_new_dates(self, monthly_template):
        """A run a month later adds just the new occurrence."""
        run_scheduler(_at(2024, 3, 1))
        report = run_scheduler(_at(2024, 4, 1, 6))

        assert [tx.date for tx in report.created] == [date(2024, 4, 1)]

    def test_biweekly_in_thirty_day_month(self, make_template):
        """April run produces the 15th and the 29th."""
        template = make_template(frequency=Frequency.BIWEEKLY, start_date=date(2024, 4, 1))

        run_scheduler(_at(2024, 4, 30))

        dates = sorted(get_generated_transactions(template).values_list('date', flat=True))
        assert dates == [date(2024, 4, 15), date(2024, 4, 29)]

    def test_biweekly_in_thirty_one_day_month(self, make_template):
        """May run produces the 15th and the 30th."""
        template = make_template(frequency=Frequency.BIWEEKLY, start_date=date(2024, 5, 1))

        run_scheduler(_at(2024, 5, 31))

        dates = sorted(get_generated_transactions(template).values_list('date', flat=True))
        assert dates == [date(2024, 5, 15), date(2024, 5, 30)]

    def test_future_start_date_skipped(self, make_template):
        """Templates that haven't started generate nothing."""
        make_template(start_date=date(2024, 6, 1))

        report = run_scheduler(_at(2024, 3, 1))

        assert report.created == []

    def test_inactive_template_skipped(self, monthly_template):
        """Inactive templates generate nothing."""
        set_active(template=monthly_template, active=False)

        report = run_scheduler(_at(2024, 3, 1))

        assert report.created == []
        assert not Transaction.objects.exists()

    def test_failing_template_does_not_block_others(self, make_template, general, concept):
        """A template with an inactive provider fails alone."""
        broken_provider = Provider.objects.create(name='Dado de baja', is_active=False)
        broken = make_template(description='Roto', provider=broken_provider)
        healthy = make_template(description='Sano')

        report = run_scheduler(_at(2024, 1, 1))

        assert [template_id for template_id, _ in report.failures] == [str(broken.id)]
        assert [tx.recurring_expense_id for tx in report.created] == [healthy.id]
        broken.refresh_from_db()
        assert broken.generated_dates == []

    def test_dry_run_saves_nothing(self, monthly_template):
        """Dry run reports occurrences but rolls back."""
        report = run_scheduler(_at(2024, 3, 1), dry_run=True)

        assert len(report.created) == 3
        assert not Transaction.objects.exists()
        monthly_template.refresh_from_db()
        assert monthly_template.generated_dates == []
        assert monthly_template.last_generated is None

    def test_local_date_uses_scheduler_zone(self, monthly_template, settings):
        """An instant just after midnight UTC is still the previous day in Mexico City."""
        settings.RECURRING_TIME_ZONE = 'America/Mexico_City'

        report = run_scheduler(datetime(2024, 2, 1, 3, 0, tzinfo=ZoneInfo('UTC')))

        assert [tx.date for tx in report.created] == [date(2024, 1, 1)]


@pytest.mark.django_db
class TestTemplateLifecycle:
    """Tests for activate/deactivate/delete"""

    def test_deactivation_keeps_generated(self, monthly_template):
        """Deactivating leaves generated transactions in place."""
        run_scheduler(_at(2024, 3, 1))

        set_active(template=monthly_template, active=False)

        assert Transaction.objects.filter(recurring_expense=monthly_template).count() == 3

    def test_reactivation_does_not_backfill(self, monthly_template):
        """Resuming starts from the reactivation date, not the last run."""
        run_scheduler(_at(2024, 1, 1))
        set_active(template=monthly_template, active=False)
        monthly_template.refresh_from_db()

        set_active(template=monthly_template, active=True)
        RecurringExpense.objects.filter(id=monthly_template.id).update(
            last_generated=datetime(2024, 5, 15, tzinfo=ZoneInfo('America/Mexico_City'))
        )
        report = run_scheduler(_at(2024, 6, 1))

        assert [tx.date for tx in report.created] == [date(2024, 6, 1)]

    def test_delete_unused_template(self, monthly_template):
        """A template that never ran is deleted."""
        assert delete_recurring_expense(template=monthly_template) == DELETED
        assert not RecurringExpense.objects.exists()

    def test_delete_used_template_deactivates(self, monthly_template):
        """A template with generated transactions is only deactivated."""
        run_scheduler(_at(2024, 1, 1))

        assert delete_recurring_expense(template=monthly_template) == DEACTIVATED
        monthly_template.refresh_from_db()
        assert monthly_template.is_active is False


@pytest.mark.django_db
class TestCreateRecurringExpense:
    """Tests for create_recurring_expense"""

    def test_create(self, general, concept, provider, accountant):
        """Valid input creates an active template."""
        template = create_recurring_expense(
            general_id=general.id,
            concept_id=concept.id,
            provider_id=provider.id,
            description=' Luz ',
            amount='320.50',
            frequency=Frequency.MONTHLY,
            start_date=date(2024, 1, 1),
            user=accountant,
        )

        assert template.description == 'Luz'
        assert template.amount == Decimal('320.50')
        assert template.is_active

    def test_provider_required(self, general, concept):
        """Templates generate expenses, so a provider is required."""
        with pytest.raises(InvalidRecurringExpenseError) as exc_info:
            create_recurring_expense(
                general_id=general.id,
                concept_id=concept.id,
                provider_id=None,
                description='Luz',
                amount='10.00',
                frequency=Frequency.MONTHLY,
                start_date=date(2024, 1, 1),
            )

        assert exc_info.value.field == 'provider'

    def test_unknown_frequency(self, general, concept, provider):
        """Frequency must be one of the supported rules."""
        with pytest.raises(InvalidRecurringExpenseError) as exc_info:
            create_recurring_expense(
                general_id=general.id,
                concept_id=concept.id,
                provider_id=provider.id,
                description='Luz',
                amount='10.00',
                frequency='yearly',
                start_date=date(2024, 1, 1),
            )

        assert exc_info.value.field == 'frequency'


@pytest.mark.django_db
class TestGenerateRecurringCommand:
    """Tests for manage.py generate_recurring"""

    def test_command_generates(self, monthly_template):
        """Command with --at creates the due occurrences."""
        out = StringIO()
        call_command('generate_recurring', '--at', '2024-02-01', stdout=out)

        assert 'Generated 2 transaction(s)' in out.getvalue()
        assert Transaction.objects.count() == 2

    def test_command_dry_run(self, monthly_template):
        """--dry-run leaves the database untouched."""
        out = StringIO()
        call_command('generate_recurring', '--at', '2024-02-01', '--dry-run', stdout=out)

        assert '--dry-run mode' in out.getvalue()
        assert not Transaction.objects.exists()

    def test_command_nothing_due(self, make_template):
        """No due templates prints the all-good message."""
        make_template(start_date=date(2030, 1, 1))
        out = StringIO()
        call_command('generate_recurring', '--at', '2024-02-01', stdout=out)

        assert 'No recurring expenses due' in out.getvalue()
