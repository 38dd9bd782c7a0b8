"""
Recurring expense scheduler.

A run at instant T looks at every active template whose start date has
been reached and materializes each due date in its window that hasn't been
generated yet. The window starts at the template's start date, or at the
local date of its last run, and ends at T's local date, all evaluated in
``RECURRING_TIME_ZONE``.

Each template is processed in its own database transaction with the
template row locked, so overlapping runs serialize per template instead of
both seeing the same ``generated_dates``. The unique
(recurring_expense, occurrence_date) constraint on transactions backs this
up at the database level.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.recurring.models import RecurringExpense
from apps.transactions.models import Transaction, TransactionType
from apps.transactions.services import create_transaction
from .schedule import due_dates

logger = logging.getLogger(__name__)

RECURRING_SUFFIX = ' (Recurrente)'


@dataclass
class SchedulerReport:
    run_at: datetime
    created: List[Transaction] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def created_count(self) -> int:
        return len(self.created)


def scheduler_zone() -> ZoneInfo:
    return ZoneInfo(settings.RECURRING_TIME_ZONE)


def local_date(moment: datetime) -> date:
    """Calendar date of an instant in the scheduler's time zone."""
    zone = scheduler_zone()
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment, zone)
    return timezone.localtime(moment, zone).date()


def _window_start(template: RecurringExpense) -> date:
    start = template.start_date
    if template.last_generated:
        start = max(start, local_date(template.last_generated))
    return start


def _generate_for_template(template_id, run_at: datetime, today: date, dry_run: bool) -> List[Transaction]:
    with transaction.atomic():
        template = RecurringExpense.objects.select_for_update().get(pk=template_id)
        if not template.is_active or template.start_date > today:
            return []

        generated = list(template.generated_dates or [])
        created = []

        for due in due_dates(template.frequency, _window_start(template), today):
            key = due.isoformat()
            if key in generated:
                continue

            if Transaction.objects.filter(recurring_expense=template, occurrence_date=due).exists():
                # Generated earlier but not recorded on the template
                generated.append(key)
                continue

            created.append(create_transaction(
                type=TransactionType.SALIDA,
                amount=template.amount,
                date=due,
                general_id=template.general_id,
                concept_id=template.concept_id,
                subconcept_id=template.subconcept_id,
                provider_id=template.provider_id,
                description=f"{template.description}{RECURRING_SUFFIX}",
                division=template.division,
                user=template.created_by,
                recurring_expense=template,
                occurrence_date=due,
                notify=False,
            ))
            generated.append(key)

        template.generated_dates = generated
        if template.last_generated is None or template.last_generated < run_at:
            template.last_generated = run_at
        template.save(update_fields=['generated_dates', 'last_generated', 'updated_at'])

        if dry_run:
            transaction.set_rollback(True)

    return created


def run_scheduler(at: Optional[datetime] = None, *, dry_run: bool = False) -> SchedulerReport:
    """
    Materialize due occurrences of all active templates.

    A template that fails (for example, its concept was deactivated) is
    logged and reported in ``failures``; the other templates still run.
    Running twice for the same instant creates nothing the second time.

    Args:
        at: Run instant, defaults to now. Naive values are read in the
            scheduler's time zone.
        dry_run: Compute what would be created and roll everything back.

    Returns:
        SchedulerReport
    """
    run_at = at or timezone.now()
    if timezone.is_naive(run_at):
        run_at = timezone.make_aware(run_at, scheduler_zone())
    today = local_date(run_at)

    report = SchedulerReport(run_at=run_at, dry_run=dry_run)
    template_ids = list(
        RecurringExpense.objects.filter(
            is_active=True,
            start_date__lte=today,
        ).values_list('id', flat=True)
    )

    for template_id in template_ids:
        try:
            report.created.extend(_generate_for_template(template_id, run_at, today, dry_run))
        except Exception as e:
            logger.exception("Recurring expense %s failed to generate", template_id)
            report.failures.append((str(template_id), str(e)))

    logger.info(
        "Recurring scheduler run for %s%s: %d created, %d failed (%d templates)",
        today, ' (dry run)' if dry_run else '',
        report.created_count, len(report.failures), len(template_ids)
    )
    return report
