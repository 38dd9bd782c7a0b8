"""
Management command to materialize due recurring expenses.

Meant to be run daily from cron (or the platform scheduler).

Usage:
    python manage.py generate_recurring
    python manage.py generate_recurring --at 2024-03-01T00:00
    python manage.py generate_recurring --dry-run
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_datetime, parse_date
from datetime import datetime, time

from apps.recurring.services import run_scheduler


class Command(BaseCommand):
    help = 'Generate pending transactions for due recurring expenses'

    def add_arguments(self, parser):
        parser.add_argument(
            '--at',
            help='Run as of this ISO date or datetime (default: now)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be generated without saving anything',
        )

    def _parse_at(self, value):
        if not value:
            return None
        moment = parse_datetime(value)
        if moment is None:
            day = parse_date(value)
            if day is None:
                raise CommandError(f'Invalid --at value: {value}')
            moment = datetime.combine(day, time.min)
        return moment

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        report = run_scheduler(self._parse_at(options.get('at')), dry_run=dry_run)

        if not report.created and not report.failures:
            self.stdout.write(
                self.style.SUCCESS('No recurring expenses due. All good!')
            )
            return

        self.stdout.write(f'\nGenerated {report.created_count} transaction(s):\n')
        for tx in report.created:
            self.stdout.write(f'  - {tx.date} | {tx.description} | {tx.amount}')

        for template_id, message in report.failures:
            self.stdout.write(
                self.style.ERROR(f'  ! {template_id}: {message}')
            )

        if dry_run:
            self.stdout.write(
                self.style.WARNING('\n--dry-run mode: No changes made.')
            )
            return

        if report.failures:
            self.stdout.write(
                self.style.WARNING(f'\n{len(report.failures)} template(s) failed, see log.')
            )
        else:
            self.stdout.write(self.style.SUCCESS('\n✓ Done.'))
