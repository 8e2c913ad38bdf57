"""
Django management command for auto-assigning the report backlog.

Finds every report in new/triaged that has never been assigned and
distributes it over the active officers, least loaded first, oldest
report first.

Usage:
    python manage.py auto_assign_reports
    python manage.py auto_assign_reports --dry-run
    python manage.py auto_assign_reports --verbose

Safe to run repeatedly (e.g. from cron): reports that already have an
assignment are never touched, and concurrent runs are refused.
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from core.exceptions import LifecycleError


class Command(BaseCommand):
    help = 'Auto-assign unassigned new/triaged reports to officers'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be assigned without making changes',
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='Show detailed output for each report',
        )

    def handle(self, *args, **options):
        from reports import balancer
        from reports.services import LifecycleService

        dry_run = options['dry_run']
        verbose = options['verbose']

        self.stdout.write(
            self.style.NOTICE(f"Auto-assignment started at {timezone.now().isoformat()}")
        )

        if dry_run:
            self.stdout.write(
                self.style.WARNING("DRY RUN MODE - No changes will be made")
            )
            plan = balancer.plan_backlog()
            if verbose:
                for planned in plan:
                    self.stdout.write(f"  Report {planned.report_id} -> {planned.officer_name}")
            self.stdout.write(f"Would assign {len(plan)} reports")
            return

        try:
            result = LifecycleService().auto_assign_backlog()
        except LifecycleError as e:
            raise CommandError(e.message)

        if verbose:
            for outcome in result.assignments:
                self.stdout.write(f"  Report {outcome.report_id} -> {outcome.assignee_name}")

        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS("=== Auto-assignment Summary ==="))
        self.stdout.write(f"  Officers: {result.officer_count}")
        self.stdout.write(f"  Assigned: {result.assigned_count}")
        self.stdout.write(f"  {result.message}")
