from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from reports.balancer import AUTO_ASSIGN_LEASE_KEY
from reports.models import ReportAssignment
from reports.tests.helpers import make_officer, make_report


class AutoAssignCommandTests(TestCase):

    def setUp(self):
        cache.clear()
        self.officer = make_officer()
        self.first = make_report(title='First', age_minutes=20)
        self.second = make_report(title='Second', age_minutes=10)

    def test_assigns_backlog(self):
        out = StringIO()

        call_command('auto_assign_reports', '--verbose', stdout=out)

        output = out.getvalue()
        self.assertIn('Assigned: 2', output)
        self.assertIn(f'Report {self.first.id} -> Test Officer', output)
        self.assertEqual(ReportAssignment.objects.count(), 2)

    def test_dry_run_writes_nothing(self):
        out = StringIO()

        call_command('auto_assign_reports', '--dry-run', '--verbose', stdout=out)

        self.assertIn('Would assign 2 reports', out.getvalue())
        self.assertIn(f'Report {self.second.id} -> Test Officer', out.getvalue())
        self.assertFalse(ReportAssignment.objects.exists())

    def test_refuses_concurrent_run(self):
        cache.add(AUTO_ASSIGN_LEASE_KEY, 'cron-1', timeout=60)

        with self.assertRaises(CommandError):
            call_command('auto_assign_reports', stdout=StringIO())

        self.assertFalse(ReportAssignment.objects.exists())
