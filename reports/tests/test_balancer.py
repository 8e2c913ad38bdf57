import uuid
from datetime import timedelta
from unittest import mock

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone

from core.exceptions import ConflictError, NotFound, ValidationError
from reports import balancer
from reports.balancer import (
    AUTO_ASSIGN_LEASE_KEY,
    BacklogItem,
    NO_BACKLOG_MESSAGE,
    NO_OFFICERS_MESSAGE,
    OfficerSlot,
    plan_round_robin,
)
from reports.models import ReportAssignment, ReportStatus, ReportStatusHistory
from reports.tests.helpers import (
    make_admin, make_citizen, make_officer, make_organization, make_report,
)


class AssignOneTests(TestCase):

    def setUp(self):
        self.admin = make_admin()
        self.officer = make_officer()
        self.organization = make_organization()
        self.report = make_report(reporter=make_citizen())

    def test_assigning_new_report_moves_it_to_assigned(self):
        outcome = balancer.assign_one(
            self.report.id, assignee_id=str(self.officer.id), changed_by=self.admin
        )

        self.report.refresh_from_db()
        self.assertEqual(self.report.status, ReportStatus.ASSIGNED)
        self.assertTrue(outcome.transitioned)
        self.assertEqual(outcome.assignee_id, str(self.officer.id))

        self.assertEqual(ReportAssignment.objects.filter(report=self.report).count(), 1)
        entry = ReportStatusHistory.objects.get(report=self.report)
        self.assertEqual(entry.from_status, ReportStatus.NEW)
        self.assertEqual(entry.to_status, ReportStatus.ASSIGNED)
        self.assertEqual(entry.note, 'Report assigned to Test Officer')
        self.assertEqual(entry.changed_by, self.admin)

    def test_assigning_in_progress_report_keeps_status(self):
        report = make_report(status=ReportStatus.IN_PROGRESS)

        outcome = balancer.assign_one(report.id, organization_id=str(self.organization.id))

        report.refresh_from_db()
        self.assertEqual(report.status, ReportStatus.IN_PROGRESS)
        self.assertFalse(outcome.transitioned)
        self.assertFalse(ReportStatusHistory.objects.filter(report=report).exists())
        self.assertEqual(outcome.organization_name, 'City Works')

    def test_officer_and_organization_together(self):
        balancer.assign_one(
            self.report.id,
            assignee_id=self.officer.id,
            organization_id=self.organization.id,
        )

        entry = ReportStatusHistory.objects.get(report=self.report)
        self.assertEqual(entry.note, 'Report assigned to Test Officer to City Works')

    def test_reassignment_appends_row_and_becomes_current(self):
        other = make_officer('second@example.com', full_name='Second Officer')
        balancer.assign_one(self.report.id, assignee_id=self.officer.id)
        balancer.assign_one(self.report.id, assignee_id=other.id)

        self.report.refresh_from_db()
        self.assertEqual(self.report.assignments.count(), 2)
        self.assertEqual(self.report.current_assignment.assignee, other)
        # Already assigned, so the second call wrote no history
        self.assertEqual(ReportStatusHistory.objects.filter(report=self.report).count(), 1)

    def test_requires_a_target(self):
        for empty in ({}, {'assignee_id': ''}, {'assignee_id': '   ', 'organization_id': None}):
            with self.assertRaises(ValidationError):
                balancer.assign_one(self.report.id, **empty)

        self.assertFalse(ReportAssignment.objects.exists())
        self.assertFalse(ReportStatusHistory.objects.exists())
        self.report.refresh_from_db()
        self.assertEqual(self.report.status, ReportStatus.NEW)

    def test_unknown_references(self):
        with self.assertRaises(NotFound):
            balancer.assign_one(uuid.uuid4(), assignee_id=self.officer.id)
        with self.assertRaises(NotFound):
            balancer.assign_one(self.report.id, assignee_id=uuid.uuid4())
        with self.assertRaises(NotFound):
            balancer.assign_one(self.report.id, organization_id='not-a-uuid')

        self.assertFalse(ReportAssignment.objects.exists())


class PlanRoundRobinTests(TestCase):

    def _backlog(self, count):
        now = timezone.now()
        return [
            BacklogItem(report_id=f'R{i}', status=ReportStatus.NEW, created_at=now + timedelta(minutes=i))
            for i in range(1, count + 1)
        ]

    def test_least_loaded_officer_first(self):
        officers = [OfficerSlot('O1', 'One'), OfficerSlot('O2', 'Two'), OfficerSlot('O3', 'Three')]
        workload = {'O1': 0, 'O2': 2, 'O3': 1}

        plan = plan_round_robin(officers, workload, self._backlog(4))

        self.assertEqual([p.officer_id for p in plan], ['O1', 'O3', 'O2', 'O1'])
        self.assertEqual([p.report_id for p in plan], ['R1', 'R2', 'R3', 'R4'])

    def test_backlog_oldest_first(self):
        backlog = list(reversed(self._backlog(3)))

        plan = plan_round_robin([OfficerSlot('O1', 'One')], {}, backlog)

        self.assertEqual([p.report_id for p in plan], ['R1', 'R2', 'R3'])

    def test_ties_keep_roster_order(self):
        officers = [OfficerSlot('B', 'B'), OfficerSlot('A', 'A')]

        plan = plan_round_robin(officers, {'A': 1, 'B': 1}, self._backlog(2))

        self.assertEqual([p.officer_id for p in plan], ['B', 'A'])

    def test_empty_inputs(self):
        self.assertEqual(plan_round_robin([], {}, self._backlog(2)), [])
        self.assertEqual(plan_round_robin([OfficerSlot('O1', 'One')], {}, []), [])


class BacklogAndWorkloadTests(TestCase):

    def setUp(self):
        self.officer = make_officer()

    def test_backlog_excludes_any_assignment(self):
        fresh = make_report(title='Fresh', age_minutes=10)
        triaged = make_report(title='Triaged', status=ReportStatus.TRIAGED, age_minutes=20)
        # Routed to an organization but never moved out of new
        routed = make_report(title='Routed', age_minutes=30)
        ReportAssignment.objects.create(report=routed, organization=make_organization())
        make_report(title='Working', status=ReportStatus.IN_PROGRESS)

        backlog = balancer.load_backlog()

        self.assertEqual([item.report_id for item in backlog], [str(triaged.id), str(fresh.id)])

    def test_open_workload_counts_current_non_terminal_assignments(self):
        other = make_officer('other@example.com')
        open_report = make_report(status=ReportStatus.IN_PROGRESS)
        ReportAssignment.objects.create(report=open_report, assignee=self.officer)
        closed = make_report(status=ReportStatus.RESOLVED)
        ReportAssignment.objects.create(report=closed, assignee=self.officer)

        workload = balancer.open_workload([self.officer.id, other.id])

        self.assertEqual(workload, {str(self.officer.id): 1, str(other.id): 0})

    def test_roster_skips_inactive_and_non_officers(self):
        make_officer('retired@example.com', is_active=False)
        make_admin()

        roster = balancer.load_roster()

        self.assertEqual([slot.officer_id for slot in roster], [str(self.officer.id)])


class AutoAssignBatchTests(TestCase):

    def setUp(self):
        cache.clear()

    def test_no_officers(self):
        make_report()

        result = balancer.auto_assign_batch()

        self.assertEqual(result.assigned_count, 0)
        self.assertEqual(result.message, NO_OFFICERS_MESSAGE)
        self.assertFalse(ReportAssignment.objects.exists())

    def test_no_backlog(self):
        make_officer()

        result = balancer.auto_assign_batch()

        self.assertEqual(result.assigned_count, 0)
        self.assertEqual(result.officer_count, 1)
        self.assertEqual(result.message, NO_BACKLOG_MESSAGE)

    def test_distributes_backlog_by_open_workload(self):
        busy = make_officer('busy@example.com', full_name='Busy Officer')
        idle = make_officer('idle@example.com', full_name='Idle Officer')
        existing = make_report(title='Existing', status=ReportStatus.IN_PROGRESS)
        ReportAssignment.objects.create(report=existing, assignee=busy)

        oldest = make_report(title='Oldest', age_minutes=30)
        middle = make_report(title='Middle', status=ReportStatus.TRIAGED, age_minutes=20)
        newest = make_report(title='Newest', age_minutes=10)

        result = balancer.auto_assign_batch()

        self.assertEqual(result.assigned_count, 3)
        self.assertEqual(result.message, 'Successfully assigned 3 reports')
        self.assertEqual(oldest.current_assignment.assignee, idle)
        self.assertEqual(middle.current_assignment.assignee, busy)
        self.assertEqual(newest.current_assignment.assignee, idle)

        for report in (oldest, middle, newest):
            report.refresh_from_db()
            self.assertEqual(report.status, ReportStatus.ASSIGNED)

        entry = ReportStatusHistory.objects.get(report=middle)
        self.assertEqual(entry.from_status, ReportStatus.TRIAGED)
        self.assertEqual(entry.note, 'Auto-assigned to Busy Officer')

    def test_second_run_has_nothing_to_do(self):
        make_officer()
        make_report()

        self.assertEqual(balancer.auto_assign_batch().assigned_count, 1)
        self.assertEqual(balancer.auto_assign_batch().assigned_count, 0)
        self.assertEqual(ReportAssignment.objects.count(), 1)

    def test_refused_while_lease_held(self):
        make_officer()
        make_report()
        cache.add(AUTO_ASSIGN_LEASE_KEY, 'someone-else', timeout=60)

        with self.assertRaises(ConflictError):
            balancer.auto_assign_batch()

        self.assertFalse(ReportAssignment.objects.exists())
        self.assertEqual(cache.get(AUTO_ASSIGN_LEASE_KEY), 'someone-else')

    def test_lease_released_after_run(self):
        make_officer()

        balancer.auto_assign_batch()

        self.assertIsNone(cache.get(AUTO_ASSIGN_LEASE_KEY))

    def test_failed_item_does_not_stop_batch(self):
        make_officer()
        first = make_report(title='First', age_minutes=20)
        second = make_report(title='Second', age_minutes=10)

        original = balancer._execute_planned

        def flaky(planned, changed_by=None):
            if planned.report_id == str(first.id):
                raise NotFound('gone')
            return original(planned, changed_by=changed_by)

        with mock.patch.object(balancer, '_execute_planned', side_effect=flaky):
            result = balancer.auto_assign_batch()

        self.assertEqual(result.assigned_count, 1)
        self.assertFalse(first.assignments.exists())
        self.assertTrue(second.assignments.exists())


class OfficerMetricsTests(TestCase):

    def test_totals_and_success_rate(self):
        strong = make_officer('strong@example.com', full_name='Strong')
        weak = make_officer('weak@example.com', full_name='Weak')
        make_officer('new@example.com', full_name='Newcomer')

        for status in (ReportStatus.RESOLVED, ReportStatus.RESOLVED, ReportStatus.IN_PROGRESS):
            ReportAssignment.objects.create(report=make_report(status=status), assignee=strong)
        ReportAssignment.objects.create(report=make_report(status=ReportStatus.RESOLVED), assignee=weak)
        ReportAssignment.objects.create(report=make_report(status=ReportStatus.ASSIGNED), assignee=weak)
        ReportAssignment.objects.create(report=make_report(status=ReportStatus.REJECTED), assignee=weak)

        metrics = balancer.officer_metrics()

        self.assertEqual([row['officer_name'] for row in metrics], ['Strong', 'Weak', 'Newcomer'])
        self.assertEqual(metrics[0]['total_cases'], 3)
        self.assertEqual(metrics[0]['resolved_cases'], 2)
        self.assertEqual(metrics[0]['success_rate'], 67)
        self.assertEqual(metrics[0]['open_cases'], 1)
        self.assertEqual(metrics[1]['success_rate'], 33)
        self.assertEqual(metrics[2]['total_cases'], 0)
        self.assertEqual(metrics[2]['success_rate'], 0)

    def test_reassigned_report_counted_once_per_officer(self):
        officer = make_officer()
        report = make_report(status=ReportStatus.RESOLVED)
        ReportAssignment.objects.create(report=report, assignee=officer)
        ReportAssignment.objects.create(report=report, assignee=officer)

        row = balancer.officer_metrics()[0]

        self.assertEqual(row['total_cases'], 1)
        self.assertEqual(row['success_rate'], 100)
