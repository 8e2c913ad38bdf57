"""
Assignment balancer.

Routes reports to officers and organizations:
- assign_one: manual assignment of a single report
- plan_round_robin: pure planner distributing a backlog over officers
- auto_assign_batch: plans and executes the whole unassigned backlog
- officer_metrics: per-officer case totals and resolution rates

Workload is always derived from assignment rows, never stored.
"""

import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.db.models import OuterRef, Subquery, UUIDField

from authentication.models import User, UserRole
from core.exceptions import ConflictError, LifecycleError, NotFound, ValidationError
from .ledger import get_ledger, lock_report
from .models import Organization, Report, ReportAssignment, ReportStatus

logger = logging.getLogger('cira.lifecycle')

AUTO_ASSIGN_LEASE_KEY = 'reports:auto-assign:lease'

NO_OFFICERS_MESSAGE = 'No officers available for assignment. Please create officers first.'
NO_BACKLOG_MESSAGE = 'No unassigned reports to assign'


@dataclass(frozen=True)
class OfficerSlot:
    officer_id: str
    display_name: str


@dataclass(frozen=True)
class BacklogItem:
    report_id: str
    status: str
    created_at: datetime


@dataclass(frozen=True)
class PlannedAssignment:
    report_id: str
    officer_id: str
    officer_name: str


@dataclass(frozen=True)
class AssignmentOutcome:
    """A committed assignment and the status move it caused, if any."""
    assignment_id: str
    report_id: str
    report_title: str
    assignee_id: Optional[str]
    assignee_name: Optional[str]
    organization_id: Optional[str]
    organization_name: Optional[str]
    due_at: Optional[datetime]
    from_status: str
    status: str

    @property
    def transitioned(self):
        return self.from_status != self.status

    def as_dict(self):
        return {
            'id': self.assignment_id,
            'report_id': self.report_id,
            'report_title': self.report_title,
            'assignee': {
                'id': self.assignee_id,
                'name': self.assignee_name,
            } if self.assignee_id else None,
            'organization': {
                'id': self.organization_id,
                'name': self.organization_name,
            } if self.organization_id else None,
            'due_at': self.due_at.isoformat() if self.due_at else None,
            'status': self.status,
        }


@dataclass
class AutoAssignResult:
    assigned_count: int = 0
    assignments: List[AssignmentOutcome] = field(default_factory=list)
    officer_count: int = 0
    message: str = ''

    def as_dict(self):
        return {
            'message': self.message,
            'assigned': self.assigned_count,
            'officer_count': self.officer_count,
            'data': [outcome.as_dict() for outcome in self.assignments],
        }


def _clean_id(value):
    """Treat None, empty and whitespace-only strings as absent."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _get_or_not_found(model, pk, label):
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound(f"{label} {pk} not found.")


def _assignment_note(assignee, organization):
    note = 'Report assigned'
    if assignee is not None:
        note += f" to {assignee.full_name or assignee.email or assignee.identifier}"
    if organization is not None:
        note += f" to {organization.name}"
    return note


def _outcome(assignment, report, from_status):
    assignee = assignment.assignee
    organization = assignment.organization
    return AssignmentOutcome(
        assignment_id=str(assignment.id),
        report_id=str(report.id),
        report_title=report.title,
        assignee_id=str(assignee.id) if assignee else None,
        assignee_name=assignee.display_name if assignee else None,
        organization_id=str(organization.id) if organization else None,
        organization_name=organization.name if organization else None,
        due_at=assignment.due_at,
        from_status=from_status,
        status=report.status,
    )


def assign_one(report_id, assignee_id=None, organization_id=None, due_at=None,
               changed_by=None, note=None):
    """
    Assign a report to an officer and/or an organization.

    A report in new/triaged moves to assigned in the same transaction, so
    the assignment row and its history row commit or roll back together.

    Raises:
        ValidationError: neither assignee nor organization given
        NotFound: unknown report, assignee or organization
    """
    assignee_id = _clean_id(assignee_id)
    organization_id = _clean_id(organization_id)

    if assignee_id is None and organization_id is None:
        raise ValidationError('Either assignee_id or organization_id must be provided.')

    ledger = get_ledger()

    with transaction.atomic():
        report = lock_report(report_id)
        assignee = _get_or_not_found(User, assignee_id, 'Officer') if assignee_id else None
        organization = (
            _get_or_not_found(Organization, organization_id, 'Organization')
            if organization_id else None
        )

        assignment = ReportAssignment.objects.create(
            report=report,
            assignee=assignee,
            organization=organization,
            due_at=due_at,
        )

        from_status = report.status
        if from_status in ReportStatus.UNASSIGNED_STATES:
            result = ledger.apply_transition(
                report,
                ReportStatus.ASSIGNED,
                note=note or _assignment_note(assignee, organization),
                changed_by=changed_by,
            )
            report.status = result.status

    logger.info(
        f"Report {report.id} assigned (assignee={assignee_id}, organization={organization_id})"
    )
    return _outcome(assignment, report, from_status)


def plan_round_robin(officers, open_workload, backlog):
    """
    Distribute a backlog over officers, least loaded first.

    Officers are ordered by their open workload (ties keep roster order);
    backlog items oldest first. Item i goes to rotation[i % len(rotation)].
    Workloads are a snapshot and are not recomputed while planning.

    Args:
        officers: list of OfficerSlot in roster order
        open_workload: mapping officer_id -> open report count
        backlog: list of BacklogItem

    Returns:
        list of PlannedAssignment
    """
    if not officers or not backlog:
        return []

    rotation = sorted(officers, key=lambda slot: open_workload.get(slot.officer_id, 0))
    queue = sorted(backlog, key=lambda item: item.created_at)

    return [
        PlannedAssignment(
            report_id=item.report_id,
            officer_id=rotation[index % len(rotation)].officer_id,
            officer_name=rotation[index % len(rotation)].display_name,
        )
        for index, item in enumerate(queue)
    ]


def open_workload(officer_ids) -> Dict[str, int]:
    """
    Count non-terminal reports whose current assignment names each officer.

    Keys are stringified officer ids; officers with no load map to 0.
    """
    officer_ids = [str(officer_id) for officer_id in officer_ids]
    workload = {officer_id: 0 for officer_id in officer_ids}
    if not officer_ids:
        return workload

    current_assignee = (
        ReportAssignment.objects
        .filter(report=OuterRef('pk'))
        .order_by('-created_at')
        .values('assignee_id')[:1]
    )
    assignees = (
        Report.objects
        .exclude(status__in=ReportStatus.TERMINAL_STATES)
        .annotate(current_assignee=Subquery(current_assignee, output_field=UUIDField()))
        .filter(current_assignee__in=officer_ids)
        .values_list('current_assignee', flat=True)
    )

    for assignee_id, count in Counter(str(value) for value in assignees).items():
        if assignee_id in workload:
            workload[assignee_id] = count
    return workload


def load_roster():
    """Active officers in roster order (creation time, then id)."""
    officers = (
        User.objects
        .filter(role=UserRole.OFFICER, is_active=True)
        .order_by('created_at', 'id')
    )
    return [OfficerSlot(officer_id=str(officer.id), display_name=officer.display_name) for officer in officers]


def load_backlog():
    """Reports in new/triaged that have never been assigned, oldest first."""
    reports = (
        Report.objects
        .filter(status__in=ReportStatus.UNASSIGNED_STATES, assignments__isnull=True)
        .order_by('created_at', 'id')
        .values_list('id', 'status', 'created_at')
    )
    return [
        BacklogItem(report_id=str(report_id), status=status, created_at=created_at)
        for report_id, status, created_at in reports
    ]


def _execute_planned(planned, changed_by=None):
    """
    Apply one planned assignment in its own transaction.

    Returns None when the report was assigned by someone else in the
    meantime.
    """
    ledger = get_ledger()

    with transaction.atomic():
        report = lock_report(planned.report_id)
        if report.assignments.exists():
            logger.info(f"[AutoAssign] Report {report.id} already assigned, skipping")
            return None

        assignment = ReportAssignment.objects.create(
            report=report,
            assignee_id=planned.officer_id,
        )

        from_status = report.status
        if from_status in ReportStatus.UNASSIGNED_STATES:
            result = ledger.apply_transition(
                report,
                ReportStatus.ASSIGNED,
                note=f"Auto-assigned to {planned.officer_name}",
                changed_by=changed_by,
            )
            report.status = result.status

    return _outcome(assignment, report, from_status)


def _acquire_lease():
    token = uuid.uuid4().hex
    if not cache.add(AUTO_ASSIGN_LEASE_KEY, token, timeout=settings.AUTO_ASSIGN_LEASE_SECONDS):
        raise ConflictError('An auto-assignment run is already in progress.')
    return token


def _release_lease(token):
    # Only the holder releases; an expired lease may already belong to another run
    if cache.get(AUTO_ASSIGN_LEASE_KEY) == token:
        cache.delete(AUTO_ASSIGN_LEASE_KEY)


def auto_assign_batch(changed_by=None):
    """
    Assign every never-assigned new/triaged report, least loaded officer first.

    Only one batch runs at a time. Completed assignments are kept if a later
    item fails; failed items are logged and skipped.

    Raises:
        ConflictError: another batch holds the lease
    """
    token = _acquire_lease()
    try:
        roster = load_roster()
        if not roster:
            logger.info("[AutoAssign] No officers available")
            return AutoAssignResult(message=NO_OFFICERS_MESSAGE)

        backlog = load_backlog()
        if not backlog:
            return AutoAssignResult(officer_count=len(roster), message=NO_BACKLOG_MESSAGE)

        workload = open_workload([slot.officer_id for slot in roster])
        plan = plan_round_robin(roster, workload, backlog)

        outcomes = []
        for planned in plan:
            try:
                outcome = _execute_planned(planned, changed_by=changed_by)
            except (LifecycleError, DatabaseError):
                logger.error(
                    f"[AutoAssign] Failed to assign report {planned.report_id} "
                    f"to officer {planned.officer_id}",
                    exc_info=True,
                )
                continue
            if outcome is not None:
                outcomes.append(outcome)

        logger.info(f"[AutoAssign] Assigned {len(outcomes)} reports to {len(roster)} officers")

        return AutoAssignResult(
            assigned_count=len(outcomes),
            assignments=outcomes,
            officer_count=len(roster),
            message=f"Successfully assigned {len(outcomes)} reports",
        )
    finally:
        _release_lease(token)


def plan_backlog():
    """Current plan for the backlog without writing anything."""
    roster = load_roster()
    backlog = load_backlog()
    workload = open_workload([slot.officer_id for slot in roster])
    return plan_round_robin(roster, workload, backlog)


def officer_metrics():
    """
    Case totals per officer.

    total_cases counts distinct reports ever assigned to the officer;
    success_rate is the rounded percentage of those that are resolved.
    Sorted by total_cases, then success_rate, both descending.
    """
    officers = list(
        User.objects.filter(role=UserRole.OFFICER).order_by('full_name', 'created_at')
    )
    officer_ids = [str(officer.id) for officer in officers]

    reports_by_officer = {officer_id: set() for officer_id in officer_ids}
    resolved_by_officer = {officer_id: set() for officer_id in officer_ids}

    rows = (
        ReportAssignment.objects
        .filter(assignee_id__in=officer_ids)
        .order_by()
        .values_list('assignee_id', 'report_id', 'report__status')
    )
    for assignee_id, report_id, status in rows:
        assignee_id = str(assignee_id)
        reports_by_officer[assignee_id].add(report_id)
        if status == ReportStatus.RESOLVED:
            resolved_by_officer[assignee_id].add(report_id)

    workload = open_workload(officer_ids)

    metrics = []
    for officer in officers:
        officer_id = str(officer.id)
        total = len(reports_by_officer[officer_id])
        resolved = len(resolved_by_officer[officer_id])
        metrics.append({
            'officer_id': officer_id,
            'officer_name': officer.display_name,
            'officer_email': officer.email,
            'total_cases': total,
            'resolved_cases': resolved,
            'success_rate': int(resolved * 100 / total + 0.5) if total else 0,
            'open_cases': workload[officer_id],
        })

    metrics.sort(key=lambda row: (-row['total_cases'], -row['success_rate']))
    return metrics
