"""
Lifecycle orchestrator for reports.

Every mutating report operation goes through LifecycleService:
1. validate input
2. apply the primary mutation in one transaction (ledger / balancer)
3. once committed, schedule notification fan-out and audit entries

Side effects never roll back or fail the primary mutation. They are
registered with transaction.on_commit, so a rolled-back mutation fires
nothing and a retried one fires exactly once.

Usage:
    from reports.services import LifecycleService

    LifecycleService().change_status(report_id, 'in_progress', actor=request.user)
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction

from audit.models import AuditAction, ResourceType
from audit.tasks import record_audit_event
from authentication.models import User, UserRole
from core.dispatch import enqueue_on_commit
from core.exceptions import ConflictError, NotFound, StoreFailure, ValidationError
from notifications.events import LifecycleEvent, dedupe_recipients
from notifications.models import NotificationType
from notifications.services import get_fanout
from . import balancer
from .ledger import get_ledger, lock_report
from .models import Report, ReportComment, ReportConfirmation, ReportSeverity, ReportType

logger = logging.getLogger('cira.lifecycle')

COMMENT_MAX_LENGTH = 2000

ALREADY_CONFIRMED = 'You have already confirmed this report.'


class LifecycleService:
    """
    Coordinates report mutations with their notifications and audit trail.
    """

    def __init__(self, ledger=None, fanout=None):
        self.ledger = ledger or get_ledger()
        self._fanout = fanout

    @property
    def fanout(self):
        return self._fanout or get_fanout()

    # =========================================================================
    # PUBLIC API - Use these methods from views
    # =========================================================================

    def submit_report(self, reporter, title, description='', type=ReportType.OTHER,
                      severity=ReportSeverity.MEDIUM, latitude=None, longitude=None,
                      address_text=''):
        """
        Create a report in status 'new' with its initial history row.

        Recipients: all active officers and administrators except the reporter.
        """
        title = (title or '').strip()
        if not title:
            raise ValidationError('Title is required.')
        if type not in dict(ReportType.CHOICES):
            raise ValidationError(f"Invalid report type '{type}'.")
        if severity not in dict(ReportSeverity.CHOICES):
            raise ValidationError(f"Invalid severity '{severity}'.")

        try:
            with transaction.atomic():
                report = Report.objects.create(
                    title=title,
                    description=description or '',
                    type=type,
                    severity=severity,
                    latitude=latitude,
                    longitude=longitude,
                    address_text=address_text or '',
                    reporter=reporter,
                )
                self.ledger.record_initial(report, changed_by=reporter)
        except DatabaseError as e:
            logger.error(f"Failed to create report: {e}", exc_info=True)
            raise StoreFailure() from e

        logger.info(f"Report {report.id} submitted by {getattr(reporter, 'id', None)}")
        self._schedule('report submission', self._after_submit, report, reporter)
        return report

    def change_status(self, report_id, status, note=None, actor=None):
        """
        Move a report to ``status`` and record the transition.

        Recipients: the reporter and the current assignee, except the actor.
        """
        try:
            with transaction.atomic():
                result = self.ledger.apply_transition(
                    report_id, status, note=note, changed_by=actor
                )
        except DatabaseError as e:
            logger.error(f"Failed to change status of report {report_id}: {e}", exc_info=True)
            raise StoreFailure() from e

        self._schedule('status change', self._after_status_change, result, note, actor)
        return result

    def assign_report(self, report_id, assignee_id=None, organization_id=None,
                      due_at=None, actor=None):
        """
        Assign a report to an officer and/or organization.

        Recipients: the assigned officer, if any.
        """
        try:
            outcome = balancer.assign_one(
                report_id,
                assignee_id=assignee_id,
                organization_id=organization_id,
                due_at=due_at,
                changed_by=actor,
            )
        except DatabaseError as e:
            logger.error(f"Failed to assign report {report_id}: {e}", exc_info=True)
            raise StoreFailure() from e

        self._schedule(
            'assignment', self._after_assignment, outcome, actor, AuditAction.REPORT_ASSIGNED
        )
        return outcome

    def auto_assign_backlog(self, actor=None):
        """
        Distribute every never-assigned new/triaged report over the officers.

        Each committed assignment is notified and audited on its own.
        """
        try:
            result = balancer.auto_assign_batch(changed_by=actor)
        except DatabaseError as e:
            logger.error(f"Auto-assignment failed: {e}", exc_info=True)
            raise StoreFailure() from e

        for outcome in result.assignments:
            self._schedule(
                'auto-assignment', self._after_assignment, outcome, actor,
                AuditAction.REPORT_AUTO_ASSIGNED,
            )
        return result

    def add_comment(self, report_id, body, author):
        """
        Add a comment to a report.

        Recipients: the reporter and the current assignee, except the author.
        """
        body = (body or '').strip()
        if not body:
            raise ValidationError('Comment body is required.')
        if len(body) > COMMENT_MAX_LENGTH:
            raise ValidationError(f'Comment must be at most {COMMENT_MAX_LENGTH} characters.')

        try:
            with transaction.atomic():
                report = lock_report(report_id)
                comment = ReportComment.objects.create(
                    report=report,
                    author=author,
                    body=body,
                )
        except DatabaseError as e:
            logger.error(f"Failed to add comment to report {report_id}: {e}", exc_info=True)
            raise StoreFailure() from e

        self._schedule('comment', self._after_comment, report, comment, author)
        return comment

    def confirm_report(self, report_id, user):
        """
        Record that ``user`` has seen the reported issue too.

        One confirmation per user and report; a repeat raises ConflictError.

        Returns:
            (ReportConfirmation, confirmation count after this one)
        """
        try:
            with transaction.atomic():
                report = lock_report(report_id)
                if ReportConfirmation.objects.filter(report=report, user=user).exists():
                    raise ConflictError(ALREADY_CONFIRMED, code='ALREADY_CONFIRMED')
                confirmation = ReportConfirmation.objects.create(report=report, user=user)
                count = report.confirmations.count()
        except IntegrityError as e:
            raise ConflictError(ALREADY_CONFIRMED, code='ALREADY_CONFIRMED') from e
        except DatabaseError as e:
            logger.error(f"Failed to confirm report {report_id}: {e}", exc_info=True)
            raise StoreFailure() from e

        self._schedule('confirmation', self._after_confirm, report, user, count)
        return confirmation, count

    def confirmation_summary(self, report_id, user=None):
        """Confirmation count for a report and whether ``user`` is among them."""
        try:
            exists = Report.objects.filter(pk=report_id).exists()
        except (DjangoValidationError, ValueError):
            exists = False
        if not exists:
            raise NotFound(f"Report {report_id} not found.")

        confirmations = ReportConfirmation.objects.filter(report_id=report_id)
        return {
            'report_id': str(report_id),
            'count': confirmations.count(),
            'user_confirmed': user is not None and confirmations.filter(user=user).exists(),
        }

    # =========================================================================
    # RECIPIENTS
    # =========================================================================

    def report_participants(self, report, exclude=None):
        """Reporter and current assignee, without ``exclude``."""
        assignment = report.current_assignment
        return dedupe_recipients(
            [report.reporter_id, assignment.assignee_id if assignment else None],
            exclude=getattr(exclude, 'id', exclude),
        )

    def staff_recipients(self, exclude=None):
        """Active officers and administrators, without ``exclude``."""
        staff_ids = (
            User.objects
            .filter(role__in=UserRole.STAFF_ROLES, is_active=True)
            .order_by('created_at')
            .values_list('id', flat=True)
        )
        return dedupe_recipients(staff_ids, exclude=getattr(exclude, 'id', exclude))

    # =========================================================================
    # SIDE EFFECTS
    # =========================================================================

    def _schedule(self, description, func, *args):
        try:
            func(*args)
        except Exception:
            logger.error(f"Failed to schedule side effects for {description}", exc_info=True)

    def _audit(self, action, resource_type, actor, resource_id, details):
        enqueue_on_commit(
            record_audit_event,
            action,
            resource_type,
            user_id=str(actor.id) if actor else None,
            resource_id=str(resource_id),
            details=details,
        )

    def _after_submit(self, report, reporter):
        self.fanout.schedule(LifecycleEvent(
            type=NotificationType.REPORT_CREATED,
            title='New Report Created',
            body=f"A new {report.type} report has been created: {report.title}",
            data={'report_id': str(report.id), 'report_title': report.title},
            recipient_ids=self.staff_recipients(exclude=reporter),
            push_body=report.title,
        ))
        self._audit(
            AuditAction.REPORT_CREATED, ResourceType.REPORT, reporter, report.id,
            {'title': report.title, 'type': report.type, 'severity': report.severity},
        )

    def _after_status_change(self, result, note, actor):
        report = Report.objects.select_related('reporter').get(pk=result.report_id)

        self.fanout.schedule(LifecycleEvent(
            type=NotificationType.REPORT_STATUS_CHANGED,
            title='Report Status Updated',
            body=f'Report "{report.title}" status changed to {result.to_status}',
            data={
                'report_id': result.report_id,
                'report_title': report.title,
                'status': result.to_status,
            },
            recipient_ids=self.report_participants(report, exclude=actor),
            push_body=f'"{report.title}" is now {result.to_status}',
        ))
        self._audit(
            AuditAction.REPORT_STATUS_CHANGED, ResourceType.REPORT, actor, result.report_id,
            {'from_status': result.from_status, 'to_status': result.to_status, 'note': note},
        )

    def _after_assignment(self, outcome, actor, action):
        if outcome.assignee_id:
            data = {
                'report_id': outcome.report_id,
                'report_title': outcome.report_title,
                'assignee_id': outcome.assignee_id,
            }
            if outcome.organization_id:
                data['organization_id'] = outcome.organization_id

            self.fanout.schedule(LifecycleEvent(
                type=NotificationType.REPORT_ASSIGNED,
                title='Report Assigned to You',
                body=f'Report "{outcome.report_title}" has been assigned to you',
                data=data,
                recipient_ids=[outcome.assignee_id],
                push_body=f'"{outcome.report_title}"',
            ))

        self._audit(
            action, ResourceType.ASSIGNMENT, actor, outcome.assignment_id,
            {
                'report_id': outcome.report_id,
                'assignee_id': outcome.assignee_id,
                'organization_id': outcome.organization_id,
                'from_status': outcome.from_status,
                'status': outcome.status,
            },
        )

    def _after_confirm(self, report, user, count):
        self._audit(
            AuditAction.REPORT_CONFIRMED, ResourceType.REPORT, user, report.id,
            {'confirmation_count': count},
        )

    def _after_comment(self, report, comment, author):
        self.fanout.schedule(LifecycleEvent(
            type=NotificationType.REPORT_COMMENTED,
            title='New Comment on Report',
            body=f'A new comment was added to report "{report.title}"',
            data={
                'report_id': str(report.id),
                'report_title': report.title,
                'comment_id': str(comment.id),
            },
            recipient_ids=self.report_participants(report, exclude=author),
            push_title='New Comment',
            push_body=f'New comment on "{report.title}"',
        ))
        self._audit(
            AuditAction.REPORT_COMMENT_ADDED, ResourceType.COMMENT, author, comment.id,
            {'report_id': str(report.id)},
        )

