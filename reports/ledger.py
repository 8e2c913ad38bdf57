"""
Status ledger for reports.

The only code path that writes Report.status. Every write appends exactly
one ReportStatusHistory row in the same transaction, so the history is a
complete, ordered record of how a report reached its current state.

The ledger is permissive: any known status may follow any other, including
transitions out of resolved/rejected (administrative correction).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Max

from core.exceptions import NotFound, InvalidStatus
from .models import Report, ReportStatus, ReportStatusHistory

logger = logging.getLogger('cira.lifecycle')


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a status transition."""
    report_id: str
    title: str
    status: str
    updated_at: object
    from_status: Optional[str]
    to_status: str
    history_id: str

    def as_dict(self):
        return {
            'id': self.report_id,
            'title': self.title,
            'status': self.status,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'from_status': self.from_status,
            'to_status': self.to_status,
            'history_id': self.history_id,
        }


def next_sequence(report):
    """Next timeline position for ``report``. Call with the report row locked."""
    last = ReportStatusHistory.objects.filter(report=report).aggregate(last=Max('sequence'))['last']
    return (last or 0) + 1


def lock_report(report_id):
    """
    Fetch and row-lock a report. Must be called inside transaction.atomic().

    Raises:
        NotFound: report does not exist (or the id is malformed)
    """
    try:
        return Report.objects.select_for_update().get(pk=report_id)
    except (Report.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound(f"Report {report_id} not found.")


class StatusLedger:
    """
    Writes status transitions and reads them back.
    """

    def validate_status(self, to_status):
        if not to_status or not str(to_status).strip():
            raise InvalidStatus('Status is required.')
        if to_status not in ReportStatus.VALUES:
            raise InvalidStatus(
                f"Invalid status '{to_status}'. Must be one of: {', '.join(ReportStatus.VALUES)}"
            )

    def apply_transition(self, report_id, to_status, note=None, changed_by=None):
        """
        Move a report to ``to_status`` and append the history row.

        Joins the caller's transaction when one is open, so a failure later
        in the caller rolls back both the status write and the history row.

        Args:
            report_id: Report UUID (or a locked Report instance)
            to_status: Target status
            note: Optional note; defaults to "Status changed to <status>"
            changed_by: Acting user, None for system actions

        Returns:
            TransitionResult
        """
        self.validate_status(to_status)

        with transaction.atomic():
            if isinstance(report_id, Report):
                report = lock_report(report_id.pk)
            else:
                report = lock_report(report_id)

            from_status = report.status
            report.status = to_status
            report.save(update_fields=['status', 'updated_at'])

            entry = ReportStatusHistory.objects.create(
                report=report,
                from_status=from_status,
                to_status=to_status,
                sequence=next_sequence(report),
                note=note or f"Status changed to {to_status}",
                changed_by=changed_by,
            )

        logger.info(f"Report {report.id}: {from_status} -> {to_status}")

        return TransitionResult(
            report_id=str(report.id),
            title=report.title,
            status=report.status,
            updated_at=report.updated_at,
            from_status=from_status,
            to_status=to_status,
            history_id=str(entry.id),
        )

    def record_initial(self, report, changed_by=None, note='Report submitted'):
        """Append the initial (None -> current status) row for a new report."""
        return ReportStatusHistory.objects.create(
            report=report,
            from_status=None,
            to_status=report.status,
            sequence=next_sequence(report),
            note=note,
            changed_by=changed_by,
        )

    def history(self, report_id, newest_first=True):
        try:
            exists = Report.objects.filter(pk=report_id).exists()
        except (DjangoValidationError, ValueError):
            exists = False
        if not exists:
            raise NotFound(f"Report {report_id} not found.")
        order = '-sequence' if newest_first else 'sequence'
        return list(
            ReportStatusHistory.objects
            .filter(report_id=report_id)
            .select_related('changed_by')
            .order_by(order)
        )

    def replay(self, report_id):
        """
        Reconstruct the transition sequence, oldest first.

        Pure read: repeated calls return identical sequences.
        """
        return [
            (entry.from_status, entry.to_status)
            for entry in self.history(report_id, newest_first=False)
        ]


_ledger = StatusLedger()


def get_ledger():
    return _ledger
