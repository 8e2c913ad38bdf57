"""
Report models for the CIRA backend.

Contains:
- Organization: external body a report can be assigned to
- Report: citizen-submitted infrastructure issue
- ReportStatusHistory: append-only status change ledger
- ReportAssignment: append-only assignment records
- ReportComment: discussion on a report
- ReportConfirmation: a citizen vouching that a reported issue exists

Lifecycle rules:
- Report.status is only written through reports.ledger.StatusLedger
- History and assignment rows are never updated; reassignment adds a row
- The current assignment is the newest assignment row
"""

from django.db import models
from django.db.models import Q

from core.models import BaseModel, AppendOnlyModel


class ReportStatus:
    """Report lifecycle status constants."""
    NEW = 'new'
    TRIAGED = 'triaged'
    ASSIGNED = 'assigned'
    IN_PROGRESS = 'in_progress'
    RESOLVED = 'resolved'
    REJECTED = 'rejected'

    CHOICES = [
        (NEW, 'New'),
        (TRIAGED, 'Triaged'),
        (ASSIGNED, 'Assigned'),
        (IN_PROGRESS, 'In Progress'),
        (RESOLVED, 'Resolved'),
        (REJECTED, 'Rejected'),
    ]

    VALUES = [value for value, _ in CHOICES]

    # Statuses eligible for (auto-)assignment
    UNASSIGNED_STATES = [NEW, TRIAGED]

    # Terminal states (no further transition expected in normal operation)
    TERMINAL_STATES = [RESOLVED, REJECTED]


class ReportSeverity:
    """Report severity levels."""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

    CHOICES = [
        (LOW, 'Low'),
        (MEDIUM, 'Medium'),
        (HIGH, 'High'),
    ]


class ReportType:
    """Infrastructure issue categories."""
    POTHOLE = 'pothole'
    STREETLIGHT = 'streetlight'
    SIDEWALK = 'sidewalk'
    DRAINAGE = 'drainage'
    OTHER = 'other'

    CHOICES = [
        (POTHOLE, 'Pothole'),
        (STREETLIGHT, 'Streetlight'),
        (SIDEWALK, 'Sidewalk'),
        (DRAINAGE, 'Drainage'),
        (OTHER, 'Other'),
    ]


class Organization(BaseModel):
    """
    Organization (utility, contractor, department) reports can be routed to.
    Reference data only; the lifecycle engine never writes it.
    """

    name = models.CharField(max_length=200)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)

    class Meta:
        db_table = 'organizations'
        verbose_name = 'Organization'
        verbose_name_plural = 'Organizations'
        ordering = ['name']

    def __str__(self):
        return self.name


class Report(BaseModel):
    """
    Citizen-submitted infrastructure issue.

    created_at is immutable and drives oldest-first auto-assignment.
    """

    title = models.CharField(
        max_length=200,
        help_text="Short summary of the issue"
    )

    description = models.TextField(
        blank=True,
        help_text="Full description from the reporter"
    )

    type = models.CharField(
        max_length=20,
        choices=ReportType.CHOICES,
        default=ReportType.OTHER,
        db_index=True,
    )

    severity = models.CharField(
        max_length=10,
        choices=ReportSeverity.CHOICES,
        default=ReportSeverity.MEDIUM,
        db_index=True,
    )

    status = models.CharField(
        max_length=20,
        choices=ReportStatus.CHOICES,
        default=ReportStatus.NEW,
        db_index=True,
        help_text="Current report status (written by the status ledger only)"
    )

    # Geographic fields
    latitude = models.DecimalField(
        max_digits=10,
        decimal_places=7,
        null=True,
        blank=True,
    )

    longitude = models.DecimalField(
        max_digits=10,
        decimal_places=7,
        null=True,
        blank=True,
    )

    address_text = models.CharField(
        max_length=255,
        blank=True,
    )

    reporter = models.ForeignKey(
        'authentication.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports',
        help_text="Citizen who submitted the report"
    )

    class Meta:
        db_table = 'reports'
        verbose_name = 'Report'
        verbose_name_plural = 'Reports'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='reports_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in ReportStatus.TERMINAL_STATES

    @property
    def current_assignment(self):
        """Newest assignment row, or None."""
        return self.assignments.order_by('-created_at').first()


class ReportStatusHistory(AppendOnlyModel):
    """
    Immutable status change history for a report.
    One row per transition; from_status is null for the initial row.

    sequence numbers a report's rows 1, 2, 3... in the order they were
    written under the report row lock. It orders the timeline; created_at
    can tie.
    """

    report = models.ForeignKey(
        Report,
        on_delete=models.PROTECT,
        related_name='status_history'
    )

    from_status = models.CharField(
        max_length=20,
        choices=ReportStatus.CHOICES,
        blank=True,
        null=True,
        help_text="Previous status (null for initial submission)"
    )

    to_status = models.CharField(
        max_length=20,
        choices=ReportStatus.CHOICES,
        help_text="New status"
    )

    sequence = models.PositiveIntegerField(
        help_text="Position in the report's timeline, starting at 1"
    )

    note = models.TextField(blank=True)

    changed_by = models.ForeignKey(
        'authentication.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='report_status_changes',
        help_text="User who changed the status (null for system actions)"
    )

    class Meta:
        db_table = 'report_status_history'
        verbose_name = 'Report Status History'
        verbose_name_plural = 'Report Status Histories'
        ordering = ['-created_at', '-sequence']
        constraints = [
            models.UniqueConstraint(fields=['report', 'sequence'], name='status_history_report_sequence'),
        ]

    def __str__(self):
        return f"Report {self.report_id}: {self.from_status} -> {self.to_status}"


class ReportAssignment(AppendOnlyModel):
    """
    Links a report to a responsible officer and/or organization.

    At least one of assignee/organization is always set.
    """

    report = models.ForeignKey(
        Report,
        on_delete=models.PROTECT,
        related_name='assignments'
    )

    assignee = models.ForeignKey(
        'authentication.User',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='report_assignments',
    )

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='report_assignments',
    )

    due_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'report_assignments'
        verbose_name = 'Report Assignment'
        verbose_name_plural = 'Report Assignments'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(assignee__isnull=False) | Q(organization__isnull=False),
                name='assignment_has_target',
            ),
        ]
        indexes = [
            models.Index(fields=['report', 'created_at'], name='assign_report_created_idx'),
        ]

    def __str__(self):
        target = self.assignee or self.organization
        return f"Report {self.report_id} -> {target}"


class ReportComment(BaseModel):
    """
    Comment on a report by a citizen or staff member.
    """

    report = models.ForeignKey(
        Report,
        on_delete=models.PROTECT,
        related_name='comments'
    )

    author = models.ForeignKey(
        'authentication.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='report_comments',
    )

    body = models.TextField()

    class Meta:
        db_table = 'report_comments'
        verbose_name = 'Report Comment'
        verbose_name_plural = 'Report Comments'
        ordering = ['created_at']

    def __str__(self):
        return f"Comment on {self.report_id} by {self.author}"


class ReportConfirmation(BaseModel):
    """
    A user confirming that a reported issue exists.
    At most one confirmation per (report, user).
    """

    report = models.ForeignKey(
        Report,
        on_delete=models.CASCADE,
        related_name='confirmations'
    )

    user = models.ForeignKey(
        'authentication.User',
        on_delete=models.CASCADE,
        related_name='report_confirmations',
    )

    class Meta:
        db_table = 'report_confirmations'
        verbose_name = 'Report Confirmation'
        verbose_name_plural = 'Report Confirmations'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['report', 'user'], name='confirmation_once_per_user'),
        ]

    def __str__(self):
        return f"{self.user} confirmed {self.report_id}"
