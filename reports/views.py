"""
Report views for the CIRA backend.

Provides REST API endpoints for:
- Report submission
- Status changes (officers / administrators)
- Manual and automatic assignment (administrators)
- Comments
- Citizen confirmations
- Status history
- Officer metrics (administrators)

Views only parse input and render output; LifecycleService does the work.
"""

from rest_framework import status, views
from rest_framework.response import Response

from authentication.permissions import IsAdmin, IsAuthenticated, IsOfficerOrAdmin
from . import balancer
from .ledger import get_ledger
from .serializers import (
    AssignSerializer,
    CommentCreateSerializer,
    CommentSerializer,
    ConfirmationSerializer,
    ReportCreateSerializer,
    ReportSerializer,
    StatusChangeSerializer,
    StatusHistorySerializer,
)
from .services import LifecycleService


class ReportCreateView(views.APIView):
    """
    Submit a new report.

    POST /api/v1/reports/

    Request:
    {
        "title": "Pothole on Main St",
        "description": "Deep pothole near the bus stop",
        "type": "pothole",
        "severity": "high",
        "latitude": "-1.9441",
        "longitude": "30.0619",
        "address_text": "KN 3 Rd"
    }
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        report = LifecycleService().submit_report(request.user, **serializer.validated_data)

        return Response(ReportSerializer(report).data, status=status.HTTP_201_CREATED)


class ReportStatusUpdateView(views.APIView):
    """
    Change the status of a report.

    PATCH /api/v1/reports/{id}/status/

    Request:
    {
        "status": "in_progress",
        "note": "Crew dispatched"
    }
    """

    permission_classes = [IsOfficerOrAdmin]

    def patch(self, request, report_id):
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = LifecycleService().change_status(
            report_id,
            serializer.validated_data['status'],
            note=serializer.validated_data.get('note') or None,
            actor=request.user,
        )

        return Response(result.as_dict())


class ReportAssignView(views.APIView):
    """
    Assign a report to an officer and/or organization.

    POST /api/v1/reports/{id}/assign/

    Request:
    {
        "assignee_id": "uuid",
        "organization_id": "uuid",
        "due_at": "2025-01-15T10:30:00Z"
    }

    At least one of assignee_id / organization_id is required.
    """

    permission_classes = [IsAdmin]

    def post(self, request, report_id):
        serializer = AssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        outcome = LifecycleService().assign_report(
            report_id,
            assignee_id=serializer.validated_data.get('assignee_id'),
            organization_id=serializer.validated_data.get('organization_id'),
            due_at=serializer.validated_data.get('due_at'),
            actor=request.user,
        )

        return Response(outcome.as_dict(), status=status.HTTP_201_CREATED)


class AutoAssignView(views.APIView):
    """
    Distribute all unassigned new/triaged reports over the officers.

    POST /api/v1/reports/auto-assign/
    """

    permission_classes = [IsAdmin]

    def post(self, request):
        result = LifecycleService().auto_assign_backlog(actor=request.user)
        return Response(result.as_dict())


class ReportCommentCreateView(views.APIView):
    """
    Add a comment to a report.

    POST /api/v1/reports/{id}/comments/

    Request:
    {
        "body": "Still not fixed"
    }
    """

    permission_classes = [IsAuthenticated]

    def post(self, request, report_id):
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = LifecycleService().add_comment(
            report_id,
            serializer.validated_data['body'],
            author=request.user,
        )

        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class ReportConfirmView(views.APIView):
    """
    Confirm that a reported issue exists. Once per user and report.

    POST /api/v1/reports/{id}/confirm/
    """

    permission_classes = [IsAuthenticated]

    def post(self, request, report_id):
        confirmation, count = LifecycleService().confirm_report(report_id, request.user)

        serializer = ConfirmationSerializer(confirmation, context={'confirmation_count': count})
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class ReportConfirmationsView(views.APIView):
    """
    Confirmation count of a report.

    GET /api/v1/reports/{id}/confirmations/
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, report_id):
        return Response(LifecycleService().confirmation_summary(report_id, user=request.user))


class ReportHistoryView(views.APIView):
    """
    Status history of a report, newest first.

    GET /api/v1/reports/{id}/history/
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, report_id):
        entries = get_ledger().history(report_id)
        return Response({'data': StatusHistorySerializer(entries, many=True).data})


class OfficerMetricsView(views.APIView):
    """
    Case totals and resolution rates per officer.

    GET /api/v1/reports/officers/metrics/
    """

    permission_classes = [IsAdmin]

    def get(self, request):
        return Response({'data': balancer.officer_metrics()})
