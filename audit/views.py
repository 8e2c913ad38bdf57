"""
Audit Views - Read-Only Access to Audit Logs

All audit logs are append-only and immutable.
Only administrators have access to audit logs.
"""

from rest_framework import generics
from django_filters import rest_framework as filters

from authentication.permissions import IsAdmin
from .models import AuditAction, AuditLog, ResourceType
from .serializers import AuditLogSerializer


class AuditLogFilter(filters.FilterSet):
    """Filter for audit logs."""

    action = filters.ChoiceFilter(field_name='action', choices=AuditAction.CHOICES)
    user_id = filters.CharFilter(field_name='user_id', lookup_expr='exact')
    resource_type = filters.ChoiceFilter(field_name='resource_type', choices=ResourceType.CHOICES)
    resource_id = filters.CharFilter(field_name='resource_id', lookup_expr='exact')
    timestamp_after = filters.DateTimeFilter(field_name='timestamp', lookup_expr='gte')
    timestamp_before = filters.DateTimeFilter(field_name='timestamp', lookup_expr='lte')

    class Meta:
        model = AuditLog
        fields = ['action', 'user_id', 'resource_type', 'resource_id']


class AuditLogListView(generics.ListAPIView):
    """
    List audit logs, newest first.

    GET /api/v1/audit/logs/
    """

    permission_classes = [IsAdmin]
    serializer_class = AuditLogSerializer
    filterset_class = AuditLogFilter

    def get_queryset(self):
        return AuditLog.objects.all().order_by('-timestamp')


class AuditLogDetailView(generics.RetrieveAPIView):
    """
    Retrieve a specific audit log entry.

    GET /api/v1/audit/logs/{id}/
    """

    permission_classes = [IsAdmin]
    serializer_class = AuditLogSerializer
    lookup_field = 'id'

    def get_queryset(self):
        return AuditLog.objects.all()
