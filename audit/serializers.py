"""
Audit Serializers - Read-Only Serializers for Audit Logs
"""

from rest_framework import serializers

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    """
    Serializer for audit log entries.
    """

    action_display = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            'id',
            'timestamp',
            'action',
            'action_display',
            'user_id',
            'resource_type',
            'resource_id',
            'details',
        ]
        read_only_fields = fields
