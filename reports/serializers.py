"""
Serializers for reports.

Handles:
- Report submission input and output
- Status change, assignment and comment input
- History, assignment, comment and confirmation output

Input serializers only shape and type-check the payload; lifecycle rules
live in LifecycleService.
"""

from rest_framework import serializers

from .models import (
    Report, ReportComment, ReportConfirmation, ReportSeverity, ReportStatusHistory, ReportType,
)
from .services import COMMENT_MAX_LENGTH


class ReportSerializer(serializers.ModelSerializer):
    """Serializer for report output."""

    reporter_id = serializers.UUIDField(read_only=True, allow_null=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Report
        fields = [
            'id',
            'title',
            'description',
            'type',
            'severity',
            'status',
            'status_display',
            'latitude',
            'longitude',
            'address_text',
            'reporter_id',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ReportCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    type = serializers.ChoiceField(choices=ReportType.CHOICES, default=ReportType.OTHER)
    severity = serializers.ChoiceField(choices=ReportSeverity.CHOICES, default=ReportSeverity.MEDIUM)
    latitude = serializers.DecimalField(
        max_digits=10, decimal_places=7, required=False, allow_null=True,
        min_value=-90, max_value=90,
    )
    longitude = serializers.DecimalField(
        max_digits=10, decimal_places=7, required=False, allow_null=True,
        min_value=-180, max_value=180,
    )
    address_text = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class StatusChangeSerializer(serializers.Serializer):
    # Membership in the status enum is checked by the ledger
    status = serializers.CharField(allow_blank=True)
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AssignSerializer(serializers.Serializer):
    """Blank ids are accepted here and treated as absent by the balancer."""

    assignee_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    organization_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    due_at = serializers.DateTimeField(required=False, allow_null=True)


class CommentCreateSerializer(serializers.Serializer):
    body = serializers.CharField(max_length=COMMENT_MAX_LENGTH)


class CommentSerializer(serializers.ModelSerializer):
    author_name = serializers.SerializerMethodField()

    class Meta:
        model = ReportComment
        fields = ['id', 'report', 'author', 'author_name', 'body', 'created_at']
        read_only_fields = fields

    def get_author_name(self, obj):
        return obj.author.display_name if obj.author else None


class StatusHistorySerializer(serializers.ModelSerializer):
    """Serializer for ReportStatusHistory."""

    changed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = ReportStatusHistory
        fields = [
            'id',
            'sequence',
            'from_status',
            'to_status',
            'note',
            'changed_by',
            'changed_by_name',
            'created_at',
        ]
        read_only_fields = fields

    def get_changed_by_name(self, obj):
        return obj.changed_by.display_name if obj.changed_by else None


class ConfirmationSerializer(serializers.ModelSerializer):
    report_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)
    confirmation_count = serializers.SerializerMethodField()

    class Meta:
        model = ReportConfirmation
        fields = ['id', 'report_id', 'user_id', 'confirmation_count', 'created_at']
        read_only_fields = fields

    def get_confirmation_count(self, obj):
        return self.context.get('confirmation_count')
