"""
Admin configuration for reports models.

Design principles:
- Reports are editable except for status (the status ledger owns it)
- History and assignments are READ-ONLY (append-only records)
- Organizations are reference data managed here
"""

from django.contrib import admin

from .models import (
    Organization, Report, ReportAssignment, ReportComment, ReportConfirmation, ReportStatusHistory,
)


class ReportStatusHistoryInline(admin.TabularInline):
    model = ReportStatusHistory
    extra = 0
    can_delete = False
    fields = ['sequence', 'from_status', 'to_status', 'note', 'changed_by', 'created_at']
    readonly_fields = fields
    ordering = ['-sequence']

    def has_add_permission(self, request, obj=None):
        return False


class ReportAssignmentInline(admin.TabularInline):
    model = ReportAssignment
    extra = 0
    can_delete = False
    fields = ['assignee', 'organization', 'due_at', 'created_at']
    readonly_fields = fields
    ordering = ['-created_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'severity', 'status', 'reporter', 'created_at']
    list_filter = ['status', 'type', 'severity', 'created_at']
    search_fields = ['id', 'title', 'description', 'address_text', 'reporter__identifier']
    ordering = ['-created_at']
    readonly_fields = ['id', 'status', 'reporter', 'created_at', 'updated_at']
    inlines = [ReportAssignmentInline, ReportStatusHistoryInline]

    fieldsets = (
        ('Report', {
            'fields': ('id', 'title', 'description', 'type', 'severity', 'status'),
        }),
        ('Location', {
            'fields': ('latitude', 'longitude', 'address_text'),
        }),
        ('Context', {
            'fields': ('reporter', 'created_at', 'updated_at'),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ReportStatusHistory)
class ReportStatusHistoryAdmin(admin.ModelAdmin):
    """READ-ONLY: history rows are append-only."""

    list_display = ['report', 'from_status', 'to_status', 'changed_by', 'created_at']
    list_filter = ['to_status', 'created_at']
    search_fields = ['report__id', 'report__title', 'note']
    readonly_fields = ['id', 'report', 'sequence', 'from_status', 'to_status', 'note', 'changed_by', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ReportAssignment)
class ReportAssignmentAdmin(admin.ModelAdmin):
    """READ-ONLY: reassignment adds a new row through the API."""

    list_display = ['report', 'assignee', 'organization', 'due_at', 'created_at']
    list_filter = ['created_at']
    search_fields = ['report__id', 'report__title', 'assignee__identifier', 'organization__name']
    readonly_fields = ['id', 'report', 'assignee', 'organization', 'due_at', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ReportComment)
class ReportCommentAdmin(admin.ModelAdmin):
    list_display = ['report', 'author', 'created_at']
    search_fields = ['report__id', 'body', 'author__identifier']
    readonly_fields = ['id', 'report', 'author', 'body', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False


@admin.register(ReportConfirmation)
class ReportConfirmationAdmin(admin.ModelAdmin):
    list_display = ['report', 'user', 'created_at']
    search_fields = ['report__id', 'report__title', 'user__identifier']
    readonly_fields = ['id', 'report', 'user', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_email', 'contact_phone', 'created_at']
    search_fields = ['name', 'contact_email']
    readonly_fields = ['id', 'created_at', 'updated_at']
