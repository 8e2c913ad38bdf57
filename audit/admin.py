"""
Admin configuration for audit models.

Note: Audit logs are read-only in admin.
"""

from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Admin for audit logs - read only."""

    list_display = ['action', 'user_id', 'resource_type', 'resource_id', 'timestamp']
    list_filter = ['action', 'resource_type', 'timestamp']
    search_fields = ['user_id', 'resource_id']
    readonly_fields = ['id', 'timestamp', 'action', 'user_id', 'resource_type', 'resource_id', 'details']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
