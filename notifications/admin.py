"""
Admin configuration for notifications.

The inbox is written only by the fan-out, so notifications are read-only
here. Device tokens can be revoked by staff.
"""

from django.contrib import admin

from .models import DeviceToken, Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):

    list_display = ['title', 'recipient', 'notification_type', 'report_id', 'is_read', 'created_at']
    list_filter = ['notification_type', 'is_read']
    search_fields = ['recipient__identifier', 'title']
    date_hierarchy = 'created_at'
    readonly_fields = [field.name for field in Notification._meta.fields]

    @admin.display(description='Report')
    def report_id(self, obj):
        return (obj.data or {}).get('report_id', '-')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(DeviceToken)
class DeviceTokenAdmin(admin.ModelAdmin):
    list_display = ['user', 'platform', 'token', 'updated_at']
    list_filter = ['platform']
    search_fields = ['user__identifier', 'token']
    readonly_fields = ['id', 'user', 'token', 'platform', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False
