"""
Serializers for notifications.
"""

from rest_framework import serializers

from .models import DeviceToken, DevicePlatform, Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for notification list/detail."""

    notification_type_display = serializers.CharField(
        source='get_notification_type_display',
        read_only=True
    )

    class Meta:
        model = Notification
        fields = [
            'id',
            'notification_type',
            'notification_type_display',
            'title',
            'body',
            'data',
            'is_read',
            'read_at',
            'created_at',
        ]
        read_only_fields = fields


class DeviceRegisterSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=255)
    platform = serializers.ChoiceField(choices=DevicePlatform.CHOICES)


class DeviceUnregisterSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=255)


class DeviceTokenSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeviceToken
        fields = ['id', 'token', 'platform', 'created_at', 'updated_at']
        read_only_fields = fields
