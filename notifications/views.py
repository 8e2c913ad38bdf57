"""
Notification views for the CIRA backend.

Provides API endpoints for:
- List user notifications
- Mark notification as read
- Mark all as read
- Get unread count
- Register / unregister push devices
- Live notification stream (server-sent events)
"""

import json

from django.conf import settings
from django.http import StreamingHttpResponse
from django_filters import rest_framework as filters
from rest_framework import generics, views, status
from rest_framework.renderers import BaseRenderer, JSONRenderer
from rest_framework.response import Response

from authentication.backends import QueryTokenJWTAuthentication
from authentication.permissions import IsAuthenticated
from .models import Notification, NotificationType
from .serializers import (
    DeviceRegisterSerializer,
    DeviceTokenSerializer,
    DeviceUnregisterSerializer,
    NotificationSerializer,
)
from .services import NotificationService
from .stream import get_broker, stream_events


class NotificationFilter(filters.FilterSet):
    """Filter for the notification inbox."""

    is_read = filters.BooleanFilter(field_name='is_read')
    type = filters.ChoiceFilter(field_name='notification_type', choices=NotificationType.CHOICES)

    class Meta:
        model = Notification
        fields = ['is_read', 'type']


class NotificationListView(generics.ListAPIView):
    """
    List notifications for the authenticated user.

    GET /api/v1/notifications/

    Query parameters:
    - is_read: Filter by read status (true/false)
    - type: Filter by notification type

    Returns: Paginated list of notifications, newest first.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer
    filterset_class = NotificationFilter

    def get_queryset(self):
        return NotificationService.list_for_user(self.request.user)


class MarkNotificationReadView(views.APIView):
    """
    Mark a notification as read.

    POST /api/v1/notifications/{id}/read/
    """

    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        notification = NotificationService.mark_read(request.user, pk)

        return Response({
            'id': str(notification.id),
            'is_read': notification.is_read,
            'read_at': notification.read_at.isoformat() if notification.read_at else None,
        })


class MarkAllReadView(views.APIView):
    """
    Mark all notifications as read for the authenticated user.

    POST /api/v1/notifications/read-all/
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        count = NotificationService.mark_all_read(request.user)

        return Response({
            'message': f'Marked {count} notifications as read.',
            'count': count,
        })


class UnreadCountView(views.APIView):
    """
    Get count of unread notifications.

    GET /api/v1/notifications/unread-count/
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        count = NotificationService.get_unread_count(request.user)

        return Response({
            'unread_count': count,
        })


class DeviceRegisterView(views.APIView):
    """
    Register a push token for the authenticated user.

    POST /api/v1/notifications/devices/
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = DeviceRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        device = NotificationService.register_device(
            request.user,
            serializer.validated_data['token'],
            serializer.validated_data['platform'],
        )

        return Response(DeviceTokenSerializer(device).data, status=status.HTTP_201_CREATED)


class DeviceUnregisterView(views.APIView):
    """
    Remove a push token of the authenticated user.

    POST /api/v1/notifications/devices/unregister/
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = DeviceUnregisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        removed = NotificationService.unregister_device(
            request.user,
            serializer.validated_data['token'],
        )

        return Response({'removed': removed})


class EventStreamRenderer(BaseRenderer):
    """Lets EventSource clients negotiate; error bodies still go out as JSON."""

    media_type = 'text/event-stream'
    format = 'event-stream'
    charset = 'utf-8'

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if data is None:
            return b''
        return json.dumps(data).encode(self.charset)


class NotificationStreamView(views.APIView):
    """
    Live notification stream.

    GET /api/v1/notifications/stream/

    Server-sent events. Accepts the JWT in the Authorization header or as
    ``?token=`` for EventSource clients. Sends a ``connected`` frame, then
    one frame per notification and a heartbeat comment when idle.
    """

    authentication_classes = [QueryTokenJWTAuthentication]
    permission_classes = [IsAuthenticated]
    renderer_classes = [JSONRenderer, EventStreamRenderer]

    def get(self, request):
        response = StreamingHttpResponse(
            stream_events(
                get_broker(),
                request.user.id,
                settings.LIVE_STREAM_HEARTBEAT_SECONDS,
            ),
            content_type='text/event-stream',
        )
        response['Cache-Control'] = 'no-cache'
        response['X-Accel-Buffering'] = 'no'
        return response
