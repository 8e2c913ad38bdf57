"""
URL configuration for notifications.
"""

from django.urls import path

from . import views

app_name = 'notifications'

urlpatterns = [
    # List notifications
    path('', views.NotificationListView.as_view(), name='list'),

    # Unread count
    path('unread-count/', views.UnreadCountView.as_view(), name='unread-count'),

    # Mark all as read
    path('read-all/', views.MarkAllReadView.as_view(), name='read-all'),

    # Mark single notification as read
    path('<uuid:pk>/read/', views.MarkNotificationReadView.as_view(), name='mark-read'),

    # Push devices
    path('devices/', views.DeviceRegisterView.as_view(), name='device-register'),
    path('devices/unregister/', views.DeviceUnregisterView.as_view(), name='device-unregister'),

    # Live stream (server-sent events)
    path('stream/', views.NotificationStreamView.as_view(), name='stream'),
]
