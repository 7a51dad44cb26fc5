from django.urls import path
from .views import (
    NotificationListView,
    broadcast_notification,
    mark_notification_read,
    mark_all_notifications_read,
    delete_notification,
    unread_count,
)

app_name = 'notifications'

urlpatterns = [
    path('', NotificationListView.as_view(), name='notification_list'),
    path('broadcast/', broadcast_notification, name='broadcast_notification'),
    path('read-all/', mark_all_notifications_read, name='mark_all_notifications_read'),
    path('unread-count/', unread_count, name='unread_count'),
    path('<uuid:notification_id>/', delete_notification, name='delete_notification'),
    path('<uuid:notification_id>/read/', mark_notification_read, name='mark_notification_read'),
]
