from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Notification
from .serializers import NotificationSerializer, NotificationCreateSerializer, BroadcastSerializer
from .services import notify, notify_many

User = get_user_model()


def _require_sender(request):
    if not request.user.can_manage_registrations():
        raise PermissionDenied('Only registrars and administrators can send notifications')


class NotificationListView(APIView):
    """Notifications for the authenticated user"""

    def get(self, request):
        """Get all notifications for current user"""
        notifications = Notification.objects.filter(recipient=request.user)

        # Filter by read status if provided
        is_read = request.query_params.get('is_read')
        if is_read is not None:
            notifications = notifications.filter(is_read=is_read.lower() == 'true')

        # Filter by type if provided
        notification_type = request.query_params.get('type')
        if notification_type:
            notifications = notifications.filter(notification_type=notification_type)

        return Response({
            'success': True,
            'count': notifications.count(),
            'unread_count': Notification.objects.filter(recipient=request.user, is_read=False).count(),
            'data': NotificationSerializer(notifications, many=True).data
        })

    def post(self, request):
        """Send a notification to one user (registrar or admin)"""
        _require_sender(request)

        serializer = NotificationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        recipient = get_object_or_404(User, id=data['user_id'])

        notification = notify(
            recipient,
            data['title'],
            data['message'],
            notification_type=data['notification_type'],
            send_email=data['send_email'],
        )
        return Response({
            'success': True,
            'message': 'Notification created successfully',
            'data': NotificationSerializer(notification).data
        }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
def broadcast_notification(request):
    """Send a notification to a list of users or to everyone holding a role"""
    _require_sender(request)

    serializer = BroadcastSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    recipients = User.objects.filter(is_active=True)
    if data.get('user_ids'):
        recipients = recipients.filter(id__in=data['user_ids'])
    if data.get('role'):
        recipients = recipients.filter(role=data['role'])

    result = notify_many(
        recipients,
        data['title'],
        data['message'],
        notification_type=data['notification_type'],
        send_email=data['send_email'],
    )
    return Response({
        'success': True,
        'message': f"Successfully created {result['notifications_created']} notifications",
        'data': result
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
def mark_notification_read(request, notification_id):
    """Mark a specific notification as read"""
    notification = get_object_or_404(Notification, id=notification_id, recipient=request.user)
    notification.mark_as_read()
    return Response({
        'success': True,
        'message': 'Notification marked as read',
        'data': NotificationSerializer(notification).data
    })


@api_view(['POST'])
def mark_all_notifications_read(request):
    """Mark all unread notifications as read"""
    count = Notification.objects.filter(
        recipient=request.user,
        is_read=False
    ).update(is_read=True, read_at=timezone.now())

    return Response({
        'success': True,
        'message': f'{count} notifications marked as read',
        'marked_count': count
    })


@api_view(['DELETE'])
def delete_notification(request, notification_id):
    """Delete a specific notification"""
    notification = get_object_or_404(Notification, id=notification_id, recipient=request.user)
    notification.delete()
    return Response({
        'success': True,
        'message': 'Notification deleted successfully'
    })


@api_view(['GET'])
def unread_count(request):
    return Response({
        'success': True,
        'unread_count': Notification.objects.filter(recipient=request.user, is_read=False).count()
    })
