from django.contrib.auth import get_user_model
from rest_framework import serializers
from .models import Announcement, Notification

User = get_user_model()


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for Notification model"""

    class Meta:
        model = Notification
        fields = [
            'id', 'title', 'message', 'notification_type',
            'is_read', 'email_sent', 'created_at', 'read_at'
        ]
        read_only_fields = fields


class NotificationCreateSerializer(serializers.Serializer):
    """Serializer for sending a notification to one user"""
    user_id = serializers.UUIDField()
    title = serializers.CharField(max_length=255)
    message = serializers.CharField()
    notification_type = serializers.ChoiceField(choices=Notification.TYPE_CHOICES, default='info')
    send_email = serializers.BooleanField(default=False)


class BroadcastSerializer(serializers.Serializer):
    """Serializer for sending a notification to many users"""
    user_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    role = serializers.ChoiceField(choices=User.USER_ROLES, required=False)
    title = serializers.CharField(max_length=255)
    message = serializers.CharField()
    notification_type = serializers.ChoiceField(choices=Notification.TYPE_CHOICES, default='info')
    send_email = serializers.BooleanField(default=False)

    def validate(self, attrs):
        if not attrs.get('user_ids') and not attrs.get('role'):
            raise serializers.ValidationError('Provide user_ids or role')
        return attrs


class AnnouncementSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(source='author.get_full_name', read_only=True, default=None)

    class Meta:
        model = Announcement
        fields = ['id', 'title', 'content', 'author', 'author_name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'author', 'created_at', 'updated_at']
