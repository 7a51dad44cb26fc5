"""
Announcement views

Portal-wide notices. Everyone signed in can read them; registrars,
administrators and staff publish and edit them.
"""

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response

from audit.services import AuditLogger
from .models import Announcement
from .serializers import AnnouncementSerializer

logger = logging.getLogger(__name__)


def _require_announcer(request):
    if not request.user.can_view_all_registrations():
        raise PermissionDenied('Only registrars, administrators and staff can manage announcements')


@api_view(['GET', 'POST'])
def announcements(request):
    """Latest announcements, or publish a new one"""
    if request.method == 'GET':
        queryset = Announcement.objects.select_related('author')
        limit = request.query_params.get('limit')
        if limit:
            try:
                queryset = queryset[:max(int(limit), 0)]
            except ValueError:
                raise ValidationError({'limit': 'limit must be an integer'})
        data = AnnouncementSerializer(queryset, many=True).data
        return Response({'success': True, 'count': len(data), 'data': data})

    _require_announcer(request)
    serializer = AnnouncementSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        announcement = serializer.save(author=request.user)
        AuditLogger.log_action(
            actor=request.user,
            action='CREATE',
            entity_type='announcement',
            entity_id=announcement.id,
            entity_name=announcement.title,
        )
    logger.info(f"Announcement '{announcement.title}' published by {request.user.email}")
    return Response({
        'success': True,
        'message': 'Announcement published',
        'data': AnnouncementSerializer(announcement).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
def announcement_detail(request, announcement_id):
    announcement = get_object_or_404(Announcement.objects.select_related('author'), id=announcement_id)

    if request.method == 'GET':
        return Response({'success': True, 'data': AnnouncementSerializer(announcement).data})

    _require_announcer(request)

    if request.method == 'DELETE':
        with transaction.atomic():
            AuditLogger.log_action(
                actor=request.user,
                action='DELETE',
                entity_type='announcement',
                entity_id=announcement.id,
                entity_name=announcement.title,
            )
            announcement.delete()
        return Response({'success': True, 'message': 'Announcement deleted successfully'})

    if not request.data.get('title') and not request.data.get('content'):
        raise ValidationError({'detail': 'Provide a title or content to update'})
    serializer = AnnouncementSerializer(announcement, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    with transaction.atomic():
        announcement = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='UPDATE',
            entity_type='announcement',
            entity_id=announcement.id,
            entity_name=announcement.title,
        )
    return Response({
        'success': True,
        'message': 'Announcement updated successfully',
        'data': AnnouncementSerializer(announcement).data
    })
