"""
Timetable API Views
"""

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from audit.services import AuditLogger
from . import services
from .models import Timetable, TimetableSlot
from .serializers import (
    TimetableSerializer, TimetableDetailSerializer, TimetableSlotSerializer, PublishSerializer
)


def _require_timetable_manager(request):
    if not request.user.can_manage_academics():
        raise PermissionDenied('Only registrars and administrators can manage timetables')


def _visible_timetables(user):
    timetables = Timetable.objects.select_related('semester', 'created_by')
    if not user.can_view_all_registrations():
        timetables = timetables.filter(is_published=True)
    return timetables


@api_view(['GET', 'POST'])
def timetables(request):
    """List timetables or create one"""
    if request.method == 'GET':
        queryset = _visible_timetables(request.user)
        semester_id = request.query_params.get('semester_id')
        if semester_id:
            queryset = queryset.filter(semester_id=semester_id)
        return Response({
            'success': True,
            'count': queryset.count(),
            'data': TimetableSerializer(queryset, many=True).data
        })

    _require_timetable_manager(request)
    serializer = TimetableSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    timetable = services.create_timetable(serializer.validated_data, actor=request.user)
    return Response({
        'success': True,
        'message': 'Timetable created successfully',
        'data': TimetableSerializer(timetable).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def timetable_detail(request, timetable_id):
    if request.method == 'GET':
        timetable = get_object_or_404(_visible_timetables(request.user), id=timetable_id)
        return Response({'success': True, 'data': TimetableDetailSerializer(timetable).data})

    _require_timetable_manager(request)
    timetable = get_object_or_404(Timetable, id=timetable_id)

    if request.method == 'DELETE':
        AuditLogger.log_action(
            actor=request.user,
            action='DELETE',
            entity_type='timetable',
            entity_id=timetable.id,
            entity_name=timetable.name,
        )
        timetable.delete()
        return Response({'success': True, 'message': 'Timetable deleted successfully'})

    serializer = TimetableSerializer(timetable, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    timetable = serializer.save()
    return Response({
        'success': True,
        'message': 'Timetable updated successfully',
        'data': TimetableSerializer(timetable).data
    })


@api_view(['PUT'])
def publish_timetable(request, timetable_id):
    """Publish or unpublish a timetable"""
    _require_timetable_manager(request)
    timetable = get_object_or_404(Timetable, id=timetable_id)
    serializer = PublishSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    is_published = serializer.validated_data['is_published']
    timetable = services.set_published(timetable, is_published, actor=request.user)
    return Response({
        'success': True,
        'message': f"Timetable {'published' if is_published else 'unpublished'} successfully",
        'data': TimetableSerializer(timetable).data
    })


@api_view(['GET', 'POST'])
def timetable_slots(request, timetable_id):
    """List or add slots"""
    if request.method == 'GET':
        timetable = get_object_or_404(_visible_timetables(request.user), id=timetable_id)
        slots = timetable.slots.select_related('course', 'lecturer')
        day_of_week = request.query_params.get('day_of_week')
        if day_of_week:
            slots = slots.filter(day_of_week=day_of_week.upper())
        return Response({
            'success': True,
            'count': slots.count(),
            'data': TimetableSlotSerializer(slots, many=True).data
        })

    _require_timetable_manager(request)
    timetable = get_object_or_404(Timetable, id=timetable_id)
    serializer = TimetableSlotSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    slot = services.add_slot(timetable, serializer.validated_data)
    return Response({
        'success': True,
        'message': 'Time slot created successfully',
        'data': TimetableSlotSerializer(slot).data
    }, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
def timetable_slot_detail(request, timetable_id, slot_id):
    _require_timetable_manager(request)
    slot = get_object_or_404(TimetableSlot.objects.select_related('timetable', 'course'), id=slot_id, timetable_id=timetable_id)

    if request.method == 'DELETE':
        services.delete_slot(slot)
        return Response({'success': True, 'message': 'Time slot deleted successfully'})

    serializer = TimetableSlotSerializer(slot, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    slot = services.update_slot(slot, serializer.validated_data)
    return Response({
        'success': True,
        'message': 'Time slot updated successfully',
        'data': TimetableSlotSerializer(slot).data
    })
