"""
Timetable Service

Slot writes lock the owning timetable row so that the overlap check and the
insert or update happen atomically per timetable.
"""

import logging

from django.db import transaction

from audit.services import AuditLogger
from portal.exceptions import PortalValidationError, SlotConflict
from .models import Timetable, TimetableSlot

logger = logging.getLogger(__name__)

SLOT_FIELDS = ('course', 'lecturer', 'day_of_week', 'start_time', 'end_time', 'room')


def _describe(slot):
    return {
        'id': str(slot.id),
        'course_code': slot.course.code,
        'day_of_week': slot.day_of_week,
        'start_time': slot.start_time.strftime('%H:%M'),
        'end_time': slot.end_time.strftime('%H:%M'),
        'room': slot.room,
    }


def check_slot_conflicts(timetable, day_of_week, start_time, end_time, exclude_slot_id=None):
    """Slots of ``timetable`` overlapping [start_time, end_time) on ``day_of_week``"""
    conflicts = TimetableSlot.objects.filter(
        timetable=timetable,
        day_of_week=day_of_week,
        start_time__lt=end_time,
        end_time__gt=start_time,
    ).select_related('course')
    if exclude_slot_id:
        conflicts = conflicts.exclude(id=exclude_slot_id)
    return conflicts


def _validate_times(start_time, end_time):
    if start_time >= end_time:
        raise PortalValidationError('Start time must be before end time', code='INVALID_TIME_RANGE')


def _ensure_free(timetable, day_of_week, start_time, end_time, exclude_slot_id=None):
    conflicts = list(check_slot_conflicts(timetable, day_of_week, start_time, end_time, exclude_slot_id))
    if conflicts:
        first = conflicts[0]
        raise SlotConflict(
            f'Time slot conflicts with {first.course.code} '
            f'({first.start_time.strftime("%H:%M")}-{first.end_time.strftime("%H:%M")})',
            conflicts=[_describe(slot) for slot in conflicts],
        )


def create_timetable(data, actor=None):
    timetable = Timetable.objects.create(
        name=data['name'],
        semester=data['semester'],
        created_by=actor,
    )
    AuditLogger.log_action(
        actor=actor,
        action='CREATE',
        entity_type='timetable',
        entity_id=timetable.id,
        entity_name=timetable.name,
    )
    logger.info(f"Timetable {timetable.name} created")
    return timetable


def add_slot(timetable, data):
    """
    Add a slot after checking it against the timetable's other slots on the same day.

    Raises:
        PortalValidationError: start_time is not before end_time
        SlotConflict: the slot overlaps an existing one
    """
    _validate_times(data['start_time'], data['end_time'])

    with transaction.atomic():
        Timetable.objects.select_for_update().get(pk=timetable.pk)
        _ensure_free(timetable, data['day_of_week'], data['start_time'], data['end_time'])
        slot = TimetableSlot.objects.create(
            timetable=timetable,
            **{field: data[field] for field in SLOT_FIELDS if field in data}
        )

    logger.info(f"Added {slot} to {timetable.name}")
    return slot


def update_slot(slot, data):
    day_of_week = data.get('day_of_week', slot.day_of_week)
    start_time = data.get('start_time', slot.start_time)
    end_time = data.get('end_time', slot.end_time)
    _validate_times(start_time, end_time)

    with transaction.atomic():
        Timetable.objects.select_for_update().get(pk=slot.timetable_id)
        _ensure_free(slot.timetable, day_of_week, start_time, end_time, exclude_slot_id=slot.id)
        for field in SLOT_FIELDS:
            if field in data:
                setattr(slot, field, data[field])
        slot.save()

    logger.info(f"Updated slot {slot.id} in {slot.timetable.name}")
    return slot


def delete_slot(slot):
    timetable_name = slot.timetable.name
    slot.delete()
    logger.info(f"Deleted slot from {timetable_name}")


def set_published(timetable, is_published, actor=None):
    """Publish or unpublish a timetable; publishing requires a conflict-free timetable"""
    with transaction.atomic():
        timetable = Timetable.objects.select_for_update().get(pk=timetable.pk)
        if is_published:
            conflicts = timetable.get_conflicts()
            if conflicts:
                raise SlotConflict(
                    f'Cannot publish timetable with {len(conflicts)} conflicts',
                    code='TIMETABLE_HAS_CONFLICTS',
                    conflicts=[[_describe(first), _describe(second)] for first, second in conflicts],
                )

        timetable.is_published = is_published
        timetable.save(update_fields=['is_published', 'updated_at'])
        AuditLogger.log_action(
            actor=actor,
            action='PUBLISH' if is_published else 'UPDATE',
            entity_type='timetable',
            entity_id=timetable.id,
            entity_name=timetable.name,
            changes={'is_published': is_published},
        )

    logger.info(f"Timetable {timetable.name} {'published' if is_published else 'unpublished'}")
    return timetable
