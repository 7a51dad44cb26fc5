"""
Semester Service

Semester lifecycle and course offerings. Activation keeps exactly one
semester active: the currently active rows are locked and switched off in the
same transaction that switches the target on, and the single_active_semester
constraint rejects anything that slips past.
"""

import logging

from django.db import transaction

from audit.services import AuditLogger
from portal.exceptions import ConflictError, PortalValidationError
from .models import LecturerCourse, ProgramCourse, Semester, SemesterCourse

logger = logging.getLogger(__name__)

SEMESTER_FIELDS = (
    'name', 'academic_year', 'start_date', 'end_date',
    'registration_deadline', 'course_upload_deadline',
)


def get_active_semester():
    return Semester.get_active()


def _ensure_name_available(name, exclude_id=None):
    queryset = Semester.objects.filter(name__iexact=name)
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise ConflictError(f'A semester named "{name}" already exists', code='SEMESTER_NAME_TAKEN')


def _validate_dates(data):
    start_date = data.get('start_date')
    end_date = data.get('end_date')
    if start_date and end_date and start_date >= end_date:
        raise PortalValidationError('Start date must be before end date')


def activate_semester(semester, actor=None):
    """
    Make ``semester`` the only active semester.

    Returns:
        Semester: the refreshed, active semester
    """
    with transaction.atomic():
        # Lock the target and every active row so concurrent activations serialize
        target = Semester.objects.select_for_update().get(pk=semester.pk)
        previously_active = list(
            Semester.objects.select_for_update().filter(is_active=True).exclude(pk=target.pk)
        )
        if previously_active:
            Semester.objects.filter(pk__in=[s.pk for s in previously_active]).update(is_active=False)

        if not target.is_active:
            target.is_active = True
            target.save(update_fields=['is_active', 'updated_at'])

        AuditLogger.log_action(
            actor=actor,
            action='ACTIVATE',
            entity_type='semester',
            entity_id=target.id,
            entity_name=target.name,
            description='Semester activated',
            changes={'deactivated': [s.name for s in previously_active]},
        )

    logger.info(
        f"Activated semester {target.name}; deactivated "
        f"{', '.join(s.name for s in previously_active) or 'none'}"
    )
    return target


def deactivate_semester(semester, actor=None):
    with transaction.atomic():
        target = Semester.objects.select_for_update().get(pk=semester.pk)
        if target.is_active:
            target.is_active = False
            target.save(update_fields=['is_active', 'updated_at'])
            AuditLogger.log_action(
                actor=actor,
                action='DEACTIVATE',
                entity_type='semester',
                entity_id=target.id,
                entity_name=target.name,
            )
    logger.info(f"Deactivated semester {target.name}")
    return target


def create_semester(data, actor=None):
    """
    Create a semester from validated serializer data.
    ``is_active=True`` routes through activation.
    """
    data = dict(data)
    is_active = data.pop('is_active', False)
    _validate_dates(data)
    _ensure_name_available(data['name'])

    with transaction.atomic():
        semester = Semester.objects.create(
            **{field: data[field] for field in SEMESTER_FIELDS if field in data}
        )
        AuditLogger.log_action(
            actor=actor,
            action='CREATE',
            entity_type='semester',
            entity_id=semester.id,
            entity_name=semester.name,
        )
        if is_active:
            semester = activate_semester(semester, actor)

    logger.info(f"Created semester {semester.name}")
    return semester


def update_semester(semester, data, actor=None):
    data = dict(data)
    is_active = data.pop('is_active', None)
    merged = {
        'start_date': data.get('start_date', semester.start_date),
        'end_date': data.get('end_date', semester.end_date),
    }
    _validate_dates(merged)
    if 'name' in data:
        _ensure_name_available(data['name'], exclude_id=semester.id)

    with transaction.atomic():
        changed = {}
        for field in SEMESTER_FIELDS:
            if field in data:
                setattr(semester, field, data[field])
                changed[field] = str(data[field])
        semester.save()
        AuditLogger.log_action(
            actor=actor,
            action='UPDATE',
            entity_type='semester',
            entity_id=semester.id,
            entity_name=semester.name,
            changes=changed,
        )

        if is_active is True:
            semester = activate_semester(semester, actor)
        elif is_active is False:
            semester = deactivate_semester(semester, actor)

    return semester


def add_course_to_semester(semester, course):
    if SemesterCourse.objects.filter(semester=semester, course=course).exists():
        raise ConflictError('Course is already in this semester', code='COURSE_ALREADY_OFFERED')
    offering = SemesterCourse.objects.create(semester=semester, course=course)
    logger.info(f"Added {course.code} to semester {semester.name}")
    return offering


def remove_course_from_semester(semester, course):
    deleted, _ = SemesterCourse.objects.filter(semester=semester, course=course).delete()
    if deleted:
        logger.info(f"Removed {course.code} from semester {semester.name}")
    return bool(deleted)


def add_course_to_program(program, course):
    if ProgramCourse.objects.filter(program=program, course=course).exists():
        raise ConflictError(f'{course.code} is already part of {program.code}', code='COURSE_ALREADY_IN_PROGRAM')
    link = ProgramCourse.objects.create(program=program, course=course)
    logger.info(f"Added {course.code} to program {program.code}")
    return link


def remove_course_from_program(program, course):
    deleted, _ = ProgramCourse.objects.filter(program=program, course=course).delete()
    if deleted:
        logger.info(f"Removed {course.code} from program {program.code}")
    return bool(deleted)


def _ensure_lecturer(user):
    if not user.is_faculty():
        raise PortalValidationError(f'{user.email} is not a faculty member', code='NOT_A_LECTURER')


def _ensure_not_assigned(lecturer, course, semester, exclude_id=None):
    queryset = LecturerCourse.objects.filter(lecturer=lecturer, course=course, semester=semester)
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise ConflictError(
            'This lecturer is already assigned to this course for the selected semester',
            code='LECTURER_ALREADY_ASSIGNED'
        )


def assign_lecturer(lecturer, course, semester, actor=None):
    """
    Assign a faculty member to teach a course in a semester.

    Raises:
        PortalValidationError: the user is not faculty
        ConflictError: the assignment already exists
    """
    _ensure_lecturer(lecturer)
    _ensure_not_assigned(lecturer, course, semester)

    with transaction.atomic():
        assignment = LecturerCourse.objects.create(lecturer=lecturer, course=course, semester=semester)
        AuditLogger.log_action(
            actor=actor,
            action='ASSIGN',
            entity_type='lecturer_course',
            entity_id=assignment.id,
            entity_name=f"{lecturer.email} {course.code}",
            description=f"Assigned to teach {course.code} in {semester.name}",
        )

    logger.info(f"Assigned {lecturer.email} to {course.code} for {semester.name}")
    return assignment


def update_lecturer_assignment(assignment, data, actor=None):
    lecturer = data.get('lecturer', assignment.lecturer)
    course = data.get('course', assignment.course)
    semester = data.get('semester', assignment.semester)
    _ensure_lecturer(lecturer)
    _ensure_not_assigned(lecturer, course, semester, exclude_id=assignment.id)

    with transaction.atomic():
        assignment.lecturer = lecturer
        assignment.course = course
        assignment.semester = semester
        assignment.save()
        AuditLogger.log_action(
            actor=actor,
            action='UPDATE',
            entity_type='lecturer_course',
            entity_id=assignment.id,
            entity_name=f"{lecturer.email} {course.code}",
            changes={'lecturer': lecturer.email, 'course': course.code, 'semester': semester.name},
        )
    return assignment
