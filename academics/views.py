import logging

from django.db import transaction
from django.db.models import Count, F, Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.response import Response

from audit.services import AuditLogger
from portal.exceptions import ConflictError
from . import services
from .models import (
    AcademicYear, Department, Course, Semester, SemesterCourse,
    Program, LecturerCourse, AcademicCalendarEvent
)
from .serializers import (
    AcademicYearSerializer, DepartmentSerializer, CourseSerializer,
    SemesterSerializer, SemesterCourseSerializer, ProgramSerializer, ProgramCourseSerializer,
    LecturerCourseSerializer, FacultyCourseSerializer, AcademicCalendarEventSerializer
)

logger = logging.getLogger(__name__)


def _require_academic_manager(request):
    if not request.user.can_manage_academics():
        raise PermissionDenied('Only registrars and administrators can manage academic records')


def _ensure_unique(model, field, value, label, exclude_id=None):
    if value is None:
        return
    queryset = model.objects.filter(**{f'{field}__iexact': value})
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise ConflictError(
            f'{model._meta.verbose_name} with this {label} already exists',
            code=f'{model.__name__.upper()}_{field.upper()}_TAKEN'
        )


# ===== ACADEMIC YEAR ENDPOINTS =====

@api_view(['GET', 'POST'])
def academic_years(request):
    """List academic years or create one"""
    if request.method == 'GET':
        years = AcademicYear.objects.all()
        return Response({
            'success': True,
            'count': years.count(),
            'data': AcademicYearSerializer(years, many=True).data
        })

    _require_academic_manager(request)
    serializer = AcademicYearSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    _ensure_unique(AcademicYear, 'name', serializer.validated_data.get('name'), 'name')
    academic_year = serializer.save()
    return Response({
        'success': True,
        'message': 'Academic year created successfully',
        'data': AcademicYearSerializer(academic_year).data
    }, status=status.HTTP_201_CREATED)


# ===== DEPARTMENT ENDPOINTS =====

@api_view(['GET', 'POST'])
def departments(request):
    """List departments or create one"""
    if request.method == 'GET':
        queryset = Department.objects.select_related('head_of_department')
        is_active = request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() == 'true')
        return Response({
            'success': True,
            'count': queryset.count(),
            'data': DepartmentSerializer(queryset, many=True).data
        })

    _require_academic_manager(request)
    serializer = DepartmentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    _ensure_unique(Department, 'name', serializer.validated_data.get('name'), 'name')
    _ensure_unique(Department, 'code', serializer.validated_data.get('code'), 'code')

    with transaction.atomic():
        department = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='CREATE',
            entity_type='department',
            entity_id=department.id,
            entity_name=department.name,
        )
    return Response({
        'success': True,
        'message': 'Department created successfully',
        'data': DepartmentSerializer(department).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def department_detail(request, department_id):
    department = get_object_or_404(Department, id=department_id)

    if request.method == 'GET':
        return Response({'success': True, 'data': DepartmentSerializer(department).data})

    _require_academic_manager(request)

    if request.method == 'DELETE':
        with transaction.atomic():
            AuditLogger.log_action(
                actor=request.user,
                action='DELETE',
                entity_type='department',
                entity_id=department.id,
                entity_name=department.name,
            )
            department.delete()
        return Response({'success': True, 'message': 'Department deleted successfully'})

    serializer = DepartmentSerializer(department, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    _ensure_unique(Department, 'name', serializer.validated_data.get('name'), 'name', department.id)
    _ensure_unique(Department, 'code', serializer.validated_data.get('code'), 'code', department.id)

    with transaction.atomic():
        department = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='UPDATE',
            entity_type='department',
            entity_id=department.id,
            entity_name=department.name,
            changes={key: str(value) for key, value in serializer.validated_data.items()},
        )
    return Response({
        'success': True,
        'message': 'Department updated successfully',
        'data': DepartmentSerializer(department).data
    })


# ===== COURSE ENDPOINTS =====

@api_view(['GET', 'POST'])
def courses(request):
    """List catalogue courses or create one"""
    if request.method == 'GET':
        queryset = Course.objects.select_related('department')
        department_id = request.query_params.get('department_id')
        if department_id:
            queryset = queryset.filter(department_id=department_id)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(code__icontains=search) | queryset.filter(title__icontains=search)
        return Response({
            'success': True,
            'count': queryset.count(),
            'data': CourseSerializer(queryset, many=True).data
        })

    _require_academic_manager(request)
    serializer = CourseSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    _ensure_unique(Course, 'code', serializer.validated_data.get('code'), 'code')

    with transaction.atomic():
        course = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='CREATE',
            entity_type='course',
            entity_id=course.id,
            entity_name=course.code,
        )
    logger.info(f"Course {course.code} created by {request.user.email}")
    return Response({
        'success': True,
        'message': 'Course created successfully',
        'data': CourseSerializer(course).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def course_detail(request, course_id):
    course = get_object_or_404(Course.objects.select_related('department'), id=course_id)

    if request.method == 'GET':
        return Response({'success': True, 'data': CourseSerializer(course).data})

    _require_academic_manager(request)

    if request.method == 'DELETE':
        with transaction.atomic():
            AuditLogger.log_action(
                actor=request.user,
                action='DELETE',
                entity_type='course',
                entity_id=course.id,
                entity_name=course.code,
            )
            course.delete()
        return Response({'success': True, 'message': 'Course deleted successfully'})

    serializer = CourseSerializer(course, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    _ensure_unique(Course, 'code', serializer.validated_data.get('code'), 'code', course.id)

    with transaction.atomic():
        course = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='UPDATE',
            entity_type='course',
            entity_id=course.id,
            entity_name=course.code,
            changes={key: str(value) for key, value in serializer.validated_data.items()},
        )
    return Response({
        'success': True,
        'message': 'Course updated successfully',
        'data': CourseSerializer(course).data
    })


# ===== SEMESTER ENDPOINTS =====

@api_view(['GET', 'POST'])
def semesters(request):
    """List semesters or create one"""
    if request.method == 'GET':
        queryset = Semester.objects.select_related('academic_year')
        academic_year_id = request.query_params.get('academic_year_id')
        if academic_year_id:
            queryset = queryset.filter(academic_year_id=academic_year_id)
        return Response({
            'success': True,
            'count': queryset.count(),
            'data': SemesterSerializer(queryset, many=True).data
        })

    _require_academic_manager(request)
    serializer = SemesterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    semester = services.create_semester(serializer.validated_data, actor=request.user)
    return Response({
        'success': True,
        'message': 'Semester created successfully',
        'data': SemesterSerializer(semester).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
def current_semester(request):
    """Get the active semester"""
    semester = services.get_active_semester()
    if semester is None:
        raise NotFound('No active semester')
    return Response({'success': True, 'data': SemesterSerializer(semester).data})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def semester_detail(request, semester_id):
    semester = get_object_or_404(Semester, id=semester_id)

    if request.method == 'GET':
        return Response({'success': True, 'data': SemesterSerializer(semester).data})

    _require_academic_manager(request)

    if request.method == 'DELETE':
        with transaction.atomic():
            AuditLogger.log_action(
                actor=request.user,
                action='DELETE',
                entity_type='semester',
                entity_id=semester.id,
                entity_name=semester.name,
            )
            semester.delete()
        return Response({'success': True, 'message': 'Semester deleted successfully'})

    serializer = SemesterSerializer(semester, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    semester = services.update_semester(semester, serializer.validated_data, actor=request.user)
    return Response({
        'success': True,
        'message': 'Semester updated successfully',
        'data': SemesterSerializer(semester).data
    })


@api_view(['POST'])
def activate_semester(request, semester_id):
    _require_academic_manager(request)
    semester = get_object_or_404(Semester, id=semester_id)
    semester = services.activate_semester(semester, actor=request.user)
    return Response({
        'success': True,
        'message': f'{semester.name} is now the active semester',
        'data': SemesterSerializer(semester).data
    })


@api_view(['POST'])
def deactivate_semester(request, semester_id):
    _require_academic_manager(request)
    semester = get_object_or_404(Semester, id=semester_id)
    semester = services.deactivate_semester(semester, actor=request.user)
    return Response({
        'success': True,
        'message': f'{semester.name} deactivated',
        'data': SemesterSerializer(semester).data
    })


@api_view(['GET', 'POST'])
def semester_courses(request, semester_id):
    """Courses offered in a semester"""
    semester = get_object_or_404(Semester, id=semester_id)

    if request.method == 'GET':
        offerings = SemesterCourse.objects.filter(semester=semester).select_related(
            'course', 'course__department'
        )
        return Response({
            'success': True,
            'count': offerings.count(),
            'data': SemesterCourseSerializer(offerings, many=True).data
        })

    _require_academic_manager(request)
    course_id = request.data.get('course_id')
    if not course_id:
        raise ValidationError({'course_id': 'This field is required.'})
    course = get_object_or_404(Course, id=course_id)
    offering = services.add_course_to_semester(semester, course)
    return Response({
        'success': True,
        'message': f'{course.code} added to {semester.name}',
        'data': SemesterCourseSerializer(offering).data
    }, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
def remove_semester_course(request, semester_id, course_id):
    _require_academic_manager(request)
    semester = get_object_or_404(Semester, id=semester_id)
    course = get_object_or_404(Course, id=course_id)
    if not services.remove_course_from_semester(semester, course):
        raise NotFound('Course is not offered in this semester')
    return Response({'success': True, 'message': f'{course.code} removed from {semester.name}'})


# ===== PROGRAM ENDPOINTS =====

@api_view(['GET', 'POST'])
def programs(request):
    """List programs or create one"""
    if request.method == 'GET':
        queryset = Program.objects.select_related('department')
        department_id = request.query_params.get('department_id')
        if department_id:
            queryset = queryset.filter(department_id=department_id)
        program_type = request.query_params.get('program_type')
        if program_type:
            queryset = queryset.filter(program_type=program_type)
        return Response({
            'success': True,
            'count': queryset.count(),
            'data': ProgramSerializer(queryset, many=True).data
        })

    _require_academic_manager(request)
    serializer = ProgramSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    _ensure_unique(Program, 'code', serializer.validated_data.get('code'), 'code')

    with transaction.atomic():
        program = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='CREATE',
            entity_type='program',
            entity_id=program.id,
            entity_name=program.code,
        )
    logger.info(f"Program {program.code} created by {request.user.email}")
    return Response({
        'success': True,
        'message': 'Program created successfully',
        'data': ProgramSerializer(program).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def program_detail(request, program_id):
    program = get_object_or_404(Program.objects.select_related('department'), id=program_id)

    if request.method == 'GET':
        return Response({'success': True, 'data': ProgramSerializer(program).data})

    _require_academic_manager(request)

    if request.method == 'DELETE':
        with transaction.atomic():
            AuditLogger.log_action(
                actor=request.user,
                action='DELETE',
                entity_type='program',
                entity_id=program.id,
                entity_name=program.code,
            )
            program.delete()
        return Response({'success': True, 'message': 'Program deleted successfully'})

    serializer = ProgramSerializer(program, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    _ensure_unique(Program, 'code', serializer.validated_data.get('code'), 'code', program.id)

    with transaction.atomic():
        program = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='UPDATE',
            entity_type='program',
            entity_id=program.id,
            entity_name=program.code,
            changes={key: str(value) for key, value in serializer.validated_data.items()},
        )
    return Response({
        'success': True,
        'message': 'Program updated successfully',
        'data': ProgramSerializer(program).data
    })


@api_view(['GET', 'POST'])
def program_courses(request, program_id):
    """Courses that make up a program"""
    program = get_object_or_404(Program, id=program_id)

    if request.method == 'GET':
        links = program.program_courses.select_related('course')
        return Response({
            'success': True,
            'count': links.count(),
            'data': ProgramCourseSerializer(links, many=True).data
        })

    _require_academic_manager(request)
    course_id = request.data.get('course_id')
    if not course_id:
        raise ValidationError({'course_id': 'This field is required.'})
    course = get_object_or_404(Course, id=course_id)
    link = services.add_course_to_program(program, course)
    return Response({
        'success': True,
        'message': f'{course.code} added to {program.code}',
        'data': ProgramCourseSerializer(link).data
    }, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
def remove_program_course(request, program_id, course_id):
    _require_academic_manager(request)
    program = get_object_or_404(Program, id=program_id)
    course = get_object_or_404(Course, id=course_id)
    if not services.remove_course_from_program(program, course):
        raise NotFound('Course is not part of this program')
    return Response({'success': True, 'message': f'{course.code} removed from {program.code}'})


@api_view(['GET'])
def departments_by_program(request, program_id):
    """The department that runs a program"""
    program = get_object_or_404(Program.objects.select_related('department'), id=program_id)
    return Response({
        'success': True,
        'count': 1,
        'data': DepartmentSerializer([program.department], many=True).data
    })


@api_view(['GET'])
def courses_by_program_department(request):
    """Program courses owned by one department"""
    program_id = request.query_params.get('program_id')
    department_id = request.query_params.get('department_id')
    if not program_id or not department_id:
        raise ValidationError({'detail': 'program_id and department_id are required'})

    queryset = Course.objects.select_related('department').filter(
        program_courses__program_id=program_id,
        department_id=department_id,
    )
    return Response({
        'success': True,
        'count': queryset.count(),
        'data': CourseSerializer(queryset, many=True).data
    })


# ===== LECTURER ASSIGNMENT ENDPOINTS =====

@api_view(['GET', 'POST'])
def lecturer_courses(request):
    """List lecturer assignments or assign a lecturer to a course"""
    if request.method == 'GET':
        queryset = LecturerCourse.objects.select_related('lecturer', 'lecturer__department', 'course', 'semester')
        for param, field in (('lecturer_id', 'lecturer_id'), ('course_id', 'course_id'), ('semester_id', 'semester_id')):
            value = request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{field: value})
        return Response({
            'success': True,
            'count': queryset.count(),
            'data': LecturerCourseSerializer(queryset, many=True).data
        })

    _require_academic_manager(request)
    serializer = LecturerCourseSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    assignment = services.assign_lecturer(
        serializer.validated_data['lecturer'],
        serializer.validated_data['course'],
        serializer.validated_data['semester'],
        actor=request.user,
    )
    return Response({
        'success': True,
        'message': 'Lecturer assigned successfully',
        'data': LecturerCourseSerializer(assignment).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def lecturer_course_detail(request, assignment_id):
    assignment = get_object_or_404(
        LecturerCourse.objects.select_related('lecturer', 'course', 'semester'), id=assignment_id
    )

    if request.method == 'GET':
        return Response({'success': True, 'data': LecturerCourseSerializer(assignment).data})

    _require_academic_manager(request)

    if request.method == 'DELETE':
        with transaction.atomic():
            AuditLogger.log_action(
                actor=request.user,
                action='DELETE',
                entity_type='lecturer_course',
                entity_id=assignment.id,
                entity_name=f"{assignment.lecturer.email} {assignment.course.code}",
            )
            assignment.delete()
        return Response({'success': True, 'message': 'Lecturer assignment deleted successfully'})

    serializer = LecturerCourseSerializer(assignment, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    assignment = services.update_lecturer_assignment(assignment, serializer.validated_data, actor=request.user)
    return Response({
        'success': True,
        'message': 'Lecturer assignment updated successfully',
        'data': LecturerCourseSerializer(assignment).data
    })


@api_view(['GET'])
def faculty_courses(request):
    """Courses the calling faculty member teaches, with approved enrolment counts"""
    if not request.user.is_faculty():
        raise PermissionDenied('Only faculty members have teaching assignments')

    queryset = LecturerCourse.objects.filter(lecturer=request.user).select_related(
        'lecturer', 'course', 'semester'
    ).annotate(
        approved_students=Count(
            'course__course_uploads',
            filter=Q(
                course__course_uploads__status='approved',
                course__course_uploads__semester_id=F('semester_id'),
            ),
        )
    )
    semester_id = request.query_params.get('semester_id')
    if semester_id:
        queryset = queryset.filter(semester_id=semester_id)
    return Response({
        'success': True,
        'count': queryset.count(),
        'data': FacultyCourseSerializer(queryset, many=True).data
    })


# ===== ACADEMIC CALENDAR ENDPOINTS =====

@api_view(['GET', 'POST'])
def academic_calendar(request):
    """List calendar events or create one"""
    if request.method == 'GET':
        queryset = AcademicCalendarEvent.objects.select_related('semester')
        semester_id = request.query_params.get('semester_id')
        if semester_id:
            queryset = queryset.filter(semester_id=semester_id)
        event_type = request.query_params.get('type')
        if event_type:
            queryset = queryset.filter(event_type=event_type)
        start_date = request.query_params.get('start_date')
        if start_date:
            queryset = queryset.filter(date__date__gte=start_date)
        end_date = request.query_params.get('end_date')
        if end_date:
            queryset = queryset.filter(date__date__lte=end_date)
        return Response({
            'success': True,
            'count': queryset.count(),
            'data': AcademicCalendarEventSerializer(queryset, many=True).data
        })

    _require_academic_manager(request)
    serializer = AcademicCalendarEventSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        event = serializer.save(created_by=request.user)
        AuditLogger.log_action(
            actor=request.user,
            action='CREATE',
            entity_type='calendar_event',
            entity_id=event.id,
            entity_name=event.title,
        )
    return Response({
        'success': True,
        'message': 'Calendar event created successfully',
        'data': AcademicCalendarEventSerializer(event).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def calendar_event_detail(request, event_id):
    event = get_object_or_404(AcademicCalendarEvent.objects.select_related('semester'), id=event_id)

    if request.method == 'GET':
        return Response({'success': True, 'data': AcademicCalendarEventSerializer(event).data})

    _require_academic_manager(request)

    if request.method == 'DELETE':
        with transaction.atomic():
            AuditLogger.log_action(
                actor=request.user,
                action='DELETE',
                entity_type='calendar_event',
                entity_id=event.id,
                entity_name=event.title,
            )
            event.delete()
        return Response({'success': True, 'message': 'Calendar event deleted successfully'})

    serializer = AcademicCalendarEventSerializer(event, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    with transaction.atomic():
        event = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='UPDATE',
            entity_type='calendar_event',
            entity_id=event.id,
            entity_name=event.title,
            changes={key: str(value) for key, value in serializer.validated_data.items()},
        )
    return Response({
        'success': True,
        'message': 'Calendar event updated successfully',
        'data': AcademicCalendarEventSerializer(event).data
    })
