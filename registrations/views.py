"""
Course Registration API Views

Students add and drop courses for a semester; registrars and administrators
review the uploads, approve or reject whole registrations, and issue cards.
"""

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from academics.models import Course, Semester
from portal.exceptions import ConflictError, PortalValidationError
from . import services
from .admission import APPROVED
from .models import CourseUpload, Registration, RegistrationCard
from .serializers import (
    CourseUploadSerializer, CourseUploadDetailSerializer, CourseUploadCreateSerializer,
    ReviewSerializer, RejectionSerializer, RegistrationSerializer, RegistrationDetailSerializer,
    RegistrationCardSerializer
)

User = get_user_model()


def _require_registrar(request):
    if not request.user.can_manage_registrations():
        raise PermissionDenied('Only registrars and administrators can review registrations')


def _scope_to_user(request, queryset):
    """Restrict a queryset to the caller unless they may view every student's records"""
    user_id = request.query_params.get('user_id')
    if request.user.can_view_all_registrations():
        return queryset.filter(student_id=user_id) if user_id else queryset
    if user_id and user_id != str(request.user.id):
        raise PermissionDenied('You can only view your own registrations')
    return queryset.filter(student=request.user)


def _ensure_owner_or_viewer(request, student_id):
    if student_id != request.user.id and not request.user.can_view_all_registrations():
        raise PermissionDenied('You can only view your own registrations')


class CourseUploadListView(APIView):
    """
    GET /api/course-uploads/
    POST /api/course-uploads/
    """

    def get(self, request):
        uploads = CourseUpload.objects.select_related('student', 'course', 'semester')
        uploads = _scope_to_user(request, uploads)

        semester_id = request.query_params.get('semester_id')
        if semester_id:
            uploads = uploads.filter(semester_id=semester_id)
        upload_status = request.query_params.get('status')
        if upload_status:
            uploads = uploads.filter(status=upload_status)

        return Response({
            'success': True,
            'count': uploads.count(),
            'data': CourseUploadSerializer(uploads, many=True).data
        })

    def post(self, request):
        serializer = CourseUploadCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user_id = data.get('user_id')
        if user_id and user_id != request.user.id:
            _require_registrar(request)
            student = get_object_or_404(User.objects.students(), id=user_id)
        elif request.user.is_student():
            student = request.user
        else:
            raise PermissionDenied('Only students can register for courses; pass user_id to act for a student')

        course = get_object_or_404(Course, id=data['course_id'], is_active=True)
        semester = get_object_or_404(Semester, id=data['semester_id'])

        upload = services.add_course(student, semester, course, actor=request.user)
        return Response({
            'success': True,
            'message': 'Course added to your registration. Awaiting approval.',
            'data': CourseUploadSerializer(upload).data
        }, status=status.HTTP_201_CREATED)


class CourseUploadDetailView(APIView):
    """
    GET /api/course-uploads/<id>/
    DELETE /api/course-uploads/<id>/
    """

    def get(self, request, upload_id):
        upload = get_object_or_404(CourseUpload.objects.select_related('student', 'course', 'semester'), id=upload_id)
        _ensure_owner_or_viewer(request, upload.student_id)
        return Response({'success': True, 'data': CourseUploadDetailSerializer(upload).data})

    def delete(self, request, upload_id):
        upload = get_object_or_404(CourseUpload.objects.select_related('student', 'course', 'semester'), id=upload_id)
        if upload.student_id != request.user.id and not request.user.can_manage_registrations():
            raise PermissionDenied('You can only drop your own courses')

        registration = services.drop_course(upload, actor=request.user)
        return Response({
            'success': True,
            'message': 'Course dropped successfully',
            'data': {
                'registration': RegistrationSerializer(registration).data if registration else None
            }
        })


class CourseUploadApproveView(APIView):
    """POST /api/course-uploads/<id>/approve/"""

    def post(self, request, upload_id):
        _require_registrar(request)
        upload = get_object_or_404(CourseUpload, id=upload_id)
        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        upload = services.approve_course_upload(upload, request.user, serializer.validated_data['comments'])
        upload.registration.refresh_from_db()
        return Response({
            'success': True,
            'message': 'Course approved successfully',
            'data': CourseUploadSerializer(upload).data,
            'registration_status': upload.registration.status,
        })


class CourseUploadRejectView(APIView):
    """POST /api/course-uploads/<id>/reject/"""

    def post(self, request, upload_id):
        _require_registrar(request)
        upload = get_object_or_404(CourseUpload, id=upload_id)
        serializer = RejectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        upload = services.reject_course_upload(upload, request.user, serializer.validated_data['reason'])
        return Response({
            'success': True,
            'message': 'Course rejected',
            'data': CourseUploadSerializer(upload).data
        })


class RegistrationListView(APIView):
    """GET /api/registrations/"""

    def get(self, request):
        registrations = Registration.objects.select_related('student', 'semester')
        registrations = _scope_to_user(request, registrations)

        registration_status = request.query_params.get('status')
        if registration_status:
            registrations = registrations.filter(status=registration_status)
        semester_id = request.query_params.get('semester_id')
        if semester_id:
            registrations = registrations.filter(semester_id=semester_id)

        return Response({
            'success': True,
            'count': registrations.count(),
            'data': RegistrationSerializer(registrations, many=True).data
        })


class RegistrationDetailView(APIView):
    """GET /api/registrations/<id>/"""

    def get(self, request, registration_id):
        registration = get_object_or_404(
            Registration.objects.select_related('student', 'semester'), id=registration_id
        )
        _ensure_owner_or_viewer(request, registration.student_id)
        return Response({'success': True, 'data': RegistrationDetailSerializer(registration).data})


class RegistrationApproveView(APIView):
    """POST /api/registrations/<id>/approve/"""

    def post(self, request, registration_id):
        _require_registrar(request)
        registration = get_object_or_404(Registration, id=registration_id)
        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        card = services.approve_registration(registration, request.user, serializer.validated_data['comments'])
        registration.refresh_from_db()
        return Response({
            'success': True,
            'message': 'Registration approved successfully',
            'data': RegistrationDetailSerializer(registration).data,
            'card': RegistrationCardSerializer(card).data,
        })


class RegistrationRejectView(APIView):
    """POST /api/registrations/<id>/reject/"""

    def post(self, request, registration_id):
        _require_registrar(request)
        registration = get_object_or_404(Registration, id=registration_id)
        serializer = RejectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        registration = services.reject_registration(
            registration, request.user, serializer.validated_data['reason']
        )
        return Response({
            'success': True,
            'message': 'Registration rejected',
            'data': RegistrationDetailSerializer(registration).data
        })


class RegistrationCardListView(APIView):
    """
    GET /api/registration-cards/
    POST /api/registration-cards/
    """

    def get(self, request):
        cards = RegistrationCard.objects.select_related('student', 'semester')
        cards = _scope_to_user(request, cards)
        semester_id = request.query_params.get('semester_id')
        if semester_id:
            cards = cards.filter(semester_id=semester_id)
        return Response({
            'success': True,
            'count': cards.count(),
            'data': RegistrationCardSerializer(cards, many=True).data
        })

    def post(self, request):
        _require_registrar(request)
        student = get_object_or_404(User.objects.students(), id=request.data.get('user_id'))
        semester = get_object_or_404(Semester, id=request.data.get('semester_id'))

        if RegistrationCard.objects.filter(student=student, semester=semester).exists():
            raise ConflictError(
                f'{student.email} already holds a card for {semester.name}',
                code='CARD_ALREADY_ISSUED'
            )
        if not Registration.objects.filter(student=student, semester=semester, status=APPROVED).exists():
            raise PortalValidationError(
                f'{student.email} has no approved registration for {semester.name}',
                code='REGISTRATION_NOT_APPROVED'
            )

        card = services.issue_registration_card(student, semester)
        return Response({
            'success': True,
            'message': 'Registration card issued',
            'data': RegistrationCardSerializer(card).data
        }, status=status.HTTP_201_CREATED)
