import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from audit.services import AuditLogger
from portal.exceptions import ConflictError
from .serializers import (
    UserSerializer, UserCreateSerializer, StudentSignupSerializer, PasswordChangeSerializer
)

User = get_user_model()
logger = logging.getLogger(__name__)


def _ensure_email_available(email, exclude_id=None):
    queryset = User.objects.filter(email__iexact=email or '')
    if exclude_id:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise ConflictError('A user with this email already exists', code='EMAIL_TAKEN')


@api_view(['POST'])
@permission_classes([AllowAny])
def register_student(request):
    """Student self sign-up"""
    serializer = StudentSignupSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    _ensure_email_available(serializer.validated_data.get('email'))

    user = serializer.save()
    logger.info(f"Student account created for {user.email}")
    return Response({
        'success': True,
        'message': 'Account created successfully',
        'data': UserSerializer(user).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
def current_user(request):
    """Return the authenticated user"""
    return Response({
        'success': True,
        'data': UserSerializer(request.user).data
    })


@api_view(['GET', 'POST'])
def users_list(request):
    """List users or create one (admin only)"""
    if not request.user.is_admin():
        raise PermissionDenied('Admin access required')

    if request.method == 'GET':
        users = User.objects.select_related('department')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        department_id = request.query_params.get('department_id')
        if department_id:
            users = users.filter(department_id=department_id)
        return Response({
            'success': True,
            'count': users.count(),
            'data': UserSerializer(users, many=True).data
        })

    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    _ensure_email_available(serializer.validated_data.get('email'))

    with transaction.atomic():
        user = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='CREATE',
            entity_type='user',
            entity_id=user.id,
            entity_name=user.email,
            description=f"Created {user.role} account {user.email}",
        )
    return Response({
        'success': True,
        'message': 'User created successfully',
        'data': UserSerializer(user).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def manage_user(request, user_id):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, id=user_id)

    if request.method == 'GET':
        if user.id != request.user.id and not request.user.can_view_all_registrations():
            raise PermissionDenied('You can only view your own account')
        return Response({'success': True, 'data': UserSerializer(user).data})

    if not request.user.is_admin():
        raise PermissionDenied('Admin access required')

    if request.method == 'DELETE':
        if user.id == request.user.id:
            raise ValidationError({'detail': 'You cannot delete your own account'})
        with transaction.atomic():
            AuditLogger.log_action(
                actor=request.user,
                action='DELETE',
                entity_type='user',
                entity_id=user.id,
                entity_name=user.email,
                description=f"Deleted account {user.email}",
            )
            user.delete()
        return Response({'success': True, 'message': 'User deleted successfully'})

    serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    if 'email' in serializer.validated_data:
        _ensure_email_available(serializer.validated_data['email'], exclude_id=user.id)

    with transaction.atomic():
        user = serializer.save()
        AuditLogger.log_action(
            actor=request.user,
            action='UPDATE',
            entity_type='user',
            entity_id=user.id,
            entity_name=user.email,
            changes={key: str(value) for key, value in serializer.validated_data.items()},
        )
    return Response({
        'success': True,
        'message': 'User updated successfully',
        'data': UserSerializer(user).data
    })


@api_view(['POST'])
def change_password(request, user_id):
    """Change a password; users must confirm their current one, admins may reset any"""
    user = get_object_or_404(User, id=user_id)
    is_self = user.id == request.user.id
    if not is_self and not request.user.is_admin():
        raise PermissionDenied('You can only change your own password')

    serializer = PasswordChangeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    if is_self and not user.check_password(serializer.validated_data.get('current_password', '')):
        raise ValidationError({'current_password': 'Current password is incorrect'})

    user.set_password(serializer.validated_data['new_password'])
    user.save(update_fields=['password', 'updated_at'])

    if not is_self:
        AuditLogger.log_action(
            actor=request.user,
            action='PASSWORD_RESET',
            entity_type='user',
            entity_id=user.id,
            entity_name=user.email,
        )
    return Response({'success': True, 'message': 'Password updated successfully'})
