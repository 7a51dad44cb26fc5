"""
API error types and the DRF exception handler.

Every failure leaves the API as ``{"success": false, "message": ..., "code": ...}``
with the HTTP status carried by the exception.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class PortalError(APIException):
    """Base class for domain errors raised by the service layer"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed'
    default_code = 'error'

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail, code)
        self.extra = extra


class PortalValidationError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'
    default_code = 'validation_error'


class AdmissionRejected(PortalValidationError):
    default_detail = 'Course cannot be added to this registration'
    default_code = 'ADMISSION_REJECTED'


class DeadlinePassed(PortalValidationError):
    default_detail = 'The deadline for this action has passed'
    default_code = 'DEADLINE_PASSED'


class ConflictError(PortalError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource conflicts with existing data'
    default_code = 'conflict'


class DuplicateRegistration(ConflictError):
    default_detail = 'You are already registered for this course'
    default_code = 'DUPLICATE_REGISTRATION'


class SlotConflict(ConflictError):
    default_detail = 'Time slot conflicts with existing schedule'
    default_code = 'TIMETABLE_CONFLICT'


def _message_from(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _message_from(value)
        return ''
    if isinstance(detail, (list, tuple)):
        return _message_from(detail[0]) if detail else ''
    return str(detail)


def portal_exception_handler(exc, context):
    """Render API errors in the portal's JSON envelope"""
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(exc.message_dict if hasattr(exc, 'error_dict') else exc.messages)

    response = exception_handler(exc, context)
    if response is None:
        return None

    detail = response.data
    body = {
        'success': False,
        'message': _message_from(detail.get('detail', detail) if isinstance(detail, dict) else detail),
        'code': getattr(exc, 'default_code', 'error'),
    }
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            body['code'] = codes
    if isinstance(exc, ValidationError) and not isinstance(exc, PortalError):
        body['errors'] = detail
    if isinstance(exc, PortalError):
        body.update(exc.extra)
    if isinstance(exc, Http404):
        body['code'] = 'not_found'

    if response.status_code >= 500:
        logger.error(f"API error {response.status_code} on {context.get('request').path}: {body['message']}")
    response.data = body
    return response
