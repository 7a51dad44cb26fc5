from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError

from portal.exceptions import (
    AdmissionRejected, ConflictError, DuplicateRegistration, portal_exception_handler
)


class HealthCheckTest(TestCase):

    def test_health_check_reports_database(self):
        response = self.client.get('/api/health/')

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['status'], 'healthy')
        self.assertEqual(body['database'], 'ok')
        self.assertEqual(body['version'], '1.0.0')


class ExceptionHandlerTest(SimpleTestCase):

    def _handle(self, exc):
        return portal_exception_handler(exc, {'request': None, 'view': None})

    def test_domain_error_carries_code_and_extra_fields(self):
        response = self._handle(AdmissionRejected('Too many credits', current_credits=20, max_credits=24))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {
            'success': False,
            'message': 'Too many credits',
            'code': 'ADMISSION_REJECTED',
            'current_credits': 20,
            'max_credits': 24,
        })

    def test_conflicts_use_409(self):
        self.assertEqual(self._handle(DuplicateRegistration()).status_code, status.HTTP_409_CONFLICT)

        response = self._handle(ConflictError('Name taken', code='SEMESTER_NAME_TAKEN'))
        self.assertEqual(response.data['code'], 'SEMESTER_NAME_TAKEN')

    def test_field_errors_are_listed(self):
        response = self._handle(ValidationError({'course_id': ['This field is required.']}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'This field is required.')
        self.assertIn('course_id', response.data['errors'])

    def test_not_found(self):
        response = self._handle(NotFound('No active semester'))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'No active semester')
        self.assertEqual(response.data['code'], 'not_found')

    def test_unhandled_exceptions_are_left_to_django(self):
        self.assertIsNone(self._handle(RuntimeError('boom')))
