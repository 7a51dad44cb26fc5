from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from audit.models import AuditLog
from audit.services import AuditLogger

User = get_user_model()


class AuditLoggerTest(TestCase):

    def test_log_action_records_actor_email(self):
        admin = User.objects.create_superuser(email='admin@portal.test', password='x')

        entry = AuditLogger.log_action(
            actor=admin,
            action='APPROVE',
            entity_type='registration',
            entity_id='abc',
            entity_name='student@portal.test First Semester',
            changes={'courses_approved': 2},
        )

        self.assertEqual(entry.actor_email, 'admin@portal.test')
        self.assertEqual(entry.changes, {'courses_approved': 2})

    def test_system_actions_have_no_actor(self):
        entry = AuditLogger.log_action(actor=None, action='ISSUE', entity_type='registration_card', entity_id=1)

        self.assertIsNone(entry.actor)
        self.assertIn('system', str(entry))


class AuditLogAPITest(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_superuser(email='admin@portal.test', password='x')
        self.registrar = User.objects.create_user(email='registrar@portal.test', password='x', role='registrar')
        AuditLogger.log_action(self.registrar, 'CREATE', 'course', 'c1', entity_name='CS201')
        AuditLogger.log_action(self.registrar, 'APPROVE', 'course_upload', 'u1', entity_name='CS201 upload')
        AuditLogger.log_action(self.admin, 'DELETE', 'user', 'x1', entity_name='old@portal.test')

    def test_admin_only(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.get('/api/audit/logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_filter_by_entity_type_and_action(self):
        self.client.force_authenticate(user=self.admin)

        by_type = self.client.get('/api/audit/logs/', {'entity_type': 'course_upload'})
        self.assertEqual(by_type.data['pagination']['total'], 1)
        self.assertEqual(by_type.data['data'][0]['action'], 'APPROVE')

        by_action = self.client.get('/api/audit/logs/', {'action': 'DELETE'})
        self.assertEqual(by_action.data['data'][0]['actor']['email'], 'admin@portal.test')

    def test_search_and_pagination(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get('/api/audit/logs/', {'search': 'CS201', 'limit': 1})
        self.assertEqual(response.data['pagination']['total'], 2)
        self.assertEqual(response.data['pagination']['returned'], 1)

    def test_non_integer_paging_rejected(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get('/api/audit/logs/', {'limit': 'many'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
