from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from academics.models import Department
from audit.models import AuditLog

User = get_user_model()


class UserModelTests(TestCase):
    """Test User model functionality"""

    def test_create_user(self):
        """Test creating a regular user"""
        user = User.objects.create_user(
            username='testuser',
            email='Test@Example.com',
            password='testpass123'
        )
        self.assertEqual(user.username, 'testuser')
        self.assertEqual(user.email, 'Test@example.com')
        self.assertTrue(user.check_password('testpass123'))
        self.assertEqual(user.role, 'student')
        self.assertTrue(user.is_student())
        self.assertFalse(user.can_manage_registrations())

    def test_username_defaults_to_email(self):
        user = User.objects.create_user(email='nouser@example.com', password='testpass123')
        self.assertEqual(user.username, 'nouser@example.com')

    def test_email_is_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_create_super_user(self):
        """Test creating a super user"""
        super_user = User.objects.create_superuser(
            email='super@example.com',
            password='superpass123'
        )
        self.assertTrue(super_user.is_superuser)
        self.assertTrue(super_user.is_staff)
        self.assertEqual(super_user.role, 'admin')
        self.assertTrue(super_user.is_admin())

    def test_role_permissions(self):
        registrar = User.objects.create_user(email='reg@example.com', password='x', role='registrar')
        staff = User.objects.create_user(email='staff@example.com', password='x', role='staff')

        self.assertTrue(registrar.can_manage_registrations())
        self.assertTrue(registrar.can_manage_academics())
        self.assertFalse(registrar.is_admin())
        self.assertFalse(staff.can_manage_registrations())
        self.assertTrue(staff.can_view_all_registrations())

    def test_students_manager_excludes_inactive_and_staff(self):
        active = User.objects.create_user(email='a@example.com', password='x')
        User.objects.create_user(email='b@example.com', password='x', is_active=False)
        User.objects.create_user(email='c@example.com', password='x', role='faculty')

        self.assertEqual(list(User.objects.students()), [active])

    def test_user_str_representation(self):
        user = User.objects.create_user(
            email='ada@example.com', password='x', first_name='Ada', last_name='Lovelace'
        )
        self.assertIn('ada@example.com', str(user))
        self.assertEqual(user.get_full_name(), 'Ada Lovelace')


class UserAPITests(APITestCase):
    """Test account endpoints"""

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_superuser(email='admin@portal.test', password='adminpass123')
        self.student = User.objects.create_user(email='student@portal.test', password='studentpass123')
        self.department = Department.objects.create(name="Computer Science", code="CS")

    def test_student_self_signup(self):
        response = self.client.post('/api/auth/register/', {
            'email': 'new@portal.test',
            'password': 'A-strong-pass-123',
            'first_name': 'New',
            'last_name': 'Student',
            'department': str(self.department.id),
            'role': 'admin',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email='new@portal.test')
        self.assertEqual(user.role, 'student')
        self.assertEqual(user.department, self.department)

    def test_duplicate_email_is_conflict(self):
        response = self.client.post('/api/auth/register/', {
            'email': 'STUDENT@portal.test',
            'password': 'A-strong-pass-123',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'EMAIL_TAKEN')

    def test_token_login_with_email(self):
        response = self.client.post('/api/token/', {
            'email': 'student@portal.test', 'password': 'studentpass123'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        me = self.client.get('/api/auth/me/')
        self.assertEqual(me.data['data']['email'], 'student@portal.test')

    def test_unauthenticated_request_rejected(self):
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_admin_creates_registrar_with_audit_entry(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post('/api/users/', {
            'email': 'registrar@portal.test',
            'password': 'A-strong-pass-123',
            'role': 'registrar',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['role'], 'registrar')
        self.assertTrue(AuditLog.objects.filter(action='CREATE', entity_type='user').exists())

    def test_list_users_filters_by_role(self):
        User.objects.create_user(email='reg@portal.test', password='x', role='registrar')
        self.client.force_authenticate(user=self.admin)

        response = self.client.get('/api/users/', {'role': 'registrar'})
        self.assertEqual(response.data['count'], 1)

    def test_student_cannot_list_users(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_views_self_but_not_others(self):
        self.client.force_authenticate(user=self.student)

        self.assertEqual(self.client.get(f'/api/users/{self.student.id}/').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(f'/api/users/{self.admin.id}/').status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_delete_self(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f'/api/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_change_own_password_requires_current(self):
        self.client.force_authenticate(user=self.student)
        url = f'/api/users/{self.student.id}/password/'

        wrong = self.client.post(url, {'current_password': 'nope', 'new_password': 'Another-pass-456'}, format='json')
        self.assertEqual(wrong.status_code, status.HTTP_400_BAD_REQUEST)

        right = self.client.post(
            url, {'current_password': 'studentpass123', 'new_password': 'Another-pass-456'}, format='json'
        )
        self.assertEqual(right.status_code, status.HTTP_200_OK)
        self.student.refresh_from_db()
        self.assertTrue(self.student.check_password('Another-pass-456'))

    def test_admin_resets_password(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            f'/api/users/{self.student.id}/password/', {'new_password': 'Reset-pass-789'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(AuditLog.objects.filter(action='PASSWORD_RESET').exists())
