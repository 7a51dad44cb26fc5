from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from notifications.models import Announcement, Notification
from notifications.services import notify, notify_many

User = get_user_model()


class NotificationServiceTest(TestCase):

    def setUp(self):
        self.student = User.objects.create_user(email='student@portal.test', password='x')

    def test_notify_without_email(self):
        notification = notify(self.student, 'Hello', 'Welcome to the portal')

        self.assertEqual(notification.notification_type, 'info')
        self.assertFalse(notification.email_sent)
        self.assertEqual(len(mail.outbox), 0)

    def test_notify_with_email(self):
        notification = notify(self.student, 'Course approved', 'CS201 approved', 'course_approval', send_email=True)

        notification.refresh_from_db()
        self.assertTrue(notification.email_sent)
        self.assertEqual(mail.outbox[0].subject, 'Course approved')

    def test_email_failure_keeps_notification(self):
        with patch('notifications.services.send_mail', side_effect=ConnectionRefusedError('SMTP down')):
            with self.assertLogs('notifications.services', level='ERROR'):
                notification = notify(self.student, 'Hello', 'Body', send_email=True)

        self.assertTrue(Notification.objects.filter(pk=notification.pk, email_sent=False).exists())

    def test_notify_many(self):
        other = User.objects.create_user(email='other@portal.test', password='x')

        result = notify_many([self.student, other], 'Deadline', 'Uploads close Friday', 'warning', send_email=True)

        self.assertEqual(result, {'notifications_created': 2, 'emails_sent': 2})
        self.assertEqual(Notification.objects.filter(notification_type='warning').count(), 2)


class NotificationAPITest(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.registrar = User.objects.create_user(email='registrar@portal.test', password='x', role='registrar')
        self.student = User.objects.create_user(email='student@portal.test', password='x')
        self.other = User.objects.create_user(email='other@portal.test', password='x')

    def test_list_includes_unread_count_and_filters(self):
        notify(self.student, 'One', 'First')
        read = notify(self.student, 'Two', 'Second', 'success')
        read.mark_as_read()
        notify(self.other, 'Three', 'Not mine')

        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/notifications/')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['unread_count'], 1)

        unread = self.client.get('/api/notifications/', {'is_read': 'false'})
        self.assertEqual([n['title'] for n in unread.data['data']], ['One'])

        by_type = self.client.get('/api/notifications/', {'type': 'success'})
        self.assertEqual(by_type.data['count'], 1)

    def test_registrar_sends_to_user(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/notifications/', {
            'user_id': str(self.student.id), 'title': 'Reminder', 'message': 'Upload your courses'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Notification.objects.filter(recipient=self.student, title='Reminder').exists())

    def test_student_cannot_send(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/notifications/', {
            'user_id': str(self.other.id), 'title': 'Hi', 'message': 'Hi'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_broadcast_by_role(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/notifications/broadcast/', {
            'role': 'student', 'title': 'Deadline', 'message': 'Uploads close Friday'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['notifications_created'], 2)
        self.assertFalse(Notification.objects.filter(recipient=self.registrar).exists())

    def test_broadcast_requires_recipients(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/notifications/broadcast/', {
            'title': 'Deadline', 'message': 'Uploads close Friday'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_read_mark_all_and_delete(self):
        first = notify(self.student, 'One', 'First')
        notify(self.student, 'Two', 'Second')
        foreign = notify(self.other, 'Three', 'Not mine')
        self.client.force_authenticate(user=self.student)

        response = self.client.post(f'/api/notifications/{first.id}/read/')
        self.assertTrue(response.data['data']['is_read'])
        self.assertEqual(self.client.get('/api/notifications/unread-count/').data['unread_count'], 1)

        response = self.client.post('/api/notifications/read-all/')
        self.assertEqual(response.data['marked_count'], 1)

        self.assertEqual(
            self.client.delete(f'/api/notifications/{foreign.id}/').status_code, status.HTTP_404_NOT_FOUND
        )
        self.assertEqual(self.client.delete(f'/api/notifications/{first.id}/').status_code, status.HTTP_200_OK)
        self.assertEqual(Notification.objects.filter(recipient=self.student).count(), 1)


class AnnouncementAPITest(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email='staff@portal.test', password='x', role='staff')
        self.student = User.objects.create_user(email='student@portal.test', password='x')

    def _publish(self, title='Registration week', content='Uploads open Monday'):
        self.client.force_authenticate(user=self.staff)
        return self.client.post('/api/announcements/', {'title': title, 'content': content}, format='json')

    def test_staff_publishes_announcement(self):
        response = self._publish()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Announcement.objects.get().author, self.staff)

    def test_student_cannot_publish(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/announcements/', {'title': 'Hi', 'content': 'x'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_students_read_latest_with_limit(self):
        self._publish(title='First')
        self._publish(title='Second')
        self.client.force_authenticate(user=self.student)

        response = self.client.get('/api/announcements/', {'limit': 1})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/announcements/', {'limit': 'many'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_needs_title_or_content_and_delete(self):
        announcement_id = self._publish().data['data']['id']
        url = f'/api/announcements/{announcement_id}/'

        self.assertEqual(self.client.patch(url, {}, format='json').status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(url, {'title': 'Registration week moved'}, format='json')
        self.assertEqual(response.data['data']['title'], 'Registration week moved')

        self.assertEqual(self.client.delete(url).status_code, status.HTTP_200_OK)
        self.assertFalse(Announcement.objects.exists())
