from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from academics.models import Course, Department, Semester
from timetables.models import Timetable, TimetableSlot

User = get_user_model()


class TimetableAPITest(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.registrar = User.objects.create_user(
            email='registrar@portal.test', password='testpass123', role='registrar'
        )
        self.student = User.objects.create_user(
            email='student@portal.test', password='testpass123', role='student'
        )
        self.lecturer = User.objects.create_user(
            email='lecturer@portal.test', password='testpass123', role='faculty',
            first_name='Grace', last_name='Hopper'
        )
        department = Department.objects.create(name="Computer Science", code="CS")
        self.course = Course.objects.create(code="CS201", title="Data Structures", department=department, credits=3)
        self.other_course = Course.objects.create(code="CS202", title="Algorithms", department=department, credits=3)
        self.semester = Semester.objects.create(
            name="First Semester 2026", start_date=date(2026, 1, 10), end_date=date(2026, 5, 30)
        )
        self.timetable = Timetable.objects.create(
            name="CS 200 Level", semester=self.semester, created_by=self.registrar
        )
        self.slots_url = f'/api/timetables/{self.timetable.id}/slots/'

    def _add_slot(self, course, day, start, end, **extra):
        self.client.force_authenticate(user=self.registrar)
        payload = {
            'course': str(course.id),
            'day_of_week': day,
            'start_time': start,
            'end_time': end,
            'room': 'LT1',
        }
        payload.update(extra)
        return self.client.post(self.slots_url, payload, format='json')

    def test_registrar_creates_timetable(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/timetables/', {
            'name': 'CS 300 Level', 'semester': str(self.semester.id)
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['data']['is_published'])
        self.assertEqual(response.data['data']['created_by'], self.registrar.id)

    def test_student_cannot_create_timetable(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/timetables/', {
            'name': 'CS 300 Level', 'semester': str(self.semester.id)
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_add_slot(self):
        response = self._add_slot(self.course, 'MON', '08:00', '10:00', lecturer=str(self.lecturer.id))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['duration_minutes'], 120)
        self.assertEqual(response.data['data']['lecturer_name'], 'Grace Hopper')

    def test_overlapping_slot_rejected_with_conflicts(self):
        self._add_slot(self.course, 'MON', '08:00', '10:00')
        response = self._add_slot(self.other_course, 'MON', '09:00', '11:00')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'TIMETABLE_CONFLICT')
        self.assertEqual(response.data['conflicts'][0]['course_code'], 'CS201')
        self.assertEqual(TimetableSlot.objects.count(), 1)

    def test_identical_slot_is_a_conflict(self):
        self._add_slot(self.course, 'MON', '08:00', '10:00')
        response = self._add_slot(self.other_course, 'MON', '08:00', '10:00')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_back_to_back_and_other_day_slots_allowed(self):
        self._add_slot(self.course, 'MON', '08:00', '10:00')

        self.assertEqual(self._add_slot(self.other_course, 'MON', '10:00', '12:00').status_code, status.HTTP_201_CREATED)
        self.assertEqual(self._add_slot(self.other_course, 'TUE', '08:00', '10:00').status_code, status.HTTP_201_CREATED)

    def test_start_must_precede_end(self):
        response = self._add_slot(self.course, 'MON', '10:00', '10:00')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'INVALID_TIME_RANGE')

    def test_update_slot_excludes_itself_from_conflicts(self):
        slot_id = self._add_slot(self.course, 'MON', '08:00', '10:00').data['data']['id']
        self._add_slot(self.other_course, 'MON', '11:00', '12:00')
        url = f'{self.slots_url}{slot_id}/'

        moved = self.client.patch(url, {'start_time': '08:30', 'end_time': '10:30'}, format='json')
        self.assertEqual(moved.status_code, status.HTTP_200_OK)
        self.assertEqual(moved.data['data']['start_time'], '08:30:00')

        clash = self.client.patch(url, {'end_time': '11:30'}, format='json')
        self.assertEqual(clash.status_code, status.HTTP_409_CONFLICT)

    def test_delete_slot(self):
        slot_id = self._add_slot(self.course, 'MON', '08:00', '10:00').data['data']['id']

        response = self.client.delete(f'{self.slots_url}{slot_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(TimetableSlot.objects.exists())

    def test_publish_refused_with_conflicts(self):
        TimetableSlot.objects.create(
            timetable=self.timetable, course=self.course, day_of_week='WED',
            start_time='08:00', end_time='10:00'
        )
        TimetableSlot.objects.create(
            timetable=self.timetable, course=self.other_course, day_of_week='WED',
            start_time='09:00', end_time='11:00'
        )
        self.client.force_authenticate(user=self.registrar)

        response = self.client.put(
            f'/api/timetables/{self.timetable.id}/publish/', {'is_published': True}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'TIMETABLE_HAS_CONFLICTS')
        self.timetable.refresh_from_db()
        self.assertFalse(self.timetable.is_published)

    def test_students_see_published_timetables_only(self):
        self.client.force_authenticate(user=self.student)
        self.assertEqual(self.client.get('/api/timetables/').data['count'], 0)
        self.assertEqual(
            self.client.get(f'/api/timetables/{self.timetable.id}/').status_code, status.HTTP_404_NOT_FOUND
        )

        self._add_slot(self.course, 'MON', '08:00', '10:00')
        published = self.client.put(
            f'/api/timetables/{self.timetable.id}/publish/', {'is_published': True}, format='json'
        )
        self.assertEqual(published.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=self.student)
        detail = self.client.get(f'/api/timetables/{self.timetable.id}/')
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(len(detail.data['data']['slots']), 1)

    def test_filter_by_semester(self):
        other_semester = Semester.objects.create(
            name="Second Semester 2026", start_date=date(2026, 8, 1), end_date=date(2026, 12, 15)
        )
        Timetable.objects.create(name="CS 200 Level", semester=other_semester)
        self.client.force_authenticate(user=self.registrar)

        response = self.client.get('/api/timetables/', {'semester_id': str(other_semester.id)})
        self.assertEqual(response.data['count'], 1)
