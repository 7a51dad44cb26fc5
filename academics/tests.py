"""
API tests for the academic catalogue and semester management
"""

from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from academics.models import (
    AcademicCalendarEvent, Department, Course, LecturerCourse, Program, ProgramCourse, Semester, SemesterCourse
)
from audit.models import AuditLog
from registrations import services as registration_services

User = get_user_model()


class AcademicsAPITestBase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.registrar = User.objects.create_user(
            email='registrar@portal.test', password='testpass123', role='registrar'
        )
        self.student = User.objects.create_user(
            email='student@portal.test', password='testpass123', role='student'
        )
        self.department = Department.objects.create(name="Computer Science", code="CS")
        self.course = Course.objects.create(
            code="CS201", title="Data Structures", department=self.department, credits=3
        )


class DepartmentAndCourseAPITest(AcademicsAPITestBase):

    def test_student_cannot_create_department(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/departments/', {'name': 'Physics', 'code': 'PHY'})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])

    def test_registrar_creates_department_with_audit_entry(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/departments/', {'name': 'Physics', 'code': 'PHY'})

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['code'], 'PHY')
        self.assertTrue(AuditLog.objects.filter(entity_type='department', action='CREATE').exists())

    def test_duplicate_department_code_is_conflict(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/departments/', {'name': 'Computing', 'code': 'cs'})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_duplicate_course_code_is_conflict(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/courses/', {
            'code': 'CS201', 'title': 'Another', 'department': str(self.department.id), 'credits': 3
        })

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data['success'])

    def test_course_credits_are_not_bounded_at_definition(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/courses/', {
            'code': 'CS100', 'title': 'Seminar', 'department': str(self.department.id), 'credits': 1
        })

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Course.objects.get(code='CS100').credits, 1)

    def test_filter_courses_by_department(self):
        other = Department.objects.create(name="Mathematics", code="MTH")
        Course.objects.create(code="MTH101", title="Calculus", department=other, credits=4)
        self.client.force_authenticate(user=self.student)

        response = self.client.get('/api/courses/', {'department_id': str(other.id)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['code'] for c in response.data['data']], ['MTH101'])


class SemesterAPITest(AcademicsAPITestBase):

    def _create_semester(self, name, is_active=False):
        self.client.force_authenticate(user=self.registrar)
        return self.client.post('/api/semesters/', {
            'name': name,
            'start_date': '2026-01-10',
            'end_date': '2026-05-30',
            'is_active': is_active,
        }, format='json')

    def test_current_semester_not_found_when_none_active(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/semesters/current/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'not_found')

    def test_activate_switches_active_semester(self):
        first = self._create_semester('First Semester 2026', is_active=True).data['data']
        second = self._create_semester('Second Semester 2026').data['data']

        response = self.client.post(f"/api/semesters/{second['id']}/activate/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['is_active'])
        self.assertFalse(Semester.objects.get(id=first['id']).is_active)
        self.assertEqual(Semester.objects.filter(is_active=True).count(), 1)

        current = self.client.get('/api/semesters/current/')
        self.assertEqual(current.data['data']['id'], second['id'])

    def test_duplicate_semester_name_is_conflict(self):
        self._create_semester('First Semester 2026')
        response = self._create_semester('first semester 2026')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'SEMESTER_NAME_TAKEN')

    def test_invalid_date_range_rejected(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/semesters/', {
            'name': 'Backwards',
            'start_date': '2026-05-30',
            'end_date': '2026-01-10',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_with_is_active_routes_through_activation(self):
        first = self._create_semester('First Semester 2026', is_active=True).data['data']
        second = self._create_semester('Second Semester 2026').data['data']

        response = self.client.patch(f"/api/semesters/{second['id']}/", {'is_active': True}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Semester.objects.get(id=first['id']).is_active)
        self.assertTrue(Semester.objects.get(id=second['id']).is_active)

    def test_semester_course_offerings(self):
        semester = Semester.objects.create(
            name='First Semester 2026', start_date=date(2026, 1, 10), end_date=date(2026, 5, 30)
        )
        self.client.force_authenticate(user=self.registrar)
        url = f'/api/semesters/{semester.id}/courses/'

        response = self.client.post(url, {'course_id': str(self.course.id)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        duplicate = self.client.post(url, {'course_id': str(self.course.id)}, format='json')
        self.assertEqual(duplicate.status_code, status.HTTP_409_CONFLICT)

        listing = self.client.get(url)
        self.assertEqual(listing.data['count'], 1)
        self.assertEqual(listing.data['data'][0]['course_code'], 'CS201')

        removed = self.client.delete(f'{url}{self.course.id}/')
        self.assertEqual(removed.status_code, status.HTTP_200_OK)
        self.assertFalse(SemesterCourse.objects.exists())


class ProgramAPITest(AcademicsAPITestBase):

    def setUp(self):
        super().setUp()
        self.program = Program.objects.create(
            name='BSc Computer Science', code='BSC-CS', program_type='undergraduate',
            duration=4, department=self.department
        )

    def test_registrar_creates_program(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/programs/', {
            'name': 'MSc Computer Science', 'code': 'MSC-CS', 'program_type': 'graduate',
            'duration': 2, 'department': str(self.department.id),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['department_name'], 'Computer Science')
        self.assertTrue(AuditLog.objects.filter(entity_type='program', action='CREATE').exists())

    def test_duplicate_program_code_is_conflict(self):
        self.client.force_authenticate(user=self.registrar)
        response = self.client.post('/api/programs/', {
            'name': 'Another', 'code': 'bsc-cs', 'program_type': 'undergraduate',
            'duration': 4, 'department': str(self.department.id),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'PROGRAM_CODE_TAKEN')

    def test_student_cannot_create_program(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/programs/', {'name': 'X', 'code': 'X'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_program_courses(self):
        self.client.force_authenticate(user=self.registrar)
        url = f'/api/programs/{self.program.id}/courses/'

        added = self.client.post(url, {'course_id': str(self.course.id)}, format='json')
        self.assertEqual(added.status_code, status.HTTP_201_CREATED)

        duplicate = self.client.post(url, {'course_id': str(self.course.id)}, format='json')
        self.assertEqual(duplicate.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(duplicate.data['code'], 'COURSE_ALREADY_IN_PROGRAM')

        listing = self.client.get(url)
        self.assertEqual(listing.data['count'], 1)
        self.assertEqual(listing.data['data'][0]['course_code'], 'CS201')

        removed = self.client.delete(f'{url}{self.course.id}/')
        self.assertEqual(removed.status_code, status.HTTP_200_OK)
        self.assertFalse(ProgramCourse.objects.exists())

    def test_department_by_program(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(f'/api/departments/by-program/{self.program.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['code'], 'CS')

    def test_courses_by_program_and_department(self):
        maths = Department.objects.create(name="Mathematics", code="MTH")
        calculus = Course.objects.create(code="MTH101", title="Calculus", department=maths, credits=4)
        Course.objects.create(code="CS999", title="Not in program", department=self.department, credits=3)
        ProgramCourse.objects.create(program=self.program, course=self.course)
        ProgramCourse.objects.create(program=self.program, course=calculus)
        self.client.force_authenticate(user=self.student)

        response = self.client.get('/api/courses/by-program-department/', {
            'program_id': str(self.program.id), 'department_id': str(self.department.id)
        })
        self.assertEqual([c['code'] for c in response.data['data']], ['CS201'])

        missing = self.client.get('/api/courses/by-program-department/', {'program_id': str(self.program.id)})
        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST)


class LecturerCourseAPITest(AcademicsAPITestBase):

    def setUp(self):
        super().setUp()
        self.lecturer = User.objects.create_user(
            email='lecturer@portal.test', password='testpass123', role='faculty'
        )
        self.semester = Semester.objects.create(
            name='First Semester 2026', start_date=date(2026, 1, 10), end_date=date(2026, 5, 30)
        )

    def _assign(self, lecturer=None):
        self.client.force_authenticate(user=self.registrar)
        return self.client.post('/api/lecturer-courses/', {
            'lecturer': str((lecturer or self.lecturer).id),
            'course': str(self.course.id),
            'semester': str(self.semester.id),
        }, format='json')

    def test_assign_lecturer(self):
        response = self._assign()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['course_code'], 'CS201')
        self.assertTrue(AuditLog.objects.filter(entity_type='lecturer_course', action='ASSIGN').exists())

    def test_duplicate_assignment_is_conflict(self):
        self._assign()
        response = self._assign()

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'LECTURER_ALREADY_ASSIGNED')

    def test_only_faculty_can_be_assigned(self):
        response = self._assign(lecturer=self.student)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'NOT_A_LECTURER')

    def test_filter_and_delete_assignment(self):
        assignment_id = self._assign().data['data']['id']

        listing = self.client.get('/api/lecturer-courses/', {'lecturer_id': str(self.lecturer.id)})
        self.assertEqual(listing.data['count'], 1)

        deleted = self.client.delete(f'/api/lecturer-courses/{assignment_id}/')
        self.assertEqual(deleted.status_code, status.HTTP_200_OK)
        self.assertFalse(LecturerCourse.objects.exists())

    def test_update_assignment_to_existing_one_is_conflict(self):
        other_course = Course.objects.create(
            code="CS202", title="Algorithms", department=self.department, credits=3
        )
        self._assign()
        second = LecturerCourse.objects.create(lecturer=self.lecturer, course=other_course, semester=self.semester)

        response = self.client.patch(
            f'/api/lecturer-courses/{second.id}/', {'course': str(self.course.id)}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_faculty_sees_own_courses_with_approved_students(self):
        self._assign()
        registration_services.add_course(self.student, self.semester, self.course)
        registration_services.approve_registration(
            self.student.registrations.get(semester=self.semester), self.registrar
        )

        self.client.force_authenticate(user=self.lecturer)
        response = self.client.get('/api/faculty/courses/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['data'][0]['approved_students'], 1)

        self.client.force_authenticate(user=self.student)
        self.assertEqual(self.client.get('/api/faculty/courses/').status_code, status.HTTP_403_FORBIDDEN)


class AcademicCalendarAPITest(AcademicsAPITestBase):

    def setUp(self):
        super().setUp()
        self.semester = Semester.objects.create(
            name='First Semester 2026', start_date=date(2026, 1, 10), end_date=date(2026, 5, 30)
        )

    def _create(self, **overrides):
        payload = {
            'title': 'Course registration opens',
            'event_type': 'registration',
            'date': '2026-01-12T08:00:00Z',
            'semester': str(self.semester.id),
        }
        payload.update(overrides)
        self.client.force_authenticate(user=self.registrar)
        return self.client.post('/api/academic-calendar/', payload, format='json')

    def test_registrar_creates_event(self):
        response = self._create()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(AcademicCalendarEvent.objects.get().created_by, self.registrar)

    def test_end_before_start_rejected(self):
        response = self._create(end_date='2026-01-11T08:00:00Z')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_type_and_date_range(self):
        self._create()
        self._create(title='Mid-semester exams', event_type='exam', date='2026-03-02T08:00:00Z')
        self.client.force_authenticate(user=self.student)

        exams = self.client.get('/api/academic-calendar/', {'type': 'exam'})
        self.assertEqual([e['title'] for e in exams.data['data']], ['Mid-semester exams'])

        january = self.client.get('/api/academic-calendar/', {'start_date': '2026-01-01', 'end_date': '2026-01-31'})
        self.assertEqual(january.data['count'], 1)

    def test_student_cannot_edit_event(self):
        event_id = self._create().data['data']['id']
        self.client.force_authenticate(user=self.student)

        response = self.client.patch(f'/api/academic-calendar/{event_id}/', {'title': 'Changed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
