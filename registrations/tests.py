"""
Integration Tests for Course Registration & Approval

Tests the complete workflow:
1. Students add courses under credit admission control
2. Registrars approve or reject individual courses or whole registrations
3. The registration is approved once every course is, and one card is issued
4. Dropping courses re-aggregates or removes the registration
"""

import re
import threading
from datetime import date, timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.db import IntegrityError, connection
from django.test import TestCase, TransactionTestCase, skipUnlessDBFeature
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from academics.models import Department, Course, Semester
from notifications.models import Notification
from portal.exceptions import AdmissionRejected, ConflictError, DuplicateRegistration, PortalValidationError
from registrations import services
from registrations.models import Approval, CourseUpload, Registration, RegistrationCard

User = get_user_model()


class RegistrationFixtureMixin:

    def create_fixtures(self):
        self.registrar = User.objects.create_user(
            email='registrar@portal.test', password='testpass123', role='registrar'
        )
        self.student = User.objects.create_user(
            email='student@portal.test', password='testpass123', role='student',
            first_name='Ada', last_name='Obi', matric_number='BU/22/001'
        )
        self.other_student = User.objects.create_user(
            email='other@portal.test', password='testpass123', role='student'
        )
        self.department = Department.objects.create(name="Computer Science", code="CS")
        self.semester = Semester.objects.create(
            name="First Semester 2026",
            start_date=date(2026, 1, 10),
            end_date=date(2026, 5, 30),
            is_active=True,
        )
        self.courses = {
            credits: Course.objects.create(
                code=f"CS{index}{credits:02d}",
                title=f"Course {index} ({credits} credits)",
                department=self.department,
                credits=credits,
            )
            for index, credits in enumerate([2, 3, 4, 5, 10], start=1)
        }
        self.second_ten = Course.objects.create(
            code="CS610", title="Capstone", department=self.department, credits=10
        )


class AddCourseServiceTest(RegistrationFixtureMixin, TestCase):

    def setUp(self):
        self.create_fixtures()

    def test_first_add_opens_pending_registration(self):
        upload = services.add_course(self.student, self.semester, self.courses[3])

        registration = Registration.objects.get(student=self.student, semester=self.semester)
        self.assertEqual(upload.registration, registration)
        self.assertEqual(upload.status, 'pending')
        self.assertEqual(registration.status, 'pending')

    def test_duplicate_upload_is_rejected(self):
        services.add_course(self.student, self.semester, self.courses[3])

        with self.assertRaises(DuplicateRegistration):
            services.add_course(self.student, self.semester, self.courses[3])
        self.assertEqual(CourseUpload.objects.count(), 1)

    def test_duplicate_guard_covers_rejected_uploads(self):
        upload = services.add_course(self.student, self.semester, self.courses[3])
        services.reject_course_upload(upload, self.registrar, 'Prerequisite missing')

        with self.assertRaises(DuplicateRegistration):
            services.add_course(self.student, self.semester, self.courses[3])

    def test_two_credit_course_rejected(self):
        with self.assertRaises(AdmissionRejected):
            services.add_course(self.student, self.semester, self.courses[2])
        self.assertFalse(Registration.objects.exists())

    def test_load_twenty_plus_five_rejected_and_plus_four_accepted(self):
        services.add_course(self.student, self.semester, self.courses[10])
        services.add_course(self.student, self.semester, self.second_ten)

        with self.assertRaises(AdmissionRejected) as caught:
            services.add_course(self.student, self.semester, self.courses[5])
        self.assertEqual(caught.exception.extra['current_credits'], 20)

        services.add_course(self.student, self.semester, self.courses[4])
        registration = Registration.objects.get(student=self.student)
        self.assertEqual(registration.total_credits, 24)

    def test_rejected_uploads_do_not_count_toward_load(self):
        services.add_course(self.student, self.semester, self.courses[10])
        upload = services.add_course(self.student, self.semester, self.second_ten)
        services.reject_course_upload(upload, self.registrar, 'Clash')

        services.add_course(self.student, self.semester, self.courses[5])
        self.assertEqual(CourseUpload.objects.filter(student=self.student).count(), 3)

    def test_deadline_passed(self):
        self.semester.course_upload_deadline = timezone.now() - timedelta(days=1)
        self.semester.save()

        with self.assertRaises(PortalValidationError) as caught:
            services.add_course(self.student, self.semester, self.courses[3])
        self.assertEqual(caught.exception.get_codes(), 'DEADLINE_PASSED')

    def test_same_course_in_another_semester_is_allowed(self):
        other_semester = Semester.objects.create(
            name="Second Semester 2026", start_date=date(2026, 8, 1), end_date=date(2026, 12, 15)
        )
        services.add_course(self.student, self.semester, self.courses[3])
        services.add_course(self.student, other_semester, self.courses[3])

        self.assertEqual(Registration.objects.filter(student=self.student).count(), 2)


class ApprovalWorkflowTest(RegistrationFixtureMixin, TestCase):

    def setUp(self):
        self.create_fixtures()
        self.upload_a = services.add_course(self.student, self.semester, self.courses[3])
        self.upload_b = services.add_course(self.student, self.semester, self.courses[4])
        self.registration = self.upload_a.registration

    def test_registration_approved_when_last_course_approved(self):
        services.approve_course_upload(self.upload_a, self.registrar)
        self.registration.refresh_from_db()
        self.assertEqual(self.registration.status, 'pending')
        self.assertFalse(RegistrationCard.objects.exists())

        services.approve_course_upload(self.upload_b, self.registrar, 'Looks good')
        self.registration.refresh_from_db()
        self.assertEqual(self.registration.status, 'approved')
        self.assertEqual(RegistrationCard.objects.filter(student=self.student, semester=self.semester).count(), 1)
        self.assertEqual(Approval.objects.filter(course_upload=self.upload_b).get().comments, 'Looks good')

    def test_approving_twice_is_rejected(self):
        services.approve_course_upload(self.upload_a, self.registrar)
        with self.assertRaises(PortalValidationError):
            services.approve_course_upload(self.upload_a, self.registrar)

    def test_card_number_format(self):
        card = services.approve_registration(self.registration, self.registrar)
        self.assertRegex(card.card_number, r'^BU2026-\d{6}$')

    def test_approve_registration_approves_all_and_issues_one_card(self):
        card = services.approve_registration(self.registration, self.registrar)
        again = services.approve_registration(self.registration, self.registrar)

        self.assertEqual(card.pk, again.pk)
        self.assertEqual(RegistrationCard.objects.count(), 1)
        self.assertFalse(CourseUpload.objects.exclude(status='approved').exists())
        self.assertEqual(Approval.objects.count(), 2)

    def test_registration_approval_notifies_student_by_email(self):
        services.approve_registration(self.registration, self.registrar)

        notification = Notification.objects.get(recipient=self.student, notification_type='registration')
        self.assertIn(RegistrationCard.objects.get().card_number, notification.message)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['student@portal.test'])

    def test_empty_registration_cannot_be_approved(self):
        empty = Registration.objects.create(student=self.other_student, semester=self.semester)
        with self.assertRaises(PortalValidationError):
            services.approve_registration(empty, self.registrar)

    def test_rejection_mixed_with_approval_rejects_registration(self):
        services.approve_course_upload(self.upload_a, self.registrar)
        services.reject_course_upload(self.upload_b, self.registrar, 'Timetable clash')

        self.registration.refresh_from_db()
        self.assertEqual(self.registration.status, 'rejected')
        self.assertTrue(
            Notification.objects.filter(recipient=self.student, notification_type='course_rejection').exists()
        )

    def test_reject_registration_rejects_pending_courses(self):
        services.reject_registration(self.registration, self.registrar, 'Fees not paid')

        self.registration.refresh_from_db()
        self.assertEqual(self.registration.status, 'rejected')
        self.assertEqual(self.registration.rejection_reason, 'Fees not paid')
        self.assertEqual(CourseUpload.objects.filter(status='rejected').count(), 2)

    def test_card_number_collision_is_retried(self):
        other_semester = Semester.objects.create(
            name="Second Semester 2026", start_date=date(2026, 8, 1), end_date=date(2026, 12, 15)
        )
        taken = RegistrationCard.objects.create(
            student=self.other_student, semester=other_semester, card_number='BU2026-000001'
        )
        with patch.object(services, 'generate_card_number', side_effect=[taken.card_number, 'BU2026-000002']):
            card = services.issue_registration_card(self.student, self.semester)

        self.assertEqual(card.card_number, 'BU2026-000002')


class DropCourseTest(RegistrationFixtureMixin, TestCase):

    def setUp(self):
        self.create_fixtures()
        self.upload_a = services.add_course(self.student, self.semester, self.courses[3])
        self.upload_b = services.add_course(self.student, self.semester, self.courses[4])

    def test_student_cannot_drop_approved_course(self):
        services.approve_course_upload(self.upload_a, self.registrar)
        self.upload_a.refresh_from_db()

        with self.assertRaises(PortalValidationError):
            services.drop_course(self.upload_a, self.student)

    def test_registrar_can_drop_approved_course(self):
        services.approve_course_upload(self.upload_a, self.registrar)
        self.upload_a.refresh_from_db()

        registration = services.drop_course(self.upload_a, self.registrar)
        self.assertEqual(registration.status, 'pending')

    def test_dropping_last_pending_course_approves_registration(self):
        services.approve_course_upload(self.upload_a, self.registrar)

        registration = services.drop_course(self.upload_b, self.student)

        self.assertEqual(registration.status, 'approved')
        self.assertEqual(RegistrationCard.objects.count(), 1)

    def test_dropping_every_course_removes_registration(self):
        services.drop_course(self.upload_a, self.student)
        self.assertIsNone(services.drop_course(self.upload_b, self.student))
        self.assertFalse(Registration.objects.exists())

    def test_student_cannot_drop_course_approved_after_it_was_loaded(self):
        stale = CourseUpload.objects.get(pk=self.upload_a.pk)
        services.approve_course_upload(self.upload_a, self.registrar)
        self.assertEqual(stale.status, 'pending')

        with self.assertRaises(PortalValidationError) as caught:
            services.drop_course(stale, self.student)

        self.assertEqual(caught.exception.get_codes(), 'COURSE_ALREADY_APPROVED')
        self.assertTrue(CourseUpload.objects.filter(pk=self.upload_a.pk, status='approved').exists())


class ReapprovalAdmissionTest(RegistrationFixtureMixin, TestCase):
    """Approving a rejected course puts its credits back on the load, so admission applies again"""

    def setUp(self):
        self.create_fixtures()
        services.add_course(self.student, self.semester, self.courses[10])
        self.rejected = services.add_course(self.student, self.semester, self.second_ten)
        services.reject_course_upload(self.rejected, self.registrar, 'Capstone needs approval')
        for credits in (4, 5, 3):
            services.add_course(self.student, self.semester, self.courses[credits])
        self.registration = Registration.objects.get(student=self.student, semester=self.semester)

    def _load(self):
        return sum(
            upload.course.credits
            for upload in CourseUpload.objects.filter(student=self.student, semester=self.semester)
            if upload.status in ('pending', 'approved')
        )

    def test_rejected_course_over_limit_cannot_be_approved(self):
        with self.assertRaises(AdmissionRejected) as caught:
            services.approve_course_upload(self.rejected, self.registrar)

        self.assertEqual(caught.exception.extra['current_credits'], 22)
        self.rejected.refresh_from_db()
        self.assertEqual(self.rejected.status, 'rejected')
        self.assertEqual(self._load(), 22)

    def test_registration_with_rejected_course_over_limit_cannot_be_approved(self):
        with self.assertRaises(AdmissionRejected):
            services.approve_registration(self.registration, self.registrar)

        self.registration.refresh_from_db()
        self.assertEqual(self.registration.status, 'pending')
        self.assertFalse(CourseUpload.objects.filter(status='approved').exists())
        self.assertFalse(RegistrationCard.objects.exists())
        self.assertEqual(self._load(), 22)

    def test_rejected_course_that_fits_can_be_approved(self):
        services.drop_course(CourseUpload.objects.get(course=self.courses[5]), self.student)
        services.drop_course(CourseUpload.objects.get(course=self.courses[3]), self.student)

        services.approve_course_upload(self.rejected, self.registrar)

        self.rejected.refresh_from_db()
        self.assertEqual(self.rejected.status, 'approved')
        self.assertEqual(self._load(), 24)

    def test_registration_approval_readmits_rejected_course_that_fits(self):
        services.drop_course(CourseUpload.objects.get(course=self.courses[5]), self.student)
        services.drop_course(CourseUpload.objects.get(course=self.courses[3]), self.student)

        card = services.approve_registration(self.registration, self.registrar)

        self.assertEqual(CourseUpload.objects.filter(status='approved').count(), 3)
        self.assertEqual(card.student, self.student)
        self.assertEqual(self._load(), 24)


class RegistrationCardLifecycleTest(RegistrationFixtureMixin, TestCase):

    def setUp(self):
        self.create_fixtures()
        self.first = services.add_course(self.student, self.semester, self.courses[3])
        self.registration = self.first.registration
        services.approve_registration(self.registration, self.registrar)
        self.other_semester = Semester.objects.create(
            name="Second Semester 2026", start_date=date(2026, 8, 1), end_date=date(2026, 12, 15)
        )

    def test_card_revoked_when_course_added_to_approved_registration(self):
        services.add_course(self.student, self.semester, self.courses[4])

        self.registration.refresh_from_db()
        self.assertEqual(self.registration.status, 'pending')
        self.assertFalse(RegistrationCard.objects.filter(student=self.student).exists())

    def test_rejected_registration_holds_no_card(self):
        services.add_course(self.student, self.semester, self.courses[4])
        services.reject_registration(self.registration, self.registrar, 'Late change')

        self.registration.refresh_from_db()
        self.assertEqual(self.registration.status, 'rejected')
        self.assertEqual(RegistrationCard.objects.filter(student=self.student).count(), 0)

    def test_new_card_issued_on_reapproval(self):
        services.add_course(self.student, self.semester, self.courses[4])
        card = services.approve_registration(self.registration, self.registrar)

        self.assertEqual(RegistrationCard.objects.get(student=self.student), card)

    def test_card_created_by_a_concurrent_approval_is_returned(self):
        concurrent = RegistrationCard.objects.create(
            student=self.student, semester=self.other_semester, card_number='BU2026-123456'
        )

        with patch.object(
            RegistrationCard.objects, 'get_or_create', side_effect=IntegrityError('duplicate key')
        ) as get_or_create:
            card = services.issue_registration_card(self.student, self.other_semester)

        get_or_create.assert_called_once()
        self.assertEqual(card.pk, concurrent.pk)
        self.assertEqual(
            RegistrationCard.objects.filter(student=self.student, semester=self.other_semester).count(), 1
        )

    def test_card_number_attempts_exhausted(self):
        with patch.object(RegistrationCard.objects, 'get_or_create', side_effect=IntegrityError('duplicate key')):
            with self.assertRaises(ConflictError) as caught:
                services.issue_registration_card(self.student, self.other_semester)

        self.assertEqual(caught.exception.get_codes(), 'CARD_NUMBER_UNAVAILABLE')


class RegistrationAPITest(RegistrationFixtureMixin, TestCase):

    def setUp(self):
        self.create_fixtures()
        self.client = APIClient()

    def _add(self, course, user=None, **extra):
        self.client.force_authenticate(user=user or self.student)
        payload = {'course_id': str(course.id), 'semester_id': str(self.semester.id)}
        payload.update(extra)
        return self.client.post('/api/course-uploads/', payload, format='json')

    def test_add_course_created(self):
        response = self._add(self.courses[3])

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['status'], 'pending')
        self.assertEqual(response.data['data']['credits'], 3)

    def test_duplicate_upload_returns_conflict(self):
        self._add(self.courses[3])
        response = self._add(self.courses[3])

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['code'], 'DUPLICATE_REGISTRATION')

    def test_low_credit_course_returns_bad_request(self):
        response = self._add(self.courses[2])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'ADMISSION_REJECTED')

    def test_credit_limit_examples(self):
        self._add(self.courses[10])
        self._add(self.second_ten)

        over = self._add(self.courses[5])
        self.assertEqual(over.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(over.data['current_credits'], 20)
        self.assertEqual(over.data['max_credits'], 24)

        within = self._add(self.courses[4])
        self.assertEqual(within.status_code, status.HTTP_201_CREATED)

    def test_unknown_course_returns_not_found(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/course-uploads/', {
            'course_id': '00000000-0000-0000-0000-000000000000',
            'semester_id': str(self.semester.id),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_registrar_adds_course_for_student(self):
        response = self._add(self.courses[3], user=self.registrar, user_id=str(self.student.id))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['student'], self.student.id)

    def test_student_cannot_act_for_another_student(self):
        response = self._add(self.courses[3], user_id=str(self.other_student.id))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_students_see_only_their_own_uploads(self):
        self._add(self.courses[3])
        self._add(self.courses[4], user=self.other_student)

        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/course-uploads/')
        self.assertEqual(response.data['count'], 1)

        forbidden = self.client.get('/api/course-uploads/', {'user_id': str(self.other_student.id)})
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_cannot_approve(self):
        upload_id = self._add(self.courses[3]).data['data']['id']
        response = self.client.post(f'/api/course-uploads/{upload_id}/approve/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_full_approval_flow_issues_single_card(self):
        first = self._add(self.courses[3]).data['data']['id']
        second = self._add(self.courses[4]).data['data']['id']

        self.client.force_authenticate(user=self.registrar)
        response = self.client.post(f'/api/course-uploads/{first}/approve/', {}, format='json')
        self.assertEqual(response.data['registration_status'], 'pending')
        response = self.client.post(f'/api/course-uploads/{second}/approve/', {}, format='json')
        self.assertEqual(response.data['registration_status'], 'approved')

        self.client.force_authenticate(user=self.student)
        cards = self.client.get('/api/registration-cards/')
        self.assertEqual(cards.data['count'], 1)
        self.assertTrue(re.match(r'^BU2026-\d{6}$', cards.data['data'][0]['card_number']))

    def test_reject_requires_reason(self):
        upload_id = self._add(self.courses[3]).data['data']['id']

        self.client.force_authenticate(user=self.registrar)
        response = self.client.post(f'/api/course-uploads/{upload_id}/reject/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            f'/api/course-uploads/{upload_id}/reject/', {'reason': 'Not offered'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['rejection_reason'], 'Not offered')

    def test_registration_detail_and_approval(self):
        self._add(self.courses[3])
        registration = Registration.objects.get(student=self.student)

        self.client.force_authenticate(user=self.student)
        detail = self.client.get(f'/api/registrations/{registration.id}/')
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(len(detail.data['data']['course_uploads']), 1)
        self.assertIsNone(detail.data['data']['card'])

        self.client.force_authenticate(user=self.registrar)
        approved = self.client.post(f'/api/registrations/{registration.id}/approve/', {}, format='json')
        self.assertEqual(approved.status_code, status.HTTP_200_OK)
        self.assertEqual(approved.data['data']['status'], 'approved')
        self.assertEqual(approved.data['card']['card_number'], approved.data['data']['card']['card_number'])

    def test_registration_list_filters_by_status(self):
        self._add(self.courses[3])
        self._add(self.courses[4], user=self.other_student)
        services.approve_registration(Registration.objects.get(student=self.other_student), self.registrar)

        self.client.force_authenticate(user=self.registrar)
        response = self.client.get('/api/registrations/', {'status': 'approved'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['data'][0]['student_email'], 'other@portal.test')

    def test_other_student_cannot_view_registration(self):
        self._add(self.courses[3])
        registration = Registration.objects.get(student=self.student)

        self.client.force_authenticate(user=self.other_student)
        response = self.client.get(f'/api/registrations/{registration.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_drop_course_via_api(self):
        upload_id = self._add(self.courses[3]).data['data']['id']

        self.client.force_authenticate(user=self.other_student)
        forbidden = self.client.delete(f'/api/course-uploads/{upload_id}/')
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.student)
        response = self.client.delete(f'/api/course-uploads/{upload_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['data']['registration'])

    def test_manual_card_issue_requires_approved_registration(self):
        self.client.force_authenticate(user=self.registrar)
        payload = {'user_id': str(self.student.id), 'semester_id': str(self.semester.id)}

        no_registration = self.client.post('/api/registration-cards/', payload, format='json')
        self.assertEqual(no_registration.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(no_registration.data['code'], 'REGISTRATION_NOT_APPROVED')

        self._add(self.courses[3])
        self.client.force_authenticate(user=self.registrar)
        pending = self.client.post('/api/registration-cards/', payload, format='json')
        self.assertEqual(pending.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(RegistrationCard.objects.exists())

    def test_manual_card_issue_conflicts_when_card_exists(self):
        self._add(self.courses[3])
        services.approve_registration(Registration.objects.get(student=self.student), self.registrar)
        RegistrationCard.objects.filter(student=self.student).delete()

        self.client.force_authenticate(user=self.registrar)
        payload = {'user_id': str(self.student.id), 'semester_id': str(self.semester.id)}

        first = self.client.post('/api/registration-cards/', payload, format='json')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)

        second = self.client.post('/api/registration-cards/', payload, format='json')
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data['code'], 'CARD_ALREADY_ISSUED')


@skipUnlessDBFeature('has_select_for_update')
class ConcurrentApprovalTest(RegistrationFixtureMixin, TransactionTestCase):
    """Sibling approvals racing each other still produce one approved registration and one card"""

    def setUp(self):
        self.create_fixtures()

    def test_concurrent_sibling_approvals(self):
        uploads = [
            services.add_course(self.student, self.semester, course)
            for course in (self.courses[3], self.courses[4], self.courses[5])
        ]
        barrier = threading.Barrier(len(uploads))
        errors = []

        def approve(upload):
            try:
                barrier.wait()
                services.approve_course_upload(upload, self.registrar)
            except Exception as exc:
                errors.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=approve, args=(upload,)) for upload in uploads]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        registration = Registration.objects.get(student=self.student, semester=self.semester)
        self.assertEqual(registration.status, 'approved')
        self.assertEqual(RegistrationCard.objects.filter(student=self.student, semester=self.semester).count(), 1)
