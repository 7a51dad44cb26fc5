import uuid

from django.conf import settings
from django.db import models


class RegistrationStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class Registration(models.Model):
    """
    A student's registration for one semester. Its status is derived from the
    statuses of its course uploads.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='registrations'
    )
    semester = models.ForeignKey(
        'academics.Semester',
        on_delete=models.CASCADE,
        related_name='registrations'
    )
    status = models.CharField(
        max_length=20,
        choices=RegistrationStatus.choices,
        default=RegistrationStatus.PENDING
    )
    rejection_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['student', 'semester'], name='unique_student_semester_registration'),
        ]
        indexes = [
            models.Index(fields=['semester', 'status'], name='registration_sem_status_idx'),
        ]

    def __str__(self):
        return f"{self.student.email} - {self.semester.name} ({self.status})"

    @property
    def total_credits(self):
        return sum(
            upload.course.credits
            for upload in self.course_uploads.select_related('course')
            if upload.status != RegistrationStatus.REJECTED
        )


class CourseUpload(models.Model):
    """A single course a student has added to their registration"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='course_uploads'
    )
    course = models.ForeignKey(
        'academics.Course',
        on_delete=models.CASCADE,
        related_name='course_uploads'
    )
    semester = models.ForeignKey(
        'academics.Semester',
        on_delete=models.CASCADE,
        related_name='course_uploads'
    )
    registration = models.ForeignKey(
        Registration,
        on_delete=models.CASCADE,
        related_name='course_uploads'
    )
    status = models.CharField(
        max_length=20,
        choices=RegistrationStatus.choices,
        default=RegistrationStatus.PENDING
    )
    rejection_reason = models.TextField(blank=True)
    uploaded_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-uploaded_at']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'semester', 'course'],
                name='unique_student_semester_course_upload'
            ),
        ]
        indexes = [
            models.Index(fields=['student', 'semester', 'status'], name='upload_student_sem_idx'),
        ]

    def __str__(self):
        return f"{self.student.email} - {self.course.code} ({self.status})"


class Approval(models.Model):
    """Reviewer decision on a course upload"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    course_upload = models.ForeignKey(
        CourseUpload,
        on_delete=models.CASCADE,
        related_name='approvals'
    )
    approver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='approvals_given'
    )
    status = models.CharField(max_length=20, choices=RegistrationStatus.choices)
    comments = models.TextField(blank=True)
    approved_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-approved_at']

    def __str__(self):
        return f"{self.course_upload.course.code} {self.status} by {self.approver}"


class RegistrationCard(models.Model):
    """Proof of an approved registration; at most one per student and semester"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='registration_cards'
    )
    semester = models.ForeignKey(
        'academics.Semester',
        on_delete=models.CASCADE,
        related_name='registration_cards'
    )
    card_number = models.CharField(max_length=50, unique=True)
    issued_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-issued_at']
        constraints = [
            models.UniqueConstraint(fields=['student', 'semester'], name='unique_student_semester_card'),
        ]

    def __str__(self):
        return self.card_number
