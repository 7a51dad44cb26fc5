# academics/models.py
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
import uuid


class AcademicYear(models.Model):
    """Academic Year model with start and end dates"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=20, unique=True, help_text="e.g., 2024/2025")
    start_date = models.DateField()
    end_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_date']
        verbose_name = "Academic Year"
        verbose_name_plural = "Academic Years"

    def clean(self):
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValidationError("Start date must be before end date")

    def __str__(self):
        return self.name


class Department(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=10, unique=True, help_text="Department code (e.g., CS, ENG)")
    description = models.TextField(blank=True)
    head_of_department = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='headed_departments'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = "Department"
        verbose_name_plural = "Departments"

    def __str__(self):
        return f"{self.code} - {self.name}"


class Course(models.Model):
    """
    Catalogue course. Credit bounds are checked when a student adds the course
    to a registration, not here.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=20, unique=True, help_text="Globally unique course code")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name='courses')
    credits = models.PositiveIntegerField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['department', 'code']
        verbose_name = "Course"
        verbose_name_plural = "Courses"

    def __str__(self):
        return f"{self.code} - {self.title}"


class Semester(models.Model):
    """
    Teaching term. At most one semester is active at a time; activation goes
    through academics.services.activate_semester.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    academic_year = models.ForeignKey(
        AcademicYear,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='semesters'
    )
    start_date = models.DateField()
    end_date = models.DateField()
    is_active = models.BooleanField(default=False)
    registration_deadline = models.DateTimeField(null=True, blank=True)
    course_upload_deadline = models.DateTimeField(null=True, blank=True)
    courses = models.ManyToManyField(Course, through='SemesterCourse', related_name='semesters', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_date']
        verbose_name = "Semester"
        verbose_name_plural = "Semesters"
        constraints = [
            models.UniqueConstraint(
                fields=['is_active'],
                condition=Q(is_active=True),
                name='single_active_semester'
            ),
        ]

    def clean(self):
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValidationError("Start date must be before end date")

    def __str__(self):
        return self.name

    @classmethod
    def get_active(cls):
        """Get the active semester"""
        return cls.objects.filter(is_active=True).first()


class SemesterCourse(models.Model):
    """A course offered in a semester"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    semester = models.ForeignKey(Semester, on_delete=models.CASCADE, related_name='semester_courses')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='semester_courses')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('semester', 'course')
        ordering = ['semester', 'course__code']
        verbose_name = "Semester Course"
        verbose_name_plural = "Semester Courses"

    def __str__(self):
        return f"{self.course.code} - {self.semester.name}"


class Program(models.Model):
    """Degree or diploma programme run by a department"""
    PROGRAM_TYPES = [
        ('undergraduate', 'Undergraduate'),
        ('graduate', 'Graduate'),
        ('diploma', 'Diploma'),
        ('certificate', 'Certificate'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=20, unique=True)
    program_type = models.CharField(max_length=20, choices=PROGRAM_TYPES)
    duration = models.PositiveSmallIntegerField(help_text="Length of the programme in years")
    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name='programs')
    description = models.TextField(blank=True)
    courses = models.ManyToManyField(Course, through='ProgramCourse', related_name='programs', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = "Program"
        verbose_name_plural = "Programs"

    def __str__(self):
        return f"{self.code} - {self.name}"


class ProgramCourse(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    program = models.ForeignKey(Program, on_delete=models.CASCADE, related_name='program_courses')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='program_courses')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['program', 'course__code']
        verbose_name = "Program Course"
        verbose_name_plural = "Program Courses"
        constraints = [
            models.UniqueConstraint(fields=['program', 'course'], name='unique_program_course'),
        ]

    def __str__(self):
        return f"{self.program.code} - {self.course.code}"


class LecturerCourse(models.Model):
    """A faculty member assigned to teach a course in a semester"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lecturer = models.ForeignKey('users.User', on_delete=models.CASCADE, related_name='lecturer_courses')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='lecturer_courses')
    semester = models.ForeignKey(Semester, on_delete=models.CASCADE, related_name='lecturer_courses')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Lecturer Course"
        verbose_name_plural = "Lecturer Courses"
        constraints = [
            models.UniqueConstraint(
                fields=['lecturer', 'course', 'semester'],
                name='unique_lecturer_course_semester'
            ),
        ]

    def __str__(self):
        return f"{self.lecturer.email} - {self.course.code} ({self.semester.name})"


class AcademicCalendarEvent(models.Model):
    EVENT_TYPES = [
        ('registration', 'Registration'),
        ('exam', 'Examination'),
        ('holiday', 'Holiday'),
        ('semester', 'Semester'),
        ('other', 'Other'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    event_type = models.CharField(max_length=20, choices=EVENT_TYPES, default='other')
    date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    semester = models.ForeignKey(
        Semester,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='calendar_events'
    )
    created_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='calendar_events'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['date']
        verbose_name = "Academic Calendar Event"
        verbose_name_plural = "Academic Calendar Events"
        indexes = [
            models.Index(fields=['semester', 'date'], name='calendar_semester_date_idx'),
        ]

    def clean(self):
        if self.date and self.end_date and self.end_date < self.date:
            raise ValidationError("End date cannot be before the event date")

    def __str__(self):
        return f"{self.title} ({self.date:%Y-%m-%d})"
