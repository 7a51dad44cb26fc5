from django.contrib.auth.models import AbstractUser
from django.db import models
import uuid

from .managers import UserManager


class User(AbstractUser):
    """Portal user with a single role driving every permission check"""
    ROLE_ADMIN = 'admin'
    ROLE_REGISTRAR = 'registrar'
    ROLE_FACULTY = 'faculty'
    ROLE_STAFF = 'staff'
    ROLE_STUDENT = 'student'

    USER_ROLES = [
        (ROLE_ADMIN, 'System Administrator'),
        (ROLE_REGISTRAR, 'Registrar'),
        (ROLE_FACULTY, 'Faculty'),
        (ROLE_STAFF, 'Staff'),
        (ROLE_STUDENT, 'Student'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    phone_number = models.CharField(max_length=20, blank=True)
    role = models.CharField(max_length=20, choices=USER_ROLES, default=ROLE_STUDENT)
    matric_number = models.CharField(max_length=50, blank=True, db_index=True)
    department = models.ForeignKey(
        'academics.Department',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='members'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    # Override username to use email
    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ['last_name', 'first_name', 'email']

    def __str__(self):
        name = self.get_full_name()
        return f"{name} ({self.email})" if name else self.email

    def get_full_name(self):
        """Return full name"""
        return f"{self.first_name} {self.last_name}".strip()

    def is_admin(self):
        return self.role == self.ROLE_ADMIN or self.is_superuser

    def is_registrar(self):
        return self.role == self.ROLE_REGISTRAR

    def is_faculty(self):
        return self.role == self.ROLE_FACULTY

    def is_student(self):
        return self.role == self.ROLE_STUDENT

    def can_manage_registrations(self):
        """Registrars and administrators review course uploads and registrations"""
        return self.is_admin() or self.is_registrar()

    def can_manage_academics(self):
        """Registrars and administrators maintain courses, semesters and timetables"""
        return self.is_admin() or self.is_registrar()

    def can_view_all_registrations(self):
        return self.can_manage_registrations() or self.role == self.ROLE_STAFF
