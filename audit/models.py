from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """Record of a state-changing action taken through the portal"""

    ACTION_CHOICES = [
        ('CREATE', 'Create'),
        ('UPDATE', 'Update'),
        ('DELETE', 'Delete'),
        ('APPROVE', 'Approve'),
        ('REJECT', 'Reject'),
        ('ACTIVATE', 'Activate'),
        ('DEACTIVATE', 'Deactivate'),
        ('ISSUE', 'Issue'),
        ('REVOKE', 'Revoke'),
        ('ASSIGN', 'Assign'),
        ('PUBLISH', 'Publish'),
        ('PASSWORD_RESET', 'Password Reset'),
        ('OTHER', 'Other'),
    ]

    ENTITY_TYPES = [
        ('user', 'User'),
        ('department', 'Department'),
        ('course', 'Course'),
        ('semester', 'Semester'),
        ('program', 'Program'),
        ('lecturer_course', 'Lecturer Course'),
        ('calendar_event', 'Calendar Event'),
        ('registration', 'Registration'),
        ('course_upload', 'Course Upload'),
        ('registration_card', 'Registration Card'),
        ('timetable', 'Timetable'),
        ('announcement', 'Announcement'),
        ('other', 'Other'),
    ]

    # Actor information
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs'
    )
    actor_email = models.CharField(max_length=255, blank=True)  # Kept if the user is deleted

    # Action information
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    entity_type = models.CharField(max_length=30, choices=ENTITY_TYPES)
    entity_id = models.CharField(max_length=255)
    entity_name = models.CharField(max_length=500, blank=True)

    # Details
    description = models.TextField(blank=True)
    changes = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['actor', '-created_at'], name='audit_actor_created_idx'),
            models.Index(fields=['action', '-created_at'], name='audit_action_created_idx'),
            models.Index(fields=['entity_type', '-created_at'], name='audit_entity_created_idx'),
        ]
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"

    def __str__(self):
        return f"{self.get_action_display()} - {self.get_entity_type_display()} ({self.entity_id}) by {self.actor_email or 'system'}"
