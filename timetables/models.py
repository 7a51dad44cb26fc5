from datetime import datetime
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .overlap import find_conflicting_pairs, slots_overlap


class Timetable(models.Model):
    """Semester timetable"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, help_text="e.g., CS 200 Level - First Semester 2026")
    semester = models.ForeignKey('academics.Semester', on_delete=models.CASCADE, related_name='timetables')
    is_published = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_timetables'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Timetable"
        verbose_name_plural = "Timetables"
        ordering = ['semester', 'name']

    def __str__(self):
        return self.name

    def get_conflicts(self):
        """Overlapping slot pairs in this timetable"""
        return find_conflicting_pairs(list(self.slots.select_related('course')))


class TimetableSlot(models.Model):
    """Individual time slots in a timetable"""
    DAYS_OF_WEEK = [
        ('MON', 'Monday'),
        ('TUE', 'Tuesday'),
        ('WED', 'Wednesday'),
        ('THU', 'Thursday'),
        ('FRI', 'Friday'),
        ('SAT', 'Saturday'),
        ('SUN', 'Sunday'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    timetable = models.ForeignKey(Timetable, on_delete=models.CASCADE, related_name='slots')
    course = models.ForeignKey('academics.Course', on_delete=models.CASCADE, related_name='timetable_slots')
    lecturer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='teaching_slots'
    )

    # Time details
    day_of_week = models.CharField(max_length=3, choices=DAYS_OF_WEEK)
    start_time = models.TimeField()
    end_time = models.TimeField()
    room = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Timetable Slot"
        verbose_name_plural = "Timetable Slots"
        ordering = ['day_of_week', 'start_time']
        indexes = [
            models.Index(fields=['timetable', 'day_of_week'], name='slot_timetable_day_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_time__lt=models.F('end_time')),
                name='slot_starts_before_it_ends'
            ),
        ]

    def clean(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError('Start time must be before end time')

    def overlaps_with(self, other_slot):
        """Check if this slot overlaps with another slot"""
        return (self.day_of_week == other_slot.day_of_week and
                slots_overlap(self.start_time, self.end_time, other_slot.start_time, other_slot.end_time))

    def get_duration_minutes(self):
        start_datetime = datetime.combine(datetime.today(), self.start_time)
        end_datetime = datetime.combine(datetime.today(), self.end_time)
        return int((end_datetime - start_datetime).total_seconds() / 60)

    def __str__(self):
        return f"{self.course.code} - {self.get_day_of_week_display()} {self.start_time}-{self.end_time}"
