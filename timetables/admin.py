from django.contrib import admin
from .models import Timetable, TimetableSlot


class TimetableSlotInline(admin.TabularInline):
    model = TimetableSlot
    extra = 0
    fields = ('course', 'lecturer', 'day_of_week', 'start_time', 'end_time', 'room')


@admin.register(Timetable)
class TimetableAdmin(admin.ModelAdmin):
    list_display = ('name', 'semester', 'is_published', 'created_by', 'created_at')
    list_filter = ('is_published', 'semester')
    search_fields = ('name',)
    inlines = [TimetableSlotInline]


@admin.register(TimetableSlot)
class TimetableSlotAdmin(admin.ModelAdmin):
    list_display = ('course', 'timetable', 'day_of_week', 'start_time', 'end_time', 'room', 'lecturer')
    list_filter = ('day_of_week', 'timetable__semester')
    search_fields = ('course__code', 'room', 'lecturer__email')
    ordering = ('timetable', 'day_of_week', 'start_time')
