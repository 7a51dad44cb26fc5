from django.contrib import admin
from .models import (
    AcademicYear, Department, Course, Semester, SemesterCourse,
    Program, ProgramCourse, LecturerCourse, AcademicCalendarEvent
)


@admin.register(AcademicYear)
class AcademicYearAdmin(admin.ModelAdmin):
    list_display = ('name', 'start_date', 'end_date', 'created_at')
    search_fields = ('name',)
    ordering = ('-start_date',)


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'head_of_department', 'is_active', 'created_at')
    list_filter = ('is_active', 'created_at')
    search_fields = ('name', 'code', 'description')
    ordering = ('name',)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('code', 'title', 'department', 'credits', 'is_active')
    list_filter = ('department', 'is_active', 'credits')
    search_fields = ('code', 'title', 'description')
    ordering = ('department', 'code')


class SemesterCourseInline(admin.TabularInline):
    model = SemesterCourse
    extra = 0
    autocomplete_fields = ('course',)


@admin.register(Semester)
class SemesterAdmin(admin.ModelAdmin):
    list_display = ('name', 'academic_year', 'start_date', 'end_date', 'is_active', 'course_upload_deadline')
    list_filter = ('is_active', 'academic_year')
    search_fields = ('name', 'academic_year__name')
    ordering = ('-start_date',)
    inlines = [SemesterCourseInline]


class ProgramCourseInline(admin.TabularInline):
    model = ProgramCourse
    extra = 0
    autocomplete_fields = ('course',)


@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'program_type', 'duration', 'department')
    list_filter = ('program_type', 'department')
    search_fields = ('code', 'name')
    inlines = [ProgramCourseInline]


@admin.register(LecturerCourse)
class LecturerCourseAdmin(admin.ModelAdmin):
    list_display = ('lecturer', 'course', 'semester', 'created_at')
    list_filter = ('semester',)
    search_fields = ('lecturer__email', 'course__code')


@admin.register(AcademicCalendarEvent)
class AcademicCalendarEventAdmin(admin.ModelAdmin):
    list_display = ('title', 'event_type', 'date', 'end_date', 'semester')
    list_filter = ('event_type', 'semester')
    search_fields = ('title', 'description')
    ordering = ('date',)
