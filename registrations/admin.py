from django.contrib import admin
from .models import Approval, CourseUpload, Registration, RegistrationCard


class CourseUploadInline(admin.TabularInline):
    model = CourseUpload
    extra = 0
    fields = ('course', 'status', 'rejection_reason', 'uploaded_at')
    readonly_fields = ('uploaded_at',)


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ('student', 'semester', 'status', 'created_at')
    list_filter = ('status', 'semester')
    search_fields = ('student__email', 'student__matric_number')
    ordering = ('-created_at',)
    inlines = [CourseUploadInline]


@admin.register(CourseUpload)
class CourseUploadAdmin(admin.ModelAdmin):
    list_display = ('student', 'course', 'semester', 'status', 'uploaded_at')
    list_filter = ('status', 'semester', 'course__department')
    search_fields = ('student__email', 'course__code', 'course__title')
    ordering = ('-uploaded_at',)


@admin.register(Approval)
class ApprovalAdmin(admin.ModelAdmin):
    list_display = ('course_upload', 'approver', 'status', 'approved_at')
    list_filter = ('status',)
    ordering = ('-approved_at',)


@admin.register(RegistrationCard)
class RegistrationCardAdmin(admin.ModelAdmin):
    list_display = ('card_number', 'student', 'semester', 'issued_at')
    list_filter = ('semester',)
    search_fields = ('card_number', 'student__email', 'student__matric_number')
    readonly_fields = ('card_number', 'issued_at')
