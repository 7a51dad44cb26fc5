from rest_framework import serializers
from .models import (
    AcademicYear, Department, Course, Semester, SemesterCourse,
    Program, ProgramCourse, LecturerCourse, AcademicCalendarEvent
)


class AcademicYearSerializer(serializers.ModelSerializer):
    """Serializer for Academic Year"""
    class Meta:
        model = AcademicYear
        fields = ['id', 'name', 'start_date', 'end_date', 'created_at']
        read_only_fields = ['id', 'created_at']
        extra_kwargs = {
            'name': {'validators': []},
        }

    def validate(self, attrs):
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')
        if start_date and end_date and start_date >= end_date:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})
        return attrs


class DepartmentSerializer(serializers.ModelSerializer):
    """Serializer for Department"""
    head_name = serializers.SerializerMethodField()
    course_count = serializers.SerializerMethodField()

    class Meta:
        model = Department
        fields = [
            'id', 'name', 'code', 'description', 'head_of_department',
            'head_name', 'course_count', 'is_active', 'created_at'
        ]
        read_only_fields = ['id', 'created_at']
        # Collisions are reported as conflicts by the views
        extra_kwargs = {
            'name': {'validators': []},
            'code': {'validators': []},
        }

    def get_head_name(self, obj):
        if obj.head_of_department:
            return f"{obj.head_of_department.first_name} {obj.head_of_department.last_name}".strip()
        return ""

    def get_course_count(self, obj):
        return obj.courses.count()


class CourseSerializer(serializers.ModelSerializer):
    """Serializer for Course"""
    department_name = serializers.CharField(source='department.name', read_only=True)
    credits = serializers.IntegerField(min_value=1)

    class Meta:
        model = Course
        fields = [
            'id', 'code', 'title', 'description', 'department', 'department_name',
            'credits', 'is_active', 'created_at'
        ]
        read_only_fields = ['id', 'created_at']
        extra_kwargs = {
            'code': {'validators': []},
        }


class SemesterSerializer(serializers.ModelSerializer):
    """Serializer for Semester"""
    academic_year_name = serializers.CharField(source='academic_year.name', read_only=True, default=None)
    course_count = serializers.SerializerMethodField()

    class Meta:
        model = Semester
        fields = [
            'id', 'name', 'academic_year', 'academic_year_name', 'start_date', 'end_date',
            'is_active', 'registration_deadline', 'course_upload_deadline',
            'course_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'validators': []},
        }

    def get_course_count(self, obj):
        return obj.semester_courses.count()


class SemesterCourseSerializer(serializers.ModelSerializer):
    course_code = serializers.CharField(source='course.code', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)
    credits = serializers.IntegerField(source='course.credits', read_only=True)
    department_name = serializers.CharField(source='course.department.name', read_only=True)

    class Meta:
        model = SemesterCourse
        fields = [
            'id', 'semester', 'course', 'course_code', 'course_title',
            'credits', 'department_name', 'created_at'
        ]
        read_only_fields = fields


class ProgramSerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(source='department.name', read_only=True)
    course_count = serializers.SerializerMethodField()
    duration = serializers.IntegerField(min_value=1)

    class Meta:
        model = Program
        fields = [
            'id', 'name', 'code', 'program_type', 'duration', 'department', 'department_name',
            'description', 'course_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'code': {'validators': []},
        }

    def get_course_count(self, obj):
        return obj.program_courses.count()


class ProgramCourseSerializer(serializers.ModelSerializer):
    course_code = serializers.CharField(source='course.code', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)
    credits = serializers.IntegerField(source='course.credits', read_only=True)
    department = serializers.UUIDField(source='course.department_id', read_only=True)

    class Meta:
        model = ProgramCourse
        fields = ['id', 'program', 'course', 'course_code', 'course_title', 'credits', 'department', 'created_at']
        read_only_fields = fields


class LecturerCourseSerializer(serializers.ModelSerializer):
    """Lecturer assignment; uniqueness is checked by the service"""
    lecturer_name = serializers.CharField(source='lecturer.get_full_name', read_only=True)
    lecturer_email = serializers.EmailField(source='lecturer.email', read_only=True)
    lecturer_department = serializers.CharField(source='lecturer.department.name', read_only=True, default=None)
    course_code = serializers.CharField(source='course.code', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)
    semester_name = serializers.CharField(source='semester.name', read_only=True)

    class Meta:
        model = LecturerCourse
        fields = [
            'id', 'lecturer', 'lecturer_name', 'lecturer_email', 'lecturer_department',
            'course', 'course_code', 'course_title', 'semester', 'semester_name',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        validators = []


class FacultyCourseSerializer(LecturerCourseSerializer):
    approved_students = serializers.IntegerField(read_only=True)

    class Meta(LecturerCourseSerializer.Meta):
        fields = LecturerCourseSerializer.Meta.fields + ['approved_students']


class AcademicCalendarEventSerializer(serializers.ModelSerializer):
    semester_name = serializers.CharField(source='semester.name', read_only=True, default=None)

    class Meta:
        model = AcademicCalendarEvent
        fields = [
            'id', 'title', 'description', 'event_type', 'date', 'end_date',
            'semester', 'semester_name', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {
            'title': {'min_length': 2},
        }

    def validate(self, attrs):
        date = attrs.get('date', getattr(self.instance, 'date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if date and end_date and end_date < date:
            raise serializers.ValidationError({'end_date': 'End date cannot be before the event date'})
        return attrs
