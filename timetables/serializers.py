from rest_framework import serializers
from .models import Timetable, TimetableSlot


class TimetableSlotSerializer(serializers.ModelSerializer):
    course_code = serializers.CharField(source='course.code', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)
    lecturer_name = serializers.SerializerMethodField()
    day_display = serializers.CharField(source='get_day_of_week_display', read_only=True)
    duration_minutes = serializers.IntegerField(source='get_duration_minutes', read_only=True)

    class Meta:
        model = TimetableSlot
        fields = [
            'id', 'timetable', 'course', 'course_code', 'course_title', 'lecturer', 'lecturer_name',
            'day_of_week', 'day_display', 'start_time', 'end_time', 'duration_minutes', 'room',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'timetable', 'created_at', 'updated_at']

    def get_lecturer_name(self, obj):
        if obj.lecturer:
            return obj.lecturer.get_full_name()
        return ""


class TimetableSerializer(serializers.ModelSerializer):
    semester_name = serializers.CharField(source='semester.name', read_only=True)
    created_by_email = serializers.CharField(source='created_by.email', read_only=True, default=None)
    slot_count = serializers.SerializerMethodField()

    class Meta:
        model = Timetable
        fields = [
            'id', 'name', 'semester', 'semester_name', 'is_published',
            'created_by', 'created_by_email', 'slot_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'is_published', 'created_by', 'created_at', 'updated_at']

    def get_slot_count(self, obj):
        return obj.slots.count()


class TimetableDetailSerializer(TimetableSerializer):
    slots = TimetableSlotSerializer(many=True, read_only=True)

    class Meta(TimetableSerializer.Meta):
        fields = TimetableSerializer.Meta.fields + ['slots']


class PublishSerializer(serializers.Serializer):
    is_published = serializers.BooleanField()
