from rest_framework import serializers
from .models import Approval, CourseUpload, Registration, RegistrationCard


class ApprovalSerializer(serializers.ModelSerializer):
    approver_email = serializers.CharField(source='approver.email', read_only=True, default=None)

    class Meta:
        model = Approval
        fields = ['id', 'approver', 'approver_email', 'status', 'comments', 'approved_at']
        read_only_fields = fields


class CourseUploadSerializer(serializers.ModelSerializer):
    """Serializer for a course on a student's registration"""
    student_email = serializers.CharField(source='student.email', read_only=True)
    student_name = serializers.CharField(source='student.get_full_name', read_only=True)
    course_code = serializers.CharField(source='course.code', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)
    credits = serializers.IntegerField(source='course.credits', read_only=True)
    semester_name = serializers.CharField(source='semester.name', read_only=True)

    class Meta:
        model = CourseUpload
        fields = [
            'id', 'student', 'student_email', 'student_name', 'course', 'course_code',
            'course_title', 'credits', 'semester', 'semester_name', 'registration',
            'status', 'rejection_reason', 'uploaded_at', 'updated_at'
        ]
        read_only_fields = fields


class CourseUploadDetailSerializer(CourseUploadSerializer):
    approvals = ApprovalSerializer(many=True, read_only=True)

    class Meta(CourseUploadSerializer.Meta):
        fields = CourseUploadSerializer.Meta.fields + ['approvals']
        read_only_fields = fields


class CourseUploadCreateSerializer(serializers.Serializer):
    course_id = serializers.UUIDField()
    semester_id = serializers.UUIDField()
    user_id = serializers.UUIDField(required=False)


class ReviewSerializer(serializers.Serializer):
    comments = serializers.CharField(required=False, allow_blank=True, default='')


class RejectionSerializer(serializers.Serializer):
    reason = serializers.CharField()


class RegistrationCardSerializer(serializers.ModelSerializer):
    student_email = serializers.CharField(source='student.email', read_only=True)
    student_name = serializers.CharField(source='student.get_full_name', read_only=True)
    matric_number = serializers.CharField(source='student.matric_number', read_only=True)
    semester_name = serializers.CharField(source='semester.name', read_only=True)

    class Meta:
        model = RegistrationCard
        fields = [
            'id', 'card_number', 'student', 'student_email', 'student_name',
            'matric_number', 'semester', 'semester_name', 'issued_at'
        ]
        read_only_fields = fields


class RegistrationSerializer(serializers.ModelSerializer):
    student_email = serializers.CharField(source='student.email', read_only=True)
    student_name = serializers.CharField(source='student.get_full_name', read_only=True)
    semester_name = serializers.CharField(source='semester.name', read_only=True)
    course_count = serializers.SerializerMethodField()
    total_credits = serializers.IntegerField(read_only=True)

    class Meta:
        model = Registration
        fields = [
            'id', 'student', 'student_email', 'student_name', 'semester', 'semester_name',
            'status', 'rejection_reason', 'course_count', 'total_credits', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_course_count(self, obj):
        return obj.course_uploads.count()


class RegistrationDetailSerializer(RegistrationSerializer):
    course_uploads = CourseUploadDetailSerializer(many=True, read_only=True)
    card = serializers.SerializerMethodField()

    class Meta(RegistrationSerializer.Meta):
        fields = RegistrationSerializer.Meta.fields + ['course_uploads', 'card']
        read_only_fields = fields

    def get_card(self, obj):
        card = RegistrationCard.objects.filter(student=obj.student, semester=obj.semester).first()
        return RegistrationCardSerializer(card).data if card else None
