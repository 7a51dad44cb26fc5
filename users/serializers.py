from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(source='get_full_name', read_only=True)
    department_name = serializers.CharField(source='department.name', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'first_name', 'last_name', 'full_name',
            'role', 'matric_number', 'phone_number', 'department', 'department_name',
            'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'email': {'validators': []},
        }


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])

    class Meta:
        model = User
        fields = [
            'username', 'email', 'password', 'first_name', 'last_name',
            'role', 'matric_number', 'phone_number', 'department'
        ]
        extra_kwargs = {
            'username': {'required': False},
            # Uniqueness is reported as a conflict by the view
            'email': {'validators': []},
        }

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class StudentSignupSerializer(UserCreateSerializer):
    class Meta(UserCreateSerializer.Meta):
        fields = [
            'username', 'email', 'password', 'first_name', 'last_name',
            'matric_number', 'phone_number', 'department'
        ]

    def create(self, validated_data):
        validated_data['role'] = User.ROLE_STUDENT
        return super().create(validated_data)


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(required=False, write_only=True)
    new_password = serializers.CharField(write_only=True, validators=[validate_password])
