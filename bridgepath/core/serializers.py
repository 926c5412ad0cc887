from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, AuditLog
from .roles import ALL_ROLES, PARTICIPANT, CASE_MANAGER, SUPERVISOR, get_original_role


class UserSerializer(serializers.ModelSerializer):
    role = serializers.SerializerMethodField()
    case_manager_id = serializers.PrimaryKeyRelatedField(source='case_manager', read_only=True)
    supervisor_id = serializers.PrimaryKeyRelatedField(source='supervisor', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'display_name', 'phone', 'role',
            'case_manager_id', 'supervisor_id', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_role(self, obj):
        return get_original_role(obj)


class AdminUserCreateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[PARTICIPANT, CASE_MANAGER, SUPERVISOR])
    email = serializers.EmailField()
    display_name = serializers.CharField(min_length=2, max_length=200)
    case_manager_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    supervisor_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)

    def validate(self, attrs):
        if attrs['role'] == PARTICIPANT and (not attrs.get('case_manager_id') or not attrs.get('supervisor_id')):
            raise serializers.ValidationError('Participant requires case_manager_id and supervisor_id.')
        return attrs


class AdminUserUpdateSerializer(serializers.Serializer):
    target_uid = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    role = serializers.ChoiceField(choices=ALL_ROLES, required=False)
    display_name = serializers.CharField(min_length=1, max_length=200, required=False)
    email = serializers.EmailField(required=False)

    def validate(self, attrs):
        email = attrs.get('email')
        if email and User.objects.filter(email__iexact=email).exclude(pk=attrs['target_uid'].pk).exists():
            raise serializers.ValidationError({'email': 'That email is already in use.'})
        return attrs


class DeleteUsersSerializer(serializers.Serializer):
    uids = serializers.ListField(child=serializers.IntegerField(), min_length=1)


class ResetPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    password = serializers.CharField(write_only=True, validators=[validate_password])


class ParticipantAssignmentSerializer(serializers.Serializer):
    participant_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    case_manager_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    supervisor_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)


class SupervisorAssignmentSerializer(serializers.Serializer):
    participant_id = serializers.IntegerField()
    supervisor_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)


class ViewAsSerializer(serializers.Serializer):
    role = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_role(self, value):
        if value and value not in ALL_ROLES:
            raise serializers.ValidationError('Unknown role.')
        return value


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
