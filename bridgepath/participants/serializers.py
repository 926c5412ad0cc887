from rest_framework import serializers
from .models import Participant, Certification, ReadinessAssessment


class ParticipantSerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=200)
    entry_date = serializers.DateField()
    current_phase = serializers.IntegerField(min_value=0, max_value=4)
    categories = serializers.ListField(child=serializers.CharField(), min_length=1)
    user_id = serializers.PrimaryKeyRelatedField(source='user', read_only=True)

    class Meta:
        model = Participant
        fields = [
            'id', 'user_id', 'name', 'email', 'phone', 'entry_date', 'current_phase', 'categories',
            'status', 'intake_status', 'is_mock', 'created_at', 'updated_at'
        ]
        read_only_fields = ['intake_status', 'is_mock', 'created_at', 'updated_at']


class IntakeSerializer(serializers.Serializer):
    """Fields captured during participant intake; all optional"""
    phone = serializers.CharField(required=False, allow_blank=True)
    address_line1 = serializers.CharField(required=False, allow_blank=True)
    address_line2 = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    state = serializers.CharField(required=False, allow_blank=True)
    postal_code = serializers.CharField(required=False, allow_blank=True)
    emergency_contact_name = serializers.CharField(required=False, allow_blank=True)
    emergency_contact_phone = serializers.CharField(required=False, allow_blank=True)
    goals = serializers.CharField(required=False, allow_blank=True)
    barriers = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class CertificationSerializer(serializers.ModelSerializer):
    participant_id = serializers.PrimaryKeyRelatedField(source='participant', queryset=Participant.objects.all())
    participant_name = serializers.CharField(source='participant.name', read_only=True)
    cert_type = serializers.CharField(min_length=2, max_length=200)

    class Meta:
        model = Certification
        fields = ['id', 'participant_id', 'participant_name', 'cert_type', 'earned_date', 'expiration_date', 'created_at']
        read_only_fields = ['created_at']


class ReadinessMetricsSerializer(serializers.Serializer):
    total_hours = serializers.FloatField()
    attendance_rate = serializers.FloatField()
    total_revenue = serializers.FloatField()
    revenue_per_hour = serializers.FloatField()
    days_in_phase = serializers.FloatField()


class ReadinessRequestSerializer(serializers.Serializer):
    participant_id = serializers.PrimaryKeyRelatedField(queryset=Participant.objects.all())
    metrics = ReadinessMetricsSerializer()


class ReadinessAssessmentSerializer(serializers.ModelSerializer):
    participant_id = serializers.PrimaryKeyRelatedField(source='participant', read_only=True)

    class Meta:
        model = ReadinessAssessment
        fields = ['id', 'participant_id', 'status', 'assessment', 'recommendation', 'metrics', 'generated_at']
