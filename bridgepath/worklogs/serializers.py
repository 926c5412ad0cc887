from decimal import Decimal

from rest_framework import serializers

from bridgepath.participants.models import Participant
from .models import WorkLog


class WorkLogSerializer(serializers.ModelSerializer):
    participant_id = serializers.IntegerField(min_value=1)
    role = serializers.CharField(min_length=1, max_length=50, required=False)
    hours = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal('0.25'), max_value=Decimal('24')
    )
    tags = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = WorkLog
        fields = [
            'id', 'participant_id', 'participant_name', 'role', 'hours', 'notes', 'tags',
            'work_date', 'is_mock', 'created_at', 'updated_at'
        ]
        read_only_fields = ['participant_name', 'is_mock', 'created_at', 'updated_at']

    def create(self, validated_data):
        # An id with no participant row is still logged, under "Unknown"
        participant = Participant.objects.filter(pk=validated_data.pop('participant_id')).first()
        validated_data['participant'] = participant
        validated_data['participant_name'] = participant.name if participant else 'Unknown'
        return super().create(validated_data)

    def update(self, instance, validated_data):
        # The participant is fixed once the log exists
        validated_data.pop('participant_id', None)
        return super().update(instance, validated_data)
