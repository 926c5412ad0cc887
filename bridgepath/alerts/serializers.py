from rest_framework import serializers

from bridgepath.participants.models import Participant
from .models import Alert


class AlertSerializer(serializers.ModelSerializer):
    participant_id = serializers.PrimaryKeyRelatedField(
        source='participant', queryset=Participant.objects.all(), required=False, allow_null=True
    )
    message = serializers.CharField(min_length=3)

    class Meta:
        model = Alert
        fields = [
            'id', 'participant_id', 'participant_name', 'type', 'priority', 'message',
            'is_read', 'is_dismissed', 'created_at', 'updated_at'
        ]
        read_only_fields = ['is_read', 'is_dismissed', 'created_at', 'updated_at']

    def create(self, validated_data):
        participant = validated_data.get('participant')
        if participant and not validated_data.get('participant_name'):
            validated_data['participant_name'] = participant.name
        return super().create(validated_data)


class AlertUpdateSerializer(serializers.Serializer):
    is_read = serializers.BooleanField(required=False)
    is_dismissed = serializers.BooleanField(required=False)
