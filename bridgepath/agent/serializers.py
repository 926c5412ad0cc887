from rest_framework import serializers

from .models import OpsAgentSession


class OpsAgentSessionListSerializer(serializers.ModelSerializer):
    first_message = serializers.CharField(read_only=True)

    class Meta:
        model = OpsAgentSession
        fields = ['id', 'first_message', 'updated_at']


class OpsAgentMessageSerializer(serializers.Serializer):
    session_id = serializers.IntegerField(required=False, allow_null=True)
    message = serializers.CharField(min_length=1)
    page_context = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)


class ConnectLinkSerializer(serializers.Serializer):
    app = serializers.CharField(required=False, allow_blank=True)
