from rest_framework import serializers

from bridgepath.core.utils import parse_day
from .models import Report


class ReportSerializer(serializers.ModelSerializer):
    created_by_id = serializers.PrimaryKeyRelatedField(source='created_by', read_only=True)

    class Meta:
        model = Report
        fields = [
            'id', 'title', 'report_type', 'start_date', 'end_date', 'stats', 'narrative', 'pdf_narrative',
            'stories', 'charts', 'chart_configurations', 'visualization_specs', 'include_narrative',
            'include_stories', 'include_charts', 'created_by_id', 'generated_at'
        ]
        read_only_fields = fields


class ReportListSerializer(serializers.ModelSerializer):
    """Light listing without the generated text"""

    class Meta:
        model = Report
        fields = ['id', 'title', 'report_type', 'start_date', 'end_date', 'stats', 'generated_at']


class ReportCreateSerializer(serializers.Serializer):
    report_type = serializers.ChoiceField(choices=Report.REPORT_TYPE_CHOICES)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    include_narrative = serializers.BooleanField()
    include_stories = serializers.BooleanField()
    include_charts = serializers.BooleanField()

    def validate(self, attrs):
        if attrs['start_date'] > attrs['end_date']:
            raise serializers.ValidationError({'end_date': 'End date must be on or after start date.'})
        return attrs


class DateRangeSerializer(serializers.Serializer):
    """Accepts YYYY-MM-DD or full ISO timestamps"""
    start = serializers.CharField()
    end = serializers.CharField()

    def validate(self, attrs):
        start = parse_day(attrs['start'])
        end = parse_day(attrs['end'])
        if start is None or end is None:
            raise serializers.ValidationError('Invalid date range')
        if start > end:
            start, end = end, start
        return {'start': start, 'end': end}


class DashboardFiltersSerializer(serializers.Serializer):
    phase = serializers.CharField(required=False, default='all')
    status = serializers.CharField(required=False, default='all')
    date_range = DateRangeSerializer()

    def validate_phase(self, value):
        if value == 'all':
            return value
        try:
            phase = int(value)
        except (TypeError, ValueError):
            raise serializers.ValidationError('Phase must be "all" or 0-4.')
        if not 0 <= phase <= 4:
            raise serializers.ValidationError('Phase must be "all" or 0-4.')
        return phase


class DashboardOverviewSerializer(serializers.Serializer):
    filters = DashboardFiltersSerializer()


class ProductionOverviewSerializer(serializers.Serializer):
    date_range = DateRangeSerializer()


class WorkLogsFiltersSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, default='')
    participant_id = serializers.CharField(required=False, allow_blank=True, default='all')
    role = serializers.CharField(required=False, allow_blank=True, default='all')
    date_range = DateRangeSerializer()

    def validate_participant_id(self, value):
        if not value or value == 'all':
            return 'all'
        try:
            return int(value)
        except (TypeError, ValueError):
            raise serializers.ValidationError('Participant must be "all" or a participant id.')


class WorkLogsOverviewSerializer(serializers.Serializer):
    filters = WorkLogsFiltersSerializer()


class DailyBriefRequestSerializer(serializers.Serializer):
    date = serializers.CharField(required=False, allow_blank=True)

    def validate_date(self, value):
        if not value:
            return None
        day = parse_day(value)
        if day is None:
            raise serializers.ValidationError('Invalid date')
        return day
