import django_filters

from .models import WorkLog


class WorkLogFilter(django_filters.FilterSet):
    """Date range applies only when both ends are supplied"""
    start = django_filters.DateFilter(method='filter_date_range')
    end = django_filters.DateFilter(method='filter_date_range')
    participant_id = django_filters.NumberFilter(field_name='participant_id')
    role = django_filters.CharFilter(field_name='role')

    class Meta:
        model = WorkLog
        fields = ['start', 'end', 'participant_id', 'role']

    def filter_date_range(self, queryset, name, value):
        start = self.form.cleaned_data.get('start')
        end = self.form.cleaned_data.get('end')
        if not start or not end or name != 'start':
            return queryset
        return queryset.filter(work_date__gte=start, work_date__lte=end)
