import django_filters

from .models import ProductionRecord


class ProductionRecordFilter(django_filters.FilterSet):
    """Date range applies only when both ends are supplied"""
    start = django_filters.DateFilter(method='filter_date_range')
    end = django_filters.DateFilter(method='filter_date_range')
    participant_id = django_filters.NumberFilter(field_name='participant_id')

    class Meta:
        model = ProductionRecord
        fields = ['start', 'end', 'participant_id']

    def filter_date_range(self, queryset, name, value):
        start = self.form.cleaned_data.get('start')
        end = self.form.cleaned_data.get('end')
        if not start or not end or name != 'start':
            return queryset
        return queryset.filter(production_date__gte=start, production_date__lte=end)
