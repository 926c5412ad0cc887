import django_filters

from .models import Alert


class AlertFilter(django_filters.FilterSet):
    priority = django_filters.ChoiceFilter(choices=Alert.PRIORITY_CHOICES)
    is_read = django_filters.BooleanFilter()

    class Meta:
        model = Alert
        fields = ['priority', 'is_read']
