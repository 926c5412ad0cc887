import django_filters

from .models import Participant


class ParticipantFilter(django_filters.FilterSet):
    """Query-string filters for the participant directory"""
    status = django_filters.ChoiceFilter(choices=Participant.STATUS_CHOICES)
    phase = django_filters.NumberFilter(field_name='current_phase')
    search = django_filters.CharFilter(field_name='name', lookup_expr='icontains')

    class Meta:
        model = Participant
        fields = ['status', 'phase', 'search']
