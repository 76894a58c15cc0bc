import django_filters

from .models import CardStatus, ECard


class ECardFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=CardStatus.choices)
    relation = django_filters.CharFilter(field_name='member__relation_slot')
    valid_on = django_filters.DateFilter(method='filter_valid_on')

    class Meta:
        model = ECard
        fields = ['status', 'relation']

    def filter_valid_on(self, queryset, name, value):
        return queryset.filter(valid_from__lte=value, valid_till__gte=value)
