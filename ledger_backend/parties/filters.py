# parties/filters.py

import django_filters
from django.db.models import Q

from parties.models import Party


class PartyFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(method="filter_q")
    location_group = django_filters.UUIDFilter(field_name="location_group_id")

    class Meta:
        model = Party
        fields = ["type", "is_active", "location_group"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(contact_person__icontains=value)
            | Q(phone__icontains=value)
        )
