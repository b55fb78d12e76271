# bills/filters.py

import django_filters
from django.db.models import Q

from bills.models import Bill


class BillFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name="bill_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="bill_date", lookup_expr="lte")
    q = django_filters.CharFilter(method="filter_q")

    class Meta:
        model = Bill
        fields = ["status", "category", "party"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(Q(bill_number__icontains=value) | Q(supplier_name__icontains=value))
