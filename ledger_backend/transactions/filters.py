# transactions/filters.py

import django_filters
from django.db.models import Q

from transactions.models import Transaction


class TransactionFilter(django_filters.FilterSet):
    party_id = django_filters.UUIDFilter(field_name="party_id")
    date_from = django_filters.DateFilter(field_name="transaction_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="transaction_date", lookup_expr="lte")
    q = django_filters.CharFilter(method="filter_q")

    class Meta:
        model = Transaction
        fields = ["status", "type", "payment_method"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(Q(party__name__icontains=value) | Q(bill_number__icontains=value))
