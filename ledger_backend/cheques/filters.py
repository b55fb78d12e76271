# cheques/filters.py

from datetime import timedelta

import django_filters
from django.utils import timezone

from cheques.models import Cheque

DUE_OVERDUE = "overdue"
DUE_TODAY = "today"
DUE_WEEK = "week"


class ChequeFilter(django_filters.FilterSet):
    """
    due=overdue  pending and due before today
    due=today    pending and due today
    due=week     pending and due within the next 7 days (today included)
    """

    due = django_filters.ChoiceFilter(
        method="filter_due",
        choices=[(DUE_OVERDUE, "Overdue"), (DUE_TODAY, "Today"), (DUE_WEEK, "This week")],
    )
    due_from = django_filters.DateFilter(field_name="due_date", lookup_expr="gte")
    due_to = django_filters.DateFilter(field_name="due_date", lookup_expr="lte")

    class Meta:
        model = Cheque
        fields = ["status", "direction", "party"]

    def filter_due(self, queryset, name, value):
        today = timezone.localdate()
        pending = queryset.filter(status=Cheque.STATUS_PENDING)
        if value == DUE_OVERDUE:
            return pending.filter(due_date__lt=today)
        if value == DUE_TODAY:
            return pending.filter(due_date=today)
        if value == DUE_WEEK:
            return pending.filter(due_date__gte=today, due_date__lte=today + timedelta(days=6))
        return queryset
