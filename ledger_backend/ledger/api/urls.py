# ledger/api/urls.py

from django.urls import path

from ledger.api.views.balances import PartyBalanceView
from ledger.api.views.dashboard import DashboardView
from ledger.api.views.statements import PartyStatementView

urlpatterns = [
    path("parties/<uuid:party_id>/balance/", PartyBalanceView.as_view(), name="party-balance"),
    path("parties/<uuid:party_id>/statement/", PartyStatementView.as_view(), name="party-statement"),
    path("dashboard/", DashboardView.as_view(), name="ledger-dashboard"),
]
