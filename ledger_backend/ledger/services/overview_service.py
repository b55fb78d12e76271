# ledger/services/overview_service.py

"""
FIRM DASHBOARD OVERVIEW

Period figures (approved only):
- total_sales, total_collections, total_purchases inside [date_from, date_to]

Point-in-time figures:
- pending_approvals:   pending day book rows
- active_parties:      active parties of the firm
- pending_cheques / cheques_due_today
- receivables / payables: sum of positive computed customer / supplier balances
- overdue_parties:     customers whose debtor days exceed OVERDUE_DEBTOR_DAYS
- recent_transactions: ten newest rows (any status)

Balances go through balance_service.get_firm_balances (one firm-wide read).
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Count, Q, Sum
from django.utils import timezone

from cheques.models import Cheque
from ledger.engine import ZERO, DateRange
from ledger.exceptions import DataUnavailable
from ledger.services.balance_service import get_firm_balances
from parties.models import Party
from parties.services.party_store import debtor_days
from transactions.models import Transaction

logger = logging.getLogger("ledger")

RECENT_LIMIT = 10


def _period_totals(*, firm, date_range: DateRange) -> dict:
    qs = Transaction.objects.filter(
        firm=firm,
        status=Transaction.STATUS_APPROVED,
        transaction_date__gte=date_range.date_from,
        transaction_date__lte=date_range.date_to,
    )
    agg = qs.aggregate(
        total_sales=Sum("amount", filter=Q(type=Transaction.TYPE_SALE)),
        total_collections=Sum("amount", filter=Q(type=Transaction.TYPE_COLLECTION)),
        total_purchases=Sum("amount", filter=Q(type=Transaction.TYPE_PURCHASE)),
        transaction_count=Count("id"),
    )
    return {
        "total_sales": agg["total_sales"] or ZERO,
        "total_collections": agg["total_collections"] or ZERO,
        "total_purchases": agg["total_purchases"] or ZERO,
        "transaction_count": agg["transaction_count"] or 0,
    }


def _cheque_counts(*, firm, today) -> dict:
    pending = Cheque.objects.filter(firm=firm, status=Cheque.STATUS_PENDING)
    return {
        "pending_cheques": pending.count(),
        "cheques_due_today": pending.filter(due_date=today).count(),
        "pending_cheque_amount": pending.aggregate(total=Sum("amount"))["total"] or ZERO,
    }


def get_dashboard_overview(*, firm, date_from=None, date_to=None) -> dict:
    today = timezone.localdate()
    date_range = DateRange.from_raw(
        date_from or today.replace(day=1),
        date_to or today,
    )
    overdue_after = int(getattr(settings, "OVERDUE_DEBTOR_DAYS", 30))

    try:
        totals = _period_totals(firm=firm, date_range=date_range)
        cheques = _cheque_counts(firm=firm, today=today)
        pending_approvals = Transaction.objects.filter(
            firm=firm, status=Transaction.STATUS_PENDING
        ).count()
        parties = list(Party.objects.for_firm(firm).active())
        recent = list(
            Transaction.objects.filter(firm=firm)
            .select_related("party")
            .order_by("-created_at")[:RECENT_LIMIT]
        )
    except DatabaseError as exc:
        logger.exception("Dashboard read failed", extra={"firm_id": str(firm.id)})
        raise DataUnavailable("Dashboard data is temporarily unavailable. Please retry.") from exc

    balances = get_firm_balances(firm=firm, parties=parties)

    receivables = Decimal("0.00")
    payables = Decimal("0.00")
    overdue = []

    for party in parties:
        balance = balances[str(party.id)].balance
        if balance <= ZERO:
            continue

        if party.type == Party.TYPE_CUSTOMER:
            receivables += balance
            days = debtor_days(party=party, current_balance=balance, today=today)
            if days > overdue_after:
                overdue.append({"party": party, "balance": balance, "debtor_days": days})
        else:
            payables += balance

    overdue.sort(key=lambda row: row["debtor_days"], reverse=True)

    return {
        "firm": firm,
        "date_from": date_range.date_from,
        "date_to": date_range.date_to,
        **totals,
        **cheques,
        "pending_approvals": pending_approvals,
        "active_parties": len(parties),
        "total_receivables": receivables,
        "total_payables": payables,
        "overdue_after_days": overdue_after,
        "overdue_parties": overdue,
        "recent_transactions": recent,
    }
