# transactions/services/transaction_store.py

"""
TRANSACTION STORE (READ CONTRACT FOR THE LEDGER)

fetch_approved_transactions(firm_id, party_id?, date_from?, date_to?, after?)
-> list[LedgerTransaction], oldest first (transaction_date, created_at, id)

Guarantees:
- status = approved only
- `after` is exclusive (transaction_date > after), date_from / date_to inclusive
- one query per call; a DB failure raises DataUnavailable, never an empty list
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.db import DatabaseError

from ledger.engine import LedgerTransaction
from ledger.exceptions import DataUnavailable
from transactions.models import Transaction

logger = logging.getLogger("transactions")

_LEDGER_FIELDS = (
    "id",
    "party_id",
    "type",
    "amount",
    "status",
    "transaction_date",
    "created_at",
    "bill_number",
    "payment_method",
    "reference_number",
    "notes",
)


def to_ledger_transaction(row) -> LedgerTransaction:
    get = row.get if isinstance(row, dict) else (lambda k: getattr(row, k))
    return LedgerTransaction(
        id=str(get("id")),
        party_id=str(get("party_id")),
        type=get("type"),
        amount=get("amount"),
        status=get("status"),
        transaction_date=get("transaction_date"),
        created_at=get("created_at"),
        bill_number=get("bill_number") or "",
        payment_method=get("payment_method") or "",
        reference_number=get("reference_number") or "",
        notes=get("notes") or "",
    )


def fetch_approved_transactions(
    *,
    firm_id,
    party_id=None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    after: Optional[date] = None,
) -> list[LedgerTransaction]:
    qs = Transaction.objects.filter(firm_id=firm_id, status=Transaction.STATUS_APPROVED)

    if party_id is not None:
        qs = qs.filter(party_id=party_id)
    if after is not None:
        qs = qs.filter(transaction_date__gt=after)
    if date_from is not None:
        qs = qs.filter(transaction_date__gte=date_from)
    if date_to is not None:
        qs = qs.filter(transaction_date__lte=date_to)

    qs = qs.order_by("transaction_date", "created_at", "id").values(*_LEDGER_FIELDS)

    try:
        rows = list(qs)
    except DatabaseError as exc:
        logger.exception(
            "Approved transaction fetch failed",
            extra={"firm_id": str(firm_id), "party_id": str(party_id or "")},
        )
        raise DataUnavailable("Transaction data is temporarily unavailable. Please retry.") from exc

    return [to_ledger_transaction(r) for r in rows]
