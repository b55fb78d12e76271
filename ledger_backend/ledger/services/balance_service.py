# ledger/services/balance_service.py

"""
======================================================
PATH: ledger/services/balance_service.py
======================================================
PARTY BALANCE + STATEMENT READS

Wires the Party Store and Transaction Store into the pure engine.

Guarantees:
- Read-only: never writes party.balance (reconciliation is a separate,
  explicit action in parties.services.party_store).
- One store read per call, so a statement's closing balance and its lines
  always come from the same fetch.
- DataUnavailable propagates; callers never see a zero in place of a
  failed read.
- Anomalies are logged at WARNING and returned with the result.
======================================================
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, Optional

from ledger.engine import (
    BalanceResult,
    DateRange,
    Statement,
    build_statement,
    compute_current_balance,
)
from ledger.exceptions import InvalidInput
from parties.models import Party
from parties.services.party_store import snapshot
from transactions.services.transaction_store import fetch_approved_transactions

logger = logging.getLogger("ledger")


def _log_anomalies(party, anomalies, *, operation: str) -> None:
    for anomaly in anomalies:
        logger.warning(
            "Anomalous transaction excluded from ledger",
            extra={
                "operation": operation,
                "party_id": str(party.id),
                "firm_id": str(party.firm_id),
                "transaction_id": anomaly.transaction_id,
                "transaction_type": anomaly.transaction_type,
                "party_type": anomaly.party_type,
                "amount": str(anomaly.amount),
            },
        )


def get_party_balance(*, party) -> BalanceResult:
    snap = snapshot(party)
    txns = fetch_approved_transactions(
        firm_id=party.firm_id,
        party_id=party.id,
        after=snap.balance_as_of,
    )

    result = compute_current_balance(snap, txns)
    _log_anomalies(party, result.anomalies, operation="balance")
    return result


def get_party_statement(*, party, date_from, date_to) -> Statement:
    """
    Statement for [date_from, date_to].

    Reads approved transactions with balance_as_of < transaction_date <= date_to
    once. The closing balance is the engine balance over that whole set (so it
    equals the current balance when date_to is today or later); the lines are
    rebuilt backward from it over the in-range subset.

    A period ending before balance_as_of is refused: the rows behind the
    stored balance are not part of the ledger, so no closing balance exists.
    """
    date_range = DateRange.from_raw(date_from, date_to)
    snap = snapshot(party)

    if date_range.date_to < snap.balance_as_of:
        raise InvalidInput(
            f"Statement period ends on {date_range.date_to.isoformat()}, before the party balance "
            f"date {snap.balance_as_of.isoformat()}; earlier activity is folded into the opening balance"
        )

    txns = fetch_approved_transactions(
        firm_id=party.firm_id,
        party_id=party.id,
        after=snap.balance_as_of,
        date_to=date_range.date_to,
    )

    closing = compute_current_balance(snap, txns)
    statement = build_statement(snap, txns, date_range, closing.balance)

    _log_anomalies(party, statement.anomalies, operation="statement")
    logger.info(
        "Party statement built",
        extra={
            "party_id": str(party.id),
            "date_from": date_range.date_from.isoformat(),
            "date_to": date_range.date_to.isoformat(),
            "line_count": len(statement.lines),
        },
    )
    return statement


def get_firm_balances(*, firm, parties: Optional[Iterable] = None) -> Dict[str, BalanceResult]:
    """
    Balances for many parties of one firm from a single firm-wide read.

    Returns {str(party_id): BalanceResult}. Each party only sees its own
    transactions dated after its own balance_as_of (the engine applies it).
    """
    if parties is None:
        parties = Party.objects.for_firm(firm)

    parties = list(parties)
    if not parties:
        return {}

    earliest: date = min(p.balance_as_of for p in parties)
    txns = fetch_approved_transactions(firm_id=firm.id, after=earliest)

    by_party = defaultdict(list)
    for txn in txns:
        by_party[txn.party_id].append(txn)

    results: Dict[str, BalanceResult] = {}
    for party in parties:
        result = compute_current_balance(snapshot(party), by_party.get(str(party.id), []))
        _log_anomalies(party, result.anomalies, operation="firm_balances")
        results[str(party.id)] = result
    return results
