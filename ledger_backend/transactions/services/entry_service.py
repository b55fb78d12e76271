# transactions/services/entry_service.py

"""
DAY BOOK ENTRY + APPROVAL

RULES:
- Customer parties take sale / collection; supplier parties take purchase / collection.
- The party must be active and belong to the transaction's firm.
- Collections always start PENDING (cash in hand is verified in the office).
- Sales / purchases start APPROVED when the entering user can approve,
  otherwise PENDING.
- transaction_date must fall after party.balance_as_of; earlier dates are
  already inside the stored balance and would never reach the ledger.
- Only PENDING rows can be edited or deleted.
- approve: PENDING -> APPROVED (already APPROVED is a no-op); stamps approved_by/at.
  Approving a collection moves party.last_payment_date forward.
- reject:  PENDING -> REJECTED (terminal); stamps rejected_by/at + reason.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from ledger.engine import to_date, to_decimal
from ledger.exceptions import InvalidInput
from parties.models import Party
from parties.services.party_store import fetch_party
from permissions.roles import CAP_TRANSACTIONS_APPROVE, user_has_capability
from transactions.models import Transaction
from transactions.services.transaction_lifecycle import (
    is_noop_transition,
    validate_editable,
    validate_transition,
)

logger = logging.getLogger("transactions")

TWOPLACES = Decimal("0.01")

ALLOWED_TYPES_BY_PARTY = {
    Party.TYPE_CUSTOMER: {Transaction.TYPE_SALE, Transaction.TYPE_COLLECTION},
    Party.TYPE_SUPPLIER: {Transaction.TYPE_PURCHASE, Transaction.TYPE_COLLECTION},
}

_PAYMENT_METHODS = {value for value, _ in Transaction.PAYMENT_METHODS}

EDITABLE_FIELDS = (
    "type",
    "amount",
    "transaction_date",
    "bill_number",
    "payment_method",
    "reference_number",
    "notes",
)


def _money(value) -> Decimal:
    amount = to_decimal(value, label="amount")
    if amount <= Decimal("0.00"):
        raise InvalidInput("Amount must be > 0")
    if amount != amount.quantize(TWOPLACES):
        raise InvalidInput("Amount must have at most 2 decimal places")
    return amount


def _validate_type(*, party: Party, txn_type: str) -> str:
    txn_type = (txn_type or "").strip().lower()
    allowed = ALLOWED_TYPES_BY_PARTY.get(party.type, set())
    if txn_type not in allowed:
        raise InvalidInput(
            f"Transaction type '{txn_type}' is not valid for a {party.type}; "
            f"use one of {sorted(allowed)}"
        )
    return txn_type


def _validate_payment_method(method: str) -> str:
    method = (method or "").strip().lower()
    if method and method not in _PAYMENT_METHODS:
        raise InvalidInput(f"Unknown payment_method '{method}'")
    return method


def _validate_ledger_date(*, party: Party, txn_date):
    if txn_date <= party.balance_as_of:
        raise InvalidInput(
            f"Transaction dated {txn_date.isoformat()} is on or before the party balance date "
            f"{party.balance_as_of.isoformat()}; reconcile the party balance instead"
        )
    return txn_date


def initial_status_for(*, txn_type: str, user) -> str:
    if txn_type == Transaction.TYPE_COLLECTION:
        return Transaction.STATUS_PENDING
    if user is not None and user_has_capability(user, CAP_TRANSACTIONS_APPROVE):
        return Transaction.STATUS_APPROVED
    return Transaction.STATUS_PENDING


@transaction.atomic
def record_transaction(
    *,
    firm,
    party_id,
    txn_type: str,
    amount,
    transaction_date=None,
    bill_number: str = "",
    payment_method: str = "",
    reference_number: str = "",
    notes: str = "",
    user=None,
) -> Transaction:
    party = fetch_party(party_id=party_id, firm_id=firm.id)
    if not party.is_active:
        raise InvalidInput("Cannot record transactions for an inactive party")

    txn_type = _validate_type(party=party, txn_type=txn_type)
    amt = _money(amount)
    txn_date = to_date(transaction_date, label="transaction_date") if transaction_date else timezone.localdate()
    _validate_ledger_date(party=party, txn_date=txn_date)
    method = _validate_payment_method(payment_method)

    status = initial_status_for(txn_type=txn_type, user=user)
    now = timezone.now()

    txn = Transaction.objects.create(
        firm=firm,
        party=party,
        type=txn_type,
        amount=amt,
        status=status,
        transaction_date=txn_date,
        bill_number=bill_number or "",
        payment_method=method,
        reference_number=reference_number or "",
        notes=notes or "",
        created_by=user,
        approved_by=user if status == Transaction.STATUS_APPROVED else None,
        approved_at=now if status == Transaction.STATUS_APPROVED else None,
    )

    logger.info(
        "Transaction recorded",
        extra={
            "transaction_id": str(txn.id),
            "firm_id": str(firm.id),
            "party_id": str(party.id),
            "type": txn_type,
            "amount": str(amt),
            "status": status,
        },
    )
    return txn


def _lock(txn_id, *, firm_id=None) -> Transaction:
    qs = Transaction.objects.select_for_update().select_related("party")
    if firm_id is not None:
        qs = qs.filter(firm_id=firm_id)
    return qs.get(id=txn_id)


@transaction.atomic
def update_pending_transaction(*, txn_id, firm_id=None, changes: dict, user=None) -> Transaction:
    txn = _lock(txn_id, firm_id=firm_id)
    validate_editable(txn=txn)

    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise InvalidInput(f"Fields cannot be edited: {sorted(unknown)}")

    if "type" in changes:
        txn.type = _validate_type(party=txn.party, txn_type=changes["type"])
    if "amount" in changes:
        txn.amount = _money(changes["amount"])
    if "transaction_date" in changes:
        txn.transaction_date = to_date(changes["transaction_date"], label="transaction_date")
    if "payment_method" in changes:
        txn.payment_method = _validate_payment_method(changes["payment_method"])
    for name in ("bill_number", "reference_number", "notes"):
        if name in changes:
            setattr(txn, name, changes[name] or "")

    _validate_ledger_date(party=txn.party, txn_date=txn.transaction_date)
    txn.save()

    logger.info(
        "Pending transaction updated",
        extra={
            "transaction_id": str(txn.id),
            "changed_fields": sorted(changes),
            "user_id": str(getattr(user, "id", "")),
        },
    )
    return txn


@transaction.atomic
def delete_pending_transaction(*, txn_id, firm_id=None, user=None) -> None:
    txn = _lock(txn_id, firm_id=firm_id)
    validate_editable(txn=txn)

    txn.delete()

    logger.info(
        "Pending transaction deleted",
        extra={"transaction_id": str(txn_id), "user_id": str(getattr(user, "id", ""))},
    )


@transaction.atomic
def approve_transaction(*, txn_id, firm_id=None, user=None) -> Transaction:
    txn = _lock(txn_id, firm_id=firm_id)

    if is_noop_transition(from_status=txn.status, to_status=Transaction.STATUS_APPROVED):
        return txn

    validate_transition(txn=txn, target_status=Transaction.STATUS_APPROVED)
    _validate_ledger_date(party=txn.party, txn_date=txn.transaction_date)

    txn.status = Transaction.STATUS_APPROVED
    txn.approved_by = user
    txn.approved_at = timezone.now()
    txn.save(update_fields=["status", "approved_by", "approved_at", "updated_at"])

    if txn.type == Transaction.TYPE_COLLECTION:
        party = Party.objects.select_for_update().get(id=txn.party_id)
        if party.last_payment_date is None or txn.transaction_date > party.last_payment_date:
            party.last_payment_date = txn.transaction_date
            party.save(update_fields=["last_payment_date", "updated_at"])

    logger.info(
        "Transaction approved",
        extra={
            "transaction_id": str(txn.id),
            "party_id": str(txn.party_id),
            "type": txn.type,
            "amount": str(txn.amount),
            "user_id": str(getattr(user, "id", "")),
        },
    )
    return txn


@transaction.atomic
def reject_transaction(*, txn_id, firm_id=None, user=None, reason: str = "") -> Transaction:
    txn = _lock(txn_id, firm_id=firm_id)
    validate_transition(txn=txn, target_status=Transaction.STATUS_REJECTED)

    txn.status = Transaction.STATUS_REJECTED
    txn.rejected_by = user
    txn.rejected_at = timezone.now()
    txn.rejection_reason = (reason or "").strip()
    txn.save(update_fields=["status", "rejected_by", "rejected_at", "rejection_reason", "updated_at"])

    logger.info(
        "Transaction rejected",
        extra={
            "transaction_id": str(txn.id),
            "party_id": str(txn.party_id),
            "user_id": str(getattr(user, "id", "")),
        },
    )
    return txn
