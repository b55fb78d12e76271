# cheques/services/cheque_lifecycle.py

"""
======================================================
PATH: cheques/services/cheque_lifecycle.py
======================================================
CHEQUE REGISTER SERVICE

register_cheque: new PENDING cheque for a party of the same firm
clear_cheque:    PENDING -> CLEARED   (stamps cleared_date)
bounce_cheque:   PENDING -> BOUNCED   (stamps bounced_date + reason)
cancel_cheque:   PENDING -> CANCELLED

Cleared / bounced / cancelled are terminal. Dates default to today and
must fall between the issue date and today.
======================================================
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from cheques.models import Cheque
from ledger.engine import to_date, to_decimal
from ledger.exceptions import InvalidInput
from parties.services.party_store import fetch_party

logger = logging.getLogger("cheques")


class ChequeLifecycleError(Exception):
    pass


class InvalidChequeTransitionError(ChequeLifecycleError):
    pass


TERMINAL_STATES = {
    Cheque.STATUS_CLEARED,
    Cheque.STATUS_BOUNCED,
    Cheque.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Cheque.STATUS_PENDING: {
        Cheque.STATUS_CLEARED,
        Cheque.STATUS_BOUNCED,
        Cheque.STATUS_CANCELLED,
    },
}


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, cheque: Cheque, target_status: str):
    if not can_transition(from_status=cheque.status, to_status=target_status):
        raise InvalidChequeTransitionError(
            f"Cheque {cheque.cheque_number} cannot transition from "
            f"'{cheque.status}' to '{target_status}'"
        )


def _event_date(value, *, label: str, cheque: Cheque):
    today = timezone.localdate()
    d = to_date(value, label=label) if value else today
    if d > today:
        raise InvalidInput(f"{label} cannot be in the future")
    if d < cheque.issue_date:
        raise InvalidInput(f"{label} cannot be before issue_date {cheque.issue_date.isoformat()}")
    return d


@transaction.atomic
def register_cheque(
    *,
    firm,
    party_id,
    cheque_number: str,
    amount,
    due_date,
    direction: str = Cheque.DIRECTION_RECEIVED,
    issue_date=None,
    bank_name: str = "",
    notes: str = "",
    user=None,
) -> Cheque:
    party = fetch_party(party_id=party_id, firm_id=firm.id)

    amt = to_decimal(amount, label="amount")
    if amt <= 0:
        raise InvalidInput("Amount must be > 0")

    cheque = Cheque.objects.create(
        firm=firm,
        party=party,
        direction=direction,
        cheque_number=cheque_number,
        amount=amt,
        issue_date=to_date(issue_date, label="issue_date") if issue_date else timezone.localdate(),
        due_date=to_date(due_date, label="due_date"),
        bank_name=(bank_name or "").strip(),
        notes=notes or "",
        created_by=user,
    )

    logger.info(
        "Cheque registered",
        extra={
            "cheque_id": str(cheque.id),
            "firm_id": str(firm.id),
            "party_id": str(party.id),
            "direction": direction,
            "amount": str(amt),
            "due_date": cheque.due_date.isoformat(),
        },
    )
    return cheque


def _lock(cheque_id, *, firm_id=None) -> Cheque:
    qs = Cheque.objects.select_for_update()
    if firm_id is not None:
        qs = qs.filter(firm_id=firm_id)
    return qs.get(id=cheque_id)


def _log_status(cheque: Cheque, user):
    logger.info(
        "Cheque status changed",
        extra={
            "cheque_id": str(cheque.id),
            "status": cheque.status,
            "user_id": str(getattr(user, "id", "")),
        },
    )


@transaction.atomic
def clear_cheque(*, cheque_id, firm_id=None, cleared_on=None, user=None) -> Cheque:
    cheque = _lock(cheque_id, firm_id=firm_id)
    validate_transition(cheque=cheque, target_status=Cheque.STATUS_CLEARED)

    cheque.status = Cheque.STATUS_CLEARED
    cheque.cleared_date = _event_date(cleared_on, label="cleared_date", cheque=cheque)
    cheque.save(update_fields=["status", "cleared_date", "updated_at"])

    _log_status(cheque, user)
    return cheque


@transaction.atomic
def bounce_cheque(*, cheque_id, firm_id=None, reason: str = "", bounced_on=None, user=None) -> Cheque:
    cheque = _lock(cheque_id, firm_id=firm_id)
    validate_transition(cheque=cheque, target_status=Cheque.STATUS_BOUNCED)

    cheque.status = Cheque.STATUS_BOUNCED
    cheque.bounced_date = _event_date(bounced_on, label="bounced_date", cheque=cheque)
    cheque.bounce_reason = (reason or "").strip()
    cheque.save(update_fields=["status", "bounced_date", "bounce_reason", "updated_at"])

    _log_status(cheque, user)
    return cheque


@transaction.atomic
def cancel_cheque(*, cheque_id, firm_id=None, user=None) -> Cheque:
    cheque = _lock(cheque_id, firm_id=firm_id)
    validate_transition(cheque=cheque, target_status=Cheque.STATUS_CANCELLED)

    cheque.status = Cheque.STATUS_CANCELLED
    cheque.save(update_fields=["status", "updated_at"])

    _log_status(cheque, user)
    return cheque
