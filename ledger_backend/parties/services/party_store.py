# parties/services/party_store.py

"""
PARTY STORE

Contract used by the ledger:
- fetch_party(party_id, firm_id?)          -> Party         (PartyNotFound / DataUnavailable)
- snapshot(party)                           -> PartySnapshot (engine input)
- update_party_balance(party_id, balance, as_of)  explicit reconciliation ONLY
- deactivate_party(party_id)                soft delete

Nothing here is called from a balance read path except fetch_party/snapshot.
"""

from __future__ import annotations

import logging
from datetime import date

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from ledger.engine import PartySnapshot, to_date, to_decimal
from ledger.exceptions import DataUnavailable, InvalidInput
from parties.models import Party

logger = logging.getLogger("parties")


class PartyStoreError(ValueError):
    pass


class PartyNotFound(PartyStoreError):
    pass


def fetch_party(*, party_id, firm_id=None, for_update: bool = False) -> Party:
    qs = Party.objects.select_related("firm", "location_group")
    if firm_id is not None:
        qs = qs.filter(firm_id=firm_id)
    if for_update:
        qs = qs.select_for_update()

    try:
        return qs.get(id=party_id)
    except (Party.DoesNotExist, ValidationError, ValueError) as exc:
        raise PartyNotFound(f"Party {party_id} not found") from exc
    except DatabaseError as exc:
        logger.exception("Party fetch failed", extra={"party_id": str(party_id)})
        raise DataUnavailable("Party data is temporarily unavailable. Please retry.") from exc


def snapshot(party: Party) -> PartySnapshot:
    return PartySnapshot.from_raw(
        party_id=party.id,
        party_type=party.type,
        balance=party.balance,
        balance_as_of=party.balance_as_of,
        name=party.name,
    )


@transaction.atomic
def update_party_balance(
    *,
    party_id,
    new_balance,
    as_of=None,
    firm_id=None,
    acting_user=None,
) -> Party:
    """
    Reconcile: set the stored balance as of a date.

    After this, only transactions dated AFTER `as_of` are added on top.
    `as_of` defaults to today and may not be in the future.
    """
    balance = to_decimal(new_balance, label="balance")
    if balance != balance.quantize(to_decimal("0.01")):
        raise InvalidInput("balance must have at most 2 decimal places")

    as_of_date = to_date(as_of, label="as_of") if as_of else timezone.localdate()
    if as_of_date > timezone.localdate():
        raise InvalidInput("as_of cannot be in the future")

    party = fetch_party(party_id=party_id, firm_id=firm_id, for_update=True)

    previous_balance = party.balance
    previous_as_of = party.balance_as_of

    party.balance = balance
    party.balance_as_of = as_of_date
    party.save(update_fields=["balance", "balance_as_of", "updated_at"])

    logger.info(
        "Party balance reconciled",
        extra={
            "party_id": str(party.id),
            "firm_id": str(party.firm_id),
            "previous_balance": str(previous_balance),
            "previous_as_of": previous_as_of.isoformat(),
            "balance": str(balance),
            "as_of": as_of_date.isoformat(),
            "acting_user_id": str(getattr(acting_user, "id", "")),
        },
    )
    return party


@transaction.atomic
def deactivate_party(*, party_id, firm_id=None, acting_user=None) -> Party:
    party = fetch_party(party_id=party_id, firm_id=firm_id, for_update=True)
    if not party.is_active:
        return party

    party.is_active = False
    party.save(update_fields=["is_active", "updated_at"])

    logger.info(
        "Party deactivated",
        extra={
            "party_id": str(party.id),
            "firm_id": str(party.firm_id),
            "acting_user_id": str(getattr(acting_user, "id", "")),
        },
    )
    return party


def debtor_days(*, party: Party, current_balance, today: date | None = None) -> int:
    """
    Days a customer has been carrying a positive balance without paying:
    measured from last_payment_date, or from balance_as_of if never paid.
    Suppliers and settled customers are 0.
    """
    if party.type != Party.TYPE_CUSTOMER:
        return 0
    if to_decimal(current_balance, label="balance") <= 0:
        return 0

    today = today or timezone.localdate()
    since = party.last_payment_date or party.balance_as_of
    return max((today - since).days, 0)
