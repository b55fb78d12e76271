# bills/services/bill_service.py

"""
======================================================
PATH: bills/services/bill_service.py
======================================================
BILL ENTRY + REVIEW

create_bill:
- at least one item; items come from the text parser or manual entry
- per item: cases = floor(quantity / pieces_per_case),
  total_price = quantity * unit_price
- bill.total_amount = sum(item.total_price)
- optional supplier party must be an active supplier of the same firm;
  supplier_name defaults to the party name

approve_bill / reject_bill: pending only (see bill_lifecycle).
Bills never touch party balances.
======================================================
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from django.db import transaction
from django.utils import timezone

from bills.models import Bill, BillItem
from bills.services.bill_lifecycle import validate_transition
from bills.text_parser import NoValidBillItems
from ledger.engine import to_date, to_decimal
from ledger.exceptions import InvalidInput
from parties.models import Party
from parties.services.party_store import fetch_party

logger = logging.getLogger("bills")

TWOPLACES = Decimal("0.01")


def _money(value, *, label: str) -> Decimal:
    amount = to_decimal(value if value not in (None, "") else "0", label=label)
    if amount < 0:
        raise InvalidInput(f"{label} cannot be negative")
    return amount.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _count(value, *, label: str, minimum: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid {label}: {value!r}") from exc
    if number < minimum:
        raise InvalidInput(f"{label} must be at least {minimum}")
    return number


def _resolve_supplier(*, firm, party_id):
    if not party_id:
        return None
    party = fetch_party(party_id=party_id, firm_id=firm.id)
    if party.type != Party.TYPE_SUPPLIER:
        raise InvalidInput("Bills can only be linked to supplier parties")
    if not party.is_active:
        raise InvalidInput("Supplier is inactive")
    return party


@transaction.atomic
def create_bill(
    *,
    firm,
    bill_number: str,
    category: str,
    items: Iterable[Mapping],
    supplier_name: str = "",
    party_id=None,
    bill_date=None,
    notes: str = "",
    source_text: str = "",
    user=None,
) -> Bill:
    items = list(items or [])
    if not items:
        raise NoValidBillItems("A bill needs at least one item")

    party = _resolve_supplier(firm=firm, party_id=party_id)
    supplier_name = (supplier_name or "").strip() or (party.name if party else "")
    if not supplier_name:
        raise InvalidInput("supplier_name is required")

    bill = Bill.objects.create(
        firm=firm,
        party=party,
        bill_number=bill_number,
        supplier_name=supplier_name,
        bill_date=to_date(bill_date, label="bill_date") if bill_date else timezone.localdate(),
        category=category,
        notes=notes or "",
        source_text=source_text or "",
        created_by=user,
    )

    total = Decimal("0.00")
    for index, raw in enumerate(items, start=1):
        item = BillItem.objects.create(
            bill=bill,
            product_name=raw.get("product_name", ""),
            quantity=_count(raw.get("quantity"), label=f"item {index} quantity", minimum=1),
            pieces_per_case=_count(
                raw.get("pieces_per_case", 1), label=f"item {index} pieces_per_case", minimum=1
            ),
            unit_price=_money(raw.get("unit_price"), label=f"item {index} unit_price"),
            category=(raw.get("category") or category or "").strip(),
        )
        total += item.total_price

    bill.total_amount = total
    bill.save(update_fields=["total_amount", "updated_at"])

    logger.info(
        "Bill created",
        extra={
            "bill_id": str(bill.id),
            "firm_id": str(firm.id),
            "bill_number": bill.bill_number,
            "item_count": len(items),
            "total_amount": str(total),
        },
    )
    return bill


def _lock(bill_id, *, firm_id=None) -> Bill:
    qs = Bill.objects.select_for_update()
    if firm_id is not None:
        qs = qs.filter(firm_id=firm_id)
    return qs.get(id=bill_id)


@transaction.atomic
def approve_bill(*, bill_id, firm_id=None, user=None) -> Bill:
    bill = _lock(bill_id, firm_id=firm_id)
    if bill.status == Bill.STATUS_APPROVED:
        return bill

    validate_transition(bill=bill, target_status=Bill.STATUS_APPROVED)

    bill.status = Bill.STATUS_APPROVED
    bill.approved_by = user
    bill.approved_at = timezone.now()
    bill.save(update_fields=["status", "approved_by", "approved_at", "updated_at"])

    logger.info(
        "Bill approved",
        extra={"bill_id": str(bill.id), "user_id": str(getattr(user, "id", ""))},
    )
    return bill


@transaction.atomic
def reject_bill(*, bill_id, firm_id=None, user=None, reason: str = "") -> Bill:
    bill = _lock(bill_id, firm_id=firm_id)
    validate_transition(bill=bill, target_status=Bill.STATUS_REJECTED)

    bill.status = Bill.STATUS_REJECTED
    bill.rejected_by = user
    bill.rejected_at = timezone.now()
    bill.rejection_reason = (reason or "").strip()
    bill.save(update_fields=["status", "rejected_by", "rejected_at", "rejection_reason", "updated_at"])

    logger.info(
        "Bill rejected",
        extra={"bill_id": str(bill.id), "user_id": str(getattr(user, "id", ""))},
    )
    return bill
