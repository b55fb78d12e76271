# ledger/engine.py

"""
PATH: ledger/engine.py

PARTY LEDGER ENGINE (FRAMEWORK-AGNOSTIC)

One canonical place for party balance + statement arithmetic. Every view,
report and dashboard figure goes through here; nothing re-derives signs.

Sign table (delta of one approved transaction on the party's balance):
    (customer, sale)        -> +amount   customer owes more
    (customer, collection)  -> -amount   customer paid
    (supplier, purchase)    -> +amount   firm owes supplier more
    (supplier, collection)  -> -amount   firm paid supplier
Any other pair contributes 0 and is reported as an AnomalousTransaction.

Rules:
- Only status=approved transactions count.
- party.balance already includes everything dated on or before
  party.balance_as_of, so only transaction_date > balance_as_of is added
  (exclusive boundary).
- Money stays exact Decimal; rounding is a display concern (ledger/formatting.py).
- Pure: inputs are never mutated, same input -> same output.

Statements are rebuilt BACKWARD from the closing balance, so the last line
always agrees with the current balance even if the stored opening balance
has drifted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence, Tuple

from ledger.exceptions import InvalidInput

ZERO = Decimal("0.00")

PARTY_CUSTOMER = "customer"
PARTY_SUPPLIER = "supplier"

TX_SALE = "sale"
TX_COLLECTION = "collection"
TX_PURCHASE = "purchase"
TX_PAYMENT = "payment"

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

SIGN_TABLE: dict[Tuple[str, str], int] = {
    (PARTY_CUSTOMER, TX_SALE): 1,
    (PARTY_CUSTOMER, TX_COLLECTION): -1,
    (PARTY_SUPPLIER, TX_PURCHASE): 1,
    (PARTY_SUPPLIER, TX_COLLECTION): -1,
}

OPENING_BALANCE_LABEL = "Opening Balance"
OPENING_BALANCE_REFERENCE = "OB"

LINE_OPENING = "opening_balance"
LINE_TRANSACTION = "transaction"


def to_decimal(value, *, label: str = "amount") -> Decimal:
    """
    Exact Decimal from Decimal / int / str. Floats go through str() so 0.1
    stays 0.1. Anything else is InvalidInput.
    """
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid {label}: {value!r}")
    try:
        if isinstance(value, Decimal):
            d = value
        else:
            d = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidInput(f"Invalid {label}: {value!r}") from exc

    if not d.is_finite():
        raise InvalidInput(f"Invalid {label}: {value!r}")
    return d


def to_date(value, *, label: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidInput(f"Invalid {label} (expected YYYY-MM-DD): {value!r}") from exc
    raise InvalidInput(f"Invalid {label}: {value!r}")


# =========================================================
# INPUT SHAPES
# =========================================================


@dataclass(frozen=True)
class PartySnapshot:
    """
    What the engine needs to know about a party.

    - balance: stored opening / reconciled balance
    - balance_as_of: last date already folded into `balance`
    """

    party_id: str
    party_type: str
    balance: Decimal
    balance_as_of: date
    name: str = ""

    @staticmethod
    def from_raw(
        *,
        party_id,
        party_type: str,
        balance,
        balance_as_of,
        name: str = "",
    ) -> "PartySnapshot":
        party_type = (party_type or "").strip().lower()
        if party_type not in (PARTY_CUSTOMER, PARTY_SUPPLIER):
            raise InvalidInput(f"Unknown party type: {party_type!r}")
        return PartySnapshot(
            party_id=str(party_id),
            party_type=party_type,
            balance=to_decimal(balance, label="balance"),
            balance_as_of=to_date(balance_as_of, label="balance_as_of"),
            name=name or "",
        )


@dataclass(frozen=True)
class LedgerTransaction:
    id: str
    type: str
    amount: Decimal
    transaction_date: date
    status: str = STATUS_APPROVED
    created_at: Optional[datetime] = None
    bill_number: str = ""
    payment_method: str = ""
    reference_number: str = ""
    notes: str = ""
    party_id: str = ""


@dataclass(frozen=True)
class DateRange:
    date_from: date
    date_to: date

    @staticmethod
    def from_raw(date_from, date_to) -> "DateRange":
        if date_from in (None, "") or date_to in (None, ""):
            raise InvalidInput("Both date_from and date_to are required")

        d1 = to_date(date_from, label="date_from")
        d2 = to_date(date_to, label="date_to")
        if d1 > d2:
            raise InvalidInput(f"date_from ({d1}) must not be after date_to ({d2})")
        return DateRange(date_from=d1, date_to=d2)

    def contains(self, d: date) -> bool:
        return self.date_from <= d <= self.date_to


# =========================================================
# OUTPUT SHAPES
# =========================================================


@dataclass(frozen=True)
class AnomalousTransaction:
    """A transaction whose (party type, transaction type) pair has no sign."""

    transaction_id: str
    party_id: str
    party_type: str
    transaction_type: str
    amount: Decimal
    transaction_date: date
    reason: str

    def as_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "party_id": self.party_id,
            "party_type": self.party_type,
            "transaction_type": self.transaction_type,
            "amount": str(self.amount),
            "transaction_date": self.transaction_date.isoformat(),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class BalanceResult:
    balance: Decimal
    counted: int
    anomalies: Tuple[AnomalousTransaction, ...] = ()


@dataclass(frozen=True)
class StatementLine:
    date: date
    description: str
    debit: Decimal
    credit: Decimal
    running_balance: Decimal
    kind: str = LINE_TRANSACTION
    transaction_id: Optional[str] = None
    transaction_type: str = ""
    reference: str = ""
    payment_method: str = ""


@dataclass(frozen=True)
class Statement:
    party_id: str
    date_range: DateRange
    opening_balance: Decimal
    closing_balance: Decimal
    total_debits: Decimal
    total_credits: Decimal
    lines: Tuple[StatementLine, ...]
    anomalies: Tuple[AnomalousTransaction, ...] = field(default_factory=tuple)

    @property
    def transaction_lines(self) -> Tuple[StatementLine, ...]:
        return tuple(line for line in self.lines if line.kind == LINE_TRANSACTION)


# =========================================================
# CORE RULES
# =========================================================


def sign_for(party_type: str, transaction_type: str) -> Optional[int]:
    return SIGN_TABLE.get((party_type, transaction_type))


def ledger_delta(party_type: str, txn: LedgerTransaction) -> Optional[Decimal]:
    """
    Signed effect of one transaction on the party balance.
    None means the pair is not in the sign table (anomaly).
    """
    sign = sign_for(party_type, txn.type)
    if sign is None:
        return None
    return txn.amount if sign > 0 else -txn.amount


def counts_toward_balance(party: PartySnapshot, txn: LedgerTransaction) -> bool:
    return txn.status == STATUS_APPROVED and txn.transaction_date > party.balance_as_of


def _chronological_key(txn: LedgerTransaction):
    # Same-day ties fall back to entry order, then id, so ordering is total.
    has_created = txn.created_at is not None
    return (
        txn.transaction_date,
        has_created,
        txn.created_at.timestamp() if has_created else 0.0,
        str(txn.id),
    )


def _validated(transactions: Iterable[LedgerTransaction]) -> List[LedgerTransaction]:
    out: List[LedgerTransaction] = []
    for txn in transactions or []:
        if not isinstance(txn.amount, Decimal):
            raise InvalidInput(f"Transaction {txn.id}: amount must be a Decimal")
        if txn.amount <= ZERO:
            raise InvalidInput(f"Transaction {txn.id}: amount must be > 0, got {txn.amount}")
        if not isinstance(txn.transaction_date, date):
            raise InvalidInput(f"Transaction {txn.id}: transaction_date must be a date")
        out.append(txn)
    return out


def _anomaly(party: PartySnapshot, txn: LedgerTransaction) -> AnomalousTransaction:
    return AnomalousTransaction(
        transaction_id=str(txn.id),
        party_id=party.party_id,
        party_type=party.party_type,
        transaction_type=txn.type,
        amount=txn.amount,
        transaction_date=txn.transaction_date,
        reason=f"No ledger sign for ({party.party_type}, {txn.type})",
    )


# =========================================================
# OPERATIONS
# =========================================================


def compute_current_balance(
    party: PartySnapshot,
    transactions: Sequence[LedgerTransaction],
) -> BalanceResult:
    """
    balance = party.balance + sum(delta(t)) over approved t with
    transaction_date > party.balance_as_of.

    Non-approved and already-folded transactions are filtered here even if
    the store already did it. Unknown pairs are skipped and reported.
    """
    txns = _validated(transactions)

    total = party.balance
    counted = 0
    anomalies: List[AnomalousTransaction] = []

    for txn in sorted(txns, key=_chronological_key):
        if not counts_toward_balance(party, txn):
            continue

        delta = ledger_delta(party.party_type, txn)
        if delta is None:
            anomalies.append(_anomaly(party, txn))
            continue

        total += delta
        counted += 1

    return BalanceResult(balance=total, counted=counted, anomalies=tuple(anomalies))


def build_statement(
    party: PartySnapshot,
    transactions: Sequence[LedgerTransaction],
    date_range: DateRange,
    closing_balance: Decimal,
) -> Statement:
    """
    Backward reconstruction:
    1. in-range counted transactions, newest first (stable tie-break)
    2. running = closing_balance
    3. each line records `running` (balance AFTER it), then running -= delta
    4. what is left is the opening balance, emitted first, dated date_from
    5. lines returned oldest first

    Column convention: debit = movement that raises the party balance,
    credit = movement that lowers it.
    """
    if not isinstance(date_range, DateRange):
        raise InvalidInput("date_range must be a DateRange")

    closing = to_decimal(closing_balance, label="closing_balance")
    txns = _validated(transactions)

    in_range = [
        t for t in txns if counts_toward_balance(party, t) and date_range.contains(t.transaction_date)
    ]
    newest_first = sorted(in_range, key=_chronological_key, reverse=True)

    running = closing
    processed: List[StatementLine] = []
    anomalies: List[AnomalousTransaction] = []
    total_debits = ZERO
    total_credits = ZERO

    for txn in newest_first:
        delta = ledger_delta(party.party_type, txn)
        if delta is None:
            anomalies.append(_anomaly(party, txn))
            continue

        debit = delta if delta > ZERO else ZERO
        credit = -delta if delta < ZERO else ZERO
        total_debits += debit
        total_credits += credit

        processed.append(
            StatementLine(
                date=txn.transaction_date,
                description=describe_transaction(txn),
                debit=debit,
                credit=credit,
                running_balance=running,
                kind=LINE_TRANSACTION,
                transaction_id=str(txn.id),
                transaction_type=txn.type,
                reference=txn.bill_number or txn.reference_number or "",
                payment_method=txn.payment_method or "",
            )
        )
        running -= delta

    opening = running
    opening_line = StatementLine(
        date=date_range.date_from,
        description=OPENING_BALANCE_LABEL,
        debit=opening if opening > ZERO else ZERO,
        credit=-opening if opening < ZERO else ZERO,
        running_balance=opening,
        kind=LINE_OPENING,
        reference=OPENING_BALANCE_REFERENCE,
    )

    processed.reverse()

    return Statement(
        party_id=party.party_id,
        date_range=date_range,
        opening_balance=opening,
        closing_balance=closing,
        total_debits=total_debits,
        total_credits=total_credits,
        lines=(opening_line, *processed),
        anomalies=tuple(reversed(anomalies)),
    )


def describe_transaction(txn: LedgerTransaction) -> str:
    if txn.type == TX_SALE:
        return f"Sale - Bill #{txn.bill_number or 'N/A'}"

    if txn.type == TX_PURCHASE:
        return f"Purchase - Bill #{txn.bill_number or 'N/A'}"

    if txn.type in (TX_COLLECTION, TX_PAYMENT):
        method = (txn.payment_method or "").strip() or "Other"
        label = "Payment Received" if txn.type == TX_COLLECTION else "Payment"
        text = f"{label} ({method})"
        notes = (txn.notes or "").strip()
        if notes:
            text = f"{text} - {notes}"
        return text

    return (txn.type or "Transaction").replace("_", " ").title()
