# ledger/formatting.py

"""
DISPLAY FORMATTING (en-IN)

- Indian digit grouping: 1234567 -> 12,34,567
- 0 decimals for lists / summaries, 2 decimals for statement lines
- ROUND_HALF_UP happens here and only here; the engine never rounds
- DR / CR label: DR when the party owes (positive), CR when negative
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from ledger.engine import to_decimal

SUMMARY_PLACES = 0
LINE_PLACES = 2

LABEL_DEBIT = "DR"
LABEL_CREDIT = "CR"


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits

    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def _symbol(symbol: str | None) -> str:
    if symbol is not None:
        return symbol
    return getattr(settings, "CURRENCY_SYMBOL", "₹")


def format_amount(value, places: int = SUMMARY_PLACES) -> str:
    """12,34,567 / 12,34,567.50 (no symbol)."""
    d = to_decimal(value)
    quant = Decimal(1).scaleb(-places)
    q = d.quantize(quant, rounding=ROUND_HALF_UP)

    negative = q < 0
    text = f"{abs(q):.{places}f}"
    whole, _, frac = text.partition(".")
    out = _group_indian(whole)
    if frac:
        out = f"{out}.{frac}"
    return f"-{out}" if negative else out


def format_currency(value, places: int = SUMMARY_PLACES, symbol: str | None = None) -> str:
    text = format_amount(value, places)
    sym = _symbol(symbol)
    if text.startswith("-"):
        return f"-{sym}{text[1:]}"
    return f"{sym}{text}"


def balance_label(balance) -> str:
    d = to_decimal(balance, label="balance")
    if d > 0:
        return LABEL_DEBIT
    if d < 0:
        return LABEL_CREDIT
    return ""


def format_balance(balance, places: int = SUMMARY_PLACES, symbol: str | None = None) -> str:
    """Absolute amount + DR/CR, e.g. '₹1,200 DR'."""
    d = to_decimal(balance, label="balance")
    label = balance_label(d)
    text = format_currency(abs(d), places, symbol)
    return f"{text} {label}" if label else text
