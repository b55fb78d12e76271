# bills/text_parser.py

r"""
======================================================
PATH: bills/text_parser.py
======================================================
FREE-TEXT BILL PARSER (BEST EFFORT)

One item per line:

    <description> {–|-} <total pieces>[ pcs|pieces|p] {\|/} <pieces per case>

    "MANSA A4 172 MRP 80/85 – 324 pcs\ 162"
      -> description "MANSA A4 172 MRP 80/85", 324 pieces, 162 per case,
         2 cases, unit price 85, total 27540

Heuristics (documented behavior, not a guarantee of correctness):
- unit price = LAST number in the description (optionally with 2 decimals),
  0 when there is none. "MRP 80/85" therefore prices at 85.
- cases = floor(total pieces / pieces per case)
- total price = total pieces * unit price

Lines that do not match are skipped. Zero parsed lines raise NoValidBillItems.
A line with 0 pieces per case cannot be cased and is skipped too.
======================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import List

LINE_PATTERN = re.compile(
    r"^(.+?)\s*[–-]\s*(\d+)(?:\s*(?:pcs?|pieces?|p))?\s*[\\/]\s*(\d+)$",
    re.IGNORECASE,
)
PRICE_PATTERN = re.compile(r"(\d+(?:\.\d{2})?)")

EXPECTED_FORMAT = '"Description – Total pieces \\ Pieces per case"'


class BillParseError(ValueError):
    pass


class NoValidBillItems(BillParseError):
    def __init__(self, message: str | None = None):
        super().__init__(message or f"No valid items found. Expected one item per line: {EXPECTED_FORMAT}")


@dataclass(frozen=True)
class ParsedBillItem:
    product_name: str
    quantity: int
    pieces_per_case: int
    cases: int
    unit_price: Decimal
    total_price: Decimal
    line_number: int = 0

    def as_dict(self) -> dict:
        return {
            "product_name": self.product_name,
            "quantity": self.quantity,
            "pieces_per_case": self.pieces_per_case,
            "cases": self.cases,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
            "line_number": self.line_number,
        }


def guess_unit_price(description: str) -> Decimal:
    numbers = PRICE_PATTERN.findall(description or "")
    if not numbers:
        return Decimal("0")
    return Decimal(numbers[-1])


def parse_bill_line(line: str, *, line_number: int = 0) -> ParsedBillItem | None:
    match = LINE_PATTERN.match((line or "").strip())
    if not match:
        return None

    description, total_pieces, per_case = match.groups()
    quantity = int(total_pieces)
    pieces_per_case = int(per_case)
    if pieces_per_case <= 0:
        return None

    description = description.strip()
    unit_price = guess_unit_price(description)

    return ParsedBillItem(
        product_name=description,
        quantity=quantity,
        pieces_per_case=pieces_per_case,
        cases=quantity // pieces_per_case,
        unit_price=unit_price,
        total_price=unit_price * quantity,
        line_number=line_number,
    )


def parse_bill_text(text: str) -> List[ParsedBillItem]:
    items: List[ParsedBillItem] = []
    for number, line in enumerate((text or "").splitlines(), start=1):
        if not line.strip():
            continue
        item = parse_bill_line(line, line_number=number)
        if item is not None:
            items.append(item)

    if not items:
        raise NoValidBillItems()
    return items
