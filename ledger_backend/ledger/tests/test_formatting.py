# ledger/tests/test_formatting.py

from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from ledger.exceptions import InvalidInput
from ledger.formatting import (
    LINE_PLACES,
    balance_label,
    format_amount,
    format_balance,
    format_currency,
)


@override_settings(CURRENCY_SYMBOL="₹")
class FormattingTests(SimpleTestCase):
    def test_indian_grouping(self):
        cases = {
            "0": "0",
            "999": "999",
            "1000": "1,000",
            "123456": "1,23,456",
            "1234567": "12,34,567",
            "123456789": "12,34,56,789",
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(format_amount(raw), expected)

    def test_line_places_keep_two_decimals(self):
        self.assertEqual(format_amount("1234.5", LINE_PLACES), "1,234.50")
        self.assertEqual(format_amount(Decimal("27540"), LINE_PLACES), "27,540.00")

    def test_half_up_rounding(self):
        self.assertEqual(format_amount("2.5"), "3")
        self.assertEqual(format_amount("-2.5"), "-3")
        self.assertEqual(format_amount("0.125", LINE_PLACES), "0.13")

    def test_currency_symbol_after_sign(self):
        self.assertEqual(format_currency("-1500"), "-₹1,500")
        self.assertEqual(format_currency("1500", symbol="Rs "), "Rs 1,500")

    def test_dr_cr_labels(self):
        self.assertEqual(balance_label("10"), "DR")
        self.assertEqual(balance_label("-0.01"), "CR")
        self.assertEqual(balance_label("0"), "")

        self.assertEqual(format_balance("1200"), "₹1,200 DR")
        self.assertEqual(format_balance("-1200"), "₹1,200 CR")
        self.assertEqual(format_balance("0"), "₹0")

    def test_garbage_rejected(self):
        with self.assertRaises(InvalidInput):
            format_amount("twelve")
