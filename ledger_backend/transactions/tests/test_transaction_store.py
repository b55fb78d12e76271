from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase

from firms.tests.factories import days_ago, make_firm, make_party, make_txn
from ledger.engine import LedgerTransaction
from ledger.exceptions import DataUnavailable
from transactions.models import Transaction
from transactions.services.transaction_store import fetch_approved_transactions


class TransactionStoreTests(TestCase):
    """
    GUARANTEES:
    - approved rows only, oldest first
    - `after` is exclusive; date_from / date_to are inclusive
    - a DB failure is DataUnavailable, never an empty list
    """

    def setUp(self):
        self.firm = make_firm("Alpha Traders")
        self.party = make_party(self.firm)
        self.other_party = make_party(self.firm, name="Rao Agencies")

        self.t10 = make_txn(self.party, amount="10", transaction_date=days_ago(10))
        self.t5 = make_txn(self.party, amount="5", transaction_date=days_ago(5))
        self.t1 = make_txn(self.party, amount="1", transaction_date=days_ago(1))
        make_txn(self.party, amount="99", transaction_date=days_ago(2), status=Transaction.STATUS_PENDING)
        make_txn(self.party, amount="98", transaction_date=days_ago(2), status=Transaction.STATUS_REJECTED)
        make_txn(self.other_party, amount="7", transaction_date=days_ago(3))

    def _ids(self, rows):
        return [r.id for r in rows]

    def test_approved_only_oldest_first(self):
        rows = fetch_approved_transactions(firm_id=self.firm.id, party_id=self.party.id)

        self.assertTrue(all(isinstance(r, LedgerTransaction) for r in rows))
        self.assertEqual(self._ids(rows), [str(self.t10.id), str(self.t5.id), str(self.t1.id)])
        self.assertEqual(rows[0].amount, Decimal("10.00"))
        self.assertEqual(rows[0].party_id, str(self.party.id))

    def test_after_is_exclusive(self):
        rows = fetch_approved_transactions(firm_id=self.firm.id, party_id=self.party.id, after=days_ago(5))
        self.assertEqual(self._ids(rows), [str(self.t1.id)])

    def test_inclusive_range(self):
        rows = fetch_approved_transactions(
            firm_id=self.firm.id,
            party_id=self.party.id,
            date_from=days_ago(10),
            date_to=days_ago(5),
        )
        self.assertEqual(self._ids(rows), [str(self.t10.id), str(self.t5.id)])

    def test_firm_wide_read(self):
        rows = fetch_approved_transactions(firm_id=self.firm.id)
        self.assertEqual(len(rows), 4)

        other_firm = make_firm("Beta Distributors")
        self.assertEqual(fetch_approved_transactions(firm_id=other_firm.id), [])

    def test_db_failure_raises(self):
        with patch("django.db.models.query.QuerySet._fetch_all", side_effect=DatabaseError("down")):
            with self.assertRaises(DataUnavailable):
                fetch_approved_transactions(firm_id=self.firm.id)
