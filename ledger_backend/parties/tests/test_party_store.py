from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from firms.tests.factories import days_ago, make_firm, make_party, make_txn
from ledger.exceptions import DataUnavailable, InvalidInput
from ledger.services.balance_service import get_party_balance
from parties.models import LocationGroup, Party
from parties.services.party_store import (
    PartyNotFound,
    deactivate_party,
    debtor_days,
    fetch_party,
    snapshot,
    update_party_balance,
)


class PartyStoreTests(TestCase):
    """
    GUARANTEES:
    - fetch_party never crosses firms
    - reconciliation is the only path that rewrites balance / balance_as_of
    - a balance read leaves the stored row untouched
    """

    def setUp(self):
        self.firm = make_firm("Alpha Traders")
        self.other = make_firm("Beta Distributors")
        self.party = make_party(self.firm, balance="1000.00")

    # --------------------------------------------------
    # FETCH
    # --------------------------------------------------

    def test_fetch_scoped_by_firm(self):
        self.assertEqual(fetch_party(party_id=self.party.id, firm_id=self.firm.id), self.party)

        with self.assertRaises(PartyNotFound):
            fetch_party(party_id=self.party.id, firm_id=self.other.id)
        with self.assertRaises(PartyNotFound):
            fetch_party(party_id="not-a-uuid")

    def test_fetch_db_failure_is_data_unavailable(self):
        with patch("django.db.models.query.QuerySet.get", side_effect=DatabaseError("gone")):
            with self.assertRaises(DataUnavailable):
                fetch_party(party_id=self.party.id)

    def test_snapshot(self):
        snap = snapshot(self.party)
        self.assertEqual(snap.party_id, str(self.party.id))
        self.assertEqual(snap.party_type, "customer")
        self.assertEqual(snap.balance, Decimal("1000.00"))

    # --------------------------------------------------
    # RECONCILIATION
    # --------------------------------------------------

    def test_balance_read_does_not_write(self):
        make_txn(self.party, amount="250.00")
        before = Party.objects.get(id=self.party.id)

        result = get_party_balance(party=self.party)

        after = Party.objects.get(id=self.party.id)
        self.assertEqual(result.balance, Decimal("1250.00"))
        self.assertEqual(after.balance, before.balance)
        self.assertEqual(after.balance_as_of, before.balance_as_of)
        self.assertEqual(after.updated_at, before.updated_at)

    def test_reconcile_folds_history(self):
        make_txn(self.party, amount="250.00", transaction_date=days_ago(5))

        update_party_balance(party_id=self.party.id, new_balance="1250.00", as_of=days_ago(2))
        self.party.refresh_from_db()

        self.assertEqual(self.party.balance, Decimal("1250.00"))
        self.assertEqual(self.party.balance_as_of, days_ago(2))
        # the folded sale is not counted a second time
        self.assertEqual(get_party_balance(party=self.party).balance, Decimal("1250.00"))

        make_txn(self.party, amount="100.00", transaction_date=days_ago(1))
        self.assertEqual(get_party_balance(party=self.party).balance, Decimal("1350.00"))

    def test_reconcile_defaults_to_today(self):
        party = update_party_balance(party_id=self.party.id, new_balance=0)
        self.assertEqual(party.balance_as_of, timezone.localdate())

    def test_reconcile_rejects_bad_input(self):
        with self.assertRaises(InvalidInput):
            update_party_balance(
                party_id=self.party.id,
                new_balance="10",
                as_of=timezone.localdate() + timedelta(days=1),
            )
        with self.assertRaises(InvalidInput):
            update_party_balance(party_id=self.party.id, new_balance="10.005")
        with self.assertRaises(InvalidInput):
            update_party_balance(party_id=self.party.id, new_balance="abc")

    # --------------------------------------------------
    # DEACTIVATION + DEBTOR DAYS
    # --------------------------------------------------

    def test_deactivate_is_soft_and_idempotent(self):
        deactivate_party(party_id=self.party.id)
        party = deactivate_party(party_id=self.party.id)

        self.assertFalse(party.is_active)
        self.assertTrue(Party.objects.filter(id=self.party.id).exists())

    def test_debtor_days(self):
        today = timezone.localdate()
        self.assertEqual(debtor_days(party=self.party, current_balance="500", today=today), 30)
        self.assertEqual(debtor_days(party=self.party, current_balance="0", today=today), 0)

        self.party.last_payment_date = days_ago(4)
        self.assertEqual(debtor_days(party=self.party, current_balance="500", today=today), 4)

        supplier = make_party(self.firm, name="Paper Mills", type=Party.TYPE_SUPPLIER)
        self.assertEqual(debtor_days(party=supplier, current_balance="500", today=today), 0)


class PartyModelTests(TestCase):
    def test_location_group_must_share_firm(self):
        alpha = make_firm("Alpha Traders")
        beta = make_firm("Beta Distributors")
        group = LocationGroup.objects.create(firm=beta, name="Market Road")

        with self.assertRaises(ValidationError):
            make_party(alpha, location_group=group)

    def test_name_is_trimmed_and_required(self):
        firm = make_firm()
        party = make_party(firm, name="  Gupta Stores  ")
        self.assertEqual(party.name, "Gupta Stores")

        with self.assertRaises(ValidationError):
            make_party(firm, name="   ")
