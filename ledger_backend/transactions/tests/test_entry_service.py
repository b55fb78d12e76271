from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from firms.tests.factories import days_ago, make_firm, make_party, make_txn, make_user
from ledger.exceptions import InvalidInput
from ledger.services.balance_service import get_party_balance
from parties.models import Party
from parties.services.party_store import PartyNotFound, update_party_balance
from transactions.models import Transaction
from transactions.services.entry_service import (
    approve_transaction,
    delete_pending_transaction,
    record_transaction,
    reject_transaction,
    update_pending_transaction,
)
from transactions.services.transaction_lifecycle import (
    InvalidTransactionTransitionError,
    TransactionNotEditableError,
    can_transition,
)


class EntryServiceTests(TestCase):
    """
    GUARANTEES:
    - collections start pending; sales start approved for approvers only
    - type must match the party type
    - only pending rows can be edited or deleted
    - approval changes the balance by exactly the signed amount
    """

    def setUp(self):
        self.firm = make_firm("Alpha Traders")
        self.accountant = make_user("accountant")
        self.field = make_user("field_staff")
        self.customer = make_party(self.firm, name="Gupta Stores", balance="1000.00")
        self.supplier = make_party(self.firm, name="Paper Mills", type=Party.TYPE_SUPPLIER)

    # --------------------------------------------------
    # RECORD
    # --------------------------------------------------

    def test_initial_status(self):
        sale = record_transaction(
            firm=self.firm, party_id=self.customer.id, txn_type="sale", amount="100", user=self.accountant
        )
        field_sale = record_transaction(
            firm=self.firm, party_id=self.customer.id, txn_type="sale", amount="100", user=self.field
        )
        collection = record_transaction(
            firm=self.firm, party_id=self.customer.id, txn_type="collection", amount="100", user=self.accountant
        )

        self.assertEqual(sale.status, Transaction.STATUS_APPROVED)
        self.assertEqual(sale.approved_by, self.accountant)
        self.assertIsNotNone(sale.approved_at)
        self.assertEqual(field_sale.status, Transaction.STATUS_PENDING)
        self.assertEqual(collection.status, Transaction.STATUS_PENDING)

    def test_type_must_match_party(self):
        with self.assertRaises(InvalidInput):
            record_transaction(firm=self.firm, party_id=self.customer.id, txn_type="purchase", amount="10")
        with self.assertRaises(InvalidInput):
            record_transaction(firm=self.firm, party_id=self.supplier.id, txn_type="sale", amount="10")
        with self.assertRaises(InvalidInput):
            record_transaction(firm=self.firm, party_id=self.customer.id, txn_type="payment", amount="10")

    def test_amount_rules(self):
        for amount in ("0", "-1", "10.001", "ten"):
            with self.subTest(amount=amount):
                with self.assertRaises(InvalidInput):
                    record_transaction(
                        firm=self.firm, party_id=self.customer.id, txn_type="sale", amount=amount
                    )

    def test_party_must_be_in_firm_and_active(self):
        other = make_firm("Beta Distributors")
        with self.assertRaises(PartyNotFound):
            record_transaction(firm=other, party_id=self.customer.id, txn_type="sale", amount="10")

        self.customer.is_active = False
        self.customer.save()
        with self.assertRaises(InvalidInput):
            record_transaction(firm=self.firm, party_id=self.customer.id, txn_type="sale", amount="10")

    def test_unknown_payment_method(self):
        with self.assertRaises(InvalidInput):
            record_transaction(
                firm=self.firm,
                party_id=self.customer.id,
                txn_type="collection",
                amount="10",
                payment_method="barter",
            )

    def test_date_must_follow_balance_date(self):
        # customer balance_as_of is days_ago(30)
        with self.assertRaises(InvalidInput):
            record_transaction(
                firm=self.firm,
                party_id=self.customer.id,
                txn_type="sale",
                amount="10",
                transaction_date=days_ago(30),
                user=self.accountant,
            )

        txn = record_transaction(
            firm=self.firm,
            party_id=self.customer.id,
            txn_type="sale",
            amount="10",
            transaction_date=days_ago(29),
            user=self.field,
        )
        with self.assertRaises(InvalidInput):
            update_pending_transaction(txn_id=txn.id, changes={"transaction_date": days_ago(31)})
        txn.refresh_from_db()
        self.assertEqual(txn.transaction_date, days_ago(29))

    def test_new_party_takes_same_day_sale(self):
        party = Party.objects.create(firm=self.firm, name="Fresh Mart", type=Party.TYPE_CUSTOMER)
        self.assertEqual(party.balance_as_of, days_ago(1))

        sale = record_transaction(
            firm=self.firm,
            party_id=party.id,
            txn_type="sale",
            amount="1000",
            transaction_date=timezone.localdate(),
            user=self.accountant,
        )

        self.assertEqual(sale.status, Transaction.STATUS_APPROVED)
        self.assertEqual(get_party_balance(party=party).balance, Decimal("1000.00"))

    # --------------------------------------------------
    # APPROVAL
    # --------------------------------------------------

    def test_approve_collection_moves_balance_and_last_payment(self):
        txn = record_transaction(
            firm=self.firm,
            party_id=self.customer.id,
            txn_type="collection",
            amount="400",
            transaction_date=days_ago(3),
            payment_method="upi",
            user=self.field,
        )
        before = get_party_balance(party=self.customer).balance

        approve_transaction(txn_id=txn.id, user=self.accountant)

        after = get_party_balance(party=self.customer).balance
        self.assertEqual(before - after, Decimal("400"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.last_payment_date, days_ago(3))

    def test_approve_refused_once_reconciled_past_it(self):
        txn = make_txn(self.customer, status=Transaction.STATUS_PENDING, transaction_date=days_ago(3))
        update_party_balance(party_id=self.customer.id, new_balance="1000.00", as_of=days_ago(1))

        with self.assertRaises(InvalidInput):
            approve_transaction(txn_id=txn.id, user=self.accountant)

        txn.refresh_from_db()
        self.assertEqual(txn.status, Transaction.STATUS_PENDING)

    def test_approve_is_idempotent(self):
        txn = make_txn(self.customer, status=Transaction.STATUS_PENDING)
        approve_transaction(txn_id=txn.id, user=self.accountant)
        approve_transaction(txn_id=txn.id, user=self.accountant)

        self.assertEqual(get_party_balance(party=self.customer).balance, Decimal("1100.00"))

    def test_rejected_is_terminal(self):
        txn = make_txn(self.customer, status=Transaction.STATUS_PENDING)
        rejected = reject_transaction(txn_id=txn.id, user=self.accountant, reason=" duplicate ")

        self.assertEqual(rejected.rejection_reason, "duplicate")
        with self.assertRaises(InvalidTransactionTransitionError):
            approve_transaction(txn_id=txn.id, user=self.accountant)
        self.assertEqual(get_party_balance(party=self.customer).balance, Decimal("1000.00"))

    def test_approved_cannot_be_rejected(self):
        txn = make_txn(self.customer)
        with self.assertRaises(InvalidTransactionTransitionError):
            reject_transaction(txn_id=txn.id, user=self.accountant)

    def test_transition_table(self):
        self.assertTrue(can_transition(from_status="pending", to_status="approved"))
        self.assertTrue(can_transition(from_status="pending", to_status="rejected"))
        self.assertFalse(can_transition(from_status="rejected", to_status="approved"))
        self.assertFalse(can_transition(from_status="approved", to_status="pending"))

    # --------------------------------------------------
    # EDIT / DELETE
    # --------------------------------------------------

    def test_edit_pending(self):
        txn = make_txn(self.customer, status=Transaction.STATUS_PENDING, amount="50.00")
        txn = update_pending_transaction(txn_id=txn.id, changes={"amount": "75.50", "notes": "corrected"})

        self.assertEqual(txn.amount, Decimal("75.50"))
        self.assertEqual(txn.notes, "corrected")

    def test_edit_rejects_unknown_fields_and_approved_rows(self):
        pending = make_txn(self.customer, status=Transaction.STATUS_PENDING)
        with self.assertRaises(InvalidInput):
            update_pending_transaction(txn_id=pending.id, changes={"status": "approved"})

        approved = make_txn(self.customer)
        with self.assertRaises(TransactionNotEditableError):
            update_pending_transaction(txn_id=approved.id, changes={"amount": "1"})
        with self.assertRaises(TransactionNotEditableError):
            delete_pending_transaction(txn_id=approved.id)

    def test_delete_pending(self):
        txn = make_txn(self.customer, status=Transaction.STATUS_PENDING)
        delete_pending_transaction(txn_id=txn.id)
        self.assertFalse(Transaction.objects.filter(id=txn.id).exists())
