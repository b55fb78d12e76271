# ledger/tests/test_balance_api.py

from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APIClient

from cheques.models import Cheque
from firms.tests.factories import days_ago, grant, make_firm, make_party, make_txn, make_user
from ledger.exceptions import DataUnavailable, InvalidInput
from ledger.services.balance_service import get_firm_balances, get_party_balance, get_party_statement
from parties.models import Party
from transactions.models import Transaction
from transactions.services.entry_service import approve_transaction, record_transaction


class BalanceServiceTests(TestCase):
    """
    GUARANTEES:
    - firm-wide balances match per-party balances
    - statement closing balance equals the live balance when date_to is today
    - an anomalous stored row is skipped, not fatal
    """

    def setUp(self):
        self.firm = make_firm("Alpha Traders")
        self.customer = make_party(self.firm, name="Gupta Stores", balance="1000.00")
        self.supplier = make_party(
            self.firm, name="Paper Mills", type=Party.TYPE_SUPPLIER, balance="200.00", balance_as_of=days_ago(10)
        )

        make_txn(self.customer, amount="500.00", transaction_date=days_ago(20))
        make_txn(self.customer, type=Transaction.TYPE_COLLECTION, amount="300.00", transaction_date=days_ago(5))
        make_txn(self.supplier, type=Transaction.TYPE_PURCHASE, amount="800.00", transaction_date=days_ago(15))
        make_txn(self.supplier, type=Transaction.TYPE_PURCHASE, amount="50.00", transaction_date=days_ago(2))

    def test_party_balances(self):
        self.assertEqual(get_party_balance(party=self.customer).balance, Decimal("1200.00"))
        # the 800 purchase predates balance_as_of and is already folded in
        self.assertEqual(get_party_balance(party=self.supplier).balance, Decimal("250.00"))

    def test_firm_balances_match(self):
        balances = get_firm_balances(firm=self.firm)
        self.assertEqual(balances[str(self.customer.id)].balance, Decimal("1200.00"))
        self.assertEqual(balances[str(self.supplier.id)].balance, Decimal("250.00"))

    def test_statement_closes_at_live_balance(self):
        stmt = get_party_statement(
            party=self.customer,
            date_from=days_ago(10).isoformat(),
            date_to=days_ago(0).isoformat(),
        )
        self.assertEqual(stmt.opening_balance, Decimal("1500.00"))
        self.assertEqual(stmt.closing_balance, Decimal("1200.00"))
        self.assertEqual(stmt.lines[-1].running_balance, Decimal("1200.00"))
        self.assertEqual(len(stmt.lines), 2)

    def test_historical_statement(self):
        stmt = get_party_statement(
            party=self.customer,
            date_from=days_ago(25).isoformat(),
            date_to=days_ago(10).isoformat(),
        )
        self.assertEqual(stmt.opening_balance, Decimal("1000.00"))
        self.assertEqual(stmt.closing_balance, Decimal("1500.00"))

    def test_statement_ending_before_balance_date_is_refused(self):
        # the 800 purchase is folded into the stored 200; no ledger rows exist before days_ago(10)
        with self.assertRaises(InvalidInput):
            get_party_statement(
                party=self.supplier,
                date_from=days_ago(20).isoformat(),
                date_to=days_ago(12).isoformat(),
            )

        stmt = get_party_statement(
            party=self.supplier,
            date_from=days_ago(20).isoformat(),
            date_to=days_ago(10).isoformat(),
        )
        self.assertEqual(stmt.closing_balance, Decimal("200.00"))
        self.assertEqual(len(stmt.transaction_lines), 0)

    def test_anomalous_row_is_reported(self):
        # legacy "payment" row on a customer: no sign, so it is skipped
        make_txn(self.customer, type=Transaction.TYPE_PAYMENT, amount="75.00", transaction_date=days_ago(3))

        with self.assertLogs("ledger", level="WARNING"):
            result = get_party_balance(party=self.customer)

        self.assertEqual(result.balance, Decimal("1200.00"))
        self.assertEqual(len(result.anomalies), 1)


class LedgerApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.firm = make_firm("Alpha Traders")
        self.other = make_firm("Beta Distributors")

        self.accountant = grant(make_user("accountant"), self.firm)
        self.field = grant(make_user("field_staff"), self.firm)

        self.party = make_party(self.firm, name="Gupta Stores", balance="1000.00")
        make_txn(self.party, amount="500.00", transaction_date=days_ago(3), bill_number="B-17")
        self.foreign = make_party(self.other, name="Hidden Mart")

    # --------------------------------------------------
    # BALANCE
    # --------------------------------------------------

    def test_balance(self):
        self.client.force_authenticate(self.field)
        res = self.client.get(f"/api/ledger/parties/{self.party.id}/balance/", {"request_seq": "7"})

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["balance"], "1500.00")
        self.assertEqual(body["opening_balance"], "1000.00")
        self.assertEqual(body["balance_label"], "DR")
        self.assertEqual(body["counted_transactions"], 1)
        self.assertEqual(body["request_seq"], "7")
        self.assertIn("generated_at", body)

    def test_pending_then_approved_moves_balance(self):
        txn = record_transaction(
            firm=self.firm,
            party_id=self.party.id,
            txn_type="collection",
            amount="200.00",
            transaction_date=days_ago(1),
            user=self.field,
        )
        self.client.force_authenticate(self.accountant)
        url = f"/api/ledger/parties/{self.party.id}/balance/"

        self.assertEqual(self.client.get(url).json()["balance"], "1500.00")
        approve_transaction(txn_id=txn.id, user=self.accountant)
        self.assertEqual(self.client.get(url).json()["balance"], "1300.00")

    def test_other_firm_party_is_404(self):
        self.client.force_authenticate(self.accountant)
        res = self.client.get(f"/api/ledger/parties/{self.foreign.id}/balance/")
        self.assertEqual(res.status_code, 404)

    def test_store_outage_is_503_not_zero(self):
        self.client.force_authenticate(self.accountant)
        with patch(
            "ledger.services.balance_service.fetch_approved_transactions",
            side_effect=DataUnavailable("Transaction data is temporarily unavailable. Please retry."),
        ):
            res = self.client.get(f"/api/ledger/parties/{self.party.id}/balance/")

        self.assertEqual(res.status_code, 503)
        self.assertNotIn("balance", res.json())
        self.assertTrue(res.json()["retryable"])

    # --------------------------------------------------
    # STATEMENT
    # --------------------------------------------------

    def test_statement(self):
        self.client.force_authenticate(self.accountant)
        res = self.client.get(
            f"/api/ledger/parties/{self.party.id}/statement/",
            {"date_from": days_ago(7).isoformat(), "date_to": days_ago(0).isoformat(), "request_seq": "abc"},
        )

        self.assertEqual(res.status_code, 200, res.content)
        body = res.json()
        opening, sale = body["lines"]
        self.assertEqual(opening["kind"], "opening_balance")
        self.assertEqual(opening["description"], "Opening Balance")
        self.assertEqual(opening["date"], days_ago(7).isoformat())
        self.assertEqual(opening["running_balance"], "1000.00")
        self.assertEqual(sale["description"], "Sale - Bill #B-17")
        self.assertEqual(sale["debit"], "500.00")
        self.assertEqual(sale["running_balance"], "1500.00")
        self.assertEqual(sale["running_balance_display"], "₹1,500.00 DR")
        self.assertEqual(body["closing_balance"], "1500.00")
        self.assertEqual(body["request_seq"], "abc")

    def test_statement_requires_valid_range(self):
        self.client.force_authenticate(self.accountant)
        url = f"/api/ledger/parties/{self.party.id}/statement/"

        self.assertEqual(self.client.get(url).status_code, 400)
        res = self.client.get(url, {"date_from": "2025-02-10", "date_to": "2025-02-01"})
        self.assertEqual(res.status_code, 400)
        res = self.client.get(url, {"date_from": "yesterday", "date_to": "2025-02-01"})
        self.assertEqual(res.status_code, 400)

    def test_statement_before_balance_date_is_400(self):
        self.client.force_authenticate(self.accountant)
        res = self.client.get(
            f"/api/ledger/parties/{self.party.id}/statement/",
            {"date_from": days_ago(60).isoformat(), "date_to": days_ago(40).isoformat()},
        )

        self.assertEqual(res.status_code, 400)
        self.assertNotIn("closing_balance", res.json())

    # --------------------------------------------------
    # DASHBOARD
    # --------------------------------------------------

    def test_dashboard(self):
        late = make_party(self.firm, name="Late Payer", balance="900.00", balance_as_of=days_ago(45))
        make_txn(self.party, type=Transaction.TYPE_COLLECTION, amount="100.00", transaction_date=days_ago(2))
        make_txn(self.party, amount="40.00", status=Transaction.STATUS_PENDING)
        make_party(self.firm, name="Paper Mills", type=Party.TYPE_SUPPLIER, balance="300.00")
        make_party(self.firm, name="Closed Shop", balance="5000.00", is_active=False)
        Cheque.objects.create(
            firm=self.firm,
            party=self.party,
            cheque_number="000123",
            amount=Decimal("250.00"),
            issue_date=days_ago(1),
            due_date=days_ago(0),
        )

        self.client.force_authenticate(self.accountant)
        res = self.client.get(
            "/api/ledger/dashboard/",
            {"firm_id": str(self.firm.id), "date_from": days_ago(10).isoformat(), "date_to": days_ago(0).isoformat()},
        )

        self.assertEqual(res.status_code, 200, res.content)
        body = res.json()
        self.assertEqual(body["total_sales"], "500.00")
        self.assertEqual(body["total_collections"], "100.00")
        self.assertEqual(body["transaction_count"], 2)
        self.assertEqual(body["pending_approvals"], 1)
        self.assertEqual(body["active_parties"], 3)
        self.assertEqual(body["pending_cheques"], 1)
        self.assertEqual(body["cheques_due_today"], 1)
        self.assertEqual(body["total_receivables"], "2300.00")
        self.assertEqual(body["total_payables"], "300.00")
        self.assertEqual([row["party_id"] for row in body["overdue_parties"]], [str(late.id)])
        self.assertEqual(len(body["recent_transactions"]), 3)

    def test_dashboard_requires_reports_capability(self):
        self.client.force_authenticate(self.field)
        res = self.client.get("/api/ledger/dashboard/", {"firm_id": str(self.firm.id)})
        self.assertEqual(res.status_code, 403)

    def test_dashboard_foreign_firm_is_403(self):
        self.client.force_authenticate(self.accountant)
        res = self.client.get("/api/ledger/dashboard/", {"firm_id": str(self.other.id)})
        self.assertEqual(res.status_code, 403)

    def test_dashboard_requires_firm(self):
        self.client.force_authenticate(self.accountant)
        self.assertEqual(self.client.get("/api/ledger/dashboard/").status_code, 400)
