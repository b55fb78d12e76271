from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from cheques.models import Cheque
from cheques.services.cheque_lifecycle import (
    InvalidChequeTransitionError,
    bounce_cheque,
    cancel_cheque,
    clear_cheque,
    register_cheque,
)
from firms.tests.factories import days_ago, grant, make_firm, make_party, make_user
from ledger.exceptions import InvalidInput
from ledger.services.balance_service import get_party_balance


class ChequeLifecycleTests(TestCase):
    """
    GUARANTEES:
    - pending -> cleared / bounced / cancelled, all terminal
    - event dates default to today and cannot be in the future
    - the ledger balance is not changed by the register
    """

    def setUp(self):
        self.firm = make_firm("Alpha Traders")
        self.party = make_party(self.firm, balance="500.00")

    def _register(self, **overrides):
        kwargs = {
            "firm": self.firm,
            "party_id": self.party.id,
            "cheque_number": "004512",
            "amount": "250.00",
            "due_date": timezone.localdate(),
        }
        kwargs.update(overrides)
        return register_cheque(**kwargs)

    def test_register_and_clear(self):
        cheque = self._register()
        self.assertEqual(cheque.status, Cheque.STATUS_PENDING)

        cleared = clear_cheque(cheque_id=cheque.id)
        self.assertEqual(cleared.status, Cheque.STATUS_CLEARED)
        self.assertEqual(cleared.cleared_date, timezone.localdate())
        self.assertEqual(get_party_balance(party=self.party).balance, Decimal("500.00"))

    def test_terminal_states(self):
        cheque = self._register()
        bounce_cheque(cheque_id=cheque.id, reason=" insufficient funds ")

        cheque.refresh_from_db()
        self.assertEqual(cheque.bounce_reason, "insufficient funds")
        with self.assertRaises(InvalidChequeTransitionError):
            clear_cheque(cheque_id=cheque.id)
        with self.assertRaises(InvalidChequeTransitionError):
            cancel_cheque(cheque_id=cheque.id)

    def test_future_event_date_rejected(self):
        cheque = self._register()
        with self.assertRaises(InvalidInput):
            clear_cheque(cheque_id=cheque.id, cleared_on=timezone.localdate() + timedelta(days=1))

    def test_event_date_before_issue_rejected(self):
        cheque = self._register(issue_date=days_ago(3), due_date=days_ago(1))
        with self.assertRaises(InvalidInput):
            clear_cheque(cheque_id=cheque.id, cleared_on=days_ago(5))
        with self.assertRaises(InvalidInput):
            bounce_cheque(cheque_id=cheque.id, bounced_on=days_ago(4))

        cheque.refresh_from_db()
        self.assertEqual(cheque.status, Cheque.STATUS_PENDING)
        cleared = clear_cheque(cheque_id=cheque.id, cleared_on=days_ago(3))
        self.assertEqual(cleared.cleared_date, days_ago(3))

    def test_due_before_issue_rejected(self):
        with self.assertRaises(ValidationError):
            self._register(issue_date=days_ago(1), due_date=days_ago(3))

    def test_non_positive_amount(self):
        with self.assertRaises(InvalidInput):
            self._register(amount="0")

    def test_is_overdue(self):
        overdue = self._register(issue_date=days_ago(10), due_date=days_ago(2))
        self.assertTrue(overdue.is_overdue)
        cancel_cheque(cheque_id=overdue.id)
        overdue.refresh_from_db()
        self.assertFalse(overdue.is_overdue)


class ChequeApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.firm = make_firm("Alpha Traders")
        self.party = make_party(self.firm)
        self.accountant = grant(make_user("accountant"), self.firm)
        self.field = grant(make_user("field_staff"), self.firm)

    def _create(self, **overrides):
        payload = {
            "firm_id": str(self.firm.id),
            "party_id": str(self.party.id),
            "cheque_number": "000777",
            "amount": "1200.00",
            "issue_date": days_ago(5).isoformat(),
            "due_date": days_ago(0).isoformat(),
            "bank_name": "SBI",
        }
        payload.update(overrides)
        return self.client.post("/api/cheques/", payload, format="json")

    def test_field_staff_reads_but_cannot_write(self):
        self.client.force_authenticate(self.field)
        self.assertEqual(self.client.get("/api/cheques/").status_code, 200)
        self.assertEqual(self._create().status_code, 403)

    def test_register_filter_and_clear(self):
        self.client.force_authenticate(self.accountant)
        res = self._create()
        self.assertEqual(res.status_code, 201, res.content)
        cheque_id = res.json()["id"]
        self._create(cheque_number="000778", issue_date=days_ago(9).isoformat(), due_date=days_ago(4).isoformat())

        res = self.client.get("/api/cheques/", {"due": "today"})
        self.assertEqual([c["id"] for c in res.json()["results"]], [cheque_id])
        res = self.client.get("/api/cheques/", {"due": "overdue"})
        self.assertEqual([c["cheque_number"] for c in res.json()["results"]], ["000778"])

        res = self.client.post(f"/api/cheques/{cheque_id}/clear/", {}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "cleared")

        res = self.client.post(f"/api/cheques/{cheque_id}/bounce/", {"reason": "late"}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_clear_before_issue_is_400(self):
        self.client.force_authenticate(self.accountant)
        cheque_id = self._create().json()["id"]

        res = self.client.post(
            f"/api/cheques/{cheque_id}/clear/", {"cleared_date": days_ago(8).isoformat()}, format="json"
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(Cheque.objects.get(id=cheque_id).status, Cheque.STATUS_PENDING)

    def test_due_before_issue_is_400(self):
        self.client.force_authenticate(self.accountant)
        res = self._create(issue_date=days_ago(1).isoformat(), due_date=days_ago(3).isoformat())
        self.assertEqual(res.status_code, 400)
