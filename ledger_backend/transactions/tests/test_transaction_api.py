from django.test import TestCase
from rest_framework.test import APIClient

from firms.tests.factories import days_ago, grant, make_firm, make_party, make_txn, make_user
from transactions.models import Transaction


class TransactionApiTests(TestCase):
    """
    GUARANTEES:
    - field staff enter transactions but never approve
    - non-approvers only change their own pending rows
    - every row is scoped to the caller's firms
    """

    def setUp(self):
        self.client = APIClient()
        self.firm = make_firm("Alpha Traders")
        self.other = make_firm("Beta Distributors")

        self.accountant = grant(make_user("accountant"), self.firm)
        self.field = grant(make_user("field_staff"), self.firm)
        self.field_2 = grant(make_user("field_staff"), self.firm)

        self.party = make_party(self.firm, name="Gupta Stores")
        self.foreign_party = make_party(self.other, name="Hidden Mart")

    def _post(self, **overrides):
        payload = {
            "firm_id": str(self.firm.id),
            "party_id": str(self.party.id),
            "type": "collection",
            "amount": "250.00",
            "payment_method": "cash",
            "transaction_date": days_ago(1).isoformat(),
        }
        payload.update(overrides)
        return self.client.post("/api/transactions/", payload, format="json")

    # --------------------------------------------------
    # ENTRY
    # --------------------------------------------------

    def test_field_staff_records_pending_collection(self):
        self.client.force_authenticate(self.field)
        res = self._post()

        self.assertEqual(res.status_code, 201, res.content)
        body = res.json()
        self.assertEqual(body["status"], "pending")
        self.assertEqual(body["amount"], "250.00")
        self.assertEqual(body["party_name"], "Gupta Stores")

    def test_invalid_type_for_party_is_400(self):
        self.client.force_authenticate(self.accountant)
        res = self._post(type="purchase")
        self.assertEqual(res.status_code, 400)

    def test_party_from_other_firm_is_400(self):
        self.client.force_authenticate(self.accountant)
        res = self._post(party_id=str(self.foreign_party.id))
        self.assertEqual(res.status_code, 400)

    def test_inaccessible_firm_is_403(self):
        self.client.force_authenticate(self.accountant)
        res = self._post(firm_id=str(self.other.id), party_id=str(self.foreign_party.id))
        self.assertEqual(res.status_code, 403)

    def test_date_on_or_before_balance_date_is_400(self):
        self.client.force_authenticate(self.accountant)
        res = self._post(type="sale", transaction_date=days_ago(30).isoformat())

        self.assertEqual(res.status_code, 400)
        self.assertIn("balance date", res.json()["detail"])
        self.assertFalse(Transaction.objects.filter(party=self.party).exists())

    def test_list_is_scoped(self):
        make_txn(self.party)
        make_txn(self.foreign_party)
        self.client.force_authenticate(self.field)

        res = self.client.get("/api/transactions/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["count"], 1)

    # --------------------------------------------------
    # OWNERSHIP
    # --------------------------------------------------

    def test_non_approver_only_edits_own_rows(self):
        self.client.force_authenticate(self.field)
        txn_id = self._post().json()["id"]

        self.client.force_authenticate(self.field_2)
        res = self.client.patch(f"/api/transactions/{txn_id}/", {"amount": "1.00"}, format="json")
        self.assertEqual(res.status_code, 403)
        res = self.client.delete(f"/api/transactions/{txn_id}/")
        self.assertEqual(res.status_code, 403)

        self.client.force_authenticate(self.field)
        res = self.client.patch(f"/api/transactions/{txn_id}/", {"amount": "300.00"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["amount"], "300.00")

    def test_approved_row_cannot_be_deleted(self):
        txn = make_txn(self.party)
        self.client.force_authenticate(self.accountant)

        res = self.client.delete(f"/api/transactions/{txn.id}/")
        self.assertEqual(res.status_code, 400)
        self.assertTrue(Transaction.objects.filter(id=txn.id).exists())

    # --------------------------------------------------
    # APPROVAL
    # --------------------------------------------------

    def test_field_staff_cannot_approve(self):
        txn = make_txn(self.party, status=Transaction.STATUS_PENDING)
        self.client.force_authenticate(self.field)

        self.assertEqual(self.client.get("/api/transactions/pending/").status_code, 403)
        self.assertEqual(self.client.post(f"/api/transactions/{txn.id}/approve/").status_code, 403)

    def test_pending_queue_and_approve(self):
        txn = make_txn(self.party, status=Transaction.STATUS_PENDING)
        make_txn(self.party)
        self.client.force_authenticate(self.accountant)

        res = self.client.get("/api/transactions/pending/")
        self.assertEqual([row["id"] for row in res.json()["results"]], [str(txn.id)])

        res = self.client.post(f"/api/transactions/{txn.id}/approve/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "approved")
        self.assertIsNotNone(res.json()["approved_by"])

    def test_reject_then_approve_is_400(self):
        txn = make_txn(self.party, status=Transaction.STATUS_PENDING)
        self.client.force_authenticate(self.accountant)

        res = self.client.post(f"/api/transactions/{txn.id}/reject/", {"reason": "duplicate"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["rejection_reason"], "duplicate")

        res = self.client.post(f"/api/transactions/{txn.id}/approve/")
        self.assertEqual(res.status_code, 400)
