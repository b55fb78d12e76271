from django.test import TestCase
from rest_framework.test import APIClient

from firms.models import Firm, FirmAccess
from firms.services.access import (
    FirmAccessDenied,
    accessible_firms,
    get_accessible_firm,
    set_firm_access,
    user_can_access_firm,
)
from firms.tests.factories import grant, make_firm, make_user


class FirmAccessServiceTests(TestCase):
    """
    GUARANTEES:
    - admins see every firm, including inactive ones
    - other users see only granted, active firms
    - unknown and forbidden firm ids fail the same way
    """

    def setUp(self):
        self.alpha = make_firm("Alpha Traders")
        self.beta = make_firm("Beta Distributors")
        self.closed = make_firm("Closed Co", status=Firm.STATUS_INACTIVE)

        self.admin = make_user("admin")
        self.staff = grant(make_user("field_staff"), self.alpha, self.closed)

    def test_admin_sees_all(self):
        self.assertEqual(set(accessible_firms(self.admin)), {self.alpha, self.beta, self.closed})

    def test_staff_sees_granted_active_only(self):
        self.assertEqual(list(accessible_firms(self.staff)), [self.alpha])
        self.assertTrue(user_can_access_firm(self.staff, self.alpha.id))
        self.assertFalse(user_can_access_firm(self.staff, self.beta.id))
        self.assertFalse(user_can_access_firm(self.staff, "not-a-uuid"))

    def test_get_accessible_firm(self):
        self.assertEqual(get_accessible_firm(user=self.staff, firm_id=str(self.alpha.id)), self.alpha)

        with self.assertRaises(FirmAccessDenied):
            get_accessible_firm(user=self.staff, firm_id=self.beta.id)
        with self.assertRaises(FirmAccessDenied):
            get_accessible_firm(user=self.staff, firm_id="00000000-0000-0000-0000-000000000000")

    def test_set_firm_access_replaces_grants(self):
        set_firm_access(user=self.staff, firms=[self.beta])

        self.assertEqual(
            set(FirmAccess.objects.filter(user=self.staff).values_list("firm_id", flat=True)),
            {self.beta.id},
        )

    def test_gst_number_normalized_and_unique(self):
        firm = make_firm("Gamma", gst_number=" 27abcde1234f1z5 ")
        self.assertEqual(firm.gst_number, "27ABCDE1234F1Z5")


class FirmApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.alpha = make_firm("Alpha Traders")
        self.beta = make_firm("Beta Distributors")
        self.staff = grant(make_user("accountant"), self.alpha)

    def test_list_is_scoped(self):
        self.client.force_authenticate(self.staff)
        res = self.client.get("/api/firms/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual([f["id"] for f in res.json()], [str(self.alpha.id)])

    def test_other_firm_is_404(self):
        self.client.force_authenticate(self.staff)
        res = self.client.get(f"/api/firms/{self.beta.id}/")
        self.assertEqual(res.status_code, 404)

    def test_anonymous_rejected(self):
        res = self.client.get("/api/firms/")
        self.assertEqual(res.status_code, 401)
