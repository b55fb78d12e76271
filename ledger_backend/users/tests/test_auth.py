from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from firms.tests.factories import grant, make_firm, make_user
from permissions.roles import CAP_REPORTS_VIEW, CAP_TRANSACTIONS_ENTER
from users.services.user_admin import UserAdminError, create_staff_user, deactivate_user

User = get_user_model()


class UserModelTests(TestCase):
    """
    GUARANTEES:
    - username is derived from the email when missing, and stays unique
    - new users default to field staff
    """

    def test_username_derived_and_unique(self):
        first = User.objects.create_user(email="ravi@example.com", password="x1234567")
        second = User.objects.create_user(email="ravi@other.com", password="x1234567")

        self.assertEqual(first.username, "ravi")
        self.assertEqual(second.username, "ravi2")
        self.assertEqual(first.role, User.ROLE_FIELD_STAFF)

    def test_requires_identity(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(password="x1234567")


class LoginTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="meena@example.com",
            username="meena",
            password="pass12345",
            role=User.ROLE_ACCOUNTANT,
        )

    def test_login_with_username_returns_token_pair(self):
        res = self.client.post(
            "/api/auth/login/",
            {"identifier": "meena", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertIn("access", body)
        self.assertIn("refresh", body)
        self.assertEqual(body["user"]["role"], User.ROLE_ACCOUNTANT)

    def test_bad_password_is_401(self):
        res = self.client.post(
            "/api/auth/login/",
            {"identifier": "meena@example.com", "password": "wrong"},
            format="json",
        )
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json()["detail"], "Invalid credentials")

    def test_deactivated_user_cannot_login(self):
        self.user.is_active = False
        self.user.save()

        res = self.client.post(
            "/api/auth/login/",
            {"identifier": "meena@example.com", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, 401)


class MeTests(TestCase):
    def test_me_lists_capabilities_and_firms(self):
        firm = make_firm("Alpha Traders")
        make_firm("Beta Distributors")
        staff = grant(make_user("field_staff"), firm)

        client = APIClient()
        client.force_authenticate(staff)
        res = client.get("/api/auth/me/")

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertIn(CAP_TRANSACTIONS_ENTER, body["capabilities"])
        self.assertNotIn(CAP_REPORTS_VIEW, body["capabilities"])
        self.assertEqual([f["id"] for f in body["firms"]], [str(firm.id)])
        self.assertEqual(body["user"]["firm_ids"], [str(firm.id)])


class UserAdminTests(TestCase):
    """
    GUARANTEES:
    - only admins manage users
    - a new user gets exactly the requested firm grants
    - users are deactivated, never deleted; nobody deactivates themselves
    """

    def setUp(self):
        self.client = APIClient()
        self.firm = make_firm("Alpha Traders")
        self.admin = make_user("admin")

    def test_admin_creates_staff_with_grants(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            "/api/auth/users/",
            {
                "email": "field@example.com",
                "password": "a-Strong-pass-91",
                "role": "field_staff",
                "firm_ids": [str(self.firm.id)],
            },
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.content)
        self.assertEqual(res.json()["firm_ids"], [str(self.firm.id)])
        self.assertTrue(User.objects.filter(email="field@example.com", role="field_staff").exists())

    def test_accountant_cannot_manage_users(self):
        self.client.force_authenticate(make_user("accountant"))
        self.assertEqual(self.client.get("/api/auth/users/").status_code, 403)

    def test_unknown_firm_rejected(self):
        with self.assertRaises(UserAdminError):
            create_staff_user(
                email="x@example.com",
                password="a-Strong-pass-91",
                role="accountant",
                firm_ids=["00000000-0000-0000-0000-000000000000"],
            )

    def test_deactivate(self):
        staff = make_user("field_staff")
        self.client.force_authenticate(self.admin)

        res = self.client.post(f"/api/auth/users/{staff.id}/deactivate/")
        self.assertEqual(res.status_code, 200)
        staff.refresh_from_db()
        self.assertFalse(staff.is_active)

        with self.assertRaises(UserAdminError):
            deactivate_user(user=self.admin, acting_user=self.admin)
