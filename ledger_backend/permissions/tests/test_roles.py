from types import SimpleNamespace

from django.test import SimpleTestCase

from permissions.roles import (
    ALL_CAPABILITIES,
    CAP_LEDGER_RECONCILE,
    CAP_LEDGER_VIEW,
    CAP_REPORTS_VIEW,
    CAP_TRANSACTIONS_APPROVE,
    CAP_TRANSACTIONS_ENTER,
    CAP_USERS_MANAGE,
    ROLE_ACCOUNTANT,
    ROLE_ADMIN,
    ROLE_FIELD_STAFF,
    HasAnyCapability,
    HasCapability,
    effective_capabilities_for,
    is_admin_user,
    user_has_capability,
)


def _user(role=None, *, authenticated=True, superuser=False):
    return SimpleNamespace(role=role, is_authenticated=authenticated, is_superuser=superuser)


class CapabilityMapTests(SimpleTestCase):
    """
    GUARANTEES:
    - admin holds every capability
    - accountants approve but do not reconcile or manage users
    - field staff enter + view only
    - anonymous users hold nothing
    """

    def test_admin_has_everything(self):
        self.assertEqual(effective_capabilities_for(_user(ROLE_ADMIN)), ALL_CAPABILITIES)

    def test_superuser_without_role(self):
        self.assertEqual(effective_capabilities_for(_user(None, superuser=True)), ALL_CAPABILITIES)
        self.assertTrue(is_admin_user(_user(None, superuser=True)))

    def test_accountant(self):
        user = _user(ROLE_ACCOUNTANT)
        self.assertTrue(user_has_capability(user, CAP_TRANSACTIONS_APPROVE))
        self.assertTrue(user_has_capability(user, CAP_REPORTS_VIEW))
        self.assertFalse(user_has_capability(user, CAP_LEDGER_RECONCILE))
        self.assertFalse(user_has_capability(user, CAP_USERS_MANAGE))
        self.assertFalse(is_admin_user(user))

    def test_field_staff(self):
        caps = effective_capabilities_for(_user(ROLE_FIELD_STAFF))
        self.assertIn(CAP_TRANSACTIONS_ENTER, caps)
        self.assertIn(CAP_LEDGER_VIEW, caps)
        self.assertNotIn(CAP_TRANSACTIONS_APPROVE, caps)
        self.assertNotIn(CAP_REPORTS_VIEW, caps)

    def test_anonymous_and_unknown_role(self):
        self.assertEqual(effective_capabilities_for(None), set())
        self.assertEqual(effective_capabilities_for(_user(ROLE_ADMIN, authenticated=False)), set())
        self.assertEqual(effective_capabilities_for(_user("janitor")), set())


class CapabilityPermissionTests(SimpleTestCase):
    def _check(self, permission, user, **view_attrs):
        request = SimpleNamespace(user=user)
        view = SimpleNamespace(**view_attrs)
        return permission.has_permission(request, view)

    def test_has_capability(self):
        perm = HasCapability()
        staff = _user(ROLE_FIELD_STAFF)
        self.assertTrue(self._check(perm, staff, required_capability=CAP_LEDGER_VIEW))
        self.assertFalse(self._check(perm, staff, required_capability=CAP_TRANSACTIONS_APPROVE))

    def test_undeclared_capability_denies(self):
        self.assertFalse(self._check(HasCapability(), _user(ROLE_ADMIN)))
        self.assertFalse(self._check(HasAnyCapability(), _user(ROLE_ADMIN)))

    def test_has_any_capability(self):
        perm = HasAnyCapability()
        staff = _user(ROLE_FIELD_STAFF)
        self.assertTrue(
            self._check(perm, staff, required_any_capabilities={CAP_REPORTS_VIEW, CAP_LEDGER_VIEW})
        )
        self.assertFalse(self._check(perm, staff, required_any_capabilities={CAP_REPORTS_VIEW}))
