# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_ACCOUNTANT = "accountant"
ROLE_FIELD_STAFF = "field_staff"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_ACCOUNTANT,
    ROLE_FIELD_STAFF,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_TRANSACTIONS_ENTER = "transactions.enter"
CAP_TRANSACTIONS_APPROVE = "transactions.approve"

CAP_LEDGER_VIEW = "ledger.view"
CAP_LEDGER_RECONCILE = "ledger.reconcile"  # rewrites a party's stored balance

CAP_PARTIES_EDIT = "parties.edit"

CAP_BILLS_ENTER = "bills.enter"
CAP_BILLS_REVIEW = "bills.review"

CAP_CHEQUES_MANAGE = "cheques.manage"

CAP_REPORTS_VIEW = "reports.view"

CAP_USERS_MANAGE = "users.manage"

ALL_CAPABILITIES = {
    CAP_TRANSACTIONS_ENTER,
    CAP_TRANSACTIONS_APPROVE,
    CAP_LEDGER_VIEW,
    CAP_LEDGER_RECONCILE,
    CAP_PARTIES_EDIT,
    CAP_BILLS_ENTER,
    CAP_BILLS_REVIEW,
    CAP_CHEQUES_MANAGE,
    CAP_REPORTS_VIEW,
    CAP_USERS_MANAGE,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_ACCOUNTANT: {
        CAP_TRANSACTIONS_ENTER,
        CAP_TRANSACTIONS_APPROVE,
        CAP_LEDGER_VIEW,
        CAP_PARTIES_EDIT,
        CAP_BILLS_ENTER,
        CAP_BILLS_REVIEW,
        CAP_CHEQUES_MANAGE,
        CAP_REPORTS_VIEW,
        # reconciliation stays with admin
    },
    ROLE_FIELD_STAFF: {
        # collects payments on the road; approval happens in the office
        CAP_TRANSACTIONS_ENTER,
        CAP_LEDGER_VIEW,
        CAP_BILLS_ENTER,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(user) -> set[str]:
    """
    Capabilities granted by the user's role.
    Superusers get everything regardless of role.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return set()
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    return capability in effective_capabilities_for(user)


def is_admin_user(user) -> bool:
    return bool(
        user
        and getattr(user, "is_authenticated", False)
        and (getattr(user, "is_superuser", False) or get_user_role(user) == ROLE_ADMIN)
    )


# =========================================================
# Base Role Permission
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_TRANSACTIONS_APPROVE
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default when a view forgets to declare its capability
            return False

        return required in effective_capabilities_for(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a list.

    Usage:
        view.required_any_capabilities = {CAP_LEDGER_VIEW, CAP_REPORTS_VIEW}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = effective_capabilities_for(user)
        return any(cap in caps for cap in set(required))


# =========================================================
# Role Permissions
# =========================================================
class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}

    def has_permission(self, request, view):
        return is_admin_user(request.user)


class IsStaff(BaseRolePermission):
    allowed_roles = STAFF_ROLES
