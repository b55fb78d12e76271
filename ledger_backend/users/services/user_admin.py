# users/services/user_admin.py

"""
STAFF USER ADMINISTRATION

Rules:
- Only admins call these (enforced at the view).
- A new user is created with a role and an explicit list of firm grants.
- Admin-role users do not need grants; they see every firm.
- Users are deactivated, never deleted (their ids stay on created_by /
  approved_by audit columns).
- An admin cannot deactivate their own account.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from firms.models import Firm
from firms.services.access import set_firm_access

logger = logging.getLogger("users")

User = get_user_model()


class UserAdminError(ValueError):
    pass


@transaction.atomic
def create_staff_user(
    *,
    email: str,
    password: str,
    role: str,
    full_name: str = "",
    username: str = "",
    firm_ids=(),
    created_by=None,
):
    firm_ids = list(firm_ids or [])
    firms = list(Firm.objects.filter(id__in=firm_ids))
    if len(firms) != len(set(firm_ids)):
        raise UserAdminError("One or more firm_ids do not exist.")

    user = User.objects.create_user(
        email=email,
        password=password,
        username=username or None,
        full_name=full_name or "",
        role=role,
    )

    set_firm_access(user=user, firms=firms)

    logger.info(
        "Staff user created",
        extra={
            "user_id": str(user.id),
            "role": role,
            "firm_count": len(firms),
            "created_by": str(getattr(created_by, "id", "")),
        },
    )
    return user


@transaction.atomic
def deactivate_user(*, user, acting_user):
    if user.pk == getattr(acting_user, "pk", None):
        raise UserAdminError("You cannot deactivate your own account.")

    if not user.is_active:
        return user

    user.is_active = False
    user.save(update_fields=["is_active"])

    logger.info(
        "Staff user deactivated",
        extra={"user_id": str(user.id), "acting_user_id": str(acting_user.id)},
    )
    return user
