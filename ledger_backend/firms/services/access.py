# firms/services/access.py

"""
FIRM ACCESS RULES (ROW-LEVEL SCOPING)

Rules:
- Admin users (role=admin or superuser) can access every firm.
- Everyone else can access exactly the firms they hold a FirmAccess grant for.
- Inactive firms stay readable for admins only.
- Every party / transaction / bill / cheque read or write resolves its firm
  through this module first.
"""

from __future__ import annotations

import logging
import uuid
from typing import Iterable

from django.db import transaction

from firms.models import Firm, FirmAccess
from permissions.roles import is_admin_user

logger = logging.getLogger("users")


class FirmAccessDenied(Exception):
    """Raised when a user asks for a firm outside their grants."""


def accessible_firms(user):
    if not user or not getattr(user, "is_authenticated", False):
        return Firm.objects.none()

    if is_admin_user(user):
        return Firm.objects.all()

    return Firm.objects.active().filter(access_grants__user=user).distinct()


def _as_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def user_can_access_firm(user, firm_id) -> bool:
    fid = _as_uuid(firm_id)
    if fid is None:
        return False
    return accessible_firms(user).filter(id=fid).exists()


def get_accessible_firm(*, user, firm_id) -> Firm:
    """
    Resolve a firm for the user or raise FirmAccessDenied.

    Unknown and forbidden ids are reported the same way so firm ids
    cannot be probed.
    """
    fid = _as_uuid(firm_id)
    firm = accessible_firms(user).filter(id=fid).first() if fid else None
    if firm is None:
        logger.warning(
            "Firm access denied",
            extra={"user_id": str(getattr(user, "id", "")), "firm_id": str(firm_id)},
        )
        raise FirmAccessDenied("You do not have access to this firm.")
    return firm


@transaction.atomic
def set_firm_access(*, user, firms: Iterable[Firm]) -> list[FirmAccess]:
    """
    Replace the user's grants with exactly `firms`.
    """
    wanted = {f.id: f for f in firms}

    FirmAccess.objects.filter(user=user).exclude(firm_id__in=list(wanted)).delete()

    existing = set(FirmAccess.objects.filter(user=user).values_list("firm_id", flat=True))
    for firm_id, firm in wanted.items():
        if firm_id not in existing:
            FirmAccess.objects.create(user=user, firm=firm)

    logger.info(
        "Firm access updated",
        extra={"user_id": str(user.id), "firm_ids": [str(fid) for fid in wanted]},
    )
    return list(FirmAccess.objects.filter(user=user).select_related("firm"))
