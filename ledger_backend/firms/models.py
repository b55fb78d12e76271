# firms/models.py

"""
FIRM MASTER DATA + ACCESS GRANTS

A Firm is the tenant boundary: every party, transaction, bill and cheque
belongs to exactly one firm.

FirmAccess grants a (non-admin) user visibility of one firm.
Admins see every firm without needing grants.
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

User = settings.AUTH_USER_MODEL


class FirmQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=Firm.STATUS_ACTIVE)


class Firm(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"

    STATUSES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
    ]

    name = models.CharField(max_length=255)
    address = models.TextField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    gst_number = models.CharField(
        max_length=20,
        blank=True,
        default="",
        help_text="GSTIN (optional). If set, must be unique.",
    )

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_ACTIVE)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="firms_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FirmQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["gst_number"],
                condition=~Q(gst_number=""),
                name="uniq_firm_gst_number_when_present",
            ),
        ]

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": "name is required"})

    def save(self, *args, **kwargs):
        self.name = (self.name or "").strip()
        self.gst_number = (self.gst_number or "").strip().upper()
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def __str__(self):
        return self.name


class FirmAccess(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="firm_access",
    )
    firm = models.ForeignKey(
        Firm,
        on_delete=models.CASCADE,
        related_name="access_grants",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "firm"], name="uniq_firm_access_user_firm"),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.firm_id}"
