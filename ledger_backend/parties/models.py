# parties/models.py

"""
PARTIES (CUSTOMERS + SUPPLIERS) AND LOCATION GROUPS

Ledger-relevant fields on Party:
- balance:        opening / last reconciled balance (signed)
- balance_as_of:  last date already folded into `balance`
                  (transactions dated on or before it are never added again)
                  defaults to the day before creation

Rules:
- balance / balance_as_of change only through the reconcile service,
  never on a balance read.
- Parties are deactivated, not deleted; transactions PROTECT them.
"""

import uuid
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from firms.models import Firm

User = settings.AUTH_USER_MODEL


def opening_balance_date():
    """
    Default balance_as_of: the day before creation.

    An opening balance is the position carried into the creation day, so
    transactions dated on the creation day still reach the ledger.
    """
    return timezone.localdate() - timedelta(days=1)


class LocationGroup(models.Model):
    """
    Route / area grouping used by field staff (e.g. "Market Road", "North Zone").
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    firm = models.ForeignKey(Firm, on_delete=models.CASCADE, related_name="location_groups")
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["firm", "name"], name="uniq_location_group_per_firm"),
        ]

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": "name is required"})

    def save(self, *args, **kwargs):
        self.name = (self.name or "").strip()
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class PartyQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def for_firm(self, firm):
        return self.filter(firm=firm)


class Party(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    TYPE_CUSTOMER = "customer"
    TYPE_SUPPLIER = "supplier"

    TYPES = [
        (TYPE_CUSTOMER, "Customer"),
        (TYPE_SUPPLIER, "Supplier"),
    ]

    firm = models.ForeignKey(Firm, on_delete=models.PROTECT, related_name="parties")

    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=TYPES)

    contact_person = models.CharField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    location_group = models.ForeignKey(
        LocationGroup,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="parties",
    )

    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Opening / last reconciled balance. Positive = party owes (customer) or is owed (supplier).",
    )
    balance_as_of = models.DateField(
        default=opening_balance_date,
        help_text="Transactions dated on or before this date are already included in balance.",
    )

    last_payment_date = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="parties_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PartyQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "parties"
        indexes = [
            models.Index(fields=["firm", "type", "is_active"], name="parties_firm_type_active_idx"),
            models.Index(fields=["firm", "name"], name="parties_firm_name_idx"),
        ]

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": "name is required"})

        if self.type not in (self.TYPE_CUSTOMER, self.TYPE_SUPPLIER):
            raise ValidationError({"type": "type must be customer or supplier"})

        if self.location_group_id and self.firm_id:
            if self.location_group.firm_id != self.firm_id:
                raise ValidationError(
                    {"location_group": "location_group belongs to a different firm"}
                )

    def save(self, *args, **kwargs):
        self.name = (self.name or "").strip()
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def is_customer(self) -> bool:
        return self.type == self.TYPE_CUSTOMER

    def __str__(self):
        return f"{self.name} ({self.type})"
