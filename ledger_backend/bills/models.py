# bills/models.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from firms.models import Firm
from parties.models import Party

User = settings.AUTH_USER_MODEL


class Bill(models.Model):
    """
    Supplier bill header, entered manually or from pasted text.

    total_amount is the sum of item total_price values and is set by
    bills.services.bill_service, never typed in.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"

    STATUSES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    firm = models.ForeignKey(Firm, on_delete=models.PROTECT, related_name="bills")
    party = models.ForeignKey(
        Party,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bills",
        help_text="Optional supplier party; supplier_name is kept either way.",
    )

    bill_number = models.CharField(max_length=64)
    supplier_name = models.CharField(max_length=255)
    bill_date = models.DateField(default=timezone.localdate)
    category = models.CharField(max_length=100)

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_PENDING)

    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True, default="")
    source_text = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bills_created",
    )
    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bills_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    rejected_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bills_rejected",
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-bill_date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=Decimal("0.00")),
                name="bill_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["firm", "status", "created_at"], name="bill_firm_status_idx"),
            models.Index(fields=["firm", "bill_date"], name="bill_firm_date_idx"),
        ]

    def clean(self):
        if not (self.bill_number or "").strip():
            raise ValidationError({"bill_number": "bill_number is required"})

        if not (self.supplier_name or "").strip():
            raise ValidationError({"supplier_name": "supplier_name is required"})

        if not (self.category or "").strip():
            raise ValidationError({"category": "category is required"})

        if self.party_id and self.firm_id and self.party.firm_id != self.firm_id:
            raise ValidationError({"party": "party belongs to a different firm"})

        if self.status == self.STATUS_APPROVED and not self.approved_at:
            raise ValidationError({"approved_at": "approved_at is required when status is approved"})

    def save(self, *args, **kwargs):
        for name in ("bill_number", "supplier_name", "category"):
            setattr(self, name, (getattr(self, name) or "").strip())
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.bill_number} ({self.supplier_name})"


class BillItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name="items")

    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(help_text="Total pieces")
    pieces_per_case = models.PositiveIntegerField(default=1)
    cases = models.PositiveIntegerField(default=0)

    unit_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    category = models.CharField(max_length=100, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(pieces_per_case__gt=0),
                name="bill_item_pieces_per_case_gt_zero",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_price__gte=Decimal("0.00")),
                name="bill_item_unit_price_nonnegative",
            ),
        ]

    def clean(self):
        if not (self.product_name or "").strip():
            raise ValidationError({"product_name": "product_name is required"})

        if not self.pieces_per_case:
            raise ValidationError({"pieces_per_case": "pieces_per_case must be at least 1"})

    def save(self, *args, **kwargs):
        self.product_name = (self.product_name or "").strip()
        if self.pieces_per_case:
            self.cases = self.quantity // self.pieces_per_case
        self.total_price = Decimal(self.quantity) * Decimal(str(self.unit_price))
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
