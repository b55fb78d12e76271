# transactions/models.py

"""
DAY BOOK TRANSACTION

One row per sale / collection / purchase entered against a party.

Ledger rules (see ledger/engine.py):
- Only APPROVED rows move a party balance.
- transaction_date is the ledger date; created_at is audit only.
- amount is always positive; direction comes from (party.type, type).

Lifecycle (see transactions/services/transaction_lifecycle.py):
- PENDING -> APPROVED | REJECTED
- APPROVED / REJECTED rows are immutable from the API.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from firms.models import Firm
from parties.models import Party

User = settings.AUTH_USER_MODEL


class Transaction(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    TYPE_SALE = "sale"
    TYPE_COLLECTION = "collection"
    TYPE_PURCHASE = "purchase"
    TYPE_PAYMENT = "payment"  # legacy rows only; never entered through the API

    TYPES = [
        (TYPE_SALE, "Sale"),
        (TYPE_COLLECTION, "Collection"),
        (TYPE_PURCHASE, "Purchase"),
        (TYPE_PAYMENT, "Payment"),
    ]

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"

    STATUSES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    METHOD_CASH = "cash"
    METHOD_UPI = "upi"
    METHOD_CHEQUE = "cheque"
    METHOD_BANK_TRANSFER = "bank_transfer"
    METHOD_GOODS_RETURN = "goods_return"

    PAYMENT_METHODS = [
        (METHOD_CASH, "Cash"),
        (METHOD_UPI, "UPI"),
        (METHOD_CHEQUE, "Cheque"),
        (METHOD_BANK_TRANSFER, "Bank Transfer"),
        (METHOD_GOODS_RETURN, "Goods Return"),
    ]

    firm = models.ForeignKey(Firm, on_delete=models.PROTECT, related_name="transactions")
    party = models.ForeignKey(Party, on_delete=models.PROTECT, related_name="transactions")

    type = models.CharField(max_length=20, choices=TYPES)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_PENDING)

    transaction_date = models.DateField(default=timezone.localdate)

    bill_number = models.CharField(max_length=64, blank=True, default="")
    payment_method = models.CharField(
        max_length=20,
        choices=PAYMENT_METHODS,
        blank=True,
        default="",
    )
    reference_number = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions_created",
    )
    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    rejected_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions_rejected",
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-transaction_date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0.00")),
                name="transaction_amount_positive",
            ),
        ]
        indexes = [
            models.Index(
                fields=["firm", "party", "status", "transaction_date"],
                name="txn_party_ledger_idx",
            ),
            models.Index(fields=["firm", "status", "created_at"], name="txn_firm_status_idx"),
            models.Index(fields=["firm", "transaction_date"], name="txn_firm_date_idx"),
        ]

    def clean(self):
        if self.amount is None or self.amount <= Decimal("0.00"):
            raise ValidationError({"amount": "amount must be > 0"})

        if self.party_id and self.firm_id and self.party.firm_id != self.firm_id:
            raise ValidationError({"party": "party belongs to a different firm"})

        if self.status == self.STATUS_APPROVED and not self.approved_at:
            raise ValidationError({"approved_at": "approved_at is required when status is approved"})

        if self.status == self.STATUS_REJECTED and not self.rejected_at:
            raise ValidationError({"rejected_at": "rejected_at is required when status is rejected"})

    def save(self, *args, **kwargs):
        if self.party_id and not self.firm_id:
            self.firm_id = self.party.firm_id

        self.bill_number = (self.bill_number or "").strip()
        self.reference_number = (self.reference_number or "").strip()

        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def is_pending(self) -> bool:
        return self.status == self.STATUS_PENDING

    def __str__(self):
        return f"{self.type} {self.amount} ({self.status})"
