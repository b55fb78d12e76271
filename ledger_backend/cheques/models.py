# cheques/models.py

"""
CHEQUE REGISTER

- received: cheque handed to the firm by a party (usually a customer)
- issued:   cheque the firm gave to a party (usually a supplier)

Status: pending -> cleared | bounced | cancelled (all terminal).
cleared_date / bounced_date are stamped by cheques.services.cheque_lifecycle.
Clearing a cheque does not post to the ledger; the matching collection is
entered in the day book.
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


class Cheque(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    DIRECTION_RECEIVED = "received"
    DIRECTION_ISSUED = "issued"

    DIRECTIONS = [
        (DIRECTION_RECEIVED, "Received"),
        (DIRECTION_ISSUED, "Issued"),
    ]

    STATUS_PENDING = "pending"
    STATUS_CLEARED = "cleared"
    STATUS_BOUNCED = "bounced"
    STATUS_CANCELLED = "cancelled"

    STATUSES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CLEARED, "Cleared"),
        (STATUS_BOUNCED, "Bounced"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    firm = models.ForeignKey(Firm, on_delete=models.PROTECT, related_name="cheques")
    party = models.ForeignKey(Party, on_delete=models.PROTECT, related_name="cheques")

    direction = models.CharField(max_length=20, choices=DIRECTIONS, default=DIRECTION_RECEIVED)
    cheque_number = models.CharField(max_length=64)
    amount = models.DecimalField(max_digits=14, decimal_places=2)

    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField()

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_PENDING)

    bank_name = models.CharField(max_length=120, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    cleared_date = models.DateField(null=True, blank=True)
    bounced_date = models.DateField(null=True, blank=True)
    bounce_reason = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cheques_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["due_date", "created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=Decimal("0.00")),
                name="cheque_amount_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["firm", "status", "due_date"], name="cheque_firm_status_due_idx"),
            models.Index(fields=["party", "created_at"], name="cheque_party_idx"),
        ]

    def clean(self):
        if not (self.cheque_number or "").strip():
            raise ValidationError({"cheque_number": "cheque_number is required"})

        if self.amount is not None and self.amount <= Decimal("0.00"):
            raise ValidationError({"amount": "amount must be > 0"})

        if self.party_id and self.firm_id and self.party.firm_id != self.firm_id:
            raise ValidationError({"party": "party belongs to a different firm"})

        if self.due_date and self.issue_date and self.due_date < self.issue_date:
            raise ValidationError({"due_date": "due_date cannot be before issue_date"})

        if self.status == self.STATUS_CLEARED and not self.cleared_date:
            raise ValidationError({"cleared_date": "cleared_date is required when cleared"})

        if self.status == self.STATUS_BOUNCED and not self.bounced_date:
            raise ValidationError({"bounced_date": "bounced_date is required when bounced"})

    def save(self, *args, **kwargs):
        self.cheque_number = (self.cheque_number or "").strip()
        if self.party_id and not self.firm_id:
            self.firm_id = self.party.firm_id
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def is_overdue(self) -> bool:
        return self.status == self.STATUS_PENDING and self.due_date < timezone.localdate()

    def __str__(self):
        return f"Cheque {self.cheque_number} ({self.direction}, {self.status})"
