# cheques/serializers.py

from decimal import Decimal

from rest_framework import serializers

from cheques.models import Cheque


class ChequeSerializer(serializers.ModelSerializer):
    party_name = serializers.CharField(source="party.name", read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Cheque
        fields = [
            "id",
            "firm",
            "party",
            "party_name",
            "direction",
            "cheque_number",
            "amount",
            "issue_date",
            "due_date",
            "status",
            "is_overdue",
            "bank_name",
            "notes",
            "cleared_date",
            "bounced_date",
            "bounce_reason",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class ChequeCreateSerializer(serializers.Serializer):
    firm_id = serializers.UUIDField()
    party_id = serializers.UUIDField()
    direction = serializers.ChoiceField(choices=Cheque.DIRECTIONS, default=Cheque.DIRECTION_RECEIVED)
    cheque_number = serializers.CharField(max_length=64)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    issue_date = serializers.DateField(required=False)
    due_date = serializers.DateField()
    bank_name = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ChequeClearSerializer(serializers.Serializer):
    cleared_date = serializers.DateField(required=False)


class ChequeBounceSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    bounced_date = serializers.DateField(required=False)
