# parties/serializers.py

from django.utils import timezone
from rest_framework import serializers

from ledger.formatting import balance_label, format_balance
from parties.models import LocationGroup, Party
from parties.services.party_store import debtor_days


class LocationGroupSerializer(serializers.ModelSerializer):
    firm_id = serializers.UUIDField(write_only=True)
    party_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = LocationGroup
        fields = ["id", "firm", "firm_id", "name", "description", "party_count", "created_at"]
        read_only_fields = ["id", "firm", "created_at"]


class PartySerializer(serializers.ModelSerializer):
    """
    Read + edit shape.

    `balance` / `balance_as_of` are writable on create only; afterwards
    they move through the reconcile action.

    `current_balance` comes from the ledger engine via context["balances"]
    ({str(party_id): BalanceResult}); it is null when not computed.
    """

    firm_id = serializers.UUIDField(write_only=True, required=False)
    location_group_name = serializers.CharField(source="location_group.name", read_only=True, default=None)

    current_balance = serializers.SerializerMethodField()
    balance_label = serializers.SerializerMethodField()
    balance_display = serializers.SerializerMethodField()
    debtor_days = serializers.SerializerMethodField()

    class Meta:
        model = Party
        fields = [
            "id",
            "firm",
            "firm_id",
            "name",
            "type",
            "contact_person",
            "phone",
            "email",
            "address",
            "location_group",
            "location_group_name",
            "balance",
            "balance_as_of",
            "current_balance",
            "balance_label",
            "balance_display",
            "debtor_days",
            "last_payment_date",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "firm",
            "last_payment_date",
            "is_active",
            "created_at",
            "updated_at",
        ]

    def _current(self, obj):
        result = (self.context.get("balances") or {}).get(str(obj.id))
        return None if result is None else result.balance

    def get_current_balance(self, obj):
        current = self._current(obj)
        return None if current is None else str(current)

    def get_balance_label(self, obj):
        current = self._current(obj)
        return None if current is None else balance_label(current)

    def get_balance_display(self, obj):
        current = self._current(obj)
        return None if current is None else format_balance(current)

    def get_debtor_days(self, obj):
        current = self._current(obj)
        if current is None:
            return None
        return debtor_days(party=obj, current_balance=current)

    def validate(self, attrs):
        if self.instance is not None:
            for name in ("balance", "balance_as_of", "type"):
                if name in attrs and attrs[name] != getattr(self.instance, name):
                    raise serializers.ValidationError(
                        {name: f"{name} cannot be changed here; use reconcile for balances"}
                    )
            attrs.pop("firm_id", None)
        elif not attrs.get("firm_id"):
            raise serializers.ValidationError({"firm_id": "firm_id is required"})

        as_of = attrs.get("balance_as_of")
        if as_of and as_of > timezone.localdate():
            raise serializers.ValidationError({"balance_as_of": "balance_as_of cannot be in the future"})
        return attrs


class ReconcileInputSerializer(serializers.Serializer):
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    as_of = serializers.DateField(required=False)
