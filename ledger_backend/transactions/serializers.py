# transactions/serializers.py

from rest_framework import serializers

from transactions.models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    party_name = serializers.CharField(source="party.name", read_only=True)
    party_type = serializers.CharField(source="party.type", read_only=True)
    created_by_name = serializers.SerializerMethodField()
    approved_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Transaction
        fields = [
            "id",
            "firm",
            "party",
            "party_name",
            "party_type",
            "type",
            "amount",
            "status",
            "transaction_date",
            "bill_number",
            "payment_method",
            "reference_number",
            "notes",
            "created_by",
            "created_by_name",
            "approved_by",
            "approved_by_name",
            "approved_at",
            "rejected_at",
            "rejection_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj):
        return obj.created_by.display_name if obj.created_by_id else None

    def get_approved_by_name(self, obj):
        return obj.approved_by.display_name if obj.approved_by_id else None


class TransactionCreateSerializer(serializers.Serializer):
    firm_id = serializers.UUIDField()
    party_id = serializers.UUIDField()
    type = serializers.ChoiceField(
        choices=[
            Transaction.TYPE_SALE,
            Transaction.TYPE_COLLECTION,
            Transaction.TYPE_PURCHASE,
        ]
    )
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    transaction_date = serializers.DateField(required=False)
    bill_number = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    payment_method = serializers.ChoiceField(
        choices=Transaction.PAYMENT_METHODS,
        required=False,
        allow_blank=True,
        default="",
    )
    reference_number = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TransactionUpdateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(
        choices=[
            Transaction.TYPE_SALE,
            Transaction.TYPE_COLLECTION,
            Transaction.TYPE_PURCHASE,
        ],
        required=False,
    )
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    transaction_date = serializers.DateField(required=False)
    bill_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    payment_method = serializers.ChoiceField(
        choices=Transaction.PAYMENT_METHODS,
        required=False,
        allow_blank=True,
    )
    reference_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class RejectInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
