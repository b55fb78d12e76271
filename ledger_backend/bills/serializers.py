# bills/serializers.py

from decimal import Decimal

from rest_framework import serializers

from bills.models import Bill, BillItem


class BillItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillItem
        fields = [
            "id",
            "product_name",
            "quantity",
            "pieces_per_case",
            "cases",
            "unit_price",
            "total_price",
            "category",
        ]
        read_only_fields = fields


class BillSerializer(serializers.ModelSerializer):
    items = BillItemSerializer(many=True, read_only=True)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Bill
        fields = [
            "id",
            "firm",
            "party",
            "bill_number",
            "supplier_name",
            "bill_date",
            "category",
            "status",
            "total_amount",
            "notes",
            "source_text",
            "items",
            "created_by",
            "created_by_name",
            "approved_by",
            "approved_at",
            "rejected_at",
            "rejection_reason",
            "created_at",
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj):
        return obj.created_by.display_name if obj.created_by_id else None


class BillItemInputSerializer(serializers.Serializer):
    product_name = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1)
    pieces_per_case = serializers.IntegerField(min_value=1, default=1)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.00"))
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class BillCreateSerializer(serializers.Serializer):
    firm_id = serializers.UUIDField()
    party_id = serializers.UUIDField(required=False, allow_null=True)
    bill_number = serializers.CharField(max_length=64)
    supplier_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    bill_date = serializers.DateField(required=False)
    category = serializers.CharField(max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    source_text = serializers.CharField(required=False, allow_blank=True, default="")
    items = BillItemInputSerializer(many=True, allow_empty=False)


class ParseTextInputSerializer(serializers.Serializer):
    text = serializers.CharField(trim_whitespace=False)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class ParsedItemSerializer(serializers.Serializer):
    line_number = serializers.IntegerField()
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    pieces_per_case = serializers.IntegerField()
    cases = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_price = serializers.DecimalField(max_digits=16, decimal_places=2)
    category = serializers.CharField()


class RejectBillInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
