# ledger/api/serializers.py

"""
Output shapes for ledger reads.

Money is exact Decimal serialized as a string; `*_display` fields carry the
en-IN formatted text (0 places for summaries, 2 for statement lines).
"""

from rest_framework import serializers

from ledger.formatting import (
    LINE_PLACES,
    balance_label,
    format_balance,
    format_currency,
)

MONEY = {"max_digits": 16, "decimal_places": 2}


class AnomalySerializer(serializers.Serializer):
    transaction_id = serializers.CharField()
    party_type = serializers.CharField()
    transaction_type = serializers.CharField()
    amount = serializers.DecimalField(**MONEY)
    transaction_date = serializers.DateField()
    reason = serializers.CharField()


class PartyBalanceSerializer(serializers.Serializer):
    party_id = serializers.CharField()
    party_name = serializers.CharField()
    party_type = serializers.CharField()
    opening_balance = serializers.DecimalField(**MONEY)
    balance_as_of = serializers.DateField()
    balance = serializers.DecimalField(**MONEY)
    balance_label = serializers.SerializerMethodField()
    balance_display = serializers.SerializerMethodField()
    counted_transactions = serializers.IntegerField()
    debtor_days = serializers.IntegerField()
    anomalies = AnomalySerializer(many=True)
    generated_at = serializers.DateTimeField()
    request_seq = serializers.CharField(allow_null=True)

    def get_balance_label(self, obj):
        return balance_label(obj["balance"])

    def get_balance_display(self, obj):
        return format_balance(obj["balance"])


class StatementLineSerializer(serializers.Serializer):
    date = serializers.DateField()
    kind = serializers.CharField()
    description = serializers.CharField()
    reference = serializers.CharField()
    payment_method = serializers.CharField()
    transaction_id = serializers.CharField(allow_null=True)
    transaction_type = serializers.CharField()
    debit = serializers.DecimalField(**MONEY)
    credit = serializers.DecimalField(**MONEY)
    running_balance = serializers.DecimalField(**MONEY)
    running_balance_display = serializers.SerializerMethodField()

    def get_running_balance_display(self, obj):
        return format_balance(obj.running_balance, places=LINE_PLACES)


class StatementSerializer(serializers.Serializer):
    party_id = serializers.CharField()
    party_name = serializers.CharField()
    party_type = serializers.CharField()
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    opening_balance = serializers.DecimalField(**MONEY)
    closing_balance = serializers.DecimalField(**MONEY)
    closing_balance_label = serializers.SerializerMethodField()
    total_debits = serializers.DecimalField(**MONEY)
    total_credits = serializers.DecimalField(**MONEY)
    lines = StatementLineSerializer(many=True)
    anomalies = AnomalySerializer(many=True)
    generated_at = serializers.DateTimeField()
    request_seq = serializers.CharField(allow_null=True)

    def get_closing_balance_label(self, obj):
        return balance_label(obj["closing_balance"])


class OverdueRowSerializer(serializers.Serializer):
    party_id = serializers.CharField(source="party.id")
    party_name = serializers.CharField(source="party.name")
    phone = serializers.CharField(source="party.phone")
    last_payment_date = serializers.DateField(source="party.last_payment_date", allow_null=True)
    balance = serializers.DecimalField(**MONEY)
    debtor_days = serializers.IntegerField()


class RecentTransactionSerializer(serializers.Serializer):
    id = serializers.CharField()
    party_name = serializers.CharField(source="party.name")
    type = serializers.CharField()
    amount = serializers.DecimalField(**MONEY)
    status = serializers.CharField()
    transaction_date = serializers.DateField()


class DashboardSerializer(serializers.Serializer):
    firm_id = serializers.CharField(source="firm.id")
    firm_name = serializers.CharField(source="firm.name")
    date_from = serializers.DateField()
    date_to = serializers.DateField()

    total_sales = serializers.DecimalField(**MONEY)
    total_collections = serializers.DecimalField(**MONEY)
    total_purchases = serializers.DecimalField(**MONEY)
    transaction_count = serializers.IntegerField()

    pending_approvals = serializers.IntegerField()
    active_parties = serializers.IntegerField()
    pending_cheques = serializers.IntegerField()
    cheques_due_today = serializers.IntegerField()
    pending_cheque_amount = serializers.DecimalField(**MONEY)

    total_receivables = serializers.DecimalField(**MONEY)
    total_payables = serializers.DecimalField(**MONEY)
    total_receivables_display = serializers.SerializerMethodField()
    total_payables_display = serializers.SerializerMethodField()

    overdue_after_days = serializers.IntegerField()
    overdue_parties = OverdueRowSerializer(many=True)
    recent_transactions = RecentTransactionSerializer(many=True)
    generated_at = serializers.DateTimeField()

    def get_total_receivables_display(self, obj):
        return format_currency(obj["total_receivables"])

    def get_total_payables_display(self, obj):
        return format_currency(obj["total_payables"])
