# transactions/admin.py

from django.contrib import admin

from transactions.models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("transaction_date", "party", "type", "amount", "status", "firm")
    list_filter = ("status", "type", "firm")
    search_fields = ("party__name", "bill_number", "reference_number")
    date_hierarchy = "transaction_date"
    raw_id_fields = ("party", "created_by", "approved_by", "rejected_by")

    def has_change_permission(self, request, obj=None):
        # approved / rejected rows are ledger history
        if obj is not None and not obj.is_pending:
            return False
        return super().has_change_permission(request, obj)
