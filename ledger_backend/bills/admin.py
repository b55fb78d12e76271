from django.contrib import admin

from bills.models import Bill, BillItem


class BillItemInline(admin.TabularInline):
    model = BillItem
    extra = 0
    readonly_fields = ("cases", "total_price")


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ("bill_number", "supplier_name", "firm", "bill_date", "total_amount", "status")
    list_filter = ("firm", "status", "category")
    search_fields = ("bill_number", "supplier_name")
    readonly_fields = ("total_amount", "approved_by", "approved_at", "rejected_by", "rejected_at")
    inlines = [BillItemInline]
