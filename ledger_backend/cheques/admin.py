from django.contrib import admin

from cheques.models import Cheque


@admin.register(Cheque)
class ChequeAdmin(admin.ModelAdmin):
    list_display = ("cheque_number", "party", "direction", "amount", "due_date", "status")
    list_filter = ("firm", "direction", "status")
    search_fields = ("cheque_number", "party__name", "bank_name")
    readonly_fields = ("cleared_date", "bounced_date", "bounce_reason", "created_at", "updated_at")
