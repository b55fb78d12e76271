# firms/admin.py

from django.contrib import admin

from firms.models import Firm, FirmAccess


class FirmAccessInline(admin.TabularInline):
    model = FirmAccess
    extra = 0
    autocomplete_fields = ["user"]


@admin.register(Firm)
class FirmAdmin(admin.ModelAdmin):
    list_display = ("name", "gst_number", "phone", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "gst_number", "email")
    inlines = [FirmAccessInline]


@admin.register(FirmAccess)
class FirmAccessAdmin(admin.ModelAdmin):
    list_display = ("user", "firm", "created_at")
    list_filter = ("firm",)
    search_fields = ("user__email", "user__username", "firm__name")
