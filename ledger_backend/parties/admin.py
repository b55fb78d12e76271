from django.contrib import admin

from parties.models import LocationGroup, Party


@admin.register(LocationGroup)
class LocationGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "firm", "created_at")
    list_filter = ("firm",)
    search_fields = ("name",)


@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "firm", "balance", "balance_as_of", "is_active")
    list_filter = ("firm", "type", "is_active")
    search_fields = ("name", "contact_person", "phone")
    readonly_fields = ("last_payment_date", "created_at", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        # stored balance moves through the reconcile action once the party exists
        if obj is not None:
            return ("balance", "balance_as_of", *self.readonly_fields)
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        return False
