# custody_core/ledger/admin.py
from django.contrib import admin

from custody_core.ledger.models import HolderIndexEntry, InventoryBalance


@admin.register(InventoryBalance)
class InventoryBalanceAdmin(admin.ModelAdmin):
    list_display = ("holder", "medicine", "quantity", "updated_at")
    search_fields = ("holder__address", "holder__name", "medicine__id")
    readonly_fields = ("holder", "medicine", "quantity")

    # Balances only move through the ledger services.
    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(HolderIndexEntry)
class HolderIndexEntryAdmin(admin.ModelAdmin):
    list_display = ("id", "medicine", "holder", "batch", "created_at")
    search_fields = ("medicine__id", "holder__address", "batch__id")
    ordering = ("id",)

    def has_change_permission(self, request, obj=None):
        return False
