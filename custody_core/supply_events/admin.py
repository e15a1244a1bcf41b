# custody_core/supply_events/admin.py
from django.contrib import admin

from custody_core.supply_events.models import SupplyChainEvent


@admin.register(SupplyChainEvent)
class SupplyChainEventAdmin(admin.ModelAdmin):
    list_display = ("id", "event_type", "medicine_id", "batch_id", "from_entity", "to_entity", "quantity", "timestamp")
    list_filter = ("event_type",)
    search_fields = ("medicine_id", "batch_id", "from_entity", "to_entity", "patient_id")
    ordering = ("id",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
