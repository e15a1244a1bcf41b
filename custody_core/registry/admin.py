# custody_core/registry/admin.py
from django.contrib import admin

from custody_core.registry.models import Batch, Medicine


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "brand", "manufacturer", "is_approved", "registered_at")
    list_filter = ("is_approved",)
    search_fields = ("id", "name", "brand")
    readonly_fields = ("registered_at", "approved_at", "approved_by")


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ("id", "medicine", "quantity", "remaining_quantity", "expiry_date", "is_active", "deactivation_reason")
    list_filter = ("is_active", "deactivation_reason")
    search_fields = ("id", "medicine__id", "medicine__name")
    readonly_fields = ("quantity", "remaining_quantity", "deactivated_at", "deactivation_reason")
