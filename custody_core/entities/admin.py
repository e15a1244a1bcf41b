# custody_core/entities/admin.py
from django.contrib import admin

from custody_core.entities.models import Entity


@admin.register(Entity)
class EntityAdmin(admin.ModelAdmin):
    list_display = ("address", "name", "role", "is_active", "registered_at")
    list_filter = ("role", "is_active")
    search_fields = ("address", "name", "license_info")
    ordering = ("registered_at",)
