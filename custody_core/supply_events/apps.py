# custody_core/supply_events/apps.py
from django.apps import AppConfig


class SupplyEventsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "custody_core.supply_events"
    label = "supply_events"
