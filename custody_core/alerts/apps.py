# custody_core/alerts/apps.py
from django.apps import AppConfig


class AlertsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "custody_core.alerts"
    label = "alerts"

    def ready(self):
        # Register event-bus handlers
        import custody_core.alerts.subscribers  # noqa: F401
