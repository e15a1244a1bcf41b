# custody_core/ledger/apps.py
from django.apps import AppConfig


class LedgerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "custody_core.ledger"
    label = "ledger"
