# custody_core/registry/apps.py
from django.apps import AppConfig


class RegistryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "custody_core.registry"
    label = "registry"
