# custody_core/entities/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone

from custody_core.common.models import TimeStampedModel


class Role(models.TextChoices):
    MANUFACTURER = "MANUFACTURER", "Manufacturer"
    SUPPLIER = "SUPPLIER", "Supplier"
    PHARMACY = "PHARMACY", "Pharmacy"
    REGULATOR = "REGULATOR", "Regulator"
    NONE = "NONE", "None"


class Entity(TimeStampedModel):
    """
    Registered supply-chain participant, identified by its address.
    The ledger only ever reads role and active status from here.
    """
    address = models.CharField(primary_key=True, max_length=128)

    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True, default="")
    license_info = models.CharField(max_length=255, blank=True, default="")

    role = models.CharField(max_length=16, choices=Role.choices, default=Role.NONE, db_index=True)
    is_active = models.BooleanField(default=True, db_index=True)
    registered_at = models.DateTimeField(default=timezone.now)

    # How an authenticated API user acts as this address.
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="custody_entity",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "entities_entity"
        indexes = [
            models.Index(fields=["role", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"
