# custody_core/alerts/models.py
from __future__ import annotations

from django.db import models

from custody_core.common.models import TimeStampedModel


class AlertSeverity(models.TextChoices):
    INFO = "INFO", "Info"
    WARNING = "WARNING", "Warning"
    CRITICAL = "CRITICAL", "Critical"


class AlertStatus(models.TextChoices):
    OPEN = "OPEN", "Open"
    ACKED = "ACKED", "Acknowledged"


class Alert(TimeStampedModel):
    """
    Notification addressed to one holder (e.g. low inventory).
    Keep links loose (plain ids) to avoid cross-app FK coupling.
    """
    code = models.SlugField(max_length=64, db_index=True)  # e.g. "low-inventory"
    title = models.CharField(max_length=255)
    message = models.TextField(blank=True, default="")

    severity = models.CharField(
        max_length=16,
        choices=AlertSeverity.choices,
        default=AlertSeverity.INFO,
        db_index=True,
    )
    status = models.CharField(
        max_length=16,
        choices=AlertStatus.choices,
        default=AlertStatus.OPEN,
        db_index=True,
    )

    holder_address = models.CharField(max_length=128, db_index=True)
    medicine_id = models.CharField(max_length=128, null=True, blank=True, db_index=True)
    batch_id = models.CharField(max_length=128, null=True, blank=True)

    acked_at = models.DateTimeField(null=True, blank=True)

    meta = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "alerts_alert"
        indexes = [
            models.Index(fields=["holder_address", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.code} -> {self.holder_address} ({self.status})"
