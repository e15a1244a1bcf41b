# custody_core/supply_events/models.py
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class EventType(models.TextChoices):
    MANUFACTURED = "MANUFACTURED", "Manufactured"
    TO_SUPPLIER = "TO_SUPPLIER", "Transferred to supplier"
    TO_PHARMACY = "TO_PHARMACY", "Transferred to pharmacy"
    DISPENSED = "DISPENSED", "Dispensed to patient"


class SupplyChainEvent(models.Model):
    """
    Immutable custody record. The per-medicine and per-batch logs are both
    read from this table, ordered by `id` (append order).
    Keep links loose (plain ids) so history outlives any registry change.
    """
    id = models.BigAutoField(primary_key=True)

    medicine_id = models.CharField(max_length=128, db_index=True)
    batch_id = models.CharField(max_length=128, db_index=True)

    event_type = models.CharField(max_length=16, choices=EventType.choices, db_index=True)

    from_entity = models.CharField(max_length=128, null=True, blank=True)
    to_entity = models.CharField(max_length=128, null=True, blank=True)

    quantity = models.PositiveBigIntegerField()
    timestamp = models.DateTimeField(default=timezone.now)
    patient_id = models.CharField(max_length=128, blank=True, default="")

    class Meta:
        db_table = "supply_events_event"
        indexes = [
            models.Index(fields=["medicine_id", "id"]),
            models.Index(fields=["batch_id", "id"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_type} {self.medicine_id}/{self.batch_id} x{self.quantity}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SupplyChainEvent is immutable and cannot be modified once created.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("SupplyChainEvent is immutable and cannot be deleted.")
