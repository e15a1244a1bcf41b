# custody_core/registry/models.py
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from custody_core.common.models import TimeStampedModel
from custody_core.entities.models import Entity


class DeactivationReason(models.TextChoices):
    NONE = "", "Active"
    MANUFACTURER = "manufacturer", "Deactivated by manufacturer"
    EXPIRED = "expired", "Expired"


class Medicine(TimeStampedModel):
    """
    Registered drug product. Immutable after registration except for the
    approval flag, which a regulator flips exactly once.
    """
    id = models.CharField(primary_key=True, max_length=128)

    name = models.CharField(max_length=255)
    brand = models.CharField(max_length=255)
    registered_at = models.DateTimeField(default=timezone.now)

    manufacturer = models.ForeignKey(Entity, on_delete=models.PROTECT, related_name="medicines")

    is_approved = models.BooleanField(default=False, db_index=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        Entity,
        on_delete=models.PROTECT,
        related_name="approved_medicines",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "registry_medicine"
        indexes = [
            models.Index(fields=["manufacturer", "is_approved"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.brand})"


class Batch(TimeStampedModel):
    """
    Dated, quantity-bounded production lot of one medicine.

    remaining_quantity is the manufacturer's un-transferred allocation; it only
    moves when the manufacturer is the transfer sender. Inactive is terminal.
    """
    id = models.CharField(primary_key=True, max_length=128)

    medicine = models.ForeignKey(Medicine, on_delete=models.PROTECT, related_name="batches")

    quantity = models.PositiveBigIntegerField()
    remaining_quantity = models.PositiveBigIntegerField()

    production_date = models.DateTimeField()
    expiry_date = models.DateTimeField(db_index=True)

    is_active = models.BooleanField(default=True, db_index=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)
    deactivation_reason = models.CharField(
        max_length=16,
        choices=DeactivationReason.choices,
        default=DeactivationReason.NONE,
        blank=True,
    )

    class Meta:
        db_table = "registry_batch"
        indexes = [
            models.Index(fields=["medicine", "created_at"]),
            models.Index(fields=["is_active", "expiry_date"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(expiry_date__gt=F("production_date")),
                name="ck_batch_expiry_after_production",
            ),
            models.CheckConstraint(
                condition=Q(remaining_quantity__lte=F("quantity")),
                name="ck_batch_remaining_within_quantity",
            ),
        ]

    def __str__(self) -> str:
        return f"Batch({self.id}, {self.medicine_id})"
