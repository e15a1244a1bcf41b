# custody_core/ledger/models.py
from django.db import models

from custody_core.common.models import TimeStampedModel
from custody_core.entities.models import Entity
from custody_core.registry.models import Batch, Medicine


class InventoryBalance(TimeStampedModel):
    """
    Units of one medicine held by one holder. Only the ledger services write
    here, always under a row lock.
    """
    holder = models.ForeignKey(Entity, on_delete=models.PROTECT, related_name="balances")
    medicine = models.ForeignKey(Medicine, on_delete=models.PROTECT, related_name="balances")
    quantity = models.PositiveBigIntegerField(default=0)

    class Meta:
        db_table = "ledger_inventory_balance"
        constraints = [
            models.UniqueConstraint(fields=["holder", "medicine"], name="uq_balance_holder_medicine"),
        ]
        indexes = [
            models.Index(fields=["medicine", "holder"]),
        ]

    def __str__(self) -> str:
        return f"{self.holder_id}/{self.medicine_id}={self.quantity}"


class HolderIndexEntry(models.Model):
    """
    Append-only "ever held" index per medicine. Never pruned; readers must
    re-check the live balance.
    """
    id = models.BigAutoField(primary_key=True)

    medicine = models.ForeignKey(Medicine, on_delete=models.PROTECT, related_name="holder_entries")
    holder = models.ForeignKey(Entity, on_delete=models.PROTECT, related_name="holder_entries")
    batch = models.ForeignKey(Batch, on_delete=models.PROTECT, related_name="holder_entries")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "ledger_holder_index"
        constraints = [
            models.UniqueConstraint(fields=["medicine", "holder", "batch"], name="uq_holder_index_entry"),
        ]
        indexes = [
            models.Index(fields=["medicine", "id"]),
            models.Index(fields=["holder", "medicine", "id"]),
        ]


class HolderMedicine(models.Model):
    """
    Medicines a holder currently has stock of. A row exists iff the holder's
    balance for that medicine is above zero.
    """
    id = models.BigAutoField(primary_key=True)

    holder = models.ForeignKey(Entity, on_delete=models.CASCADE, related_name="held_medicines")
    medicine = models.ForeignKey(Medicine, on_delete=models.CASCADE, related_name="current_holders")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "ledger_holder_medicine"
        constraints = [
            models.UniqueConstraint(fields=["holder", "medicine"], name="uq_holder_medicine"),
        ]
