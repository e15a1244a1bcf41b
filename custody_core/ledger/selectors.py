# custody_core/ledger/selectors.py
from __future__ import annotations

from django.db.models import QuerySet, Sum

from custody_core.ledger.models import HolderIndexEntry, HolderMedicine, InventoryBalance


def balance_of(*, holder: str, medicine_id: str) -> int:
    quantity = (
        InventoryBalance.objects.filter(holder_id=holder, medicine_id=medicine_id)
        .values_list("quantity", flat=True)
        .first()
    )
    return int(quantity or 0)


def total_held(*, medicine_id: str) -> int:
    total = InventoryBalance.objects.filter(medicine_id=medicine_id).aggregate(total=Sum("quantity")).get("total")
    return int(total or 0)


def holder_entries(*, medicine_id: str) -> QuerySet[HolderIndexEntry]:
    return (
        HolderIndexEntry.objects.filter(medicine_id=medicine_id)
        .select_related("holder", "batch")
        .order_by("id")
    )


def held_medicines(*, holder: str) -> QuerySet[HolderMedicine]:
    return HolderMedicine.objects.filter(holder_id=holder).select_related("medicine").order_by("id")
