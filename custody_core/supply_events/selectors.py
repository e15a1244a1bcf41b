# custody_core/supply_events/selectors.py
from __future__ import annotations

from django.db.models import QuerySet, Sum

from custody_core.registry.models import Medicine
from custody_core.supply_events.models import EventType, SupplyChainEvent


def history(*, medicine_id: str) -> QuerySet[SupplyChainEvent]:
    return SupplyChainEvent.objects.filter(medicine_id=medicine_id).order_by("id")


def batch_history(*, batch_id: str) -> QuerySet[SupplyChainEvent]:
    return SupplyChainEvent.objects.filter(batch_id=batch_id).order_by("id")


def dispensed_total(*, medicine_id: str) -> int:
    total = (
        SupplyChainEvent.objects.filter(medicine_id=medicine_id, event_type=EventType.DISPENSED)
        .aggregate(total=Sum("quantity"))
        .get("total")
    )
    return int(total or 0)


def verify_authenticity(*, medicine_id: str) -> bool:
    """
    Root-of-trust check: the first recorded event must be MANUFACTURED and
    land with the medicine's registered manufacturer. Balances are not
    re-derived here.
    """
    manufacturer_id = Medicine.objects.filter(id=medicine_id).values_list("manufacturer_id", flat=True).first()
    if manufacturer_id is None:
        return False

    first = history(medicine_id=medicine_id).first()
    if first is None:
        return False
    if first.event_type != EventType.MANUFACTURED:
        return False
    return first.to_entity == manufacturer_id
