# custody_core/supply_events/services.py
from __future__ import annotations

from datetime import datetime

from custody_core.common.errors import IneligibleReceiver
from custody_core.entities.models import Role
from custody_core.supply_events.models import EventType, SupplyChainEvent

_RECEIVER_EVENT_TYPES = {
    Role.MANUFACTURER: EventType.MANUFACTURED,
    Role.SUPPLIER: EventType.TO_SUPPLIER,
    Role.PHARMACY: EventType.TO_PHARMACY,
    Role.REGULATOR: None,
    Role.NONE: None,
}


def event_type_for_receiver(role: str) -> EventType:
    """
    Custody event recorded when stock lands with an entity of `role`.
    Regulators and unregistered addresses never receive stock.
    """
    try:
        event_type = _RECEIVER_EVENT_TYPES[Role(role)]
    except ValueError:
        event_type = None
    if event_type is None:
        raise IneligibleReceiver("Receiver role cannot hold stock.", role=str(role))
    return event_type


def record_event(
    *,
    medicine_id: str,
    batch_id: str,
    event_type: str,
    from_entity: str | None,
    to_entity: str | None,
    quantity: int,
    patient_id: str = "",
    timestamp: datetime | None = None,
) -> SupplyChainEvent:
    """
    Append one event to the custody log. No dedup, no reordering; callers
    run this inside their own transaction so a rollback drops it too.
    """
    kwargs = {}
    if timestamp is not None:
        kwargs["timestamp"] = timestamp

    return SupplyChainEvent.objects.create(
        medicine_id=medicine_id,
        batch_id=batch_id,
        event_type=event_type,
        from_entity=from_entity,
        to_entity=to_entity,
        quantity=quantity,
        patient_id=patient_id or "",
        **kwargs,
    )
