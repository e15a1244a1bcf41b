# custody_core/alerts/subscribers.py
from custody_core.alerts.services import AlertService
from custody_core.common.events import subscribe


@subscribe("inventory.low")
def on_inventory_low(payload: dict) -> None:
    AlertService.raise_low_inventory(
        holder=payload["holder"],
        medicine_id=payload["medicine_id"],
        batch_id=payload["batch_id"],
        balance=int(payload["balance"]),
        threshold=int(payload["threshold"]),
    )
