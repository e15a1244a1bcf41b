# custody_core/alerts/services.py
from __future__ import annotations

from django.db import transaction
from django.utils import timezone

from custody_core.alerts.models import Alert, AlertSeverity, AlertStatus
from custody_core.common.errors import NotFound

LOW_INVENTORY = "low-inventory"


class AlertService:
    @staticmethod
    @transaction.atomic
    def create_alert(
        *,
        holder_address: str,
        code: str,
        title: str,
        message: str = "",
        severity: str = AlertSeverity.INFO,
        medicine_id: str | None = None,
        batch_id: str | None = None,
        meta: dict | None = None,
    ) -> Alert:
        return Alert.objects.create(
            holder_address=holder_address,
            code=code,
            title=title,
            message=message,
            severity=severity,
            status=AlertStatus.OPEN,
            medicine_id=medicine_id,
            batch_id=batch_id,
            meta=meta or {},
        )

    @staticmethod
    def raise_low_inventory(*, holder: str, medicine_id: str, batch_id: str, balance: int, threshold: int) -> Alert:
        return AlertService.create_alert(
            holder_address=holder,
            code=LOW_INVENTORY,
            title="Low inventory",
            message=f"Balance for {medicine_id} is {balance} (threshold {threshold}).",
            severity=AlertSeverity.WARNING,
            medicine_id=medicine_id,
            batch_id=batch_id,
            meta={"balance": balance, "threshold": threshold},
        )

    @staticmethod
    @transaction.atomic
    def ack_alert(*, holder_address: str, alert_id: int) -> Alert:
        alert = Alert.objects.select_for_update().filter(id=alert_id, holder_address=holder_address).first()
        if alert is None:
            raise NotFound("Alert not found.", alert_id=alert_id)
        if alert.status != AlertStatus.ACKED:
            alert.status = AlertStatus.ACKED
            alert.acked_at = timezone.now()
            alert.save(update_fields=["status", "acked_at", "updated_at"])
        return alert
