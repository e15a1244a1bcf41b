# custody_core/registry/services.py
from __future__ import annotations

import logging
from datetime import datetime

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from custody_core.audit.services import AuditService
from custody_core.common import grants
from custody_core.common.errors import (
    AlreadyApproved,
    AlreadyExists,
    InvalidInput,
    NotApproved,
    NotFound,
    Unauthorized,
)
from custody_core.common.events import publish
from custody_core.entities.directory import require_active_role
from custody_core.entities.models import Role
from custody_core.ledger.services import InventoryLedger
from custody_core.registry.models import Batch, DeactivationReason, Medicine
from custody_core.supply_events.models import EventType
from custody_core.supply_events.services import record_event

logger = logging.getLogger(__name__)

# Lets this module open balances in the ledger; nothing else holds it.
_GRANT = grants.issue(grants.REGISTRY)


def _min_name_length() -> int:
    return int(getattr(settings, "CUSTODY_MIN_NAME_LENGTH", 2))


def _aware(value: datetime | None) -> datetime | None:
    # Naive datetimes are read in the current timezone, as Django does on save.
    if value is not None and timezone.is_naive(value):
        return timezone.make_aware(value, timezone.get_current_timezone())
    return value


def _lock_batch(batch_id: str) -> Batch:
    try:
        return Batch.objects.select_for_update().select_related("medicine").get(id=batch_id)
    except Batch.DoesNotExist:
        raise NotFound("Batch not found.", batch_id=batch_id)


class MedicineService:
    """
    Medicine registration and the one-way approval flag.
    """

    @staticmethod
    @transaction.atomic
    def register_medicine(*, actor: str, medicine_id: str, name: str, brand: str) -> Medicine:
        manufacturer = require_active_role(actor, Role.MANUFACTURER)

        medicine_id = (medicine_id or "").strip()
        name = (name or "").strip()
        brand = (brand or "").strip()
        min_len = _min_name_length()

        if not medicine_id:
            raise InvalidInput("Medicine id is required.", field="medicine_id")
        if len(name) < min_len:
            raise InvalidInput("Name is too short.", field="name", value=name, min_length=min_len)
        if len(brand) < min_len:
            raise InvalidInput("Brand is too short.", field="brand", value=brand, min_length=min_len)
        if Medicine.objects.filter(id=medicine_id).exists():
            raise AlreadyExists("Medicine is already registered.", medicine_id=medicine_id)

        try:
            with transaction.atomic():
                medicine = Medicine.objects.create(
                    id=medicine_id,
                    name=name,
                    brand=brand,
                    manufacturer=manufacturer,
                )
        except IntegrityError:
            raise AlreadyExists("Medicine is already registered.", medicine_id=medicine_id)

        AuditService.log(
            event_code="medicine.registered",
            entity_type="Medicine",
            entity_id=medicine.id,
            actor_address=actor,
            metadata={"name": name, "brand": brand},
        )
        publish("medicine.registered", {"medicine_id": medicine.id, "manufacturer": manufacturer.address})
        logger.info("medicine registered id=%s manufacturer=%s", medicine.id, manufacturer.address)
        return medicine

    @staticmethod
    @transaction.atomic
    def approve_medicine(*, actor: str, medicine_id: str) -> Medicine:
        regulator = require_active_role(actor, Role.REGULATOR)

        medicine = Medicine.objects.select_for_update().filter(id=medicine_id).first()
        if medicine is None:
            raise NotFound("Medicine not found.", medicine_id=medicine_id)
        if medicine.is_approved:
            raise AlreadyApproved(medicine_id=medicine_id, approved_by=medicine.approved_by_id)

        medicine.is_approved = True
        medicine.approved_at = timezone.now()
        medicine.approved_by = regulator
        medicine.save(update_fields=["is_approved", "approved_at", "approved_by", "updated_at"])

        AuditService.log(
            event_code="medicine.approved",
            entity_type="Medicine",
            entity_id=medicine.id,
            actor_address=actor,
            metadata={},
        )
        logger.info("medicine approved id=%s regulator=%s", medicine.id, regulator.address)
        return medicine


class BatchService:
    """
    Batch lifecycle: Active -> Inactive (manufacturer or expiry). Inactive is
    terminal. Batch creation and the manufacturer's opening balance commit as
    one transaction.
    """

    @staticmethod
    @transaction.atomic
    def create_batch(
        *,
        actor: str,
        medicine_id: str,
        batch_id: str,
        quantity: int,
        production_date: datetime,
        expiry_date: datetime,
    ) -> Batch:
        medicine = Medicine.objects.select_related("manufacturer").filter(id=medicine_id).first()
        if medicine is None:
            raise NotFound("Medicine not found.", medicine_id=medicine_id)

        manufacturer = require_active_role(actor, Role.MANUFACTURER)
        if manufacturer.address != medicine.manufacturer_id:
            raise Unauthorized(
                "Only the medicine's manufacturer can create batches.",
                address=actor,
                manufacturer=medicine.manufacturer_id,
            )
        if not medicine.is_approved:
            raise NotApproved(medicine_id=medicine_id)

        batch_id = (batch_id or "").strip()
        if not batch_id:
            raise InvalidInput("Batch id is required.", field="batch_id")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInput("Quantity must be a positive integer.", field="quantity", value=quantity)
        production_date = _aware(production_date)
        expiry_date = _aware(expiry_date)
        if production_date is None or expiry_date is None or expiry_date <= production_date:
            raise InvalidInput(
                "Expiry date must be after production date.",
                field="expiry_date",
                production_date=production_date.isoformat() if production_date else None,
                expiry_date=expiry_date.isoformat() if expiry_date else None,
            )
        if Batch.objects.filter(id=batch_id).exists():
            raise AlreadyExists("Batch already exists.", batch_id=batch_id)

        try:
            with transaction.atomic():
                batch = Batch.objects.create(
                    id=batch_id,
                    medicine=medicine,
                    quantity=quantity,
                    remaining_quantity=quantity,
                    production_date=production_date,
                    expiry_date=expiry_date,
                    is_active=True,
                )
        except IntegrityError:
            raise AlreadyExists("Batch already exists.", batch_id=batch_id)

        InventoryLedger.initialize_balance(
            medicine_id=medicine.id,
            batch_id=batch.id,
            holder=manufacturer.address,
            quantity=quantity,
            grant=_GRANT,
        )
        record_event(
            medicine_id=medicine.id,
            batch_id=batch.id,
            event_type=EventType.MANUFACTURED,
            from_entity=None,
            to_entity=manufacturer.address,
            quantity=quantity,
        )

        logger.info("batch created id=%s medicine=%s quantity=%s", batch.id, medicine.id, quantity)
        return batch

    @staticmethod
    def _deactivate(batch: Batch, *, reason: str, actor: str | None, at: datetime) -> None:
        batch.is_active = False
        batch.deactivated_at = at
        batch.deactivation_reason = reason
        batch.save(update_fields=["is_active", "deactivated_at", "deactivation_reason", "updated_at"])

        AuditService.log(
            event_code="batch.deactivated",
            entity_type="Batch",
            entity_id=batch.id,
            actor_address=actor,
            metadata={"reason": reason, "medicine_id": batch.medicine_id},
        )
        publish("batch.deactivated", {"batch_id": batch.id, "medicine_id": batch.medicine_id, "reason": reason})
        logger.info("batch deactivated id=%s reason=%s", batch.id, reason)

    @staticmethod
    @transaction.atomic
    def deactivate_batch(*, actor: str, batch_id: str) -> Batch:
        batch = _lock_batch(batch_id)

        require_active_role(actor, Role.MANUFACTURER)
        if actor != batch.medicine.manufacturer_id:
            raise Unauthorized(
                "Only the medicine's manufacturer can deactivate its batches.",
                address=actor,
                manufacturer=batch.medicine.manufacturer_id,
            )

        if not batch.is_active:
            return batch

        BatchService._deactivate(batch, reason=DeactivationReason.MANUFACTURER, actor=actor, at=timezone.now())
        return batch

    @staticmethod
    def sweep_expired_batches(*, now: datetime | None = None) -> list[str]:
        """
        Deactivate every active batch whose expiry date has been reached.

        Each batch is locked and re-checked in its own transaction, so the sweep
        never holds more than one batch lock and a transfer racing it either
        commits first or sees the batch inactive.
        """
        now = now or timezone.now()
        candidates = list(
            Batch.objects.filter(is_active=True, expiry_date__lte=now)
            .order_by("expiry_date", "id")
            .values_list("id", flat=True)
        )

        deactivated: list[str] = []
        for batch_id in candidates:
            with transaction.atomic():
                batch = Batch.objects.select_for_update().get(id=batch_id)
                if not batch.is_active:
                    continue
                BatchService._deactivate(batch, reason=DeactivationReason.EXPIRED, actor=None, at=now)
                deactivated.append(batch_id)

        logger.info("expiry sweep as_of=%s deactivated=%d", now.isoformat(), len(deactivated))
        return deactivated

    @staticmethod
    @transaction.atomic
    def update_remaining_quantity(*, batch_id: str, new_value: int, grant) -> Batch:
        """
        Ledger-only hook: move the manufacturer's batch allocation in lock-step
        with its inventory debit.
        """
        grants.require(grant, grants.LEDGER)

        batch = _lock_batch(batch_id)
        if isinstance(new_value, bool) or not isinstance(new_value, int) or not 0 <= new_value <= batch.quantity:
            raise InvalidInput(
                "Remaining quantity must be between zero and the batch quantity.",
                batch_id=batch_id,
                value=new_value,
                quantity=batch.quantity,
            )

        batch.remaining_quantity = new_value
        batch.save(update_fields=["remaining_quantity", "updated_at"])
        return batch
