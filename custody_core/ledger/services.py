# custody_core/ledger/services.py
from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction

from custody_core.common import grants
from custody_core.common.errors import (
    BatchInactive,
    IneligibleReceiver,
    InsufficientBatchQuantity,
    InsufficientInventory,
    InvalidInput,
    InvalidQuantity,
    NotFound,
    Unauthorized,
)
from custody_core.common.events import publish
from custody_core.entities.directory import get_entity, require_active_role
from custody_core.entities.models import Role
from custody_core.ledger.models import HolderIndexEntry, HolderMedicine, InventoryBalance
from custody_core.registry.models import Batch
from custody_core.supply_events.models import EventType, SupplyChainEvent
from custody_core.supply_events.services import event_type_for_receiver, record_event

logger = logging.getLogger(__name__)

# Lets this module move a batch's remaining allocation; nothing else holds it.
_GRANT = grants.issue(grants.LEDGER)


def low_stock_threshold() -> int:
    return int(getattr(settings, "CUSTODY_LOW_STOCK_THRESHOLD", 10))


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class InventoryLedger:
    """
    Every quantity movement goes through here.

    Conservation: for a medicine, held + dispensed == minted. Each operation is
    one transaction; the batch row is locked first, then balance rows in
    address order, and every check runs before the first write.
    """

    # -------------------------
    # Internal helpers
    # -------------------------
    @staticmethod
    def _lock_active_batch(batch_id: str) -> Batch:
        try:
            batch = Batch.objects.select_for_update().select_related("medicine").get(id=batch_id)
        except Batch.DoesNotExist:
            raise NotFound("Batch not found.", batch_id=batch_id)
        if not batch.is_active:
            raise BatchInactive(batch_id=batch_id, reason=batch.deactivation_reason)
        return batch

    @staticmethod
    def _lock_balances(
        *,
        medicine_id: str,
        holders: list[str],
        receivers: tuple[str, ...] = (),
    ) -> dict[str, InventoryBalance]:
        # select_for_update only locks rows that exist, so receivers get a zero
        # row first. get_or_create absorbs a concurrent insert of the same row.
        for address in sorted(set(receivers)):
            InventoryBalance.objects.get_or_create(holder_id=address, medicine_id=medicine_id, defaults={"quantity": 0})

        rows = (
            InventoryBalance.objects.select_for_update()
            .filter(medicine_id=medicine_id, holder_id__in=sorted(set(holders)))
            .order_by("holder_id")
        )
        return {row.holder_id: row for row in rows}

    @staticmethod
    def _credit(row: InventoryBalance, quantity: int) -> InventoryBalance:
        row.quantity += quantity
        row.save(update_fields=["quantity", "updated_at"])
        return row

    @staticmethod
    def _debit(row: InventoryBalance, quantity: int) -> InventoryBalance:
        row.quantity -= quantity
        row.save(update_fields=["quantity", "updated_at"])
        if row.quantity == 0:
            HolderMedicine.objects.filter(holder_id=row.holder_id, medicine_id=row.medicine_id).delete()
        return row

    @staticmethod
    def _index_holder(*, medicine_id: str, holder: str, batch_id: str, first_stock: bool) -> None:
        HolderIndexEntry.objects.get_or_create(medicine_id=medicine_id, holder_id=holder, batch_id=batch_id)
        if first_stock:
            HolderMedicine.objects.get_or_create(holder_id=holder, medicine_id=medicine_id)

    @staticmethod
    def _notify_if_low(*, holder: str, medicine_id: str, batch_id: str, balance: int) -> None:
        threshold = low_stock_threshold()
        if balance > threshold:
            return
        logger.warning(
            "low inventory holder=%s medicine=%s balance=%s threshold=%s",
            holder,
            medicine_id,
            balance,
            threshold,
        )
        publish(
            "inventory.low",
            {
                "holder": holder,
                "medicine_id": medicine_id,
                "batch_id": batch_id,
                "balance": balance,
                "threshold": threshold,
            },
        )

    # -------------------------
    # Registry hook
    # -------------------------
    @staticmethod
    @transaction.atomic
    def initialize_balance(*, medicine_id: str, batch_id: str, holder: str, quantity: int, grant) -> InventoryBalance:
        """
        Opening balance for a freshly created batch. Registry-only.
        """
        grants.require(grant, grants.REGISTRY)
        if not _is_positive_int(quantity):
            raise InvalidQuantity(requested=quantity)

        entity = get_entity(holder)
        if entity is None:
            raise NotFound("Entity is not registered.", address=holder)

        balances = InventoryLedger._lock_balances(medicine_id=medicine_id, holders=[holder], receivers=(holder,))
        row = InventoryLedger._credit(balances[holder], quantity)
        InventoryLedger._index_holder(
            medicine_id=medicine_id,
            holder=holder,
            batch_id=batch_id,
            first_stock=row.quantity == quantity,
        )
        return row

    # -------------------------
    # Custody movements
    # -------------------------
    @staticmethod
    @transaction.atomic
    def transfer(*, actor: str, batch_id: str, to_holder: str, quantity: int) -> SupplyChainEvent:
        # Avoid an import cycle: the registry imports this module.
        from custody_core.registry.services import BatchService

        sender = get_entity(actor)
        if sender is None or not sender.is_active:
            raise Unauthorized("Sender is not a registered, active entity.", address=actor)

        batch = InventoryLedger._lock_active_batch(batch_id)
        medicine = batch.medicine

        receiver = get_entity(to_holder)
        if receiver is None:
            raise IneligibleReceiver("Receiver is not registered.", address=to_holder)
        if not receiver.is_active:
            raise IneligibleReceiver("Receiver is inactive.", address=to_holder)
        if receiver.role == Role.REGULATOR:
            raise IneligibleReceiver("Regulators cannot hold stock.", address=to_holder, role=receiver.role)
        if receiver.address == sender.address:
            raise IneligibleReceiver("Sender and receiver must differ.", address=to_holder)
        event_type = event_type_for_receiver(receiver.role)
        if event_type == EventType.MANUFACTURED:
            raise IneligibleReceiver("Stock cannot be transferred to a manufacturer.", address=to_holder, role=receiver.role)

        if not _is_positive_int(quantity):
            raise InvalidQuantity(requested=quantity)

        balances = InventoryLedger._lock_balances(
            medicine_id=medicine.id,
            holders=[sender.address, receiver.address],
            receivers=(receiver.address,),
        )
        sender_row = balances.get(sender.address)
        available = sender_row.quantity if sender_row else 0

        from_manufacturer = sender.address == medicine.manufacturer_id
        if from_manufacturer and batch.remaining_quantity < quantity:
            raise InsufficientBatchQuantity(
                batch_id=batch.id,
                requested=quantity,
                available=batch.remaining_quantity,
            )
        if available < quantity:
            raise InsufficientInventory(
                holder=sender.address,
                medicine_id=medicine.id,
                requested=quantity,
                available=available,
            )

        # All checks passed; writes below cannot fail on business rules.
        if from_manufacturer:
            BatchService.update_remaining_quantity(
                batch_id=batch.id,
                new_value=batch.remaining_quantity - quantity,
                grant=_GRANT,
            )

        sender_row = InventoryLedger._debit(sender_row, quantity)
        receiver_row = InventoryLedger._credit(balances[receiver.address], quantity)
        InventoryLedger._index_holder(
            medicine_id=medicine.id,
            holder=receiver.address,
            batch_id=batch.id,
            first_stock=receiver_row.quantity == quantity,
        )
        InventoryLedger._notify_if_low(
            holder=sender.address,
            medicine_id=medicine.id,
            batch_id=batch.id,
            balance=sender_row.quantity,
        )

        event = record_event(
            medicine_id=medicine.id,
            batch_id=batch.id,
            event_type=event_type,
            from_entity=sender.address,
            to_entity=receiver.address,
            quantity=quantity,
        )
        logger.info(
            "transfer batch=%s from=%s to=%s quantity=%s type=%s",
            batch.id,
            sender.address,
            receiver.address,
            quantity,
            event_type,
        )
        return event

    @staticmethod
    @transaction.atomic
    def dispense(*, actor: str, batch_id: str, quantity: int, patient_id: str) -> SupplyChainEvent:
        """
        Pharmacy hands units to a patient. Dispensing is the ledger's only sink.
        """
        pharmacy = require_active_role(actor, Role.PHARMACY)

        batch = InventoryLedger._lock_active_batch(batch_id)
        medicine = batch.medicine

        if not _is_positive_int(quantity):
            raise InvalidQuantity(requested=quantity)
        patient_id = (patient_id or "").strip()
        if not patient_id:
            raise InvalidInput("Patient id is required.", field="patient_id")

        balances = InventoryLedger._lock_balances(medicine_id=medicine.id, holders=[pharmacy.address])
        row = balances.get(pharmacy.address)
        available = row.quantity if row else 0
        if available < quantity:
            raise InsufficientInventory(
                holder=pharmacy.address,
                medicine_id=medicine.id,
                requested=quantity,
                available=available,
            )

        row = InventoryLedger._debit(row, quantity)
        InventoryLedger._notify_if_low(
            holder=pharmacy.address,
            medicine_id=medicine.id,
            batch_id=batch.id,
            balance=row.quantity,
        )

        event = record_event(
            medicine_id=medicine.id,
            batch_id=batch.id,
            event_type=EventType.DISPENSED,
            from_entity=pharmacy.address,
            to_entity=None,
            quantity=quantity,
            patient_id=patient_id,
        )
        logger.info("dispense batch=%s pharmacy=%s quantity=%s", batch.id, pharmacy.address, quantity)
        return event
