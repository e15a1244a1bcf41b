# custody_core/projections/selectors.py
from __future__ import annotations

from dataclasses import asdict, dataclass

from django.db import transaction

from custody_core.common.errors import NotFound
from custody_core.entities.directory import get_entity
from custody_core.ledger import selectors as ledger_selectors
from custody_core.ledger.models import HolderIndexEntry, InventoryBalance
from custody_core.registry.models import Batch, Medicine
from custody_core.registry.selectors import RegistrySelectors
from custody_core.supply_events import selectors as event_selectors


@dataclass(frozen=True)
class HolderStock:
    holder: str
    batch_id: str
    name: str
    location: str
    quantity: int


@dataclass(frozen=True)
class EntityMedicine:
    medicine_id: str
    batch_id: str | None
    name: str
    brand: str
    quantity: int


class ProjectionSelectors:
    """
    Read-only views composed from registry, ledger and event log.
    Each projection reads inside one transaction so it never mixes the
    before/after state of a concurrent transfer.
    """

    @staticmethod
    def _require_medicine(medicine_id: str) -> Medicine:
        return RegistrySelectors.get_medicine(medicine_id=medicine_id)

    @staticmethod
    def _require_holder(holder: str):
        entity = get_entity(holder)
        if entity is None:
            raise NotFound("Entity is not registered.", address=holder)
        return entity

    @staticmethod
    @transaction.atomic
    def holders_with_stock(*, medicine_id: str) -> list[HolderStock]:
        ProjectionSelectors._require_medicine(medicine_id)

        balances = dict(
            InventoryBalance.objects.filter(medicine_id=medicine_id, quantity__gt=0).values_list("holder_id", "quantity")
        )

        seen: set[str] = set()
        items: list[HolderStock] = []
        for entry in ledger_selectors.holder_entries(medicine_id=medicine_id):
            if entry.holder_id in seen:
                continue
            if balances.get(entry.holder_id, 0) <= 0:
                continue
            if not entry.batch.is_active or not entry.holder.is_active:
                continue
            seen.add(entry.holder_id)
            items.append(
                HolderStock(
                    holder=entry.holder_id,
                    batch_id=entry.batch_id,
                    name=entry.holder.name,
                    location=entry.holder.location,
                    quantity=balances[entry.holder_id],
                )
            )
        return items

    @staticmethod
    @transaction.atomic
    def entity_medicines(*, holder: str) -> list[EntityMedicine]:
        ProjectionSelectors._require_holder(holder)

        first_batches: dict[str, str] = {}
        for medicine_id, batch_id in (
            HolderIndexEntry.objects.filter(holder_id=holder).order_by("id").values_list("medicine_id", "batch_id")
        ):
            first_batches.setdefault(medicine_id, batch_id)

        items: list[EntityMedicine] = []
        for row in ledger_selectors.held_medicines(holder=holder):
            items.append(
                EntityMedicine(
                    medicine_id=row.medicine_id,
                    batch_id=first_batches.get(row.medicine_id),
                    name=row.medicine.name,
                    brand=row.medicine.brand,
                    quantity=ledger_selectors.balance_of(holder=holder, medicine_id=row.medicine_id),
                )
            )
        return items

    @staticmethod
    @transaction.atomic
    def inventory_of(*, holder: str, medicine_id: str) -> int:
        ProjectionSelectors._require_holder(holder)
        ProjectionSelectors._require_medicine(medicine_id)
        return ledger_selectors.balance_of(holder=holder, medicine_id=medicine_id)

    @staticmethod
    def batch_details(*, batch_id: str) -> Batch:
        return RegistrySelectors.get_batch(batch_id=batch_id)

    @staticmethod
    def medicine_details(*, medicine_id: str) -> Medicine:
        return RegistrySelectors.get_medicine(medicine_id=medicine_id)

    @staticmethod
    @transaction.atomic
    def conservation_report(*, medicine_id: str) -> dict:
        """
        minted == held + dispensed must always hold.
        """
        ProjectionSelectors._require_medicine(medicine_id)

        minted = sum(
            RegistrySelectors.batches_for_medicine(medicine_id=medicine_id).values_list("quantity", flat=True)
        )
        held = ledger_selectors.total_held(medicine_id=medicine_id)
        dispensed = event_selectors.dispensed_total(medicine_id=medicine_id)
        return {
            "medicine_id": medicine_id,
            "minted": int(minted),
            "held": held,
            "dispensed": dispensed,
            "balanced": minted == held + dispensed,
        }


def as_dicts(items) -> list[dict]:
    return [asdict(i) for i in items]
