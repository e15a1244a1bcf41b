from datetime import timedelta

import pytest
from django.utils import timezone

from custody_core.audit.models import AuditEvent
from custody_core.common.errors import (
    AlreadyExists,
    InvalidInput,
    NotApproved,
    NotFound,
    Unauthorized,
)
from custody_core.entities.models import Role
from custody_core.entities.services import EntityService
from custody_core.ledger.selectors import balance_of
from custody_core.registry.models import Batch, DeactivationReason
from custody_core.registry.services import BatchService, MedicineService
from custody_core.supply_events.models import EventType
from custody_core.supply_events.selectors import batch_history, history

pytestmark = pytest.mark.django_db


def _dates():
    now = timezone.now()
    return now - timedelta(days=1), now + timedelta(days=365)


def test_create_batch_seeds_balance_and_first_event(batch, manufacturer):
    assert batch.is_active is True
    assert batch.quantity == 4000
    assert batch.remaining_quantity == 4000
    assert balance_of(holder=manufacturer.address, medicine_id="M1") == 4000

    events = list(history(medicine_id="M1"))
    assert len(events) == 1
    first = events[0]
    assert first.event_type == EventType.MANUFACTURED
    assert first.from_entity is None
    assert first.to_entity == manufacturer.address
    assert first.quantity == 4000
    assert [e.id for e in batch_history(batch_id="B1")] == [first.id]


def test_create_batch_requires_approval(manufacturer):
    MedicineService.register_medicine(actor=manufacturer.address, medicine_id="M9", name="Ibuprofen", brand="Advil")
    production, expiry = _dates()

    with pytest.raises(NotApproved):
        BatchService.create_batch(
            actor=manufacturer.address,
            medicine_id="M9",
            batch_id="B9",
            quantity=10,
            production_date=production,
            expiry_date=expiry,
        )
    assert not Batch.objects.exists()


def test_create_batch_only_by_own_manufacturer(approved_medicine):
    other = EntityService.register(address="0xB", name="Other Pharma", role=Role.MANUFACTURER)
    production, expiry = _dates()

    with pytest.raises(Unauthorized):
        BatchService.create_batch(
            actor=other.address,
            medicine_id="M1",
            batch_id="B1",
            quantity=10,
            production_date=production,
            expiry_date=expiry,
        )


@pytest.mark.parametrize("quantity", [0, -5])
def test_create_batch_rejects_non_positive_quantity(approved_medicine, manufacturer, quantity):
    production, expiry = _dates()
    with pytest.raises(InvalidInput) as ei:
        BatchService.create_batch(
            actor=manufacturer.address,
            medicine_id="M1",
            batch_id="B1",
            quantity=quantity,
            production_date=production,
            expiry_date=expiry,
        )
    assert ei.value.details["value"] == quantity


def test_create_batch_rejects_expiry_not_after_production(approved_medicine, manufacturer):
    production, _ = _dates()
    with pytest.raises(InvalidInput):
        BatchService.create_batch(
            actor=manufacturer.address,
            medicine_id="M1",
            batch_id="B1",
            quantity=10,
            production_date=production,
            expiry_date=production,
        )


def test_create_batch_duplicate_and_unknown_medicine(batch, manufacturer, make_batch):
    with pytest.raises(AlreadyExists):
        make_batch(batch_id="B1", quantity=5)

    production, expiry = _dates()
    with pytest.raises(NotFound):
        BatchService.create_batch(
            actor=manufacturer.address,
            medicine_id="missing",
            batch_id="B2",
            quantity=5,
            production_date=production,
            expiry_date=expiry,
        )

    # the failed duplicate did not touch the ledger
    assert balance_of(holder=manufacturer.address, medicine_id="M1") == 4000


def test_deactivate_batch_is_idempotent(batch, manufacturer):
    first = BatchService.deactivate_batch(actor=manufacturer.address, batch_id="B1")
    assert first.is_active is False
    assert first.deactivation_reason == DeactivationReason.MANUFACTURER

    again = BatchService.deactivate_batch(actor=manufacturer.address, batch_id="B1")
    assert again.is_active is False
    assert again.deactivated_at == first.deactivated_at

    audits = AuditEvent.objects.filter(event_code="batch.deactivated", entity_id="B1")
    assert audits.count() == 1
    assert audits.get().metadata["reason"] == "manufacturer"


def test_deactivate_batch_manufacturer_only(batch, supplier):
    with pytest.raises(Unauthorized):
        BatchService.deactivate_batch(actor=supplier.address, batch_id="B1")
    with pytest.raises(NotFound):
        BatchService.deactivate_batch(actor=supplier.address, batch_id="missing")

    assert Batch.objects.get(id="B1").is_active is True


def test_update_remaining_quantity_requires_ledger_grant(batch):
    with pytest.raises(Unauthorized):
        BatchService.update_remaining_quantity(batch_id="B1", new_value=10, grant=None)

    from custody_core.registry import services as registry_services

    # The registry's own grant is not the ledger's.
    with pytest.raises(Unauthorized):
        BatchService.update_remaining_quantity(batch_id="B1", new_value=10, grant=registry_services._GRANT)

    assert Batch.objects.get(id="B1").remaining_quantity == 4000


def test_update_remaining_quantity_bounds(batch):
    from custody_core.ledger import services as ledger_services

    with pytest.raises(InvalidInput):
        BatchService.update_remaining_quantity(batch_id="B1", new_value=4001, grant=ledger_services._GRANT)

    updated = BatchService.update_remaining_quantity(batch_id="B1", new_value=3000, grant=ledger_services._GRANT)
    assert updated.remaining_quantity == 3000


def test_create_batch_accepts_mixed_naive_and_aware_dates(approved_medicine, manufacturer):
    aware_production = timezone.now() - timedelta(days=1)
    naive_expiry = (timezone.now() + timedelta(days=30)).replace(tzinfo=None)

    batch = BatchService.create_batch(
        actor=manufacturer.address,
        medicine_id="M1",
        batch_id="B1",
        quantity=10,
        production_date=aware_production,
        expiry_date=naive_expiry,
    )

    assert timezone.is_aware(batch.expiry_date)
    assert batch.expiry_date > batch.production_date


def test_create_batch_mixed_dates_out_of_order(approved_medicine, manufacturer):
    naive_production = (timezone.now() + timedelta(days=30)).replace(tzinfo=None)

    with pytest.raises(InvalidInput) as ei:
        BatchService.create_batch(
            actor=manufacturer.address,
            medicine_id="M1",
            batch_id="B1",
            quantity=10,
            production_date=naive_production,
            expiry_date=timezone.now(),
        )
    assert ei.value.details["field"] == "expiry_date"
    assert not Batch.objects.exists()
