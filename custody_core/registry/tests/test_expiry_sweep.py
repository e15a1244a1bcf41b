from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from custody_core.common.errors import BatchInactive
from custody_core.ledger.services import InventoryLedger
from custody_core.registry.models import Batch, DeactivationReason
from custody_core.registry.services import BatchService

pytestmark = pytest.mark.django_db


@pytest.fixture
def expired_batch(make_batch):
    now = timezone.now()
    return make_batch(
        batch_id="B-old",
        quantity=50,
        production_date=now - timedelta(days=30),
        expiry_date=now - timedelta(days=1),
    )


def test_sweep_deactivates_only_expired(batch, expired_batch):
    deactivated = BatchService.sweep_expired_batches()

    assert deactivated == ["B-old"]
    old = Batch.objects.get(id="B-old")
    assert old.is_active is False
    assert old.deactivation_reason == DeactivationReason.EXPIRED
    assert Batch.objects.get(id="B1").is_active is True


def test_sweep_twice_matches_sweep_once(batch, expired_batch):
    BatchService.sweep_expired_batches()
    inactive_once = set(Batch.objects.filter(is_active=False).values_list("id", flat=True))

    assert BatchService.sweep_expired_batches() == []
    inactive_twice = set(Batch.objects.filter(is_active=False).values_list("id", flat=True))

    assert inactive_once == inactive_twice == {"B-old"}


def test_sweep_leaves_manufacturer_reason_untouched(expired_batch, manufacturer):
    BatchService.deactivate_batch(actor=manufacturer.address, batch_id="B-old")

    assert BatchService.sweep_expired_batches() == []
    assert Batch.objects.get(id="B-old").deactivation_reason == DeactivationReason.MANUFACTURER


def test_sweep_as_of_future(batch):
    later = timezone.now() + timedelta(days=400)
    assert BatchService.sweep_expired_batches(now=later) == ["B1"]


def test_transfer_against_swept_batch_fails(expired_batch, manufacturer, supplier):
    BatchService.sweep_expired_batches()

    with pytest.raises(BatchInactive) as ei:
        InventoryLedger.transfer(actor=manufacturer.address, batch_id="B-old", to_holder=supplier.address, quantity=5)
    assert ei.value.details["reason"] == "expired"


def test_management_command(batch, expired_batch):
    out = StringIO()
    call_command("sweep_expired_batches", "--dry-run", stdout=out)
    assert "would expire B-old" in out.getvalue()
    assert Batch.objects.get(id="B-old").is_active is True

    out = StringIO()
    call_command("sweep_expired_batches", stdout=out)
    assert "Deactivated: 1" in out.getvalue()
    assert Batch.objects.get(id="B-old").is_active is False


def test_sweep_expires_batch_exactly_at_its_expiry(batch):
    expiry = Batch.objects.get(id="B1").expiry_date

    assert BatchService.sweep_expired_batches(now=expiry - timedelta(microseconds=1)) == []
    assert Batch.objects.get(id="B1").is_active is True

    assert BatchService.sweep_expired_batches(now=expiry) == ["B1"]
    assert Batch.objects.get(id="B1").deactivation_reason == DeactivationReason.EXPIRED
