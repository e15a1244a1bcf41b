import logging

import pytest

from custody_core.alerts.models import Alert, AlertSeverity
from custody_core.alerts.services import LOW_INVENTORY
from custody_core.common.errors import InsufficientInventory, InvalidInput, Unauthorized
from custody_core.ledger.models import HolderMedicine
from custody_core.ledger.selectors import balance_of
from custody_core.ledger.services import InventoryLedger
from custody_core.supply_events.models import EventType
from custody_core.supply_events.selectors import dispensed_total

pytestmark = pytest.mark.django_db


@pytest.fixture
def stocked_pharmacy(batch, manufacturer, supplier, pharmacy):
    InventoryLedger.transfer(actor="0xA", batch_id="B1", to_holder="0xS", quantity=200)
    InventoryLedger.transfer(actor="0xS", batch_id="B1", to_holder="0xP", quantity=90)
    return pharmacy


def test_dispense_records_patient_and_debits(stocked_pharmacy):
    event = InventoryLedger.dispense(actor="0xP", batch_id="B1", quantity=30, patient_id="P-1")

    assert event.event_type == EventType.DISPENSED
    assert event.from_entity == "0xP"
    assert event.to_entity is None
    assert event.patient_id == "P-1"
    assert balance_of(holder="0xP", medicine_id="M1") == 60
    assert dispensed_total(medicine_id="M1") == 30


def test_dispense_all_removes_membership(stocked_pharmacy):
    InventoryLedger.dispense(actor="0xP", batch_id="B1", quantity=90, patient_id="P-1")

    assert balance_of(holder="0xP", medicine_id="M1") == 0
    assert not HolderMedicine.objects.filter(holder_id="0xP", medicine_id="M1").exists()


def test_only_pharmacies_dispense(stocked_pharmacy, supplier):
    with pytest.raises(Unauthorized):
        InventoryLedger.dispense(actor="0xS", batch_id="B1", quantity=1, patient_id="P-1")


def test_dispense_more_than_held(stocked_pharmacy):
    with pytest.raises(InsufficientInventory) as ei:
        InventoryLedger.dispense(actor="0xP", batch_id="B1", quantity=91, patient_id="P-1")

    assert ei.value.details["available"] == 90
    assert ei.value.details["requested"] == 91


def test_patient_id_required(stocked_pharmacy):
    with pytest.raises(InvalidInput):
        InventoryLedger.dispense(actor="0xP", batch_id="B1", quantity=1, patient_id="   ")
    assert balance_of(holder="0xP", medicine_id="M1") == 90


def test_low_stock_raises_alert_and_logs(stocked_pharmacy, caplog):
    caplog.set_level(logging.WARNING, logger="custody_core")

    InventoryLedger.dispense(actor="0xP", batch_id="B1", quantity=85, patient_id="P-1")

    alert = Alert.objects.get(holder_address="0xP", code=LOW_INVENTORY)
    assert alert.severity == AlertSeverity.WARNING
    assert alert.medicine_id == "M1"
    assert alert.meta == {"balance": 5, "threshold": 10}
    assert "low inventory holder=0xP" in caplog.text


def test_above_threshold_is_quiet(stocked_pharmacy):
    InventoryLedger.dispense(actor="0xP", batch_id="B1", quantity=10, patient_id="P-1")
    assert not Alert.objects.filter(holder_address="0xP").exists()


def test_threshold_comes_from_settings(stocked_pharmacy, settings):
    settings.CUSTODY_LOW_STOCK_THRESHOLD = 80

    InventoryLedger.dispense(actor="0xP", batch_id="B1", quantity=10, patient_id="P-1")
    assert Alert.objects.filter(holder_address="0xP", code=LOW_INVENTORY).count() == 1
