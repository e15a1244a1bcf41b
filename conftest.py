# conftest.py
from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from custody_core.entities.models import Role
from custody_core.entities.services import EntityService
from custody_core.registry.services import BatchService, MedicineService


@pytest.fixture
def manufacturer(db):
    return EntityService.register(address="0xA", name="Acme Pharma", role=Role.MANUFACTURER, location="Basel")


@pytest.fixture
def supplier(db):
    return EntityService.register(address="0xS", name="Swift Supply", role=Role.SUPPLIER, location="Lyon")


@pytest.fixture
def pharmacy(db):
    return EntityService.register(address="0xP", name="Corner Pharmacy", role=Role.PHARMACY, location="Paris")


@pytest.fixture
def regulator(db):
    return EntityService.register(address="0xR", name="Drug Authority", role=Role.REGULATOR, location="Brussels")


@pytest.fixture
def approved_medicine(manufacturer, regulator):
    MedicineService.register_medicine(actor=manufacturer.address, medicine_id="M1", name="Amoxicillin", brand="Amoxil")
    return MedicineService.approve_medicine(actor=regulator.address, medicine_id="M1")


@pytest.fixture
def make_batch(approved_medicine, manufacturer):
    def _make(batch_id="B1", quantity=4000, medicine_id="M1", production_date=None, expiry_date=None):
        now = timezone.now()
        return BatchService.create_batch(
            actor=manufacturer.address,
            medicine_id=medicine_id,
            batch_id=batch_id,
            quantity=quantity,
            production_date=production_date or now - timedelta(days=1),
            expiry_date=expiry_date or now + timedelta(days=365),
        )
    return _make


@pytest.fixture
def batch(make_batch):
    return make_batch()


@pytest.fixture
def client_for(db):
    """
    APIClient authenticated as a user linked to the given entity.
    """
    User = get_user_model()

    def _client(entity) -> APIClient:
        user = User.objects.create_user(username=f"user-{entity.address}", password="pass123")
        entity.user = user
        entity.save(update_fields=["user", "updated_at"])
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client
