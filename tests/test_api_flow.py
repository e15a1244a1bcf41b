from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


@pytest.fixture
def clients(manufacturer, supplier, pharmacy, regulator, client_for):
    return {
        "A": client_for(manufacturer),
        "S": client_for(supplier),
        "P": client_for(pharmacy),
        "R": client_for(regulator),
    }


def _create_batch(client, batch_id="B1", quantity=4000, expiry_days=365):
    now = timezone.now()
    return client.post(
        "/api/v1/batches/",
        {
            "id": batch_id,
            "medicine_id": "M1",
            "quantity": quantity,
            "production_date": (now - timedelta(days=1)).isoformat(),
            "expiry_date": (now + timedelta(days=expiry_days)).isoformat(),
        },
        format="json",
    )


def test_full_custody_flow(clients):
    A, S, P, R = clients["A"], clients["S"], clients["P"], clients["R"]

    r = A.post("/api/v1/medicines/", {"id": "M1", "name": "Amoxicillin", "brand": "Amoxil"}, format="json")
    assert r.status_code == 201, r.data
    assert r.data["is_approved"] is False
    assert r.data["manufacturer"] == "0xA"

    r = _create_batch(A)
    assert r.status_code == 409
    assert r.data["error"]["code"] == "not_approved"

    r = R.post("/api/v1/medicines/M1/approve/", format="json")
    assert r.status_code == 200
    assert r.data["approved_by"] == "0xR"

    r = R.post("/api/v1/medicines/M1/approve/", format="json")
    assert r.status_code == 409
    assert r.data["error"]["code"] == "already_approved"

    r = _create_batch(A)
    assert r.status_code == 201, r.data
    assert r.data["remaining_quantity"] == 4000

    r = A.post("/api/v1/batches/B1/transfer/", {"to_holder": "0xS", "quantity": 200}, format="json")
    assert r.status_code == 201, r.data
    assert r.data["event_type"] == "TO_SUPPLIER"

    r = S.post("/api/v1/batches/B1/transfer/", {"to_holder": "0xP", "quantity": 500}, format="json")
    assert r.status_code == 409
    assert r.data["error"]["code"] == "insufficient_inventory"
    assert r.data["error"]["details"] == {"holder": "0xS", "medicine_id": "M1", "requested": 500, "available": 200}

    r = S.post("/api/v1/batches/B1/transfer/", {"to_holder": "0xR", "quantity": 5}, format="json")
    assert r.status_code == 400
    assert r.data["error"]["code"] == "ineligible_receiver"

    r = S.post("/api/v1/batches/B1/transfer/", {"to_holder": "0xP", "quantity": 90}, format="json")
    assert r.status_code == 201

    r = P.post("/api/v1/batches/B1/dispense/", {"quantity": 90, "patient_id": "P-1"}, format="json")
    assert r.status_code == 201
    assert r.data["to_entity"] is None
    assert r.data["patient_id"] == "P-1"

    r = P.get("/api/v1/inventory/mine/")
    assert r.status_code == 200
    assert r.data == []

    r = P.get("/api/v1/alerts/")
    assert r.status_code == 200
    assert [a["code"] for a in r.data["results"]] == ["low-inventory"]

    r = S.get("/api/v1/inventory/0xS/medicines/M1/")
    assert r.data == {"holder": "0xS", "medicine_id": "M1", "quantity": 110}

    r = S.get("/api/v1/medicines/M1/holders/")
    assert [h["holder"] for h in r.data] == ["0xA", "0xS"]

    r = S.get("/api/v1/medicines/M1/authenticity/")
    assert r.data == {"medicine_id": "M1", "authentic": True}

    r = S.get("/api/v1/medicines/M1/conservation/")
    assert r.data["balanced"] is True
    assert r.data["dispensed"] == 90

    r = S.get("/api/v1/medicines/M1/history/")
    assert r.status_code == 200
    assert r.data["count"] == 4
    assert [e["event_type"] for e in r.data["results"]] == ["MANUFACTURED", "TO_SUPPLIER", "TO_PHARMACY", "DISPENSED"]

    r = S.get("/api/v1/medicines/M1/history/", {"from_entity": "0xS"})
    assert [e["to_entity"] for e in r.data["results"]] == ["0xP"]

    r = S.get("/api/v1/batches/B1/history/", {"event_type": "DISPENSED"})
    assert r.data["count"] == 1


def test_short_name_rejected_with_values(clients):
    r = clients["A"].post("/api/v1/medicines/", {"id": "M1", "name": "A", "brand": "Amoxil"}, format="json")

    assert r.status_code == 400
    err = r.data["error"]
    assert err["code"] == "invalid_input"
    assert err["details"]["field"] == "name"
    assert err["details"]["min_length"] == 2
    assert err["request_id"]


def test_wrong_role_is_forbidden(clients):
    r = clients["S"].post("/api/v1/medicines/", {"id": "M1", "name": "Amoxicillin", "brand": "Amoxil"}, format="json")

    assert r.status_code == 403
    assert r.data["error"]["code"] == "unauthorized"


def test_user_without_entity_is_forbidden(db):
    user = get_user_model().objects.create_user(username="lurker", password="pass123")
    client = APIClient()
    client.force_authenticate(user=user)

    r = client.get("/api/v1/inventory/mine/")
    assert r.status_code == 403
    assert r.data["error"]["code"] == "unauthorized"


def test_anonymous_is_rejected(db):
    r = APIClient().get("/api/v1/medicines/")
    assert r.status_code == 401
    assert r.data["error"]["code"] == "not_authenticated"


def test_unknown_resources(clients):
    r = clients["S"].get("/api/v1/batches/nope/")
    assert r.status_code == 404
    assert r.data["error"]["details"] == {"batch_id": "nope"}

    r = clients["S"].get("/api/v1/medicines/nope/authenticity/")
    assert r.data["authentic"] is False


def test_sweep_endpoint(approved_medicine, clients):
    assert _create_batch(clients["A"], batch_id="B1").status_code == 201

    later = (timezone.now() + timedelta(days=400)).isoformat()
    r = clients["S"].post("/api/v1/batches/sweep-expired/", {"as_of": later}, format="json")
    assert r.status_code == 200
    assert r.data == {"deactivated": ["B1"], "count": 1}

    r = clients["A"].post("/api/v1/batches/B1/transfer/", {"to_holder": "0xS", "quantity": 1}, format="json")
    assert r.status_code == 409
    assert r.data["error"]["code"] == "batch_inactive"


def test_entity_directory_endpoints(clients):
    r = clients["S"].get("/api/v1/entities/", {"role": "PHARMACY"})
    assert r.status_code == 200
    assert [e["address"] for e in r.data["results"]] == ["0xP"]

    r = clients["S"].get("/api/v1/entities/me/")
    assert r.data["address"] == "0xS"

    r = clients["S"].post("/api/v1/entities/", {"address": "0xZ", "name": "Zed", "role": "SUPPLIER"}, format="json")
    assert r.status_code == 403

    admin = get_user_model().objects.create_user(username="admin", password="pass123", is_staff=True)
    client = APIClient()
    client.force_authenticate(user=admin)
    r = client.post("/api/v1/entities/", {"address": "0xZ", "name": "Zed", "role": "SUPPLIER"}, format="json")
    assert r.status_code == 201
    assert r.data["is_active"] is True
