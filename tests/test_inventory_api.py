import uuid
from datetime import timedelta

import pytest

from clinic.config import settings
from clinic.models.all_models import clinic_today
from clinic.services.inventory import MAX_STOCK

API = "/api/v1/inventory"


@pytest.fixture()
def category_id(client, admin):
    r = client.post(f"{API}/categories", headers=admin.headers, json={
        "name": "Consumables", "description": "Single-use supplies",
    })
    assert r.status_code == 201, r.text
    return r.json()["id"]


def add_item(client, headers, category_id, **fields):
    payload = {"category_id": category_id, "name": "Gauze"}
    payload.update(fields)
    r = client.post(f"{API}/items", headers=headers, json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def transact(client, headers, item_id, transaction_type, quantity, reason=None):
    return client.post(f"{API}/items/{item_id}/transactions", headers=headers, json={
        "transaction_type": transaction_type, "quantity": quantity, "reason": reason,
    })


# ── Tests: categories and items ──────────────────────────────────────

def test_category_creation_is_admin_only(client, receptionist, db_session):
    r = client.post(f"{API}/categories", headers=receptionist.headers, json={"name": "Drugs"})
    assert r.status_code == 403


def test_duplicate_category_conflicts(client, admin, category_id):
    r = client.post(f"{API}/categories", headers=admin.headers, json={"name": "Consumables"})
    assert r.status_code == 409


def test_item_defaults(client, receptionist, category_id):
    item = add_item(client, receptionist.headers, category_id)
    assert item["unit_of_measure"] == "kom"
    assert item["current_stock"] == 0
    assert item["min_stock_level"] == 10
    assert item["stock_status"] == "out_of_stock"
    assert item["category"]["name"] == "Consumables"


def test_item_with_unknown_category_is_404(client, receptionist, db_session):
    r = client.post(f"{API}/items", headers=receptionist.headers, json={
        "category_id": str(uuid.uuid4()), "name": "Orphan",
    })
    assert r.status_code == 404


# ── Tests: transactions ──────────────────────────────────────────────

def test_withdrawal_beyond_stock_clamps_to_zero(client, receptionist, category_id):
    item = add_item(client, receptionist.headers, category_id, current_stock=5)

    r = transact(client, receptionist.headers, item["id"], "out", 8, reason="Surgery")
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["message"] == "Transaction recorded"
    assert body["item"]["current_stock"] == 0
    assert body["transaction"]["quantity"] == 8
    assert body["transaction"]["performed_by"] == str(receptionist.profile_id)
    assert body["transaction"]["item_name"] == "Gauze"


def test_intake_then_adjustment(client, receptionist, category_id):
    item = add_item(client, receptionist.headers, category_id, current_stock=4)

    r = transact(client, receptionist.headers, item["id"], "in", 6)
    assert r.json()["item"]["current_stock"] == 10

    r = transact(client, receptionist.headers, item["id"], "adjustment", 7, reason="Count")
    assert r.json()["item"]["current_stock"] == 7


def test_zero_quantity_intake_rejected(client, receptionist, category_id):
    item = add_item(client, receptionist.headers, category_id, current_stock=4)
    r = transact(client, receptionist.headers, item["id"], "in", 0)
    assert r.status_code == 400


def test_negative_quantity_rejected(client, receptionist, category_id):
    item = add_item(client, receptionist.headers, category_id, current_stock=4)
    r = transact(client, receptionist.headers, item["id"], "adjustment", -2)
    assert r.status_code == 422


def test_transaction_for_unknown_item_is_404(client, receptionist, db_session):
    r = transact(client, receptionist.headers, uuid.uuid4(), "in", 1)
    assert r.status_code == 404


def test_overdraw_rejected_when_setting_enabled(client, receptionist, category_id, monkeypatch):
    monkeypatch.setattr(settings, "REJECT_STOCK_OVERDRAW", True)
    item = add_item(client, receptionist.headers, category_id, current_stock=5)

    r = transact(client, receptionist.headers, item["id"], "out", 8)
    assert r.status_code == 400

    overview = client.get(API, headers=receptionist.headers).json()
    assert overview["items"][0]["current_stock"] == 5
    assert overview["transactions"] == []


def test_quantity_above_column_range_rejected(client, receptionist, category_id):
    item = add_item(client, receptionist.headers, category_id, current_stock=1)
    r = transact(client, receptionist.headers, item["id"], "in", MAX_STOCK + 1)
    assert r.status_code == 422


def test_intake_past_column_range_rejected(client, receptionist, category_id):
    item = add_item(client, receptionist.headers, category_id, current_stock=MAX_STOCK)
    r = transact(client, receptionist.headers, item["id"], "in", 1)
    assert r.status_code == 400


def test_item_stock_above_column_range_rejected(client, receptionist, category_id):
    r = client.post(f"{API}/items", headers=receptionist.headers, json={
        "category_id": category_id, "name": "Huge", "min_stock_level": MAX_STOCK + 1,
    })
    assert r.status_code == 422


# ── Tests: overview ──────────────────────────────────────────────────

def test_overview_lists_alerts_and_history(client, receptionist, category_id):
    today = clinic_today()
    low = add_item(client, receptionist.headers, category_id, name="Bandage", current_stock=3, min_stock_level=5)
    add_item(
        client, receptionist.headers, category_id, name="Saline",
        current_stock=50, expiry_date=(today + timedelta(days=30)).isoformat(),
    )
    add_item(
        client, receptionist.headers, category_id, name="Vaccine",
        current_stock=50, expiry_date=(today + timedelta(days=31)).isoformat(),
    )
    transact(client, receptionist.headers, low["id"], "in", 1)

    r = client.get(API, headers=receptionist.headers)
    assert r.status_code == 200
    body = r.json()
    assert [i["name"] for i in body["items"]] == ["Bandage", "Saline", "Vaccine"]
    assert [i["name"] for i in body["low_stock"]] == ["Bandage"]
    assert [i["name"] for i in body["expiring_soon"]] == ["Saline"]
    assert [c["name"] for c in body["categories"]] == ["Consumables"]
    assert len(body["transactions"]) == 1
    assert body["transactions"][0]["performed_by_name"] == "Mila Desk"


def test_overview_search_filters_items(client, receptionist, category_id):
    add_item(client, receptionist.headers, category_id, name="Paracetamol", supplier="Galenika")
    add_item(client, receptionist.headers, category_id, name="Gloves")

    r = client.get(API, headers=receptionist.headers, params={"search": "GALENIKA"})
    body = r.json()
    assert [i["name"] for i in body["items"]] == ["Paracetamol"]
    assert body["search"] == "GALENIKA"
