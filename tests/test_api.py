import pytest
from fastapi.testclient import TestClient

from main import app


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_item_total(client):
    response = client.post("/items/total", json={"price": 15, "quantity": 2, "tax_rate": 10})
    assert response.status_code == 200
    assert response.json() == {"subtotal": "30.00", "tax": "3.00", "total": "33.00"}


def test_item_total_rejects_bad_split_type(client):
    response = client.post("/items/total", json={"price": 15, "split_type": "half"})
    assert response.status_code == 422


def test_allocate_percent_item(client):
    response = client.post("/items/allocate", json={
        "item": {"price": 100, "split_type": "unequal-percent", "splits": {"1": 60, "2": 60}},
        "participants": [
            {"participant_id": 1, "name": "Alice"},
            {"participant_id": 2, "name": "Bob"},
        ],
    })
    assert response.status_code == 200
    assert response.json() == {
        "item_total": "100.00",
        "allocations": {"1": "50.00", "2": "50.00"},
    }


def test_allocate_keeps_non_numeric_splits_lenient(client):
    response = client.post("/items/allocate", json={
        "item": {"price": 30, "split_type": "unequal-money", "splits": {"1": "abc", "2": "12.5"}},
        "participants": [
            {"participant_id": 1, "name": "Alice"},
            {"participant_id": 2, "name": "Bob"},
        ],
    })
    assert response.status_code == 200
    assert response.json()["allocations"] == {"1": "0.00", "2": "12.50"}


def test_allocate_rejects_duplicate_ids(client):
    response = client.post("/items/allocate", json={
        "item": {"price": 30},
        "participants": [
            {"participant_id": 1, "name": "Alice"},
            {"participant_id": "1", "name": "Bob"},
        ],
    })
    assert response.status_code == 400
    assert "duplicate participant_id" in response.json()["detail"]


def test_settlements(client):
    response = client.post("/settlements", json={"participants": [
        {"participant_id": 1, "name": "Alice", "amount_paid": 100, "amount_owed": 50},
        {"participant_id": 2, "name": "Bob", "amount_paid": 0, "amount_owed": 50},
    ]})
    assert response.status_code == 200
    assert response.json()["settlements"] == [{"from": "Bob", "to": "Alice", "amount": "50.00"}]


def test_calculate_bill(client):
    response = client.post("/bills/calculate", json={
        "items": [
            {"item_id": 1, "name": "Shared Item", "price": 30},
            {"item_id": 2, "name": "Percent Split Item", "price": 100,
             "split_type": "unequal-percent", "splits": {"1": 50, "2": 30, "3": 20}},
        ],
        "participants": [
            {"participant_id": 1, "name": "Alice", "amount_paid": 130, "amount_owed": 999},
            {"participant_id": 2, "name": "Bob"},
            {"participant_id": 3, "name": "Charlie"},
        ],
    })
    assert response.status_code == 200
    body = response.json()

    assert [p["amount_owed"] for p in body["participants"]] == ["60.00", "40.00", "30.00"]
    assert sorted(body["settlements"], key=lambda t: t["from"]) == [
        {"from": "Bob", "to": "Alice", "amount": "40.00"},
        {"from": "Charlie", "to": "Alice", "amount": "30.00"},
    ]
    assert body["summary"]["bill_total"] == "130.00"
    assert body["summary"]["item_totals"] == {"1": "30.00", "2": "100.00"}
    assert body["summary"]["unsettled_balances"] == {}
    assert body["warnings"] == []
    assert body["explanations"][1]["total_owed"] == "40.00"


def test_calculate_bill_reports_underpayment(client):
    response = client.post("/bills/calculate", json={
        "items": [{"item_id": 1, "price": 50}],
        "participants": [
            {"participant_id": "a", "name": "Alice", "amount_paid": 0},
            {"participant_id": "b", "name": "Bob", "amount_paid": 0},
        ],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["settlements"] == []
    assert body["summary"]["unsettled_balances"] == {"Alice": "-25.00", "Bob": "-25.00"}
    assert any("short of the bill total" in w for w in body["warnings"])


def test_calculate_empty_bill(client):
    response = client.post("/bills/calculate", json={})
    assert response.status_code == 200
    body = response.json()
    assert body["participants"] == []
    assert body["settlements"] == []
    assert body["summary"]["bill_total"] == "0.00"


def test_item_total_rejects_out_of_range_price(client):
    response = client.post("/items/total", json={"price": 1e26})
    assert response.status_code == 422


def test_item_total_large_values(client):
    response = client.post("/items/total", json={"price": 1e12, "quantity": 1e3, "tax_rate": 10})
    assert response.status_code == 200
    assert response.json()["total"] == "1100000000000000.00"
