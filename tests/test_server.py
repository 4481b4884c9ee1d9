import pytest
from fastapi.testclient import TestClient

from modules.memory.planner_repository import InMemoryPlannerRepository
from schemas.budget import default_category_set
from server import create_app


@pytest.fixture
def repository():
    return InMemoryPlannerRepository()


@pytest.fixture
def client(repository):
    return TestClient(create_app(repository))


def budget_body(total=1000.0, categories=None):
    return {
        "total": total,
        "recommended": 0,
        "currency": "SGD",
        "categories": categories if categories is not None else default_category_set().to_payload(),
    }


def test_root(client):
    assert client.get("/").json() == {"message": "Trip Budget Planner API is running"}


# ── Persistence routes ────────────────────────────────────────────────────────

def test_trip_details_are_stored_per_user(client, repository):
    body = {
        "destination": {"country": "Japan", "city": "Osaka"},
        "startDate": "2025-06-01T00:00:00.000Z",
        "endDate": "2025-06-05",
        "days": 5,
        "travelers": 2,
        "tripType": "budget",
    }
    assert client.post("/api/trip-details", json=body, headers={"X-User-Id": "alice"}).json() == {"success": True}

    stored = client.get("/api/trip-details", headers={"X-User-Id": "alice"}).json()
    assert stored["startDate"] == "2025-06-01"
    assert stored["tripType"] == "budget"
    assert client.get("/api/trip-details", headers={"X-User-Id": "bob"}).json() is None
    assert repository.last_updated("alice") is not None


def test_budget_and_expenses_round_trip(client):
    client.post("/api/budget", json=budget_body(2500))
    assert client.get("/api/budget").json()["total"] == 2500

    expenses = [{"id": 1, "description": "Taxi", "amount": 12.5, "category": "transport",
                 "date": "2025-06-01", "originalAmount": 12.5, "originalCurrency": "SGD"}]
    client.post("/api/expenses", json=expenses)
    stored = client.get("/api/expenses").json()
    assert stored[0]["description"] == "Taxi"
    assert stored[0]["originalAmount"] == 12.5


def test_malformed_budget_is_rejected(client):
    categories = {"food": {"percentage": 100}}   # no buffer
    response = client.post("/api/budget", json=budget_body(categories=categories))
    assert response.status_code == 422
    assert "buffer" in response.json()["detail"]


def test_custom_categories(client):
    client.post("/api/custom-categories", json=[{"key": "diving", "label": "Diving"}])
    assert client.get("/api/custom-categories").json() == [{"key": "diving", "label": "Diving"}]


# ── Calculation routes ────────────────────────────────────────────────────────

def test_normalize_percentages(client):
    response = client.post("/api/normalize-percentages", json={
        "budget": budget_body(), "changedKey": "transport", "value": 5,
    })
    categories = response.json()["categories"]
    assert categories["transport"]["percentage"] == pytest.approx(5.0)
    assert categories["buffer"]["percentage"] == pytest.approx(10.0)
    assert sum(c["percentage"] for c in categories.values()) == pytest.approx(100.0)


def test_normalize_accepts_out_of_range_slider_value(client):
    categories = default_category_set().to_payload()
    categories["food"]["percentage"] = 150
    response = client.post("/api/normalize-percentages", json={
        "budget": budget_body(categories=categories), "changedKey": "food",
    })
    assert response.status_code == 200
    assert response.json()["categories"]["food"]["percentage"] == pytest.approx(90.0)


def test_normalize_unknown_key(client):
    response = client.post("/api/normalize-percentages", json={
        "budget": budget_body(), "changedKey": "nightlife", "value": 5,
    })
    assert response.status_code == 422
    assert "nightlife" in response.json()["detail"]


def test_distribute_budget(client):
    categories = client.post("/api/distribute-budget", json={"budget": budget_body(10000)}).json()["categories"]
    assert categories["food"]["amount"] == pytest.approx(2500.0)
    assert categories["buffer"]["is_buffer"] is True


def test_format_and_categorize(client):
    assert client.post("/api/format-currency", json={"amount": 2500, "currency": "SGD"}).json() == {
        "formatted": "S$ 2500.00"}
    assert client.post("/api/auto-categorize-expense", json={"description": "Uber home"}).json() == {
        "category": "transport"}


def test_check_thresholds(client):
    response = client.post("/api/check-thresholds", json={
        "budget": budget_body(1000),
        "expenses": [{"description": "Hotel", "amount": 290, "category": "accommodation",
                      "date": "2025-05-01"}],
        "tripDetails": {"days": 10, "travelers": 1},
        "today": "2025-06-01",
    })
    assert response.json()["alerts"] == [{
        "type": "error",
        "message": "Accommodation budget is 96.7% used. Consider reducing spending.",
        "category": "accommodation",
    }]


def test_check_thresholds_without_budget(client):
    assert client.post("/api/check-thresholds", json={"expenses": []}).json() == {"alerts": []}


def test_daily_budget(client):
    response = client.post("/api/calculate-daily-budget", json={
        "budget": budget_body(7000), "tripDetails": {"days": 7, "travelers": 2},
    })
    assert response.json()["dailyBudget"] == pytest.approx(475.0)


def test_daily_budget_rejects_zero_days(client):
    response = client.post("/api/calculate-daily-budget", json={
        "budget": budget_body(7000), "tripDetails": {"days": 0, "travelers": 2},
    })
    assert response.status_code == 422


def test_recommended_budget(client):
    response = client.post("/api/recommended-budget", json={
        "destination": {"country": "Thailand"},
        "tripDetails": {"startDate": "2025-06-01", "endDate": "2025-06-03", "days": 3, "travelers": 2},
    })
    assert response.json() == {"recommended": 600.0}


def test_budget_status(client):
    body = client.post("/api/budget-status", json={"total": 10000, "recommended": 10500}).json()
    assert body["status"] == "MATCHED"
    assert body["message"] == "Perfect match!"
    assert body["difference"] == pytest.approx(-4.76, abs=0.01)
