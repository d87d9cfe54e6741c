"""
Tests for the HTTP API (subscriptions, stats, categories, settings)
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from subtracker.main import create_app


@pytest.fixture
def client(session_factory, notifier):
    """Test client on an in-memory database; lifespan seeds categories and settings"""
    app = create_app(session_factory=session_factory, notifier=notifier)
    with TestClient(app) as c:
        yield c


def _today():
    return datetime.now(timezone.utc).date()


def _create(client, **overrides):
    body = {
        "name": "Netflix",
        "amount": "15.99",
        "billing_cycle": "monthly",
        "next_billing_date": (_today() + timedelta(days=20)).isoformat(),
        "category_id": "streaming",
        "reminder_days": [3, 1],
    }
    body.update(overrides)
    return client.post("/api/v1/subscriptions/", json=body)


class TestSubscriptionsApi:
    def test_create(self, client, notifier):
        resp = _create(client)
        assert resp.status_code == 201
        data = resp.json()
        assert data["name"] == "Netflix"
        assert data["amount"] == "15.99"
        assert data["currency"] == "USD"
        assert data["is_active"] is True
        assert len(data["notification_ids"]) == 2
        assert set(data["notification_ids"]) == set(notifier.pending)

    def test_create_past_date_rolled_forward(self, client):
        past = _today() - timedelta(days=3)
        data = _create(client, billing_cycle="weekly", next_billing_date=past.isoformat()).json()
        assert data["next_billing_date"] == (past + timedelta(days=7)).isoformat()

    @pytest.mark.parametrize("overrides", [
        {"amount": "0"},
        {"amount": "-1"},
        {"name": "   "},
        {"billing_cycle": "daily"},
        {"reminder_days": [-1]},
    ])
    def test_create_invalid(self, client, overrides):
        assert _create(client, **overrides).status_code == 422
        assert client.get("/api/v1/subscriptions/").json() == []

    def test_create_unknown_category(self, client):
        assert _create(client, category_id="pets").status_code == 404

    def test_get_and_list(self, client):
        sub_id = _create(client).json()["id"]
        _create(client, name="Gym", is_active=False)

        assert client.get(f"/api/v1/subscriptions/{sub_id}").json()["id"] == sub_id
        assert len(client.get("/api/v1/subscriptions/").json()) == 2
        assert [s["name"] for s in client.get("/api/v1/subscriptions/?active=true").json()] == ["Netflix"]

    def test_get_missing(self, client):
        assert client.get("/api/v1/subscriptions/nope").status_code == 404

    def test_due(self, client):
        _create(client, name="Soon", next_billing_date=(_today() + timedelta(days=2)).isoformat())
        _create(client, name="Later", next_billing_date=(_today() + timedelta(days=20)).isoformat())

        names = [s["name"] for s in client.get("/api/v1/subscriptions/due?days=7").json()]
        assert names == ["Soon"]

    def test_patch_partial_and_clear_notes(self, client, notifier):
        created = _create(client, notes="family plan").json()

        resp = client.patch(f"/api/v1/subscriptions/{created['id']}", json={"amount": "17.49"})
        assert resp.status_code == 200
        assert resp.json()["amount"] == "17.49"
        assert resp.json()["notes"] == "family plan"
        assert set(created["notification_ids"]) <= set(notifier.cancelled)

        resp = client.patch(f"/api/v1/subscriptions/{created['id']}", json={"notes": None})
        assert resp.json()["notes"] is None

    def test_patch_invalid_and_missing(self, client):
        sub_id = _create(client).json()["id"]
        assert client.patch(f"/api/v1/subscriptions/{sub_id}", json={"amount": "0"}).status_code == 422
        assert client.patch(f"/api/v1/subscriptions/{sub_id}", json={"is_active": None}).status_code == 422
        assert client.patch("/api/v1/subscriptions/nope", json={"name": "X"}).status_code == 404

    def test_delete_idempotent(self, client, notifier):
        created = _create(client).json()

        assert client.delete(f"/api/v1/subscriptions/{created['id']}").status_code == 204
        assert client.delete(f"/api/v1/subscriptions/{created['id']}").status_code == 204
        assert client.get(f"/api/v1/subscriptions/{created['id']}").status_code == 404
        assert notifier.pending == {}

    def test_mark_paid(self, client):
        billing = _today() + timedelta(days=20)
        created = _create(client, billing_cycle="weekly", next_billing_date=billing.isoformat()).json()

        resp = client.post(f"/api/v1/subscriptions/{created['id']}/mark-paid")
        assert resp.status_code == 200
        assert resp.json()["next_billing_date"] == (billing + timedelta(days=7)).isoformat()
        assert not set(resp.json()["notification_ids"]) & set(created["notification_ids"])

    def test_toggle_active(self, client):
        sub_id = _create(client).json()["id"]

        paused = client.post(f"/api/v1/subscriptions/{sub_id}/toggle-active").json()
        assert paused["is_active"] is False
        assert paused["notification_ids"] == []

        resumed = client.post(f"/api/v1/subscriptions/{sub_id}/toggle-active").json()
        assert resumed["is_active"] is True
        assert len(resumed["notification_ids"]) == 2

    def test_actions_on_missing_id(self, client):
        assert client.post("/api/v1/subscriptions/nope/mark-paid").status_code == 404
        assert client.post("/api/v1/subscriptions/nope/toggle-active").status_code == 404


class TestStatsApi:
    def test_totals(self, client):
        _create(client, amount="10", billing_cycle="weekly")
        _create(client, amount="120", billing_cycle="yearly", currency="EUR")
        _create(client, amount="99", is_active=False)

        data = client.get("/api/v1/stats/totals").json()
        assert data["monthly"] == {"USD": "43.30", "EUR": "10.00"}
        assert data["yearly"] == {"USD": "519.60", "EUR": "120.00"}
        assert data["weekly"] == {"USD": "10.00", "EUR": "2.31"}

    def test_actual_spend(self, client):
        billing = _today() + timedelta(days=20)
        _create(client, amount="5", next_billing_date=billing.isoformat())

        data = client.get(f"/api/v1/stats/actual-spend?year={billing.year}&month={billing.month}").json()
        assert data["year"] == billing.year
        assert [(row["currency"], row["total"]) for row in data["by_currency"]] == [("USD", "5.00")]

    def test_by_category(self, client):
        _create(client, amount="10", category_id="music")
        _create(client, amount="20")

        rows = client.get("/api/v1/stats/by-category").json()
        assert [(r["category_id"], r["monthly_equivalent_sum"]) for r in rows] == [
            ("streaming", "20.00"), ("music", "10.00"),
        ]

    def test_summary_empty(self, client):
        data = client.get("/api/v1/stats/summary").json()
        assert data["active_count"] == 0
        assert data["most_expensive"] is None

    def test_upcoming(self, client):
        _create(client, name="Tomorrow", next_billing_date=(_today() + timedelta(days=1)).isoformat())
        _create(client, name="Far", next_billing_date=(_today() + timedelta(days=40)).isoformat())

        data = client.get("/api/v1/stats/upcoming").json()
        assert [s["name"] for s in data["tomorrow"]] == ["Tomorrow"]
        assert [s["name"] for s in data["later"]] == ["Far"]
        assert data["overdue"] == []


class TestCategoriesApi:
    def test_list(self, client):
        ids = {c["id"] for c in client.get("/api/v1/categories/").json()}
        assert "streaming" in ids and "other" in ids

    def test_detail(self, client):
        _create(client, amount="30", billing_cycle="quarterly")
        data = client.get("/api/v1/categories/streaming").json()
        assert data["name"] == "Streaming"
        assert len(data["subscriptions"]) == 1
        assert data["monthly"] == {"USD": "10.00"}

    def test_missing(self, client):
        assert client.get("/api/v1/categories/pets").status_code == 404


class TestSettingsApi:
    def test_read_defaults(self, client):
        assert client.get("/api/v1/settings/").json() == {
            "default_currency": "USD",
            "default_reminder_days": [3],
            "notifications_enabled": True,
            "show_amount_in_notifications": True,
        }

    def test_disable_notifications_cancels_reminders(self, client, notifier):
        _create(client)
        resp = client.patch("/api/v1/settings/", json={"notifications_enabled": False})
        assert resp.status_code == 200
        assert resp.json()["notifications_enabled"] is False
        assert notifier.pending == {}

    def test_invalid(self, client):
        assert client.patch("/api/v1/settings/", json={"default_reminder_days": [-3]}).status_code == 422


def test_health(client):
    assert client.get("/health").text == "ok"
    assert client.get("/ready").text == "ok"
