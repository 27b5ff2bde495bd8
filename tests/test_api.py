# tests/test_api.py
import pytest
from fastapi.testclient import TestClient

from offer_tracker.config import Settings
from offer_tracker.main import build_components, create_app


@pytest.fixture
def app(marketplace, resolver, channel):
    settings = Settings(database_url="sqlite://", poll_enabled=False)
    components = build_components(settings, client=marketplace, resolver=resolver, channel=channel)
    return create_app(settings, components)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def new_tracker(client, **overrides):
    body = {
        "searchTerm": "PS5",
        "minPrice": 3000,
        "maxPrice": 4000,
        "condition": "all",
        "location": "SP",
        "notifyAddress": "(11) 90000-0000",
    }
    body.update(overrides)
    return client.post("/api/trackers", json=body)


def stored_code(app, tracker_id):
    return app.state.store.get_tracker(tracker_id).confirmation_code


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_create_tracker(client):
    resp = new_tracker(client)
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "pending"
    assert data["searchTerm"] == "PS5"
    assert "confirmationCode" not in data


def test_create_accepts_blank_prices(client):
    resp = new_tracker(client, minPrice="", maxPrice=None, condition=None, location=None)
    assert resp.status_code == 201
    assert resp.json()["minPrice"] == 0
    assert resp.json()["condition"] == "all"


@pytest.mark.parametrize("overrides", [
    {"searchTerm": ""},
    {"notifyAddress": ""},
    {"minPrice": -1},
    {"minPrice": "inf"},
    {"maxPrice": "Infinity"},
    {"maxPrice": "NaN"},
    {"condition": "broken"},
])
def test_create_rejects_bad_input(client, overrides):
    assert new_tracker(client, **overrides).status_code == 400


def test_list_trackers_newest_first_without_codes(client):
    first = new_tracker(client, searchTerm="first").json()
    second = new_tracker(client, searchTerm="second").json()
    data = client.get("/api/trackers").json()
    assert [t["id"] for t in data] == [second["id"], first["id"]]
    assert all("confirmationCode" not in t for t in data)


def test_confirm_flow(app, client, marketplace):
    marketplace.results["PS5"] = [{"id": "X1", "title": "PS5", "price": 3500}]
    tracker = new_tracker(client).json()
    assert client.post(f"/api/trackers/{tracker['id']}/confirm", json={"code": "abcd"}).status_code == 400
    resp = client.post(f"/api/trackers/{tracker['id']}/confirm", json={"code": stored_code(app, tracker["id"])})
    assert resp.status_code == 200
    assert resp.json()["status"] == "active"
    assert "confirmationCode" not in resp.json()
    again = client.post(f"/api/trackers/{tracker['id']}/confirm", json={"code": "1234"})
    assert again.status_code == 400
    assert "already active" in again.json()["detail"]
    products = client.get("/api/products").json()
    assert [p["id"] for p in products] == ["X1"]
    assert "foundAt" in products[0]


def test_confirm_unknown(client):
    assert client.post("/api/trackers/nope/confirm", json={"code": "1234"}).status_code == 404


def test_resend_code(app, client, channel):
    tracker = new_tracker(client).json()
    resp = client.post(f"/api/trackers/{tracker['id']}/resend-code")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert channel.sent[-1][1].endswith(stored_code(app, tracker["id"]))
    assert client.post("/api/trackers/nope/resend-code").status_code == 404
    client.post(f"/api/trackers/{tracker['id']}/confirm", json={"code": stored_code(app, tracker["id"])})
    assert client.post(f"/api/trackers/{tracker['id']}/resend-code").status_code == 400


def test_delete_tracker(client):
    tracker = new_tracker(client).json()
    assert client.delete(f"/api/trackers/{tracker['id']}").json() == {"success": True}
    assert client.delete(f"/api/trackers/{tracker['id']}").status_code == 404
    assert client.get("/api/trackers").json() == []


def test_poll_endpoint(app, client, marketplace):
    tracker = new_tracker(client).json()
    client.post(f"/api/trackers/{tracker['id']}/confirm", json={"code": stored_code(app, tracker["id"])})
    marketplace.results["PS5"] = [{"id": "N1"}, {"id": "N2"}]
    assert client.post("/api/poll").json() == {"newProducts": 2}
    assert client.post("/api/poll").json() == {"newProducts": 0}


def test_scheduler_not_started_when_disabled(app, client):
    assert not app.state.scheduler.running
