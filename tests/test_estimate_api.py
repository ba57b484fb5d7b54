"""
Estimate API tests — the HTTP surface over the store.

Money comes back as strings (Decimal in JSON mode); compare as Decimal.
"""

from decimal import Decimal

from fastapi.testclient import TestClient

from estimator.exceptions import PersistenceError
from estimator.main import app
from estimator.schemas import AccessoriesConfig, BuildingConfig, DoorConfig, EstimateSnapshot


def _total(resp):
    return Decimal(resp.json()["pricing"]["grand_total"])


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_get_initial_state(client):
    resp = client.get("/api/estimate")
    assert resp.status_code == 200
    data = resp.json()
    assert data["step"] == 1
    assert data["contract_section"] == 1
    assert data["building"]["width"] == 24
    assert data["accessories"]["doors"] == {}
    assert Decimal(data["pricing"]["grand_total"]) == Decimal("0")


def test_step_navigation(client):
    resp = client.post("/api/estimate/step/next")
    assert resp.json()["step"] == 2
    assert _total(resp) == Decimal("9140.00")

    resp = client.post("/api/estimate/step/6")
    assert resp.json()["step"] == 6
    resp = client.post("/api/estimate/step/9")
    assert resp.status_code == 200
    assert resp.json()["step"] == 6
    resp = client.post("/api/estimate/step/previous")
    assert resp.json()["step"] == 5


def test_contract_section_navigation(client):
    client.post("/api/estimate/contract-section/next")
    resp = client.post("/api/estimate/contract-section/next")
    assert resp.json()["contract_section"] == 3
    resp = client.post("/api/estimate/contract-section/previous")
    assert resp.json()["contract_section"] == 2
    resp = client.post("/api/estimate/contract-section/7")
    assert resp.json()["contract_section"] == 7


def test_patch_building_reprices(client):
    resp = client.patch("/api/estimate/building", json={"width": 30, "leg_type": "certified"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["building"]["width"] == 30
    assert data["building"]["length"] == 30
    assert Decimal(data["pricing"]["base_price"]) == Decimal("8797.50")  # 900 × 8.50 × 1.15


def test_patch_building_rejects_bad_width(client, store):
    resp = client.patch("/api/estimate/building", json={"width": 23})
    assert resp.status_code == 422
    assert store.building.width == 24


def test_unknown_field_rejected(client, store):
    resp = client.patch("/api/estimate/customer", json={"nickname": "D"})
    assert resp.status_code == 422
    resp = client.patch("/api/estimate/concrete", json={"thickness": 8})
    assert resp.status_code == 422
    assert store.concrete.thickness == 4


def test_customer_colors_contract(client):
    client.patch("/api/estimate/customer", json={"name": "Dana Reyes", "state": "TX"})
    client.patch("/api/estimate/colors", json={"roof": "#7A1F1F"})
    resp = client.patch("/api/estimate/contract", json={
        "signatures": {"customer": "Dana Reyes", "customer_date": "2026-03-01"},
        "agreed_to_terms": True,
    })
    data = resp.json()
    assert data["customer"]["name"] == "Dana Reyes"
    assert data["customer"]["state"] == "TX"
    assert data["colors"]["roof"] == "#7A1F1F"
    assert data["contract"]["signatures"]["customer"] == "Dana Reyes"
    assert data["contract"]["signatures"]["contractor"] is None
    assert data["contract"]["agreed_to_terms"] is True


def test_door_lifecycle(client):
    resp = client.post("/api/estimate/doors", json={"type": "roll_up", "size": "10x10"})
    assert resp.status_code == 200
    doors = resp.json()["accessories"]["doors"]
    assert len(doors) == 1
    door_id = next(iter(doors))
    assert doors[door_id]["id"] == door_id
    assert Decimal(resp.json()["pricing"]["accessories_total"]) == Decimal("1100.00")

    resp = client.patch(f"/api/estimate/doors/{door_id}", json={"quantity": 2})
    assert Decimal(resp.json()["pricing"]["accessories_total"]) == Decimal("2200.00")

    resp = client.patch(f"/api/estimate/doors/{door_id}", json={"type": "walk"})
    assert resp.status_code == 422  # type is fixed at creation

    resp = client.delete(f"/api/estimate/doors/{door_id}")
    assert resp.json()["accessories"]["doors"] == {}
    assert Decimal(resp.json()["pricing"]["accessories_total"]) == Decimal("0.00")


def test_door_with_caller_id(client):
    resp = client.post("/api/estimate/doors", json={
        "id": "front-walk", "type": "walk", "size": "3x7", "wall": "back", "quantity": 12,
    })
    door = resp.json()["accessories"]["doors"]["front-walk"]
    assert door["wall"] == "back"
    assert door["quantity"] == 10


def test_create_payloads_reject_unknown_fields(client, store):
    resp = client.post("/api/estimate/doors", json={"type": "walk", "size": "3x7", "colour": "red"})
    assert resp.status_code == 422
    resp = client.post("/api/estimate/windows", json={"size": "30x36", "tint": True})
    assert resp.status_code == 422
    resp = client.patch("/api/estimate/building", json={"width": None})
    assert resp.status_code == 422
    assert store.accessories.doors == {}
    assert store.accessories.windows == {}
    assert store.building.width == 24


def test_delete_missing_door_is_ok(client):
    resp = client.delete("/api/estimate/doors/nope")
    assert resp.status_code == 200


def test_window_lifecycle(client):
    resp = client.post("/api/estimate/windows", json={"size": "36x48", "wall": "left"})
    windows = resp.json()["accessories"]["windows"]
    window_id = next(iter(windows))
    assert Decimal(resp.json()["pricing"]["accessories_total"]) == Decimal("225.00")

    resp = client.patch(f"/api/estimate/windows/{window_id}", json={"size": "30x36"})
    assert Decimal(resp.json()["pricing"]["accessories_total"]) == Decimal("175.00")

    resp = client.post("/api/estimate/windows", json={"size": "3x3"})
    assert resp.status_code == 422

    resp = client.delete(f"/api/estimate/windows/{window_id}")
    assert resp.json()["accessories"]["windows"] == {}


def test_door_positions(client):
    resp = client.put("/api/estimate/door-positions/abc/left", json={"position": 12.5})
    assert resp.json()["door_positions"] == {"abc-left": 12.5}
    resp = client.put("/api/estimate/door-positions/abc/up", json={"position": 1})
    assert resp.status_code == 422


def test_delivery_distance(client):
    resp = client.put("/api/estimate/delivery-distance", json={"miles": 20})
    assert Decimal(resp.json()["pricing"]["delivery_total"]) == Decimal("570.00")
    resp = client.put("/api/estimate/delivery-distance", json={"miles": -1})
    assert resp.status_code == 422


def test_accessories_and_concrete(client):
    client.patch("/api/estimate/accessories", json={"insulation": "full", "ventilation": True})
    resp = client.patch("/api/estimate/concrete", json={"type": "slab", "thickness": 6})
    pricing = resp.json()["pricing"]
    assert Decimal(pricing["accessories_total"]) == Decimal("152.50")
    assert Decimal(pricing["concrete_total"]) == Decimal("6084.00")


def test_pricing_endpoint_is_idempotent(client):
    first = client.post("/api/estimate/pricing").json()["pricing"]
    second = client.post("/api/estimate/pricing").json()["pricing"]
    assert first == second
    assert Decimal(first["deposit_amount"]) == Decimal("3199.00")


def test_save_reset_load(client):
    client.patch("/api/estimate/customer", json={"name": "Dana Reyes"})
    client.post("/api/estimate/doors", json={"type": "walk", "size": "4x7"})
    assert client.post("/api/estimate/save").status_code == 200

    client.patch("/api/estimate/customer", json={"name": "Someone Else"})
    resp = client.post("/api/estimate/load")
    data = resp.json()
    assert data["customer"]["name"] == "Dana Reyes"
    assert Decimal(data["pricing"]["accessories_total"]) == Decimal("400.00")

    resp = client.post("/api/estimate/reset")
    data = resp.json()
    assert data["customer"]["name"] == ""
    assert data["accessories"]["doors"] == {}
    assert Decimal(data["pricing"]["grand_total"]) == Decimal("0")


def test_save_failure_returns_503(client, store, monkeypatch):
    def fail(snapshot):
        raise PersistenceError("disk full")

    monkeypatch.setattr(store.persistence, "save", fail)
    client.patch("/api/estimate/customer", json={"name": "Dana"})
    resp = client.post("/api/estimate/save")
    assert resp.status_code == 503
    assert store.customer.name == "Dana"


def test_color_names_endpoint(client):
    client.patch("/api/estimate/colors", json={"walls": "#fef3c7", "trim": "#123456"})
    data = client.get("/api/estimate/colors").json()
    assert data["roof"] == {"code": "#3B3B3B", "name": "Burnished Slate"}
    assert data["walls"]["name"] == "Ivory"
    assert data["trim"]["name"] == "Custom"


def test_startup_restores_saved_estimate(app_database, repository):
    """The app builds its own store at startup and loads the saved snapshot."""
    door = DoorConfig(id="r1", type="roll_up", size="10x10")
    repository.save(EstimateSnapshot(
        building=BuildingConfig(width=30),
        accessories=AccessoriesConfig(doors={"r1": door}),
    ))

    with TestClient(app) as started:
        data = started.get("/api/estimate").json()
        assert data["step"] == 1
        assert data["building"]["width"] == 30
        assert list(data["accessories"]["doors"]) == ["r1"]
        assert Decimal(data["pricing"]["base_price"]) == Decimal("7650.00")  # 900 × 8.50
        assert Decimal(data["pricing"]["accessories_total"]) == Decimal("1100.00")
        assert Decimal(data["pricing"]["grand_total"]) == Decimal("12400.00")
    assert app.state.store is None


def test_startup_without_saved_estimate_prices_defaults(app_database):
    with TestClient(app) as started:
        data = started.get("/api/estimate").json()
        assert data["building"]["width"] == 24
        assert Decimal(data["pricing"]["grand_total"]) == Decimal("9140.00")
