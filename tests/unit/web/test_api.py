"""HTTP tests for the response envelope, error mapping and admin token."""

import pytest
from fakes import FakeDatabase
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from workhub.app import App
from workhub.web.server import create_fastapi_app

API = "/api/v1"


def create_space(client, space_payload, **overrides):
    response = client.post(f"{API}/spaces", json={**space_payload, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestEnvelope:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_create_and_get(self, client, space_payload):
        space = create_space(client, space_payload)
        assert space["id"].startswith("SPC")
        assert "_id" not in space

        body = client.get(f"{API}/spaces/{space['id']}").json()
        assert body["success"] is True
        assert body["error"] is None
        assert body["data"]["name"] == "Meeting Room A"

    def test_list_shape(self, client, space_payload):
        create_space(client, space_payload)
        body = client.get(f"{API}/spaces", params={"limit": 10}).json()
        assert body["success"] is True
        assert set(body["data"]) >= {"items", "total", "limit", "offset"}
        assert body["data"]["total"] == 1
        assert body["data"]["limit"] == 10

    def test_city_statistics_visible(self, client, building_payload):
        building = client.post(f"{API}/buildings", json=building_payload).json()["data"]
        city = client.get(f"{API}/cities/{building['city_id']}").json()["data"]
        assert city["statistics"]["total_buildings"] == 1

        assert client.delete(f"{API}/buildings/{building['id']}").json() == {
            "success": True,
            "data": {"id": building["id"], "deleted": True},
            "error": None,
        }
        city = client.get(f"{API}/cities/{building['city_id']}").json()["data"]
        assert city["statistics"]["total_buildings"] == 0

    def test_patch_space(self, client, space_payload):
        space = create_space(client, space_payload)
        body = client.patch(f"{API}/spaces/{space['id']}", json={"capacity": 30}).json()
        assert body["data"]["capacity"] == 30
        assert body["data"]["brand"] == "NextSpace"

    def test_brands(self, client):
        assert client.get(f"{API}/metadata/brands").json()["data"] == ["NextSpace", "UnionSpace", "CoSpace"]

    def test_dashboard(self, client, space_payload):
        space = create_space(client, space_payload)
        client.post(
            f"{API}/orders",
            json={"customer_name": "Budi", "customer_email": "budi@example.com", "space_id": space["id"], "amount": 10},
        )
        data = client.get(f"{API}/dashboard/stats").json()["data"]
        assert data["total_spaces"] == 1
        assert data["total_orders"] == 1
        assert data["orders_by_status"]["pending"] == 1


class TestErrors:
    def test_validation_error_lists_all_fields(self, client, space_payload):
        response = client.post(f"{API}/spaces", json={**space_payload, "capacity": 2000, "brand": "Acme"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["data"] is None
        assert body["error"]["code"] == "validation_error"
        assert sorted(f["field"] for f in body["error"]["fields"]) == ["brand", "capacity"]

    def test_request_shape_error_uses_envelope(self, client, space_payload):
        response = client.post(f"{API}/spaces", json={**space_payload, "capacity": "many"})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert error["fields"][0]["field"] == "capacity"

    def test_not_found(self, client):
        response = client.get(f"{API}/buildings/BLD25999")
        assert response.status_code == 404
        assert response.json()["error"] == {"code": "not_found", "message": "Building 'BLD25999' not found"}

    def test_conflict(self, client):
        city = {"name": "Medan", "province": "North Sumatra"}
        assert client.post(f"{API}/cities", json=city).status_code == 201
        response = client.post(f"{API}/cities", json=city)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "conflict"

    def test_exhausted_retries_are_internal(self, client, database, space_payload, monkeypatch):
        async def always_duplicate(*args, **kwargs):
            raise DuplicateKeyError("E11000", 11000)

        monkeypatch.setattr(database.get_collection("counters"), "find_one_and_update", always_duplicate)
        response = client.post(f"{API}/spaces", json=space_payload)
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_error"
        assert "please retry" in response.json()["error"]["message"]

    def test_statistics_failure_names_entity(self, client, database, building_payload):
        database.get_collection("cities").fail_next("update_one", RuntimeError("connection reset"))
        response = client.post(f"{API}/buildings", json=building_payload)
        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "statistics_update_failed"
        assert "BLD" in error["message"]

    def test_unexpected_error(self, client, database):
        database.get_collection("cities").fail_next("find_one", RuntimeError("boom"))
        response = client.get(f"{API}/cities/CIT25001")
        assert response.status_code == 500
        assert response.json()["error"] == {"code": "internal_error", "message": "An unexpected error occurred."}


class TestAdminToken:
    @pytest.fixture
    def secured_client(self, config):
        secured = config.model_copy(update={"admin_token": "s3cret"})
        app = App(secured, FakeDatabase())  # type: ignore[arg-type]
        with TestClient(create_fastapi_app(app, secured), raise_server_exceptions=False) as test_client:
            yield test_client

    def test_reads_are_open(self, secured_client):
        assert secured_client.get(f"{API}/cities").status_code == 200

    def test_write_without_token_rejected(self, secured_client):
        response = secured_client.post(f"{API}/cities", json={"name": "Medan", "province": "North Sumatra"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "authentication_error"

    def test_write_with_wrong_token_rejected(self, secured_client):
        response = secured_client.post(
            f"{API}/cities",
            json={"name": "Medan", "province": "North Sumatra"},
            headers={"Authorization": "Bearer wrong"},
        )
        assert response.status_code == 401

    def test_write_with_token(self, secured_client):
        response = secured_client.post(
            f"{API}/cities",
            json={"name": "Medan", "province": "North Sumatra"},
            headers={"Authorization": "Bearer s3cret"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["name"] == "Medan"
