# =============================================================================
# API Tests — HTTP Contract
# =============================================================================
#
# Exercises the FastAPI app end-to-end through TestClient. The record
# service dependency is overridden with an in-memory store (or a failing
# AsyncMock store), so no database or Redis is needed.
# =============================================================================

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_record_service
from app.main import app
from app.services.record_store import InMemoryRecordStore
from app.services.records import RecordService
from tests.conftest import make_records


@pytest.fixture
def client_for():
    """Build a TestClient whose RecordService wraps the given store."""

    def _make(store) -> TestClient:
        app.dependency_overrides[get_record_service] = lambda: RecordService(store)
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(client_for, records_25) -> TestClient:
    return client_for(InMemoryRecordStore(records_25))


# ---------------------------------------------------------------------------
# GET /records
# ---------------------------------------------------------------------------


class TestListEndpoint:
    def test_response_shape(self, client):
        resp = client.get("/records")
        assert resp.status_code == 200
        body = resp.json()

        assert set(body) == {"result", "page", "limit", "totalRows", "totalPages", "metadata"}
        assert set(body["metadata"]) == {
            "timestamp", "sortField", "sortDirection", "query", "executionTime",
        }
        assert body["page"] == 0
        assert body["limit"] == 10
        assert body["totalRows"] == 25
        assert body["totalPages"] == 3
        assert body["metadata"]["sortField"] == "id"
        assert body["metadata"]["sortDirection"] == "desc"
        assert body["metadata"]["query"] == ""
        assert body["metadata"]["executionTime"].endswith("ms")
        assert set(body["result"][0]) == {
            "id", "first_name", "last_name", "email", "gender", "ip_address",
        }

    def test_last_page(self, client):
        resp = client.get(
            "/records", params={"page": "2", "limit": "10", "sortDirection": "asc"},
        )
        body = resp.json()
        assert [r["id"] for r in body["result"]] == [21, 22, 23, 24, 25]
        assert body["totalPages"] == 3

    def test_malformed_params_never_error(self, client):
        resp = client.get(
            "/records",
            params={
                "page": "abc",
                "limit": "-1",
                "sortField": "password",
                "sortDirection": "sideways",
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["page"] == 0
        assert body["limit"] == 10
        assert body["metadata"]["sortField"] == "id"
        assert body["metadata"]["sortDirection"] == "desc"

    def test_page_beyond_range(self, client):
        resp = client.get("/records", params={"page": "99"})
        assert resp.status_code == 200
        assert resp.json()["result"] == []

    def test_oversized_numbers_never_error(self, client):
        huge = "9" * 5000
        resp = client.get("/records", params={"page": huge, "limit": huge})
        assert resp.status_code == 200
        body = resp.json()
        assert (body["page"], body["limit"]) == (0, 10)

        resp = client.get("/records", params={"page": "10000000000000000000"})
        assert resp.status_code == 200
        assert resp.json()["result"] == []
        assert resp.json()["totalRows"] == 25

    def test_search_and_sort_echoed(self, client_for, mixed_records):
        client = client_for(InMemoryRecordStore(mixed_records))
        resp = client.get(
            "/records",
            params={"search": "gmail", "sortField": "email", "sortDirection": "asc"},
        )
        body = resp.json()
        assert body["totalRows"] == 2
        assert {r["id"] for r in body["result"]} == {2, 3}
        assert body["metadata"]["query"] == "gmail"
        assert body["metadata"]["sortField"] == "email"
        assert body["metadata"]["sortDirection"] == "asc"

    def test_store_failure_is_500_with_detail(self, client_for):
        store = AsyncMock()
        store.count.side_effect = ConnectionError("db unreachable")
        resp = client_for(store).get("/records")

        assert resp.status_code == 500
        assert resp.json() == {
            "status": "error",
            "message": "Failed to fetch personal data",
            "error": "db unreachable",
        }

    def test_error_detail_hidden_when_disabled(self, client_for):
        store = AsyncMock()
        store.count.side_effect = ConnectionError("db unreachable")
        with patch("app.api.errors.settings") as mock_settings:
            mock_settings.expose_error_details = False
            resp = client_for(store).get("/records")

        assert resp.status_code == 500
        assert resp.json() == {
            "status": "error",
            "message": "Failed to fetch personal data",
        }


# ---------------------------------------------------------------------------
# GET /records/{id}
# ---------------------------------------------------------------------------


class TestGetEndpoint:
    def test_found(self, client):
        resp = client.get("/records/7")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "success"
        assert body["data"]["id"] == 7

    def test_not_found(self, client):
        resp = client.get("/records/999999")
        assert resp.status_code == 404
        assert resp.json() == {"status": "error", "message": "Personal data not found"}

    @pytest.mark.parametrize("raw", ["abc", "1.5", "12abc"])
    def test_invalid_id_is_400_without_store_call(self, client_for, raw):
        store = AsyncMock()
        resp = client_for(store).get(f"/records/{raw}")

        assert resp.status_code == 400
        assert resp.json() == {
            "status": "error",
            "message": "Invalid ID parameter. Must be a valid number.",
        }
        store.get.assert_not_awaited()

    def test_id_too_long_for_int_is_400(self, client_for):
        store = AsyncMock()
        resp = client_for(store).get("/records/" + "9" * 5000)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid ID parameter. Must be a valid number."
        store.get.assert_not_awaited()

    def test_store_failure(self, client_for):
        store = AsyncMock()
        store.get.side_effect = TimeoutError("pool exhausted")
        resp = client_for(store).get("/records/1")

        assert resp.status_code == 500
        assert resp.json()["message"] == "Failed to fetch personal data by ID"


# ---------------------------------------------------------------------------
# GET /records/export
# ---------------------------------------------------------------------------


class TestExportEndpoint:
    def test_capped_and_id_descending(self, client_for):
        client = client_for(InMemoryRecordStore(make_records(1000)))
        resp = client.get(
            "/records/export",
            params={"search": "", "maxExport": "3", "sortField": "email", "sortDirection": "asc"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "success"
        assert body["totalExported"] == 3
        assert [r["id"] for r in body["data"]] == [1000, 999, 998]

    def test_invalid_max_export_uses_default(self, client_for):
        client = client_for(InMemoryRecordStore(make_records(1200)))
        body = client.get("/records/export", params={"maxExport": "lots"}).json()
        assert body["totalExported"] == 1000
        assert len(body["data"]) == 1000

    def test_store_failure(self, client_for):
        store = AsyncMock()
        store.fetch.side_effect = RuntimeError("boom")
        resp = client_for(store).get("/records/export")

        assert resp.status_code == 500
        assert resp.json()["message"] == "Failed to export personal data"


# ---------------------------------------------------------------------------
# Ambient routes and headers
# ---------------------------------------------------------------------------


class TestAmbient:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["uptime"] >= 0
        assert "timestamp" in body

    def test_unknown_route(self, client):
        resp = client.get("/nope")
        assert resp.status_code == 404
        assert resp.json() == {"status": "error", "message": "Resource not found"}

    def test_security_headers(self, client):
        resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"

    def test_cors_preflight(self, client):
        resp = client.options(
            "/records",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert resp.status_code == 200
        assert "access-control-allow-origin" in resp.headers
