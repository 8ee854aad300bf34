"""
HTTP tests for the v1 API over the in-memory store
"""

import pytest
from fastapi.testclient import TestClient

from conftest import InMemoryStore, make_source
from dashboard_engine.api.v1.dependencies import EngineServices, get_services
from dashboard_engine.main import app

USER = {"X-User-Id": "u-1"}


@pytest.fixture
def api_store():
    return InMemoryStore(data_sources=[
        make_source("ds-users", "Users Count"),
        make_source("ds-signups", "Signups", query_config={"table": "users", "operation": "select"}),
    ])


@pytest.fixture
def client(api_store):
    services = EngineServices.build(api_store)
    app.dependency_overrides[get_services] = lambda: services
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestWidgetEndpoints:
    """Test cases for /api/v1/widgets"""

    def test_types_grouped_by_category(self, client):
        resp = client.get("/api/v1/widgets/types")

        assert resp.status_code == 200
        body = resp.json()
        assert len(body["types"]) == 6
        assert list(body["by_category"]) == ["metrics", "charts", "tables"]

    def test_fields_for_known_type(self, client):
        resp = client.get("/api/v1/widgets/types/data_table/fields")

        assert resp.status_code == 200
        fields = resp.json()["fields"]
        assert [f["key"] for f in fields] == ["title", "data_source_id", "columns", "page_size"]
        assert fields[0]["placeholder"] == "Data Table"
        assert [o["value"] for o in fields[1]["options"]] == ["ds-users", "ds-signups"]

    def test_fields_for_unknown_type(self, client):
        assert client.get("/api/v1/widgets/types/gauge/fields").status_code == 404

    def test_config_merge_reports_errors(self, client):
        resp = client.post("/api/v1/widgets/config/merge", json={
            "widget_type": "data_table",
            "existing": {"page_size": 10, "title": "Users"},
            "overrides": {"page_size": "0", "columns": "name, email"},
        })

        body = resp.json()
        assert body["valid"] is False
        assert "page_size" in body["errors"]
        assert body["config"] == {"page_size": 10, "title": "Users", "columns": ["name", "email"]}

    def test_render_unknown_type(self, client):
        resp = client.post("/api/v1/widgets/render", json={"widget_type": "gauge", "data": []})

        assert resp.status_code == 200
        assert resp.json()["metadata"]["message"] == "Unknown widget type: gauge"


class TestDataSourceEndpoints:
    """Test cases for /api/v1/data-sources"""

    def test_create_then_list(self, client, api_store):
        resp = client.post("/api/v1/data-sources", json={
            "name": "Revenue",
            "source_type": "calculated",
            "query_config": {"table": "subscriptions", "aggregate": "sum", "column": "amount"},
            "refresh_interval": 120,
        })

        assert resp.status_code == 201
        names = [ds["name"] for ds in client.get("/api/v1/data-sources").json()["data_sources"]]
        assert names == ["Users Count", "Signups", "Revenue"]

    def test_interval_below_floor_is_rejected(self, client, api_store):
        resp = client.post("/api/v1/data-sources", json={
            "name": "Fast", "source_type": "table_query", "refresh_interval": 10,
        })

        assert resp.status_code == 422
        assert api_store.calls["create_data_source"] == 0

    def test_fetch_data(self, client, api_store):
        api_store.widget_data["ds-users"] = {"count": 3}

        body = client.get("/api/v1/data-sources/ds-users/data").json()

        assert body == {"data": {"count": 3}, "is_loading": False, "error": None}
        assert client.get("/api/v1/data-sources/ds-nope/data").status_code == 404


class TestDashboardEndpoints:
    """Test cases for /api/v1/dashboards"""

    def _payload(self, **overrides):
        payload = {
            "dashboard_name": "Growth",
            "widget_configs": [
                {"widget_type": "metric_card", "data_source_id": "ds-users", "config": {"title": "Users"}},
            ],
        }
        payload.update(overrides)
        return payload

    def test_save_requires_user(self, client, api_store):
        resp = client.post("/api/v1/dashboards", json=self._payload())

        assert resp.status_code == 400
        assert "must be logged in" in resp.json()["detail"]
        assert api_store.calls["create_dashboard_config"] == 0

    def test_save_without_widgets(self, client, api_store):
        resp = client.post("/api/v1/dashboards", json=self._payload(widget_configs=[]), headers=USER)

        assert resp.status_code == 400
        assert api_store.calls["create_dashboard_config"] == 0

    def test_store_failure_is_502(self, client, api_store):
        api_store.fail_saves = True

        resp = client.post("/api/v1/dashboards", json=self._payload(), headers=USER)

        assert resp.status_code == 502
        assert resp.json()["detail"] == "Failed to save dashboard. Please try again."

    def test_save_list_and_view(self, client, api_store):
        api_store.widget_data["ds-users"] = {"count": 1234}

        saved = client.post("/api/v1/dashboards", json=self._payload(), headers=USER)
        listed = client.get("/api/v1/dashboards", headers=USER).json()["dashboards"]
        view = client.get("/api/v1/dashboards/view", headers=USER).json()

        assert saved.status_code == 201
        assert saved.json() == {"status": "saved", "message": "Dashboard saved successfully!"}
        assert listed[0]["dashboard_name"] == "Growth"
        assert view["has_dashboard"] is True
        assert view["widgets"][0]["data"]["formatted"] == "1,234"

    def test_view_without_dashboard(self, client):
        body = client.get("/api/v1/dashboards/view", headers={"X-User-Id": "u-2"}).json()
        assert body["has_dashboard"] is False
        assert body["widgets"] == []

    def test_view_requires_user(self, client):
        assert client.get("/api/v1/dashboards/view").status_code == 401


class TestSystemEndpoints:
    """Test cases for /api/v1/system"""

    def test_health(self, client):
        body = client.get("/api/v1/system/health").json()
        assert body["status"] == "ok"

    def test_cache_refresh(self, client):
        body = client.post("/api/v1/system/cache/refresh").json()
        assert body == {"status": "refreshed", "data_sources": 2}

    def test_cache_info_reports_loaded_snapshots(self, client):
        client.get("/api/v1/widgets/types")
        client.get("/api/v1/data-sources/ds-users/data")

        body = client.get("/api/v1/system/cache/info").json()

        assert body["catalog"]["widget_types"]["count"] == 6
        assert body["data_sources"]["data_sources"]["count"] == 2
        assert body["data_sources"]["data_sources"]["expired"] is False
        assert len(body["widget_data"]) == 1
