"""Tests for the FastAPI surface."""

import pytest
from fastapi.testclient import TestClient

from api.main import app
from core.endpoint import ENDPOINT_STORAGE_KEY
from core.runtime import DashboardRuntime

from conftest import make_client_factory


@pytest.fixture
def install_runtime(settings, storage):
    def _install(url="", data=None, error=None):
        if url:
            storage.set(ENDPOINT_STORAGE_KEY, url)
        runtime = DashboardRuntime.start(settings, storage, client_factory=make_client_factory(data=data, error=error))
        app.state.runtime = runtime
        return runtime

    yield _install
    app.state.runtime = None


@pytest.fixture
def client():
    return TestClient(app)


def test_overview_returns_totals_and_series(client, install_runtime, parsed_data):
    install_runtime(url="https://x", data=parsed_data)
    resp = client.get("/overview")
    assert resp.status_code == 200
    body = resp.json()
    assert body["totals"]["component_count"] == 3
    assert body["totals"]["active_project_count"] == 1
    assert body["totals"]["total_project_value"] == 20000.5
    assert body["total_project_value_display"] == "20,000.5 AED"
    assert body["series"]["components_by_type"][0] == {"name": "Solar Panels", "count": 2}
    assert set(body["charts"]) == {"components_by_type", "project_status"}
    assert body["error"] is None


def test_overview_unconfigured_reports_error(client, install_runtime):
    install_runtime()
    body = client.get("/overview").json()
    assert body["error"] == "Google Apps Script URL is not configured."
    assert body["totals"]["component_count"] == 0


def test_overview_unexpected_failure_is_500(client, install_runtime):
    """Errors outside the backend contract become a 500 JSON body."""

    install_runtime(url="https://x", error=KeyError("boom"))
    resp = client.get("/overview")
    assert resp.status_code == 500
    assert resp.json()["type"] == "KeyError"


def test_get_endpoint(client, install_runtime):
    install_runtime(url="https://x")
    assert client.get("/settings/endpoint").json() == {"url": "https://x", "configured": True}


def test_save_endpoint_restarts_runtime(client, install_runtime, storage):
    """Saving persists the URL and swaps in a fresh runtime."""

    old = install_runtime()
    resp = client.put("/settings/endpoint", json={"url": "https://new"})
    assert resp.status_code == 200
    assert resp.json() == {"url": "https://new", "configured": True}
    assert storage.get(ENDPOINT_STORAGE_KEY) == "https://new"
    assert app.state.runtime is not old
    assert app.state.runtime.endpoint.url == "https://new"
    assert client.get("/settings/endpoint").json()["url"] == "https://new"


def test_save_empty_endpoint_is_unconfigured(client, install_runtime):
    install_runtime(url="https://x")
    assert client.put("/settings/endpoint", json={"url": ""}).json() == {"url": "", "configured": False}


def test_reload_builds_fresh_runtime(client, install_runtime, parsed_data):
    old = install_runtime(url="https://x", data=parsed_data)
    resp = client.post("/reload")
    assert resp.status_code == 200
    assert resp.json()["totals"]["supplier_count"] == 1
    assert app.state.runtime is not old


def test_meta_lists(client):
    assert client.get("/meta/project-statuses").json() == {
        "values": ["Planning", "In Progress", "Completed", "Cancelled"]
    }
    assert "Electric Chargers" in client.get("/meta/component-types").json()["values"]


def test_export_collection_csv(client, install_runtime, parsed_data):
    install_runtime(url="https://x", data=parsed_data)
    resp = client.get("/export/suppliers")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "SunCo" in resp.text


def test_export_unknown_collection(client, install_runtime):
    install_runtime()
    assert client.get("/export/invoices").status_code == 404


def test_export_unexpected_failure_is_500(client, install_runtime, caplog):
    """Export failures are logged and reported as a 500 JSON body, like the other routes."""

    install_runtime(url="https://x", error=KeyError("boom"))
    resp = client.get("/export/components")
    assert resp.status_code == 500
    assert resp.json()["type"] == "KeyError"
    assert "export failed" in caplog.text
