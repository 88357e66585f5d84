"""Tests for the rebuildable application runtime."""

from core.backend import BackendError
from core.config import AppSettings
from core.endpoint import ENDPOINT_STORAGE_KEY
from core.runtime import LOAD_HINT, NOT_CONFIGURED_ERROR, DashboardRuntime

from conftest import make_client_factory


def test_unconfigured_runtime_loads_empty_state(settings, storage):
    """Without an endpoint no fetch happens and the state explains why."""

    factory = make_client_factory()
    runtime = DashboardRuntime.start(settings, storage, client_factory=factory)
    state = runtime.load_data()

    assert state.error == NOT_CONFIGURED_ERROR
    assert (state.components, state.projects, state.suppliers) == ([], [], [])
    assert factory.created[0].fetch_calls == 0


def test_endpoint_is_read_before_any_fetch(settings, storage, parsed_data):
    """The client is built from the stored endpoint at start."""

    storage.set(ENDPOINT_STORAGE_KEY, "https://x")
    factory = make_client_factory(data=parsed_data)
    runtime = DashboardRuntime.start(settings, storage, client_factory=factory)

    assert runtime.endpoint.url == "https://x"
    assert factory.created[0].config.url == "https://x"
    assert factory.created[0].fetch_calls == 0

    state = runtime.state
    assert state.error is None
    assert len(state.components) == 3
    assert runtime.state is state
    assert factory.created[0].fetch_calls == 1


def test_fetch_failure_becomes_state_error(settings, storage):
    storage.set(ENDPOINT_STORAGE_KEY, "https://x")
    factory = make_client_factory(error=BackendError("Network response was not ok, status: 404"))
    state = DashboardRuntime.start(settings, storage, client_factory=factory).load_data()

    assert state.error == f"Network response was not ok, status: 404 {LOAD_HINT}"
    assert state.projects == []


def test_save_marks_runtime_stale_and_restart_uses_new_endpoint(settings, storage):
    """Saving never mutates the running runtime; a restart picks up the change."""

    factory = make_client_factory()
    runtime = DashboardRuntime.start(settings, storage, client_factory=factory)
    assert not runtime.stale

    runtime.save_endpoint("https://new")
    assert runtime.stale
    assert runtime.endpoint.url == ""
    assert runtime.client.config.url == ""

    fresh = runtime.restart()
    assert fresh is not runtime
    assert not fresh.stale
    assert fresh.endpoint.url == "https://new"
    assert factory.created[-1].config.url == "https://new"


def test_start_uses_settings_path_by_default(tmp_path):
    """Without an explicit storage the settings file is used."""

    settings = AppSettings(settings_path=tmp_path / "s.json")
    DashboardRuntime.start(settings, client_factory=make_client_factory()).save_endpoint("https://x")
    assert DashboardRuntime.start(settings, client_factory=make_client_factory()).endpoint.url == "https://x"
