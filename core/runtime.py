from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.backend import BackendClient, BackendError
from core.config import AppSettings
from core.endpoint import EndpointConfig, EndpointRegistry, JsonFileStorage, KeyValueStorage
from core.models import Component, Project, Supplier


logger = logging.getLogger(__name__)

NOT_CONFIGURED_ERROR = "Google Apps Script URL is not configured."
LOAD_FAILED_ERROR = "Failed to load data from Google Script."
LOAD_HINT = "Please check the URL in Settings or your script's permissions."


@dataclass(frozen=True)
class DashboardState:
    components: List[Component] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    suppliers: List[Supplier] = field(default_factory=list)
    error: Optional[str] = None

    def as_context(self) -> Dict[str, Any]:
        return {
            "components": self.components,
            "projects": self.projects,
            "suppliers": self.suppliers,
            "error": self.error,
        }


class DashboardRuntime:
    """One generation of the application: endpoint config -> client -> loaded data.

    A runtime never changes its endpoint. Saving a new one marks the runtime
    stale and the owner replaces it with ``restart()``.
    """

    def __init__(self, settings: AppSettings, storage: KeyValueStorage, client_factory=BackendClient):
        self.settings = settings
        self.storage = storage
        self.client_factory = client_factory
        self.stale = False
        self.registry = EndpointRegistry(storage, on_save=self._request_restart)
        self.endpoint: EndpointConfig = self.registry.load()
        self.client: BackendClient = client_factory(self.endpoint, timeout=settings.request_timeout)
        self._state: Optional[DashboardState] = None

    @classmethod
    def start(cls, settings: AppSettings, storage: Optional[KeyValueStorage] = None, client_factory=BackendClient) -> "DashboardRuntime":
        storage = storage if storage is not None else JsonFileStorage(settings.settings_path)
        return cls(settings, storage, client_factory=client_factory)

    def _request_restart(self, config: EndpointConfig) -> None:
        self.stale = True

    def restart(self) -> "DashboardRuntime":
        return type(self).start(self.settings, self.storage, client_factory=self.client_factory)

    def save_endpoint(self, url: str) -> EndpointConfig:
        return self.registry.save(url)

    def load_data(self) -> DashboardState:
        if not self.endpoint.is_configured:
            self._state = DashboardState(error=NOT_CONFIGURED_ERROR)
            return self._state
        try:
            data = self.client.fetch_all_data()
        except BackendError as exc:
            logger.error("Data load failed: %s", exc)
            message = str(exc) or LOAD_FAILED_ERROR
            self._state = DashboardState(error=f"{message} {LOAD_HINT}")
            return self._state
        self._state = DashboardState(
            components=data.get("components", []),
            projects=data.get("projects", []),
            suppliers=data.get("suppliers", []),
        )
        logger.info(
            "Loaded %d components, %d projects, %d suppliers",
            len(self._state.components),
            len(self._state.projects),
            len(self._state.suppliers),
        )
        return self._state

    @property
    def state(self) -> DashboardState:
        if self._state is None:
            return self.load_data()
        return self._state
