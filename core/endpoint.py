"""Backend endpoint registry.

The backend URL is the only persisted setting. It is read once when the
application starts and turned into an immutable ``EndpointConfig``; changing it
goes through ``EndpointRegistry.save``, which writes the value and then signals
that the application must be rebuilt from scratch.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol


logger = logging.getLogger(__name__)

ENDPOINT_STORAGE_KEY = "googleAppsScriptUrl"

UNCONFIGURED = "Unconfigured"
CONFIGURED = "Configured"


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class JsonFileStorage:
    """Durable key-value storage kept in a single JSON object on disk."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError):
            logger.exception("Could not read settings file %s; treating it as empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Settings file %s does not hold an object; ignoring it", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".settings-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


@dataclass(frozen=True)
class EndpointConfig:
    url: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    @property
    def state(self) -> str:
        return CONFIGURED if self.is_configured else UNCONFIGURED


RestartSignal = Callable[[EndpointConfig], None]


def _no_restart(config: EndpointConfig) -> None:
    return None


class EndpointRegistry:
    def __init__(self, storage: KeyValueStorage, on_save: Optional[RestartSignal] = None):
        self.storage = storage
        self.on_save: RestartSignal = on_save or _no_restart

    def load(self) -> EndpointConfig:
        stored = self.storage.get(ENDPOINT_STORAGE_KEY)
        config = EndpointConfig(url=stored or "")
        logger.info("Backend endpoint %s", config.state.lower())
        return config

    def save(self, url: str) -> EndpointConfig:
        # Stored verbatim; a bad URL only surfaces when data is fetched.
        self.storage.set(ENDPOINT_STORAGE_KEY, url)
        config = EndpointConfig(url=url)
        logger.info("Backend endpoint saved (%s); restarting application", config.state.lower())
        self.on_save(config)
        return config
