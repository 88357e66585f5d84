from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


DEFAULT_SETTINGS_PATH = Path.home() / ".solar_oasis" / "settings.json"
DEFAULT_CURRENCY = "AED"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _as_float(value: Optional[str], default: float) -> float:
    if value is None or not str(value).strip():
        return default
    try:
        out = float(value)
    except Exception:
        return default
    return out if out > 0 else default


@dataclass(frozen=True)
class AppSettings:
    """Process-level settings, read once at start."""

    settings_path: Path = DEFAULT_SETTINGS_PATH
    currency: str = DEFAULT_CURRENCY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "AppSettings":
        env = os.environ if environ is None else environ
        raw_path = (env.get("SOLAR_OASIS_SETTINGS_PATH") or "").strip()
        return cls(
            settings_path=Path(raw_path).expanduser() if raw_path else DEFAULT_SETTINGS_PATH,
            currency=(env.get("SOLAR_OASIS_CURRENCY") or DEFAULT_CURRENCY).strip() or DEFAULT_CURRENCY,
            request_timeout=_as_float(env.get("SOLAR_OASIS_REQUEST_TIMEOUT"), DEFAULT_REQUEST_TIMEOUT),
            log_level=(env.get("SOLAR_OASIS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL,
        )


def configure_logging(settings: AppSettings) -> None:
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
