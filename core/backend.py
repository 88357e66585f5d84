from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from core.data import parse_all_data
from core.endpoint import EndpointConfig


logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Application is not configured by the administrator."


class BackendError(RuntimeError):
    """The Apps Script backend could not be reached or reported an error."""


class NotConfiguredError(BackendError):
    pass


class BackendClient:
    """Talks to the Google Apps Script web app that fronts the spreadsheet."""

    def __init__(self, config: EndpointConfig, *, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.config = config
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self) -> str:
        if not self.config.is_configured:
            raise NotConfiguredError(NOT_CONFIGURED_MESSAGE)
        return self.config.url

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.ok:
            raise BackendError(f"Network response was not ok, status: {response.status_code}")
        try:
            result = response.json()
        except ValueError as exc:
            raise BackendError("Backend returned a non-JSON response") from exc
        if isinstance(result, Mapping) and result.get("error"):
            raise BackendError(f"Google Script Error: {result['error']}")
        return result

    def fetch_all_data(self) -> Dict[str, List[Any]]:
        url = self._url()
        try:
            response = self.session.get(url, params={"action": "getData"}, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            logger.exception("fetch_all_data failed")
            raise BackendError(str(exc)) from exc
        payload = self._decode(response)
        if not isinstance(payload, Mapping):
            raise BackendError("Backend returned an unexpected payload")
        return parse_all_data(payload)
