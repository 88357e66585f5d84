import os
import sys
from typing import Any, Dict, List, Optional

# Ensure project root is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest

from core.config import AppSettings
from core.data import parse_all_data
from core.endpoint import JsonFileStorage


RAW_PAYLOAD: Dict[str, List[Dict[str, Any]]] = {
    "components": [
        {
            "id": "c1",
            "type": "Solar Panels",
            "manufacturer": "Jinko",
            "model": "Tiger Neo",
            "supplierId": "s1",
            "cost": "450",
            "wattage": "550",
            "efficiency": "21.5",
            "warranty": "",
            "technology": "Mono",
        },
        {"id": "c2", "type": "Inverters", "manufacturer": "Huawei", "capacity": "10", "inverterType": "String"},
        {"id": "c3", "type": "Solar Panels", "manufacturer": "Longi", "wattage": "400"},
        {"id": "", "type": "", "manufacturer": ""},
    ],
    "projects": [
        {
            "id": "p1",
            "name": "Palm Villa",
            "status": "In Progress",
            "clientName": "A. Client",
            "timelineStartDate": "2024-01-10",
            "costAnalysis_finalSellingPrice": "12000.5",
            "costAnalysis_totalMaterialCost": "9000",
            "components": '[{"componentId": "c1", "quantity": 10, "costAtTimeOfAdd": 450}]',
        },
        {"id": "p2", "name": "Warehouse", "status": "Completed", "costAnalysis_finalSellingPrice": 8000},
        {"id": "p3", "name": "Farm", "status": "", "costAnalysis_finalSellingPrice": "n/a"},
    ],
    "suppliers": [
        {"id": "s1", "name": "SunCo", "specialization": "Solar Panels, Inverters"},
    ],
}


class FakeClient:
    def __init__(self, config, data: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.config = config
        self.data = data
        self.error = error
        self.fetch_calls = 0

    def fetch_all_data(self) -> Dict[str, Any]:
        self.fetch_calls += 1
        if self.error is not None:
            raise self.error
        return self.data or {"components": [], "projects": [], "suppliers": []}


def make_client_factory(data: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
    created: List[FakeClient] = []

    def factory(config, timeout: float = 30.0) -> FakeClient:
        client = FakeClient(config, data=data, error=error)
        created.append(client)
        return client

    factory.created = created  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def raw_payload() -> Dict[str, List[Dict[str, Any]]]:
    return RAW_PAYLOAD


@pytest.fixture
def parsed_data() -> Dict[str, List[Any]]:
    return parse_all_data(RAW_PAYLOAD)


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(settings_path=tmp_path / "settings.json")


@pytest.fixture
def storage(settings) -> JsonFileStorage:
    return JsonFileStorage(settings.settings_path)
