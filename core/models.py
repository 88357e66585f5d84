from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


COMPONENT_TYPES: Dict[str, str] = {
    "solar_panel": "Solar Panels",
    "inverter": "Inverters",
    "battery": "Batteries",
    "mounting_system": "Mounting Systems",
    "cable": "Cables",
    "monitoring_system": "Monitoring Systems",
    "electric_charger": "Electric Chargers",
}

PROJECT_STATUSES: List[str] = ["Planning", "In Progress", "Completed", "Cancelled"]
ACTIVE_PROJECT_STATUS = "In Progress"
DEFAULT_PROJECT_STATUS = "Planning"


@dataclass(frozen=True)
class Component:
    id: str
    type: str
    manufacturer: str = ""
    model: str = ""
    supplier_id: str = ""
    cost: Optional[float] = None
    # Type-specific columns (wattage, capacity, connectorType, ...).
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Supplier:
    id: str
    name: str = ""
    contact_person: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    specialization: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ClientInfo:
    name: str = ""
    contact: str = ""
    address: str = ""


@dataclass(frozen=True)
class Timeline:
    start_date: str = ""
    end_date: str = ""


@dataclass(frozen=True)
class ProjectComponent:
    component_id: str
    quantity: float = 0.0
    cost_at_time_of_add: float = 0.0
    selling_price: Optional[float] = None


@dataclass(frozen=True)
class CostAnalysis:
    total_material_cost: float = 0.0
    total_project_cost: float = 0.0
    final_selling_price: float = 0.0
    profit_margin: float = 0.0
    profit_margin_percentage: float = 0.0
    cost_per_kw: float = 0.0
    markup_amount: float = 0.0
    installation_charges: Optional[float] = None
    commissioning_charges: Optional[float] = None
    electrical_cost: Optional[float] = None
    installation_selling_price: Optional[float] = None
    commissioning_selling_price: Optional[float] = None
    electrical_selling_price: Optional[float] = None
    markup_percentage: Optional[float] = None
    component_costs: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class Project:
    id: str
    name: str = ""
    status: str = DEFAULT_PROJECT_STATUS
    location: str = ""
    system_capacity: float = 0.0
    site_survey_notes: str = ""
    client: ClientInfo = field(default_factory=ClientInfo)
    timeline: Timeline = field(default_factory=Timeline)
    components: List[ProjectComponent] = field(default_factory=list)
    cost_analysis: Optional[CostAnalysis] = field(default_factory=CostAnalysis)

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_PROJECT_STATUS
