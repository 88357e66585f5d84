from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

import pandas as pd

from core.models import (
    DEFAULT_PROJECT_STATUS,
    ClientInfo,
    Component,
    CostAnalysis,
    Project,
    ProjectComponent,
    Supplier,
    Timeline,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Sheet column kinds per component type label. Anything not listed is kept as text.
COMPONENT_ATTRIBUTES: Dict[str, Dict[str, str]] = {
    "Solar Panels": {"wattage": "number", "efficiency": "number", "warranty": "number", "technology": "text"},
    "Inverters": {"capacity": "number", "inverterType": "text", "efficiency": "number", "mpptChannels": "number"},
    "Batteries": {"capacity": "number", "batteryType": "text", "warranty": "number", "depthOfDischarge": "number"},
    "Mounting Systems": {"mountingType": "text", "material": "text", "loadCapacity": "number"},
    "Cables": {"cableType": "text", "crossSection": "number"},
    "Monitoring Systems": {"features": "list"},
    "Electric Chargers": {"chargingSpeed": "number", "connectorType": "text"},
}

COMPONENT_BASE_COLUMNS = {"id", "type", "manufacturer", "model", "supplierId", "cost"}

# camelCase sheet column -> CostAnalysis field
COST_ANALYSIS_COLUMNS = {
    "totalMaterialCost": "total_material_cost",
    "totalProjectCost": "total_project_cost",
    "finalSellingPrice": "final_selling_price",
    "profitMargin": "profit_margin",
    "profitMarginPercentage": "profit_margin_percentage",
    "costPerKw": "cost_per_kw",
    "markupAmount": "markup_amount",
    "installationCharges": "installation_charges",
    "commissioningCharges": "commissioning_charges",
    "electricalCost": "electrical_cost",
    "installationSellingPrice": "installation_selling_price",
    "commissioningSellingPrice": "commissioning_selling_price",
    "electricalSellingPrice": "electrical_selling_price",
    "markupPercentage": "markup_percentage",
}
REQUIRED_COST_FIELDS = {
    "total_material_cost",
    "total_project_cost",
    "final_selling_price",
    "profit_margin",
    "profit_margin_percentage",
    "cost_per_kw",
    "markup_amount",
}


# ---------------- Scalar parsing ----------------
def parse_optional_number(value: object) -> Optional[float]:
    if value is None or isinstance(value, (bool, list, tuple, dict)):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        num = pd.to_numeric(value, errors="coerce")
        if pd.isna(num):
            return None
        return float(num)
    except (TypeError, ValueError, OverflowError):
        return None


def parse_required_number(value: object) -> float:
    num = parse_optional_number(value)
    return 0.0 if num is None else num


def parse_json_field(value: object, default: T) -> T:
    if not isinstance(value, str) or not value:
        return default
    try:
        return json.loads(value)
    except ValueError:
        logger.error("Failed to parse JSON field: %r", value)
        return default


def split_list(value: object) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    if value is None or value == "":
        return []
    return [item.strip() for item in str(value).split(",") if item.strip()]


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


# ---------------- Row parsers ----------------
def parse_component(row: Mapping[str, Any]) -> Component:
    ctype = _text(row.get("type"))
    kinds = COMPONENT_ATTRIBUTES.get(ctype, {})
    attributes: Dict[str, Any] = {}
    for key, value in row.items():
        if key in COMPONENT_BASE_COLUMNS:
            continue
        kind = kinds.get(key, "text")
        if kind == "number":
            attributes[key] = parse_optional_number(value)
        elif kind == "list":
            attributes[key] = split_list(value)
        else:
            attributes[key] = value if value != "" else None
    return Component(
        id=_text(row.get("id")),
        type=ctype,
        manufacturer=_text(row.get("manufacturer")),
        model=_text(row.get("model")),
        supplier_id=_text(row.get("supplierId")),
        cost=parse_optional_number(row.get("cost")),
        attributes=attributes,
    )


def parse_supplier(row: Mapping[str, Any]) -> Supplier:
    return Supplier(
        id=_text(row.get("id")),
        name=_text(row.get("name")),
        contact_person=_text(row.get("contactPerson")),
        phone=_text(row.get("phone")),
        email=_text(row.get("email")),
        address=_text(row.get("address")),
        specialization=split_list(row.get("specialization")),
    )


def _parse_project_components(value: object) -> List[ProjectComponent]:
    raw = value if isinstance(value, list) else parse_json_field(value, [])
    out: List[ProjectComponent] = []
    for item in raw or []:
        if not isinstance(item, Mapping):
            continue
        out.append(
            ProjectComponent(
                component_id=_text(item.get("componentId")),
                quantity=parse_required_number(item.get("quantity")),
                cost_at_time_of_add=parse_required_number(item.get("costAtTimeOfAdd")),
                selling_price=parse_optional_number(item.get("sellingPrice")),
            )
        )
    return out


def unflatten_project(row: Mapping[str, Any]) -> Project:
    cost_values: Dict[str, Any] = {}
    for column, attr in COST_ANALYSIS_COLUMNS.items():
        raw = row.get(f"costAnalysis_{column}")
        cost_values[attr] = parse_required_number(raw) if attr in REQUIRED_COST_FIELDS else parse_optional_number(raw)
    cost_values["component_costs"] = parse_json_field(row.get("costAnalysis_componentCosts"), [])

    return Project(
        id=_text(row.get("id")),
        name=_text(row.get("name")),
        status=_text(row.get("status")) or DEFAULT_PROJECT_STATUS,
        location=_text(row.get("location")),
        system_capacity=parse_required_number(row.get("systemCapacity")),
        site_survey_notes=_text(row.get("siteSurveyNotes")),
        client=ClientInfo(
            name=_text(row.get("clientName")),
            contact=_text(row.get("clientContact")),
            address=_text(row.get("clientAddress")),
        ),
        timeline=Timeline(
            start_date=_text(row.get("timelineStartDate")),
            end_date=_text(row.get("timelineEndDate")),
        ),
        components=_parse_project_components(row.get("components")),
        cost_analysis=CostAnalysis(**cost_values),
    )


def process_sheet_rows(rows: object, parser: Callable[[Mapping[str, Any]], T], sheet_name: str) -> List[T]:
    """Parse sheet rows, skipping rows without an id and rows the parser rejects."""
    if not isinstance(rows, list):
        return []
    out: List[T] = []
    for index, row in enumerate(rows):
        # Row 1 of every sheet is the header.
        row_number = index + 2
        if not isinstance(row, Mapping):
            continue
        if not row.get("id"):
            if any(v not in ("", None) for v in row.values()):
                logger.warning("Skipping invalid data at row %d in '%s' sheet: %r", row_number, sheet_name, dict(row))
            continue
        try:
            out.append(parser(row))
        except Exception:
            logger.exception("Error processing row %d in '%s' sheet", row_number, sheet_name)
    return out


def parse_all_data(payload: Mapping[str, Any]) -> Dict[str, List[Any]]:
    return {
        "components": process_sheet_rows(payload.get("components"), parse_component, "Components"),
        "suppliers": process_sheet_rows(payload.get("suppliers"), parse_supplier, "Suppliers"),
        "projects": process_sheet_rows(payload.get("projects"), unflatten_project, "Projects"),
    }


# ---------------- Frames & formatting ----------------
def records_frame(items: Iterable[Any]) -> pd.DataFrame:
    """Flatten records (dataclasses or mappings) into a DataFrame for export."""
    rows = [asdict(item) if is_dataclass(item) else dict(item) for item in items]
    if not rows:
        return pd.DataFrame()
    return pd.json_normalize(rows, sep=".")


def format_amount(value: object, currency: str = "AED") -> str:
    if value is None or pd.isna(value):
        return f"0 {currency}"
    text = f"{float(value):,.3f}".rstrip("0").rstrip(".")
    return f"{text} {currency}"
