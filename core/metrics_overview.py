from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from core.charts import bar_chart, to_vega_spec
from core.data import format_amount, parse_optional_number
from core.models import ACTIVE_PROJECT_STATUS


UNSPECIFIED_LABEL = "Unspecified"

COMPONENT_CHART_COLOR = "#003366"
PROJECT_CHART_COLOR = "#FFD700"

ChartSeries = List[Tuple[str, int]]
FieldSelector = Union[str, Callable[[Any], Any]]


@dataclass(frozen=True)
class Totals:
    component_count: int = 0
    active_project_count: int = 0
    supplier_count: int = 0
    total_project_value: float = 0.0


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _as_amount(value: Any) -> float:
    num = parse_optional_number(value)
    if num is None or math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def final_selling_price(project: Any) -> float:
    """Project price, reading typed records or raw camelCase rows; missing -> 0."""
    if isinstance(project, Mapping):
        cost = project.get("costAnalysis") or project.get("cost_analysis")
        if isinstance(cost, Mapping):
            return _as_amount(cost.get("finalSellingPrice", cost.get("final_selling_price")))
        return _as_amount(project.get("costAnalysis_finalSellingPrice"))
    cost = getattr(project, "cost_analysis", None)
    return _as_amount(getattr(cost, "final_selling_price", None))


def compute_totals(components: Sequence[Any], projects: Sequence[Any], suppliers: Sequence[Any]) -> Totals:
    active = sum(1 for p in projects if _field(p, "status") == ACTIVE_PROJECT_STATUS)
    total_value = 0.0
    for project in projects:
        total_value += final_selling_price(project)
    return Totals(
        component_count=len(components),
        active_project_count=active,
        supplier_count=len(suppliers),
        total_project_value=total_value,
    )


def _group_key(label: Any) -> Tuple[Any, ...]:
    # Type-qualified so 3 and "3", or None and "Unspecified", stay apart.
    try:
        hash(label)
    except TypeError:
        return (type(label), repr(label))
    return (type(label), label)


def _display_label(label: Any) -> str:
    return UNSPECIFIED_LABEL if label is None else str(label)


def group_by_field(items: Sequence[Any], field_selector: FieldSelector) -> ChartSeries:
    """Count items per label, in the order each label is first seen."""
    select = field_selector if callable(field_selector) else (lambda item: _field(item, field_selector))
    counts: Dict[Tuple[Any, ...], List[Any]] = {}
    for item in items:
        label = select(item)
        key = _group_key(label)
        if key in counts:
            counts[key][1] += 1
        else:
            counts[key] = [label, 1]
    return [(_display_label(label), count) for label, count in counts.values()]


def series_records(series: ChartSeries) -> List[Dict[str, Any]]:
    return [{"name": label, "count": count} for label, count in series]


def compute_overview(ctx: Dict[str, Any], *, currency: str = "AED") -> Dict[str, Any]:
    components = ctx.get("components", []) or []
    projects = ctx.get("projects", []) or []
    suppliers = ctx.get("suppliers", []) or []
    error: Optional[str] = ctx.get("error")

    totals = compute_totals(components, projects, suppliers)
    components_by_type = group_by_field(components, "type")
    projects_by_status = group_by_field(projects, "status")

    charts: Dict[str, Any] = {}
    if components_by_type:
        charts["components_by_type"] = to_vega_spec(
            bar_chart(components_by_type, title="Components by Type", color=COMPONENT_CHART_COLOR)
        )
    if projects_by_status:
        charts["project_status"] = to_vega_spec(
            bar_chart(projects_by_status, title="Project Status", color=PROJECT_CHART_COLOR)
        )

    return {
        "totals": asdict(totals),
        "total_project_value_display": format_amount(totals.total_project_value, currency),
        "series": {
            "components_by_type": series_records(components_by_type),
            "project_status": series_records(projects_by_status),
        },
        "charts": charts,
        "error": error,
    }
