from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TotalsModel(BaseModel):
    component_count: int = 0
    active_project_count: int = 0
    supplier_count: int = 0
    total_project_value: float = 0.0


class ChartEntryModel(BaseModel):
    name: str
    count: int


class SeriesModel(BaseModel):
    components_by_type: List[ChartEntryModel] = Field(default_factory=list)
    project_status: List[ChartEntryModel] = Field(default_factory=list)


class OverviewResponse(BaseModel):
    totals: TotalsModel
    total_project_value_display: str
    series: SeriesModel
    charts: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


class EndpointSettingsModel(BaseModel):
    url: str = ""


class EndpointStatusResponse(BaseModel):
    url: str
    configured: bool


class MetaListResponse(BaseModel):
    values: List[str]
