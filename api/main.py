from __future__ import annotations

import logging
import math

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import EndpointSettingsModel, EndpointStatusResponse, MetaListResponse, OverviewResponse
from core.config import AppSettings, configure_logging
from core.data import records_frame
from core.metrics_overview import compute_overview
from core.models import COMPONENT_TYPES, PROJECT_STATUSES
from core.runtime import DashboardRuntime


app = FastAPI(title="Solar Oasis Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

EXPORTABLE = ("components", "projects", "suppliers")


def get_runtime(request: Request) -> DashboardRuntime:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        settings = AppSettings.from_environment()
        configure_logging(settings)
        runtime = DashboardRuntime.start(settings)
        request.app.state.runtime = runtime
    return runtime


def _restart(request: Request, runtime: DashboardRuntime) -> DashboardRuntime:
    fresh = runtime.restart()
    request.app.state.runtime = fresh
    return fresh


def _json(data: object) -> JSONResponse:
    """Return JSON with NaN/inf mapped to null."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(content=jsonable_encoder(data, custom_encoder={float: _safe_float}))


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/overview")
def overview(request: Request):
    try:
        runtime = get_runtime(request)
        payload = compute_overview(runtime.state.as_context(), currency=runtime.settings.currency)
        return _json(OverviewResponse.model_validate(payload))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/reload")
def reload_data(request: Request):
    try:
        runtime = _restart(request, get_runtime(request))
        payload = compute_overview(runtime.load_data().as_context(), currency=runtime.settings.currency)
        return _json(OverviewResponse.model_validate(payload))
    except Exception as exc:
        logger.exception("reload failed")
        return _error(exc)


@app.get("/meta/component-types")
def meta_component_types():
    return _json(MetaListResponse(values=list(COMPONENT_TYPES.values())))


@app.get("/meta/project-statuses")
def meta_project_statuses():
    return _json(MetaListResponse(values=list(PROJECT_STATUSES)))


@app.get("/settings/endpoint")
def get_endpoint(request: Request):
    try:
        endpoint = get_runtime(request).endpoint
        return _json(EndpointStatusResponse(url=endpoint.url, configured=endpoint.is_configured))
    except Exception as exc:
        logger.exception("get_endpoint failed")
        return _error(exc)


@app.put("/settings/endpoint")
def save_endpoint(body: EndpointSettingsModel, request: Request):
    try:
        runtime = get_runtime(request)
        runtime.save_endpoint(body.url)
        if runtime.stale:
            runtime = _restart(request, runtime)
        endpoint = runtime.endpoint
        return _json(EndpointStatusResponse(url=endpoint.url, configured=endpoint.is_configured))
    except Exception as exc:
        logger.exception("save_endpoint failed")
        return _error(exc)


@app.get("/export/{collection}")
def export_collection(collection: str, request: Request):
    if collection not in EXPORTABLE:
        return JSONResponse(status_code=404, content={"error": f"Unknown collection: {collection}", "type": "NotFound"})
    try:
        state = get_runtime(request).state
        export_df = records_frame(getattr(state, collection))
        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
        return Response(
            content=csv_bytes,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={collection}.csv"},
        )
    except Exception as exc:
        logger.exception("export failed")
        return _error(exc)
