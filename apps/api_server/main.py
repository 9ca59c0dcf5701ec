"""FastAPI service exposing tolerance clustering over HTTP."""

from __future__ import annotations

import io
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from .schemas.models import ClusterModel, ClusterRequest, ClusterResponse, ToleranceModel
from grezzi.errors import InvalidTolerance
from grezzi.pipeline import cluster_all
from grezzi.sink import build_summary, render_clusters
from grezzi.spatial import ToleranceRange
from grezzi.tools.config_loader import RunConfig, get_config

app = FastAPI(title="grezzi clustering service", version="0.3.0")


@app.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "ok"}


def _load_config(name: Optional[str]) -> RunConfig:
    try:
        return get_config(name)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _resolve_tolerance(request: ClusterRequest) -> ToleranceRange:
    if request.tolerance is not None:
        return request.tolerance.to_range()
    return _load_config(request.profile).tolerance


def _cluster(request: ClusterRequest) -> tuple:
    tolerance = _resolve_tolerance(request)
    groups = {
        identifier: [unit.to_unit() for unit in units]
        for identifier, units in request.groups.items()
    }
    try:
        clusters = cluster_all(groups, tolerance, max_workers=request.max_workers)
    except InvalidTolerance as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return tolerance, clusters


@app.post("/cluster")
def cluster_action(request: ClusterRequest) -> ClusterResponse:
    tolerance, clusters = _cluster(request)
    payload: Dict[str, List[ClusterModel]] = {
        identifier: [ClusterModel.from_cluster(c) for c in clusters[identifier]]
        for identifier in sorted(clusters)
    }
    return ClusterResponse(
        tolerance=ToleranceModel(min=tolerance.min, max=tolerance.max),
        clusters=payload,
        summary=build_summary(clusters),
    )


@app.post("/render")
def render_action(request: ClusterRequest) -> Response:
    _tolerance, clusters = _cluster(request)
    image = render_clusters(clusters)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return Response(content=buffer.getvalue(), media_type="image/png")
