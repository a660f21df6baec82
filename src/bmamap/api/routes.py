"""Map router — layer status, selection setters, refresh and render passes.

The router reads its collaborators from ``request.app.state``:
``layer_manager`` (LayerManager), ``selection`` (SelectionState),
``fetcher`` (SourceFetcher) and optionally ``poller`` (LivePoller).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from loguru import logger
from pydantic import BaseModel

from bmamap.config import settings
from bmamap.errors import InvalidSelection
from bmamap.layers.exporters.geojson import export_geojson
from bmamap.layers.registry import icon_url
from bmamap.selection import BASEMAPS, QUANTITIES
from bmamap.styling.resolver import render_pass

router = APIRouter(prefix="/api/map", tags=["map"])


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class LayerStatus(BaseModel):
    """Current state of one layer."""
    id: str
    name: str
    name_en: str
    kind: str
    feature_count: int
    renderable_count: int
    degraded: bool
    error: Optional[str] = None
    visible: bool
    created_at: str


class VisibilityRequest(BaseModel):
    visible: bool


class BasemapRequest(BaseModel):
    basemap_id: str


class QuantityRequest(BaseModel):
    quantity: str


class RefreshResponse(BaseModel):
    layers: int
    degraded: int


# ---------------------------------------------------------------------------
# Sources and layers
# ---------------------------------------------------------------------------

@router.get("/sources")
async def list_sources(request: Request):
    """Return the source registry, in order."""
    return [d.to_dict() for d in request.app.state.layer_manager.registry]


@router.get("/view")
async def initial_view(request: Request):
    """Initial camera, active basemap and the icon images the layers use."""
    selection = request.app.state.selection
    icons = sorted({d.icon for d in request.app.state.layer_manager.registry if d.icon})
    return {
        "center": [settings.map_center_lng, settings.map_center_lat],
        "zoom": settings.initial_zoom,
        "basemap": _basemap_payload(selection),
        "icons": {icon: icon_url(icon) for icon in icons},
    }


@router.get("/layers", response_model=list[LayerStatus])
async def list_layers(request: Request):
    """Return every layer's status.

    ``degraded`` distinguishes a failed source from one that is merely
    hidden (``visible=false``).
    """
    selection = request.app.state.selection
    return [
        LayerStatus(
            id=layer.layer_id,
            name=layer.name,
            name_en=layer.descriptor.name_en,
            kind=layer.descriptor.kind.value,
            feature_count=len(layer.features),
            renderable_count=sum(1 for f in layer.features if f.renderable),
            degraded=layer.degraded,
            error=layer.error,
            visible=selection.is_layer_visible(layer.layer_id, layer.visible),
            created_at=layer.created_at,
        )
        for layer in request.app.state.layer_manager.list_layers()
    ]


@router.get("/layers/{layer_id}/geojson")
async def get_layer_geojson(layer_id: str, request: Request):
    """Return a layer's renderable features as a GeoJSON FeatureCollection."""
    layer = request.app.state.layer_manager.get_layer(layer_id)
    if layer is None:
        raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")
    return export_geojson(layer)


@router.post("/layers/{layer_id}/visibility")
async def set_layer_visibility(layer_id: str, body: VisibilityRequest, request: Request):
    """Override a layer's visibility."""
    if request.app.state.layer_manager.get_layer(layer_id) is None:
        raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")
    try:
        request.app.state.selection.set_layer_visible(layer_id, body.visible)
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"id": layer_id, "visible": body.visible}


# ---------------------------------------------------------------------------
# Basemap and measured quantity
# ---------------------------------------------------------------------------

def _basemap_payload(selection) -> dict:
    active = selection.basemap
    return {
        "id": active.basemap_id,
        "name": active.name,
        "style_url": active.style_url,
        "available": [
            {"id": b.basemap_id, "name": b.name, "style_url": b.style_url}
            for b in BASEMAPS.values()
        ],
    }


@router.get("/basemap")
async def get_basemap(request: Request):
    return _basemap_payload(request.app.state.selection)


@router.post("/basemap")
async def set_basemap(body: BasemapRequest, request: Request):
    """Select the active basemap. Unknown ids are rejected with 400."""
    selection = request.app.state.selection
    try:
        selection.set_basemap(body.basemap_id)
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _basemap_payload(selection)


@router.get("/quantity")
async def get_quantity(request: Request):
    return {"quantity": request.app.state.selection.active_quantity, "available": list(QUANTITIES)}


@router.post("/quantity")
async def set_quantity(body: QuantityRequest, request: Request):
    """Select the measured quantity used to classify the air-quality layer."""
    selection = request.app.state.selection
    try:
        selection.set_active_quantity(body.quantity)
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"quantity": selection.active_quantity, "available": list(QUANTITIES)}


# ---------------------------------------------------------------------------
# Ingestion and rendering
# ---------------------------------------------------------------------------

@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    request: Request,
    degraded_only: bool = Query(False, description="Retry only degraded layers"),
):
    """Re-ingest all sources, or only the degraded ones."""
    manager = request.app.state.layer_manager
    fetcher = request.app.state.fetcher
    if degraded_only:
        await manager.retry_degraded(fetcher)
    else:
        await manager.refresh(fetcher)
    layers = manager.list_layers()
    degraded = sum(1 for layer in layers if layer.degraded)
    logger.info(f"Refresh ({'degraded only' if degraded_only else 'all'}): {degraded} degraded")
    return RefreshResponse(layers=len(layers), degraded=degraded)


@router.get("/render")
async def render(
    request: Request,
    zoom: float = Query(..., ge=0, le=24, description="Current map zoom level"),
):
    """Resolve style descriptors for every visible layer at ``zoom``."""
    passes = render_pass(
        request.app.state.layer_manager.list_layers(),
        zoom,
        request.app.state.selection,
    )
    return [
        {
            "layer_id": layer.layer_id,
            "styles": [s.to_dict() for s in styles],
        }
        for layer, styles in passes
    ]


@router.get("/poller")
async def poller_status(request: Request):
    poller = getattr(request.app.state, "poller", None)
    if poller is None:
        return {"running": False}
    return poller.stats
