"""Tests for the map router — layer status, selection endpoints, render, refresh."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from bmamap.config import settings
from bmamap.layers.registry import AIR4THAI_URL, SourceDescriptor, SourceKind
from bmamap.main import create_app


@pytest.fixture
def registry(vector_source, csv_source, live_source):
    arcgis = SourceDescriptor("arcgis", SourceKind.UNSUPPORTED, "", "ArcGIS", default_visible=False)
    return [vector_source, csv_source, live_source, arcgis]


@pytest.fixture
def fetcher(fetcher_factory, feature_collection, station):
    return fetcher_factory({
        "bma_road.geojson": feature_collection,
        "bma_cctv.csv": "name,lng,lat\nA,100.5,13.7\nB,bad,13.8\n",
        AIR4THAI_URL: {"stations": [station("02t", aqi_code="3", aqi="77")]},
    })


@pytest.fixture
def client(registry, fetcher):
    app = create_app(registry, fetcher=fetcher, poll=False)
    with TestClient(app) as c:
        yield c


@pytest.mark.unit
class TestLayers:
    def test_sources_in_registry_order(self, client):
        resp = client.get("/api/map/sources")
        assert resp.status_code == 200
        assert [s["id"] for s in resp.json()] == ["road", "bma_cctv", "air4thai", "arcgis"]

    def test_sources_carry_icon_urls(self, client):
        sources = {s["id"]: s for s in client.get("/api/map/sources").json()}
        assert sources["bma_cctv"]["icon_url"] == settings.icon_base_url.rstrip("/") + "/cctv.png"
        assert sources["road"]["icon_url"] is None

    def test_initial_view(self, client):
        view = client.get("/api/map/view").json()
        assert view["center"] == [settings.map_center_lng, settings.map_center_lat]
        assert view["zoom"] == settings.initial_zoom
        assert view["basemap"]["id"] == "google_hybrid"
        assert set(view["icons"]) == {"air", "cctv"}
        assert view["icons"]["air"].endswith("/air.png")

    def test_layer_status_after_startup_ingest(self, client):
        data = {l["id"]: l for l in client.get("/api/map/layers").json()}
        assert data["road"]["feature_count"] == 3
        assert data["bma_cctv"]["feature_count"] == 2
        assert data["bma_cctv"]["renderable_count"] == 1
        assert data["air4thai"]["degraded"] is False
        assert data["arcgis"]["degraded"] is True
        assert data["arcgis"]["visible"] is False

    def test_layer_geojson(self, client):
        resp = client.get("/api/map/layers/bma_cctv/geojson")
        assert resp.status_code == 200
        assert len(resp.json()["features"]) == 1

    def test_unknown_layer_geojson(self, client):
        assert client.get("/api/map/layers/nope/geojson").status_code == 404

    def test_toggle_visibility(self, client):
        resp = client.post("/api/map/layers/road/visibility", json={"visible": False})
        assert resp.status_code == 200
        status = {l["id"]: l for l in client.get("/api/map/layers").json()}
        assert status["road"]["visible"] is False
        assert status["road"]["degraded"] is False

    def test_toggle_unknown_layer(self, client):
        resp = client.post("/api/map/layers/nope/visibility", json={"visible": True})
        assert resp.status_code == 404

    def test_health_lists_degraded(self, client):
        assert client.get("/health").json()["degraded"] == ["arcgis"]


@pytest.mark.unit
class TestSelectionEndpoints:
    def test_get_basemap(self, client):
        data = client.get("/api/map/basemap").json()
        assert data["id"] == "google_hybrid"
        assert len(data["available"]) == 5

    def test_set_basemap(self, client):
        resp = client.post("/api/map/basemap", json={"basemap_id": "carto_light"})
        assert resp.status_code == 200
        assert resp.json()["id"] == "carto_light"

    def test_invalid_basemap_rejected(self, client):
        resp = client.post("/api/map/basemap", json={"basemap_id": "mapquest"})
        assert resp.status_code == 400
        assert client.get("/api/map/basemap").json()["id"] == "google_hybrid"

    def test_set_quantity(self, client):
        resp = client.post("/api/map/quantity", json={"quantity": "PM25"})
        assert resp.json()["quantity"] == "PM25"

    def test_invalid_quantity_rejected(self, client):
        assert client.post("/api/map/quantity", json={"quantity": "XYZ"}).status_code == 400
        assert client.get("/api/map/quantity").json()["quantity"] == "AQI"


@pytest.mark.unit
class TestRenderAndRefresh:
    def test_render_pass(self, client):
        resp = client.get("/api/map/render", params={"zoom": 12})
        assert resp.status_code == 200
        by_layer = {entry["layer_id"]: entry["styles"] for entry in resp.json()}
        assert set(by_layer) == {"road", "bma_cctv", "air4thai"}
        assert by_layer["road"][0]["kind"] == "line"
        assert [s["feature_id"] for s in by_layer["bma_cctv"]] == ["bma_cctv-0"]
        label = by_layer["air4thai"][0]
        assert label["kind"] == "point-label"
        assert label["label"] == "77"

    def test_render_requires_zoom(self, client):
        assert client.get("/api/map/render").status_code == 422

    def test_refresh_degraded_only(self, client, fetcher):
        fetcher.calls.clear()
        resp = client.post("/api/map/refresh", params={"degraded_only": "true"})
        assert resp.status_code == 200
        assert resp.json() == {"layers": 4, "degraded": 1}
        assert fetcher.calls == []

    def test_full_refresh(self, client, fetcher):
        fetcher.calls.clear()
        resp = client.post("/api/map/refresh")
        assert resp.json()["layers"] == 4
        assert len(fetcher.calls) == 3

    def test_poller_status_when_disabled(self, client):
        assert client.get("/api/map/poller").json() == {"running": False}

    def test_fetcher_closed_on_shutdown(self, registry, fetcher):
        with TestClient(create_app(registry, fetcher=fetcher, poll=False)):
            pass
        assert fetcher.closed is True
