"""Tests for the GeoJSON exporter handed to the renderer."""

import pytest

from bmamap.layers import Layer, LayerFeature
from bmamap.layers.exporters.geojson import export_geojson


@pytest.mark.unit
class TestGeoJSONExporter:
    def test_exports_renderable_features_only(self, csv_source):
        layer = Layer.healthy(csv_source, [
            LayerFeature("c1", "Point", [100.5, 13.7], {"name": "A"}),
            LayerFeature("c2", "Point", None, {"name": "B"}, renderable=False),
        ])
        data = export_geojson(layer)
        assert data["type"] == "FeatureCollection"
        assert data["name"] == "bma_cctv"
        assert len(data["features"]) == 1
        feature = data["features"][0]
        assert feature["id"] == "c1"
        assert feature["geometry"] == {"type": "Point", "coordinates": [100.5, 13.7]}
        assert feature["properties"] == {"name": "A"}

    def test_geometry_collection_round_trips(self, vector_source):
        geometry = {"type": "GeometryCollection", "geometries": []}
        layer = Layer.healthy(vector_source, [
            LayerFeature("g", "GeometryCollection", None, {}, geometry=geometry),
        ])
        assert export_geojson(layer)["features"][0]["geometry"] == geometry

    def test_degraded_layer_exports_empty(self, vector_source):
        assert export_geojson(Layer.failed(vector_source, "down"))["features"] == []
