"""Export Layer to GeoJSON dict (RFC 7946 compliant).

This is the shape handed to the renderer. GeoJSON coordinates are
[lng, lat] (already the internal storage convention).
"""

from __future__ import annotations

from bmamap.layers.layer import Layer, LayerFeature


def export_geojson(layer: Layer) -> dict:
    """Export a Layer to a GeoJSON FeatureCollection dict.

    Non-renderable features are omitted.
    """
    return {
        "type": "FeatureCollection",
        "name": layer.layer_id,
        "features": [_feature_to_geojson(f) for f in layer.features if f.renderable],
    }


def _feature_to_geojson(feature: LayerFeature) -> dict:
    """Convert a LayerFeature to a GeoJSON Feature dict."""
    if feature.geometry is not None:
        geometry = feature.geometry
    else:
        geometry = {
            "type": feature.geometry_type,
            "coordinates": feature.coordinates,
        }
    return {
        "type": "Feature",
        "id": feature.feature_id,
        "geometry": geometry,
        "properties": dict(feature.properties),
    }
