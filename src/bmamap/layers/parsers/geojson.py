"""Vector decoder — GeoJSON (RFC 7946) FeatureCollection to features.

Identity transform: geometry and properties pass through unchanged.
Coordinates are already in [lng, lat] order.
"""

from __future__ import annotations

from bmamap.errors import MalformedSource
from bmamap.layers.layer import GEOMETRY_TYPES, LayerFeature
from bmamap.layers.parsers._common import load_json
from bmamap.layers.registry import SourceDescriptor


def parse_geojson(content: str | bytes, descriptor: SourceDescriptor) -> list[LayerFeature]:
    """Parse a GeoJSON FeatureCollection into features.

    Args:
        content: Raw GeoJSON content.
        descriptor: The source being decoded.

    Returns:
        One LayerFeature per collection entry, in order. Entries with a
        null geometry are kept as non-renderable features.

    Raises:
        MalformedSource: If the document is not a FeatureCollection, or an
            entry is not a Feature with a recognized geometry type.
    """
    source_id = descriptor.source_id
    data = load_json(content, source_id)

    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise MalformedSource("Top-level object is not a FeatureCollection", source_id)

    raw_features = data.get("features")
    if not isinstance(raw_features, list):
        raise MalformedSource("FeatureCollection has no features list", source_id)

    return [_parse_feature(raw, idx, source_id) for idx, raw in enumerate(raw_features)]


def _parse_feature(raw, idx: int, source_id: str) -> LayerFeature:
    """Parse a single GeoJSON Feature dict into a LayerFeature."""
    if not isinstance(raw, dict) or raw.get("type") != "Feature":
        raise MalformedSource(f"Entry {idx} is not a Feature", source_id)

    properties = raw.get("properties") or {}
    if not isinstance(properties, dict):
        raise MalformedSource(f"Entry {idx} has non-object properties", source_id)

    feature_id = raw.get("id", f"{source_id}-{idx}")
    if not isinstance(feature_id, str):
        feature_id = str(feature_id)

    geometry = raw.get("geometry")
    if geometry is None:
        # Unlocated feature: legal GeoJSON, nothing to draw
        return LayerFeature(feature_id, None, None, properties, renderable=False)

    if not isinstance(geometry, dict):
        raise MalformedSource(f"Entry {idx} has a non-object geometry", source_id)

    geom_type = geometry.get("type")
    if geom_type not in GEOMETRY_TYPES:
        raise MalformedSource(f"Entry {idx} has unrecognized geometry type {geom_type!r}", source_id)

    if geom_type == "GeometryCollection":
        return LayerFeature(feature_id, geom_type, None, properties, geometry=geometry)

    coordinates = geometry.get("coordinates")
    if not isinstance(coordinates, list):
        raise MalformedSource(f"Entry {idx} geometry has no coordinates", source_id)

    return LayerFeature(feature_id, geom_type, coordinates, properties)
