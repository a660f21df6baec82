"""Layer and LayerFeature dataclasses for the map data layer system.

All coordinates are stored in GeoJSON convention: [lng, lat] or [lng, lat, alt].
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from bmamap.layers.registry import SourceDescriptor

# Geometry types accepted from vector sources (RFC 7946 section 3.1)
GEOMETRY_TYPES = frozenset({
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
})


@dataclass(frozen=True)
class LayerFeature:
    """A single decoded feature within a layer.

    Attributes:
        feature_id: Identifier, unique within its layer.
        geometry_type: A GeoJSON geometry type, or None for an unlocated feature.
        coordinates: GeoJSON-style coordinate arrays.
            Point: [lng, lat]
            Other types: passed through unchanged from the source.
            None when the source coordinates could not be parsed.
        properties: Arbitrary key-value metadata.
        renderable: False when the geometry is missing or its coordinates
            are invalid. Such features are kept but never styled.
        geometry: The raw geometry object for types that carry no
            ``coordinates`` member (GeometryCollection).
    """

    feature_id: str
    geometry_type: str | None
    coordinates: list | None
    properties: dict
    renderable: bool = True
    geometry: dict | None = None


@dataclass
class Layer:
    """The decoded features of one source plus its presentation state.

    Attributes:
        descriptor: The SourceDescriptor this layer was ingested from.
        features: Decoded features in decode order. Never partially updated;
            re-ingestion replaces the whole Layer.
        visible: Layer-level visibility, seeded from the descriptor default.
        degraded: True when fetching or decoding failed.
        error: Failure message for a degraded layer.
        created_at: ISO8601 timestamp of the ingestion pass.
    """

    descriptor: SourceDescriptor
    features: tuple[LayerFeature, ...] = ()
    visible: bool = True
    degraded: bool = False
    error: str | None = None
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def layer_id(self) -> str:
        return self.descriptor.source_id

    @property
    def name(self) -> str:
        return self.descriptor.name

    @classmethod
    def healthy(cls, descriptor: SourceDescriptor, features) -> "Layer":
        return cls(
            descriptor=descriptor,
            features=tuple(features),
            visible=descriptor.default_visible,
        )

    @classmethod
    def failed(cls, descriptor: SourceDescriptor, error: str) -> "Layer":
        return cls(
            descriptor=descriptor,
            features=(),
            visible=descriptor.default_visible,
            degraded=True,
            error=error,
        )
