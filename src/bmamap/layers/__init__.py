"""Map data layer system — source catalog, decoding and layer lifecycle.

Supports GeoJSON feature collections, CSV point tables and live JSON
station APIs. Decoders use only Python stdlib (json, csv).
"""

from bmamap.layers.layer import Layer, LayerFeature
from bmamap.layers.manager import LayerManager
from bmamap.layers.registry import DEFAULT_REGISTRY, SourceDescriptor, SourceKind

__all__ = [
    "DEFAULT_REGISTRY",
    "Layer",
    "LayerFeature",
    "LayerManager",
    "SourceDescriptor",
    "SourceKind",
]
