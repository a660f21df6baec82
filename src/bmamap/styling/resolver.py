"""Style resolver — Layer + zoom + selection to StyleDescriptors.

Each source resolves through exactly one rule, chosen by precedence:
classified > icon > extrusion > line. Several sources satisfy more than
one rule's preconditions (Air4Thai is classified and has an icon), so the
order matters.
"""

from __future__ import annotations

import math
from enum import Enum

from bmamap.layers.layer import Layer
from bmamap.layers.registry import SourceDescriptor
from bmamap.selection import SelectionSnapshot, SelectionState
from bmamap.styling.classifier import classify
from bmamap.styling.style import StyleDescriptor, StyleKind

ICON_SIZE = 0.5
EXTRUSION_COLOR = "#aaaaaa"
EXTRUSION_OPACITY = 0.8
EXTRUSION_TYPES = frozenset({"Polygon", "MultiPolygon"})

# source id -> (color, width)
LINE_STYLES: dict[str, tuple[str, float]] = {
    "district": ("#6b7280", 1.5),
    "road": ("#f59e0b", 1.0),
    "bike_way": ("#16a34a", 2.0),
    "bma_zone": ("#7c3aed", 2.0),
}
DEFAULT_LINE_STYLE = ("#0000ff", 1.0)


class StyleRule(str, Enum):
    CLASSIFIED = "classified"
    ICON = "icon"
    EXTRUSION = "extrusion"
    LINE = "line"


def rule_for(descriptor: SourceDescriptor) -> StyleRule:
    """Pick the single styling rule for a source, in precedence order."""
    if descriptor.classified:
        return StyleRule.CLASSIFIED
    if descriptor.icon:
        return StyleRule.ICON
    if descriptor.volumetric:
        return StyleRule.EXTRUSION
    return StyleRule.LINE


def resolve(layer: Layer, zoom: float, selection) -> list[StyleDescriptor]:
    """Resolve the descriptors for one layer at ``zoom``.

    Args:
        layer: The layer to style.
        zoom: Current map zoom level.
        selection: SelectionState or SelectionSnapshot.

    Returns:
        Descriptors to draw; empty when the layer is hidden, out of its
        zoom range, or has nothing renderable.
    """
    descriptor = layer.descriptor
    if not selection.is_layer_visible(layer.layer_id, layer.visible):
        return []
    if not descriptor.in_zoom_range(zoom):
        return []
    return _BUILDERS[rule_for(descriptor)](layer, selection)


def render_pass(layers, zoom: float, selection) -> list[tuple[Layer, list[StyleDescriptor]]]:
    """Resolve every layer against one consistent selection snapshot.

    Layers that produce no descriptors are omitted.
    """
    snapshot = selection.snapshot() if isinstance(selection, SelectionState) else selection
    result = []
    for layer in layers:
        styles = resolve(layer, zoom, snapshot)
        if styles:
            result.append((layer, styles))
    return result


def _classified(layer: Layer, selection: SelectionSnapshot) -> list[StyleDescriptor]:
    d = layer.descriptor
    styles = []
    for feature in layer.features:
        if not feature.renderable:
            continue
        result = classify(feature, selection.active_quantity, d.payload_property)
        if result is None:
            continue
        styles.append(StyleDescriptor(
            kind=StyleKind.POINT_LABEL,
            layer_id=layer.layer_id,
            feature_id=feature.feature_id,
            color=result.color,
            size=ICON_SIZE,
            label=result.display_text,
            icon=d.icon,
            min_zoom=d.min_zoom,
            max_zoom=d.max_zoom,
        ))
    return styles


def _icon(layer: Layer, selection: SelectionSnapshot) -> list[StyleDescriptor]:
    d = layer.descriptor
    return [
        StyleDescriptor(
            kind=StyleKind.POINT_ICON,
            layer_id=layer.layer_id,
            feature_id=feature.feature_id,
            size=ICON_SIZE,
            icon=d.icon,
            min_zoom=d.min_zoom,
            max_zoom=d.max_zoom,
        )
        for feature in layer.features
        if feature.renderable
    ]


def _extrusion(layer: Layer, selection: SelectionSnapshot) -> list[StyleDescriptor]:
    d = layer.descriptor
    return [
        StyleDescriptor(
            kind=StyleKind.FILL_EXTRUSION,
            layer_id=layer.layer_id,
            feature_id=feature.feature_id,
            color=EXTRUSION_COLOR,
            opacity=EXTRUSION_OPACITY,
            height=_height(feature.properties.get(d.height_property)),
            min_zoom=d.min_zoom,
            max_zoom=d.max_zoom,
        )
        for feature in layer.features
        if feature.renderable and feature.geometry_type in EXTRUSION_TYPES
    ]


def _line(layer: Layer, selection: SelectionSnapshot) -> list[StyleDescriptor]:
    d = layer.descriptor
    if not any(f.renderable for f in layer.features):
        return []
    color, width = LINE_STYLES.get(layer.layer_id, DEFAULT_LINE_STYLE)
    return [StyleDescriptor(
        kind=StyleKind.LINE,
        layer_id=layer.layer_id,
        color=color,
        width=width,
        min_zoom=d.min_zoom,
        max_zoom=d.max_zoom,
    )]


def _height(value) -> float:
    """Extrusion height in meters; missing or unparseable heights are 0."""
    try:
        height = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(height) or height < 0:
        return 0.0
    return height


_BUILDERS = {
    StyleRule.CLASSIFIED: _classified,
    StyleRule.ICON: _icon,
    StyleRule.EXTRUSION: _extrusion,
    StyleRule.LINE: _line,
}
