"""StyleDescriptor — what the renderer should draw, and how."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum


class StyleKind(str, Enum):
    POINT_ICON = "point-icon"
    POINT_LABEL = "point-label"
    LINE = "line"
    FILL_EXTRUSION = "fill-extrusion"


@dataclass(frozen=True)
class StyleDescriptor:
    """A derived rendering instruction. Never persisted.

    Attributes:
        kind: Primitive to draw.
        layer_id: Layer the descriptor belongs to.
        feature_id: Target feature, or None when it applies to the whole layer.
        color: Hex color (line color, label halo, extrusion fill).
        size: Icon scale for point-icon/point-label, ignored otherwise.
        width: Line width in pixels.
        opacity: 0.0 to 1.0.
        label: Label text for point-label.
        icon: Icon image id.
        height: Extrusion height in meters.
        min_zoom: Lowest zoom at which the descriptor applies.
        max_zoom: Highest zoom at which the descriptor applies.
    """

    kind: StyleKind
    layer_id: str
    feature_id: str | None = None
    color: str | None = None
    size: float | None = None
    width: float | None = None
    opacity: float = 1.0
    label: str | None = None
    icon: str | None = None
    height: float | None = None
    min_zoom: int = 0
    max_zoom: int = 22

    def to_dict(self) -> dict:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data
