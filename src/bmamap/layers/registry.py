"""Source registry — the static, ordered catalog of map data sources.

The catalog is data, not logic: adding a source means adding a
SourceDescriptor here (or passing a custom registry to ``ingest``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from bmamap.config import settings

AIR4THAI_URL = "http://air4thai.com/forweb/getAQI_JSON.php"

MIN_ZOOM = 0
MAX_ZOOM = 22


def icon_url(icon: str) -> str:
    """Image URL for an icon id (``school`` -> ``<icon_base_url>/school.png``)."""
    return settings.icon_base_url.rstrip("/") + "/" + icon + ".png"


class SourceKind(str, Enum):
    """Which decoder turns a source's bytes into features."""

    VECTOR = "vector"
    TABULAR = "tabular"
    LIVE_API = "live-api"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class SourceDescriptor:
    """One catalog entry.

    Attributes:
        source_id: Unique, stable identifier.
        kind: Decoder kind.
        location: Absolute URL, or a path relative to the data base URL.
        name: Human-readable (localized) display name.
        name_en: English display name.
        default_visible: Visibility before any user override.
        icon: Icon image id for point-icon styling, or None.
        min_zoom: Lowest zoom level at which the layer renders.
        max_zoom: Highest zoom level at which the layer renders.
        volumetric: Render polygons as 3-D extrusions.
        height_property: Feature property holding the extrusion height.
        classified: Features carry a per-quantity measured payload.
        payload_property: Feature property holding that payload.
        lng_field: Longitude column (tabular) or field (live-API).
        lat_field: Latitude column (tabular) or field (live-API).
        list_field: Live-API document field holding the entry list.
        id_field: Entry field used as feature id, if present.
        polled: Re-ingested periodically by the live poller.
    """

    source_id: str
    kind: SourceKind
    location: str
    name: str
    name_en: str = ""
    default_visible: bool = True
    icon: str | None = None
    min_zoom: int = MIN_ZOOM
    max_zoom: int = MAX_ZOOM
    volumetric: bool = False
    height_property: str = "height"
    classified: bool = False
    payload_property: str = "AQILast"
    lng_field: str = "lng"
    lat_field: str = "lat"
    list_field: str = "stations"
    id_field: str | None = None
    polled: bool = False

    def __post_init__(self) -> None:
        if not self.source_id:
            raise ValueError("source_id must not be empty")
        if self.min_zoom > self.max_zoom:
            raise ValueError(
                f"{self.source_id}: min_zoom {self.min_zoom} > max_zoom {self.max_zoom}"
            )

    def in_zoom_range(self, zoom: float) -> bool:
        return self.min_zoom <= zoom <= self.max_zoom

    def to_dict(self) -> dict:
        return {
            "id": self.source_id,
            "kind": self.kind.value,
            "location": self.location,
            "name": self.name,
            "name_en": self.name_en,
            "default_visible": self.default_visible,
            "icon": self.icon,
            "icon_url": icon_url(self.icon) if self.icon else None,
            "min_zoom": self.min_zoom,
            "max_zoom": self.max_zoom,
            "volumetric": self.volumetric,
            "classified": self.classified,
            "polled": self.polled,
        }


DEFAULT_REGISTRY: tuple[SourceDescriptor, ...] = (
    SourceDescriptor("district", SourceKind.VECTOR, "district.geojson", "เขต", "district"),
    SourceDescriptor("road", SourceKind.VECTOR, "bma_road.geojson", "ถนน", "road"),
    SourceDescriptor("bike_way", SourceKind.VECTOR, "bike_way.geojson", "ทางจักรยาน", "bike_way"),
    SourceDescriptor("bma_zone", SourceKind.VECTOR, "bma_zone.geojson", "Zone", "bma_zone"),
    SourceDescriptor(
        "bma_school", SourceKind.VECTOR, "bma_school.geojson", "โรงเรียน", "bma_school",
        icon="school",
    ),
    SourceDescriptor(
        "air_pollution", SourceKind.VECTOR, "air_pollution.geojson", "สถานีตรวจวัด", "air_pollution",
        icon="station",
    ),
    SourceDescriptor(
        "bma_cctv", SourceKind.TABULAR, "bma_cctv.csv", "กล้อง CCTV", "bma_cctv",
        icon="cctv", min_zoom=11,
    ),
    SourceDescriptor(
        "bma_building", SourceKind.VECTOR, "bma_building.geojson", "อาคาร", "bma_building",
        volumetric=True, min_zoom=13,
    ),
    SourceDescriptor(
        "air4thai", SourceKind.LIVE_API, AIR4THAI_URL, "Air4Thai", "air4thai",
        icon="air", classified=True, lng_field="Long", lat_field="Lat",
        id_field="stationID", polled=True,
    ),
    SourceDescriptor(
        "bma_basemap_arcgis", SourceKind.UNSUPPORTED, "", "BMAGI Basemap 2564", "bma_basemap_arcgis",
        default_visible=False,
    ),
)


def validate_registry(registry) -> tuple[SourceDescriptor, ...]:
    """Return the registry as a tuple, rejecting duplicate source ids."""
    registry = tuple(registry)
    seen: set[str] = set()
    for descriptor in registry:
        if descriptor.source_id in seen:
            raise ValueError(f"Duplicate source id: {descriptor.source_id}")
        seen.add(descriptor.source_id)
    return registry


def get_source(source_id: str, registry=DEFAULT_REGISTRY) -> SourceDescriptor | None:
    for descriptor in registry:
        if descriptor.source_id == source_id:
            return descriptor
    return None
