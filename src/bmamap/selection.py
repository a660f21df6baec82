"""Selection state — the user-controlled toggles read on every render pass.

Single writer, many readers: setters take a lock and validate before
changing anything; render passes read an immutable snapshot.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from loguru import logger

from bmamap.config import settings
from bmamap.errors import InvalidSelection


@dataclass(frozen=True)
class Basemap:
    """A selectable background map style."""

    basemap_id: str
    name: str
    style_url: str


def _basemap_url(filename: str) -> str:
    return settings.basemap_base_url.rstrip("/") + "/" + filename


BASEMAPS: dict[str, Basemap] = {
    b.basemap_id: b
    for b in (
        Basemap("google_hybrid", "Google Hybrid", _basemap_url("ghyb.json")),
        Basemap("osm", "OpenStreetMap", _basemap_url("osm.json")),
        Basemap("esri_world_imagery", "ESRI WorldImagery", _basemap_url("esri.json")),
        Basemap("carto_light", "Carto Light", _basemap_url("cartoLight.json")),
        Basemap("carto_dark", "Carto Dark", _basemap_url("cartoDark.json")),
    )
}
DEFAULT_BASEMAP = "google_hybrid"

QUANTITIES: tuple[str, ...] = ("AQI", "PM25", "PM10", "O3", "CO", "NO2", "SO2")
DEFAULT_QUANTITY = "AQI"


@dataclass(frozen=True)
class SelectionSnapshot:
    """Consistent, read-only view of the selection for one render pass."""

    basemap_id: str
    active_quantity: str
    visibility: Mapping[str, bool] = field(default_factory=dict)

    def is_layer_visible(self, layer_id: str, default: bool) -> bool:
        """Effective visibility: the user override if any, else ``default``."""
        return self.visibility.get(layer_id, default)


class SelectionState:
    """Active basemap, active measured quantity and per-layer visibility."""

    def __init__(
        self,
        basemap_id: Optional[str] = None,
        quantity: Optional[str] = None,
        known_layers: Optional[Iterable[str]] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._known_layers = frozenset(known_layers) if known_layers is not None else None
        self._visibility: dict[str, bool] = {}

        basemap_id = basemap_id if basemap_id is not None else settings.default_basemap
        if basemap_id not in BASEMAPS:
            logger.warning(f"Unknown basemap {basemap_id!r}, using {DEFAULT_BASEMAP}")
            basemap_id = DEFAULT_BASEMAP
        self._basemap_id = basemap_id

        quantity = quantity if quantity is not None else settings.default_quantity
        if quantity not in QUANTITIES:
            logger.warning(f"Unknown quantity {quantity!r}, using {DEFAULT_QUANTITY}")
            quantity = DEFAULT_QUANTITY
        self._quantity = quantity

    # -- getters -----------------------------------------------------------

    @property
    def basemap_id(self) -> str:
        return self._basemap_id

    @property
    def basemap(self) -> Basemap:
        return BASEMAPS[self._basemap_id]

    @property
    def active_quantity(self) -> str:
        return self._quantity

    def layer_visible(self, layer_id: str) -> Optional[bool]:
        """The visibility override for a layer, or None if not overridden."""
        return self._visibility.get(layer_id)

    def is_layer_visible(self, layer_id: str, default: bool) -> bool:
        return self._visibility.get(layer_id, default)

    def snapshot(self) -> SelectionSnapshot:
        with self._lock:
            return SelectionSnapshot(
                basemap_id=self._basemap_id,
                active_quantity=self._quantity,
                visibility=MappingProxyType(dict(self._visibility)),
            )

    # -- setters -----------------------------------------------------------

    def set_layer_visible(self, layer_id: str, visible: bool) -> None:
        """Override a layer's visibility.

        Raises:
            InvalidSelection: If the layer id is not registered.
        """
        if self._known_layers is not None and layer_id not in self._known_layers:
            logger.warning(f"Rejected visibility change for unknown layer {layer_id!r}")
            raise InvalidSelection(f"Unknown layer: {layer_id}")
        with self._lock:
            self._visibility[layer_id] = bool(visible)

    def clear_layer_visible(self, layer_id: str) -> None:
        """Drop an override so the layer's default visibility applies again."""
        with self._lock:
            self._visibility.pop(layer_id, None)

    def set_basemap(self, basemap_id: str) -> None:
        """Select the active basemap.

        Raises:
            InvalidSelection: If the id is not a known basemap. The previous
                basemap stays active.
        """
        if basemap_id not in BASEMAPS:
            logger.warning(f"Rejected unknown basemap {basemap_id!r}")
            raise InvalidSelection(f"Unknown basemap: {basemap_id}")
        with self._lock:
            self._basemap_id = basemap_id

    def set_active_quantity(self, quantity: str) -> None:
        """Select the measured quantity used for classification.

        Raises:
            InvalidSelection: If the key is not a known quantity.
        """
        if quantity not in QUANTITIES:
            logger.warning(f"Rejected unknown quantity {quantity!r}")
            raise InvalidSelection(f"Unknown quantity: {quantity}")
        with self._lock:
            self._quantity = quantity
