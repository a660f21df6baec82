"""LayerManager — holds the current Layer of every registered source.

Layers are replaced wholesale. Refreshes of a single source are sequenced
with monotonically increasing tickets so that a slow, superseded fetch can
never overwrite the result of a newer one.
"""

from __future__ import annotations

import asyncio
import itertools

from loguru import logger

from bmamap.config import settings
from bmamap.layers.layer import Layer
from bmamap.layers.registry import SourceDescriptor, SourceKind, validate_registry


class LayerManager:
    """Registry of the current map layers, in registry order."""

    def __init__(self, registry) -> None:
        self._registry: tuple[SourceDescriptor, ...] = validate_registry(registry)
        self._layers: dict[str, Layer] = {
            d.source_id: Layer.healthy(d, ()) for d in self._registry
        }
        self._tickets = itertools.count(1)
        self._latest_ticket: dict[str, int] = {}

    @property
    def registry(self) -> tuple[SourceDescriptor, ...]:
        return self._registry

    def get_layer(self, layer_id: str) -> Layer | None:
        """Get a layer by ID, or None if the source is not registered."""
        return self._layers.get(layer_id)

    def list_layers(self) -> list[Layer]:
        """All current layers, in registry order."""
        return list(self._layers.values())

    def degraded_layers(self) -> list[Layer]:
        return [layer for layer in self._layers.values() if layer.degraded]

    def replace_all(self, layers: list[Layer]) -> None:
        """Install layers unconditionally.

        Any refresh still in flight for these sources is superseded.
        """
        for layer in layers:
            self._require_known(layer.layer_id)
        for layer in layers:
            self._latest_ticket[layer.layer_id] = next(self._tickets)
            self._layers[layer.layer_id] = layer

    def begin_refresh(self, layer_id: str) -> int:
        """Issue a ticket for a new fetch of one source.

        Raises:
            KeyError: If the layer_id is not registered.
        """
        self._require_known(layer_id)
        ticket = next(self._tickets)
        self._latest_ticket[layer_id] = ticket
        return ticket

    def commit(self, layer: Layer, ticket: int) -> bool:
        """Apply a refreshed layer if its ticket is still the latest one.

        Returns:
            True if applied, False if the result was stale and discarded.
        """
        layer_id = layer.layer_id
        self._require_known(layer_id)
        if self._latest_ticket.get(layer_id) != ticket:
            logger.debug(f"Discarding stale refresh of {layer_id} (ticket {ticket})")
            return False
        self._layers[layer_id] = layer
        return True

    async def refresh(self, fetcher, max_in_flight: int | None = None) -> list[Layer]:
        """Re-ingest every registered source and install the result.

        Tickets are taken before fetching, so a source whose refresh was
        started later (e.g. a live poll) keeps its newer layer.

        Returns:
            The layers that were applied.
        """
        from bmamap.ingest.orchestrator import ingest

        tickets = {d.source_id: self.begin_refresh(d.source_id) for d in self._registry}
        layers = await ingest(self._registry, fetcher=fetcher, max_in_flight=max_in_flight)
        return [layer for layer in layers if self.commit(layer, tickets[layer.layer_id])]

    async def retry_degraded(self, fetcher, max_in_flight: int | None = None) -> list[Layer]:
        """Re-ingest only degraded layers whose source kind has a decoder.

        Returns:
            The layers that were applied.
        """
        from bmamap.ingest.orchestrator import ingest_source

        targets = [
            layer.descriptor
            for layer in self.degraded_layers()
            if layer.descriptor.kind is not SourceKind.UNSUPPORTED
        ]
        if not targets:
            return []

        semaphore = asyncio.Semaphore(max_in_flight or settings.max_in_flight)

        async def _one(descriptor: SourceDescriptor) -> Layer | None:
            ticket = self.begin_refresh(descriptor.source_id)
            layer = await ingest_source(descriptor, fetcher, semaphore)
            return layer if self.commit(layer, ticket) else None

        results = await asyncio.gather(*(_one(d) for d in targets))
        applied = [layer for layer in results if layer is not None]
        logger.info(f"Retried {len(targets)} degraded layer(s), {sum(not l.degraded for l in applied)} recovered")
        return applied

    def _require_known(self, layer_id: str) -> None:
        if layer_id not in self._layers:
            raise KeyError(f"Layer not found: {layer_id}")
