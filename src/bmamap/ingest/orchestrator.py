"""Ingestion orchestrator — fetch and decode every source concurrently.

Each source is an independent unit of work. Failures are caught at the
per-source boundary and become degraded layers, so ``ingest`` always
returns exactly one Layer per registered source, in registry order.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from bmamap.config import settings
from bmamap.errors import IngestError
from bmamap.ingest.fetcher import SourceFetcher
from bmamap.layers.layer import Layer
from bmamap.layers.parsers import parse_csv, parse_geojson, parse_live_api
from bmamap.layers.registry import DEFAULT_REGISTRY, SourceDescriptor, SourceKind, validate_registry

DECODERS = {
    SourceKind.VECTOR: parse_geojson,
    SourceKind.TABULAR: parse_csv,
    SourceKind.LIVE_API: parse_live_api,
}


async def ingest_source(
    descriptor: SourceDescriptor,
    fetcher,
    semaphore: asyncio.Semaphore | None = None,
) -> Layer:
    """Fetch and decode one source. Never raises for fetch or decode errors.

    Args:
        descriptor: Source to ingest.
        fetcher: Object with ``async fetch(location, source_id) -> bytes``.
        semaphore: Optional cap on concurrent fetches.
    """
    decoder = DECODERS.get(descriptor.kind)
    if decoder is None:
        return Layer.failed(descriptor, f"No decoder for source kind '{descriptor.kind.value}'")

    try:
        if semaphore is None:
            content = await fetcher.fetch(descriptor.location, descriptor.source_id)
        else:
            async with semaphore:
                content = await fetcher.fetch(descriptor.location, descriptor.source_id)
        features = decoder(content, descriptor)
    except IngestError as e:
        logger.warning(f"Layer {descriptor.source_id} degraded: {e}")
        return Layer.failed(descriptor, str(e))
    except Exception as e:
        logger.exception(f"Layer {descriptor.source_id} degraded by unexpected error")
        return Layer.failed(descriptor, f"{type(e).__name__}: {e}")

    layer = Layer.healthy(descriptor, features)
    skipped = sum(1 for f in layer.features if not f.renderable)
    logger.info(
        f"Layer {descriptor.source_id}: {len(layer.features)} features"
        + (f" ({skipped} non-renderable)" if skipped else "")
    )
    return layer


async def ingest(
    registry=DEFAULT_REGISTRY,
    *,
    fetcher=None,
    max_in_flight: int | None = None,
) -> list[Layer]:
    """Ingest every registered source.

    Args:
        registry: Ordered SourceDescriptors.
        fetcher: Fetcher to use; a SourceFetcher is created (and closed)
            when omitted.
        max_in_flight: Maximum concurrent fetches (default from settings).

    Returns:
        One Layer per source, in registry order. Failed sources are
        returned as degraded layers.
    """
    registry = validate_registry(registry)
    limit = max_in_flight if max_in_flight is not None else settings.max_in_flight
    if limit < 1:
        raise ValueError(f"max_in_flight must be >= 1, got {limit}")
    semaphore = asyncio.Semaphore(limit)

    if fetcher is None:
        async with SourceFetcher() as owned:
            return await _ingest_all(registry, owned, semaphore)
    return await _ingest_all(registry, fetcher, semaphore)


async def _ingest_all(registry, fetcher, semaphore) -> list[Layer]:
    layers = await asyncio.gather(*(ingest_source(d, fetcher, semaphore) for d in registry))
    degraded = sum(1 for layer in layers if layer.degraded)
    logger.info(f"Ingested {len(layers)} layers ({degraded} degraded)")
    return list(layers)
