"""BMA Map — FastAPI application.

Wires the source registry, layer manager, selection state and live poller
together, and exposes them through the map router.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from bmamap.api.routes import router as map_router
from bmamap.config import settings
from bmamap.ingest.fetcher import SourceFetcher
from bmamap.ingest.poller import LivePoller
from bmamap.layers.manager import LayerManager
from bmamap.layers.registry import DEFAULT_REGISTRY
from bmamap.selection import SelectionState


def create_app(
    registry=DEFAULT_REGISTRY,
    *,
    fetcher: Optional[SourceFetcher] = None,
    ingest_on_startup: bool = True,
    poll: Optional[bool] = None,
) -> FastAPI:
    """Build the application.

    Args:
        registry: Source catalog to serve.
        fetcher: Fetcher to use; a SourceFetcher is created from settings
            when omitted.
        ingest_on_startup: Run a full ingestion pass in the lifespan.
        poll: Start the live poller (default from settings).
    """
    manager = LayerManager(registry)
    selection = SelectionState(known_layers=[d.source_id for d in manager.registry])
    fetcher = fetcher if fetcher is not None else SourceFetcher()
    poll = settings.live_poll_enabled if poll is None else poll

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.app_name} starting with {len(manager.registry)} sources")

        if ingest_on_startup:
            await manager.refresh(fetcher)

        pollers: list[LivePoller] = []
        if poll:
            for descriptor in manager.registry:
                if descriptor.polled:
                    poller = LivePoller(
                        descriptor, manager, fetcher, delay_first=ingest_on_startup,
                    )
                    poller.start()
                    pollers.append(poller)
        app.state.poller = pollers[0] if pollers else None

        yield

        for poller in pollers:
            await poller.stop()
        await fetcher.aclose()
        logger.info(f"{settings.app_name} shut down")

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        description="Bangkok map layers: ingestion, selection and styling",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.layer_manager = manager
    app.state.selection = selection
    app.state.fetcher = fetcher
    app.state.poller = None
    app.include_router(map_router)

    @app.get("/health")
    async def health():
        layers = manager.list_layers()
        return {
            "status": "ok",
            "layers": len(layers),
            "degraded": [layer.layer_id for layer in layers if layer.degraded],
        }

    return app
