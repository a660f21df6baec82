"""LivePoller — periodic re-ingestion of a polled live-API source.

Every poll takes a ticket from the LayerManager before fetching; when it
completes, its result is applied only if no newer poll has been issued in
the meantime.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from bmamap.config import settings
from bmamap.ingest.orchestrator import ingest_source
from bmamap.layers.manager import LayerManager
from bmamap.layers.registry import SourceDescriptor


class LivePoller:
    """Polls one source on a fixed interval until stopped.

    With ``delay_first`` the first poll waits one interval, for sources that
    were just ingested.
    """

    def __init__(
        self,
        descriptor: SourceDescriptor,
        manager: LayerManager,
        fetcher,
        interval: float | None = None,
        delay_first: bool = False,
    ) -> None:
        self._descriptor = descriptor
        self._manager = manager
        self._fetcher = fetcher
        self._interval = interval if interval is not None else settings.live_poll_interval
        self._delay_first = delay_first
        self._task: asyncio.Task | None = None
        self._running = False
        self._poll_count = 0
        self._discarded_count = 0
        self._last_error = ""

    @property
    def stats(self) -> dict:
        return {
            "source_id": self._descriptor.source_id,
            "running": self._running,
            "interval": self._interval,
            "poll_count": self._poll_count,
            "discarded_count": self._discarded_count,
            "last_error": self._last_error,
        }

    async def poll_once(self) -> bool:
        """Fetch and decode the source once.

        Returns:
            True if the result was applied, False if a newer poll superseded it.
        """
        ticket = self._manager.begin_refresh(self._descriptor.source_id)
        layer = await ingest_source(self._descriptor, self._fetcher)
        self._poll_count += 1
        self._last_error = layer.error or ""
        applied = self._manager.commit(layer, ticket)
        if not applied:
            self._discarded_count += 1
        return applied

    def start(self) -> None:
        """Start polling in the running event loop. No-op if already running."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"poll-{self._descriptor.source_id}"
        )
        logger.info(f"Polling {self._descriptor.source_id} every {self._interval:.0f}s")

    async def stop(self) -> None:
        """Stop polling, cancelling any in-flight poll."""
        self._running = False
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info(f"Stopped polling {self._descriptor.source_id}")

    async def _run(self) -> None:
        if self._delay_first:
            await asyncio.sleep(self._interval)
        while self._running:
            try:
                await self.poll_once()
            except Exception as e:
                self._last_error = str(e)
                logger.exception(f"Poll of {self._descriptor.source_id} failed: {e}")
            await asyncio.sleep(self._interval)
