"""Fetching and ingestion of registered map sources."""

from bmamap.ingest.fetcher import SourceFetcher
from bmamap.ingest.orchestrator import DECODERS, ingest, ingest_source
from bmamap.ingest.poller import LivePoller

__all__ = ["DECODERS", "LivePoller", "SourceFetcher", "ingest", "ingest_source"]
