"""Tests for ingest() — one layer per source, failure isolation, bounded concurrency."""

import asyncio
import json

import pytest

from bmamap.errors import FetchFailure
from bmamap.ingest.orchestrator import ingest, ingest_source
from bmamap.layers.registry import SourceDescriptor, SourceKind

EMPTY_COLLECTION = b'{"type": "FeatureCollection", "features": []}'


@pytest.mark.unit
class TestIngest:
    def test_one_layer_per_source_in_registry_order(self, vector_source, csv_source, live_source, fetcher_factory):
        """Every source yields a layer even when most fetches fail."""
        fetcher = fetcher_factory({
            "bma_cctv.csv": "name,lng,lat\nA,100.5,13.7\n",
            live_source.location: FetchFailure("connection refused"),
        })
        registry = [vector_source, csv_source, live_source]
        layers = asyncio.run(ingest(registry, fetcher=fetcher))
        assert [l.layer_id for l in layers] == ["road", "bma_cctv", "air4thai"]
        assert [l.degraded for l in layers] == [True, False, True]
        assert "connection refused" in layers[2].error
        assert layers[0].features == ()

    def test_empty_station_list_is_healthy(self, live_source, fetcher_factory):
        fetcher = fetcher_factory({live_source.location: {"stations": []}})
        (layer,) = asyncio.run(ingest([live_source], fetcher=fetcher))
        assert layer.features == ()
        assert layer.degraded is False

    def test_malformed_source_degrades_only_itself(self, vector_source, csv_source, fetcher_factory):
        fetcher = fetcher_factory({
            "bma_road.geojson": {"type": "Topology"},
            "bma_cctv.csv": "name,lng,lat\nA,100.5,13.7\nB,bad,13.8\n",
        })
        road, cctv = asyncio.run(ingest([vector_source, csv_source], fetcher=fetcher))
        assert road.degraded is True
        assert "FeatureCollection" in road.error
        assert cctv.degraded is False
        assert [f.renderable for f in cctv.features] == [True, False]

    def test_unsupported_source_not_fetched(self, fetcher_factory):
        arcgis = SourceDescriptor("arcgis", SourceKind.UNSUPPORTED, "", "ArcGIS", default_visible=False)
        fetcher = fetcher_factory()
        (layer,) = asyncio.run(ingest([arcgis], fetcher=fetcher))
        assert layer.degraded is True
        assert "unsupported" in layer.error
        assert fetcher.calls == []

    def test_unexpected_decoder_error_is_isolated(self, vector_source, csv_source, fetcher_factory):
        class Exploding:
            async def fetch(self, location, source_id=""):
                if location == "bma_road.geojson":
                    raise RuntimeError("kaboom")
                return b"name,lng,lat\nA,1,2\n"

        road, cctv = asyncio.run(ingest([vector_source, csv_source], fetcher=Exploding()))
        assert road.degraded is True
        assert "kaboom" in road.error
        assert cctv.degraded is False

    def test_concurrency_is_bounded(self):
        class CountingFetcher:
            def __init__(self):
                self.in_flight = 0
                self.peak = 0

            async def fetch(self, location, source_id=""):
                self.in_flight += 1
                self.peak = max(self.peak, self.in_flight)
                await asyncio.sleep(0.01)
                self.in_flight -= 1
                return EMPTY_COLLECTION

        registry = [
            SourceDescriptor(f"s{i}", SourceKind.VECTOR, f"s{i}.geojson", f"S{i}") for i in range(6)
        ]
        fetcher = CountingFetcher()
        layers = asyncio.run(ingest(registry, fetcher=fetcher, max_in_flight=2))
        assert len(layers) == 6
        assert fetcher.peak == 2

    def test_invalid_concurrency_cap(self, vector_source, fetcher_factory):
        with pytest.raises(ValueError):
            asyncio.run(ingest([vector_source], fetcher=fetcher_factory(), max_in_flight=0))

    def test_ingest_source_healthy(self, live_source, station, fetcher_factory):
        fetcher = fetcher_factory({live_source.location: json.dumps({"stations": [station()]})})
        layer = asyncio.run(ingest_source(live_source, fetcher))
        assert layer.degraded is False
        assert layer.features[0].feature_id == "02t"
