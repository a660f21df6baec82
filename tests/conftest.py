"""Shared fixtures: sample sources, an in-memory fetcher, Air4Thai stations."""

from __future__ import annotations

import json

import pytest

from bmamap.errors import FetchFailure
from bmamap.layers.registry import AIR4THAI_URL, SourceDescriptor, SourceKind


class FakeFetcher:
    """In-memory fetcher mapping location -> bytes (or an exception to raise)."""

    def __init__(self, responses: dict | None = None):
        self.responses = dict(responses or {})
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, location: str, source_id: str = "") -> bytes:
        self.calls.append(location)
        value = self.responses.get(location)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise FetchFailure(f"404 for {location}", source_id, location)
        if isinstance(value, (dict, list)):
            return json.dumps(value).encode()
        if isinstance(value, str):
            return value.encode()
        return value

    async def aclose(self) -> None:
        self.closed = True


def make_station(
    station_id: str = "02t",
    lng="100.5",
    lat="13.7",
    aqi_code: str = "2",
    aqi: str = "38",
    pm25: str = "17.2",
) -> dict:
    """An Air4Thai-shaped station record."""
    return {
        "stationID": station_id,
        "nameEN": f"Station {station_id}",
        "areaEN": "Bangkok",
        "stationType": "GROUND",
        "Long": lng,
        "Lat": lat,
        "AQILast": {
            "date": "2026-10-19",
            "time": "10:00",
            "AQI": {"color_id": aqi_code, "aqi": aqi, "param": "PM25"},
            "PM25": {"color_id": aqi_code, "aqi": aqi, "value": pm25},
            "PM10": {"color_id": "1", "aqi": "20", "value": "30"},
            "O3": {"color_id": "-1", "aqi": "-1", "value": "-1"},
            "CO": {"color_id": "-1", "aqi": "-999", "value": "-999"},
        },
    }


@pytest.fixture
def fetcher_factory():
    return FakeFetcher


@pytest.fixture
def station():
    return make_station


@pytest.fixture
def vector_source():
    return SourceDescriptor("road", SourceKind.VECTOR, "bma_road.geojson", "ถนน", "road")


@pytest.fixture
def csv_source():
    return SourceDescriptor(
        "bma_cctv", SourceKind.TABULAR, "bma_cctv.csv", "กล้อง CCTV", "bma_cctv", icon="cctv",
    )


@pytest.fixture
def live_source():
    return SourceDescriptor(
        "air4thai", SourceKind.LIVE_API, AIR4THAI_URL, "Air4Thai", "air4thai",
        icon="air", classified=True, lng_field="Long", lat_field="Lat",
        id_field="stationID", polled=True,
    )


@pytest.fixture
def feature_collection():
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [100.5231, 13.7367]},
                "properties": {"name": "Sala Daeng"},
            },
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[100.50, 13.75], [100.51, 13.76], [100.52, 13.77]],
                },
                "properties": {"name": "Rama IV"},
            },
            {
                "type": "Feature",
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[100.5, 13.7], [100.6, 13.7], [100.6, 13.8], [100.5, 13.7]]],
                },
                "properties": {"name": "Pathum Wan"},
            },
        ],
    }
