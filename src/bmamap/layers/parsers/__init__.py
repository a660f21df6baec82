"""Format decoders: raw source bytes to a list of LayerFeature."""

from bmamap.layers.parsers.csv_import import parse_csv
from bmamap.layers.parsers.geojson import parse_geojson
from bmamap.layers.parsers.live_api import parse_live_api

__all__ = ["parse_csv", "parse_geojson", "parse_live_api"]
