"""Tabular decoder — header-delimited text to point features.

Uses stdlib csv module. The longitude/latitude column names come from the
source descriptor; they are consumed into the coordinate pair and removed
from the properties. All other columns become feature properties, as strings.
Coordinates stored as [lng, lat] (GeoJSON convention).
"""

from __future__ import annotations

import csv
import io

from bmamap.errors import MalformedSource
from bmamap.layers.layer import LayerFeature
from bmamap.layers.parsers._common import parse_coordinate, to_text
from bmamap.layers.registry import SourceDescriptor


def parse_csv(content: str | bytes, descriptor: SourceDescriptor) -> list[LayerFeature]:
    """Parse CSV text into Point features, one per data row.

    A row whose longitude or latitude is missing or non-numeric still
    produces a feature, with ``coordinates=None`` and ``renderable=False``.

    Raises:
        MalformedSource: If there is no header row, or the header lacks
            either coordinate column.
    """
    source_id = descriptor.source_id
    lng_col = descriptor.lng_field
    lat_col = descriptor.lat_field

    try:
        reader = csv.DictReader(io.StringIO(to_text(content, source_id)))
        fieldnames = reader.fieldnames
    except csv.Error as e:
        raise MalformedSource(f"Unreadable CSV header: {e}", source_id) from e

    if not fieldnames:
        raise MalformedSource("CSV has no header row", source_id)

    missing = [col for col in (lng_col, lat_col) if col not in fieldnames]
    if missing:
        raise MalformedSource(f"CSV header lacks column(s): {', '.join(missing)}", source_id)

    features: list[LayerFeature] = []
    try:
        for idx, row in enumerate(reader):
            lng = parse_coordinate(row.get(lng_col))
            lat = parse_coordinate(row.get(lat_col))

            # Overflow cells land under the None key; drop them
            properties = {
                key: value
                for key, value in row.items()
                if key is not None and key != lng_col and key != lat_col
            }

            valid = lng is not None and lat is not None
            features.append(
                LayerFeature(
                    feature_id=f"{source_id}-{idx}",
                    geometry_type="Point",
                    coordinates=[lng, lat] if valid else None,
                    properties=properties,
                    renderable=valid,
                )
            )
    except csv.Error as e:
        raise MalformedSource(f"CSV parse error at line {reader.line_num}: {e}", source_id) from e

    return features
