"""Live-API decoder — JSON document with a nested station list.

The list field and the coordinate field names are per-source configuration
(upstream APIs disagree on casing, e.g. ``Long``/``Lat`` vs ``lng``/``lat``).
"""

from __future__ import annotations

from bmamap.errors import MalformedSource
from bmamap.layers.layer import LayerFeature
from bmamap.layers.parsers._common import load_json, parse_coordinate
from bmamap.layers.registry import SourceDescriptor


def parse_live_api(content: str | bytes, descriptor: SourceDescriptor) -> list[LayerFeature]:
    """Parse a live-API document into Point features.

    An absent list field yields no features; the API may legitimately
    report zero stations. Each entry's fields become the feature properties
    unchanged.

    Raises:
        MalformedSource: If the document is not a JSON object, the list field
            is not a list, or an entry is not an object.
    """
    source_id = descriptor.source_id
    data = load_json(content, source_id)

    if not isinstance(data, dict):
        raise MalformedSource("Live-API document is not a JSON object", source_id)

    entries = data.get(descriptor.list_field)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise MalformedSource(f"Field {descriptor.list_field!r} is not a list", source_id)

    features: list[LayerFeature] = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise MalformedSource(f"Entry {idx} is not an object", source_id)

        lng = parse_coordinate(entry.get(descriptor.lng_field))
        lat = parse_coordinate(entry.get(descriptor.lat_field))
        valid = lng is not None and lat is not None

        feature_id = f"{source_id}-{idx}"
        if descriptor.id_field and entry.get(descriptor.id_field) is not None:
            feature_id = str(entry[descriptor.id_field])

        features.append(
            LayerFeature(
                feature_id=feature_id,
                geometry_type="Point",
                coordinates=[lng, lat] if valid else None,
                properties=dict(entry),
                renderable=valid,
            )
        )

    return features
