"""Value classifier for measured-quantity (air quality) payloads.

Each station carries a payload keyed by quantity, e.g.::

    {"AQI": {"color_id": "2", "aqi": "38", "param": "PM25"},
     "PM25": {"color_id": "2", "aqi": "38", "value": "17.2"}, ...}

The severity bucket is the vendor's ``color_id``; thresholds are never
recomputed here. The payload may arrive JSON-encoded as a string (vector
sources flatten nested properties).
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import IntEnum

from bmamap.errors import UnclassifiableFeature
from bmamap.layers.layer import LayerFeature


class Severity(IntEnum):
    UNKNOWN = 0
    VERY_GOOD = 1
    GOOD = 2
    MODERATE = 3
    SENSITIVE = 4
    UNHEALTHY = 5


# bucket code -> (severity, color, label)
BUCKETS: dict[str, tuple[Severity, str, str]] = {
    "1": (Severity.VERY_GOOD, "#3bccff", "Very Good"),
    "2": (Severity.GOOD, "#92d050", "Good"),
    "3": (Severity.MODERATE, "#ffff00", "Moderate"),
    "4": (Severity.SENSITIVE, "#ffa200", "Starting to Affect Health"),
    "5": (Severity.UNHEALTHY, "#f04646", "Affects Health"),
}
NEUTRAL: tuple[Severity, str, str] = (Severity.UNKNOWN, "#9e9e9e", "Unknown")

# Instrument offline / reading unavailable
SENTINELS = frozenset({-1.0, -999.0})

DEFAULT_PAYLOAD_PROPERTY = "AQILast"


@dataclass(frozen=True)
class ClassificationResult:
    quantity: str
    bucket_code: str
    severity: Severity
    color: str
    label: str
    display_value: float | str

    @property
    def display_text(self) -> str:
        value = self.display_value
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)


def bucket_style(code) -> tuple[Severity, str, str]:
    """Map a bucket code to (severity, color, label). Total: unknown codes are neutral."""
    return BUCKETS.get(str(code).strip(), NEUTRAL)


def classify(
    feature: LayerFeature,
    quantity: str,
    payload_property: str = DEFAULT_PAYLOAD_PROPERTY,
) -> ClassificationResult | None:
    """Classify a feature's reading for ``quantity``.

    Returns:
        The classification, or None when the feature has no usable reading
        (missing or malformed payload, sentinel value).
    """
    try:
        reading = _extract_reading(feature.properties, quantity, payload_property)
        value = _display_value(reading, quantity)
    except UnclassifiableFeature:
        return None

    code = str(reading.get("color_id", "")).strip()
    severity, color, label = bucket_style(code)
    return ClassificationResult(
        quantity=quantity,
        bucket_code=code,
        severity=severity,
        color=color,
        label=label,
        display_value=value,
    )


def _decode(value, what: str):
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise UnclassifiableFeature(f"{what} is not valid JSON") from e
    return value


def _extract_reading(properties: dict, quantity: str, payload_property: str) -> dict:
    payload = _decode(properties.get(payload_property), "payload")
    if not isinstance(payload, dict):
        raise UnclassifiableFeature(f"No {payload_property} payload")
    reading = _decode(payload.get(quantity), quantity)
    if not isinstance(reading, dict):
        raise UnclassifiableFeature(f"No {quantity} reading")
    return reading


def _display_value(reading: dict, quantity: str) -> float | str:
    raw = reading.get("aqi") if quantity == "AQI" else reading.get("value")
    if raw is None or isinstance(raw, bool) or str(raw).strip() == "":
        raise UnclassifiableFeature(f"{quantity} reading has no value")
    try:
        number = float(raw)
    except (TypeError, ValueError):
        # Categorical reading
        return str(raw).strip()
    if not math.isfinite(number) or number in SENTINELS:
        raise UnclassifiableFeature(f"{quantity} reading unavailable")
    return number
