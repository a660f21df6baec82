"""Helpers shared by the decoders."""

from __future__ import annotations

import json
import math

from bmamap.errors import MalformedSource


def to_text(content: str | bytes, source_id: str) -> str:
    """Decode bytes as UTF-8, dropping a leading BOM."""
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise MalformedSource(f"Source is not valid UTF-8: {e}", source_id) from e


def load_json(content: str | bytes, source_id: str):
    try:
        return json.loads(to_text(content, source_id))
    except json.JSONDecodeError as e:
        raise MalformedSource(f"Invalid JSON: {e}", source_id) from e


def parse_coordinate(value) -> float | None:
    """Parse a longitude/latitude value; None if missing, non-numeric or non-finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number
