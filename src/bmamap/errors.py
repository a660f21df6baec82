"""Error hierarchy for ingestion, selection and classification.

Ingest errors never escape ``ingest()``; they are caught per source and
turned into a degraded Layer.
"""

from __future__ import annotations


class BmaMapError(Exception):
    """Base class for all bmamap errors."""


class IngestError(BmaMapError):
    """A source could not be turned into features."""

    def __init__(self, message: str, source_id: str = "") -> None:
        super().__init__(message)
        self.source_id = source_id


class FetchFailure(IngestError):
    """Network or transport failure while fetching a source."""

    def __init__(self, message: str, source_id: str = "", location: str = "") -> None:
        super().__init__(message, source_id)
        self.location = location


class MalformedSource(IngestError):
    """The fetched bytes do not have the structure the decoder expects."""


class InvalidSelection(BmaMapError, ValueError):
    """A selection setter was called with an unrecognized value."""


class UnclassifiableFeature(BmaMapError):
    """A feature has no usable reading for the active quantity."""
