"""BMA Map — geospatial source ingestion, normalization and styling selection."""

__version__ = "0.1.0"
