"""HTTP surface used by the UI layer."""

from bmamap.api.routes import router

__all__ = ["router"]
