"""HTTP routes of the proxy."""

from .translate import router as translate_router

__all__ = ["translate_router"]
