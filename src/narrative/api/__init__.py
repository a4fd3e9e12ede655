"""HTTP API."""

from narrative.api.router import api_router

__all__ = ["api_router"]
