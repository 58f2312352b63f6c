"""HTTP API layer."""

from .api import ChatRequest, get_model_factory, router

__all__ = ["ChatRequest", "get_model_factory", "router"]
