"""Logging helpers."""

from .logging import ProviderLogger

__all__ = ["ProviderLogger"]
