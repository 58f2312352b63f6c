"""Provider implementations and error mapping."""

from .base import ProviderError
from .errors import ErrorMapper

__all__ = [
    "ErrorMapper",
    "ProviderError",
]
