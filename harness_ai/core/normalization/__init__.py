"""Normalization of provider usage and finish reasons."""

from .finish_reason import map_anthropic_stop_reason
from .usage import extract_cache_info, merge_usage_update, normalize_usage, sum_usage

__all__ = [
    "extract_cache_info",
    "map_anthropic_stop_reason",
    "merge_usage_update",
    "normalize_usage",
    "sum_usage",
]
