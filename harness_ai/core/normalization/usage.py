"""
Usage normalization module.

Converts the provider's raw usage objects into LanguageModelUsage and sums
usage across steps. All token counts are coerced to ints; missing or null
fields count as zero.
"""

from typing import Any, Dict, Iterable, Optional

from ...models.generation import LanguageModelUsage


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def normalize_usage(
    usage_data: Optional[Dict[str, Any]],
    provider: str = "anthropic",
) -> LanguageModelUsage:
    """
    Normalize raw usage data into a LanguageModelUsage.

    Anthropic reports ``input_tokens``/``output_tokens`` plus cache counters;
    other providers use ``prompt_tokens``/``completion_tokens``.

    Args:
        usage_data: Raw usage dict from the provider (optional)
        provider: Provider name for field mapping

    Returns:
        LanguageModelUsage with total_tokens = input + output
    """
    if not usage_data:
        return LanguageModelUsage()

    if provider == "anthropic":
        input_tokens = _as_int(usage_data.get("input_tokens"))
        output_tokens = _as_int(usage_data.get("output_tokens"))
        cached = _as_int(usage_data.get("cache_read_input_tokens"))
    else:
        input_tokens = _as_int(usage_data.get("prompt_tokens", usage_data.get("input_tokens")))
        output_tokens = _as_int(usage_data.get("completion_tokens", usage_data.get("output_tokens")))
        cached = _as_int(usage_data.get("cached_tokens"))

    return LanguageModelUsage(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=input_tokens + output_tokens,
        reasoning_tokens=_as_int(usage_data.get("reasoning_tokens")),
        cached_input_tokens=cached,
    )


def merge_usage_update(
    current: Dict[str, Any],
    update: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Merge a message-delta usage update into the raw usage seen so far.

    Anthropic's message_delta usage is cumulative, so present non-null fields
    replace earlier values rather than adding to them.
    """
    merged = dict(current)
    if update:
        for key, value in update.items():
            if value is not None:
                merged[key] = value
    return merged


def extract_cache_info(usage_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Extract Anthropic cache counters for provider metadata."""
    cache_info: Dict[str, Any] = {}
    if not usage_data:
        return cache_info
    if usage_data.get("cache_creation_input_tokens") is not None:
        cache_info["cacheCreationInputTokens"] = _as_int(usage_data["cache_creation_input_tokens"])
    if usage_data.get("cache_read_input_tokens") is not None:
        cache_info["cacheReadInputTokens"] = _as_int(usage_data["cache_read_input_tokens"])
    return cache_info


def sum_usage(usages: Iterable[LanguageModelUsage]) -> LanguageModelUsage:
    """Sum usage across steps."""
    total = LanguageModelUsage()
    for usage in usages:
        total = total + usage
    return total
