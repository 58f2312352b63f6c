"""
Error mapping utilities for provider requests.

Converts httpx failures, failed HTTP responses and in-stream error events
into ProviderError instances with consistent metadata.
"""

from typing import Any, Dict, Optional

import httpx

from .base import ProviderError


class ErrorMapper:
    """Maps provider-side failures to ProviderError."""

    # HTTP status codes that indicate a retryable failure (529 is Anthropic's "overloaded")
    RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504, 529}

    RETRYABLE_ERROR_TYPES = {"rate_limit_error", "overloaded_error", "api_error"}

    @staticmethod
    def is_retryable(error: BaseException) -> bool:
        """
        Determine if an error is retryable.

        Args:
            error: The exception to check

        Returns:
            bool: True if the error is retryable
        """
        status_code = getattr(error, "status_code", None)
        if status_code is not None and status_code in ErrorMapper.RETRYABLE_STATUS_CODES:
            return True

        if isinstance(error, (httpx.TimeoutException, httpx.ConnectError, httpx.RemoteProtocolError)):
            return True

        error_msg = str(error).lower()
        return any(phrase in error_msg for phrase in ("rate limit", "overloaded", "too many requests"))

    @staticmethod
    def get_retry_after(response: Optional[httpx.Response]) -> Optional[float]:
        """Seconds from a Retry-After header, or None."""
        if response is None:
            return None
        retry_after = response.headers.get("retry-after")
        if not retry_after:
            return None
        try:
            return float(retry_after)
        except ValueError:
            return None

    @staticmethod
    def from_response(response: httpx.Response, body: str) -> ProviderError:
        """
        Build the error for a non-2xx Anthropic response.

        Args:
            response: The failed response (body already read)
            body: Response body text

        Returns:
            ProviderError carrying status, body and retry metadata
        """
        provider_error = ProviderError(
            message=f"anthropic request failed ({response.status_code}): {body}",
            provider="anthropic",
            status_code=response.status_code,
            retry_after=ErrorMapper.get_retry_after(response),
            response_body=body,
        )
        provider_error.is_retryable = ErrorMapper.is_retryable(provider_error)
        return provider_error

    @staticmethod
    def from_stream_error(error_type: str, message: str) -> ProviderError:
        """Build the error for an ``error`` event sent inside the stream."""
        provider_error = ProviderError(
            message=f"anthropic stream error ({error_type}): {message}",
            provider="anthropic",
        )
        provider_error.is_retryable = error_type in ErrorMapper.RETRYABLE_ERROR_TYPES
        return provider_error

    @staticmethod
    def map_anthropic_error(error: BaseException) -> ProviderError:
        """
        Map a transport exception raised while talking to Anthropic.

        ProviderErrors pass through unchanged.
        """
        if isinstance(error, ProviderError):
            return error

        status_code = None
        retry_after = None
        if isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code
            retry_after = ErrorMapper.get_retry_after(error.response)

        if isinstance(error, httpx.TimeoutException):
            message = f"Anthropic request timed out: {error}"
        elif isinstance(error, httpx.ConnectError):
            message = f"Anthropic connection failed: {error}"
        else:
            message = f"Anthropic API error: {error}"

        provider_error = ProviderError(
            message=message,
            provider="anthropic",
            status_code=status_code,
            retry_after=retry_after,
        )
        provider_error.is_retryable = ErrorMapper.is_retryable(error)
        provider_error.original_error = error
        return provider_error

    @staticmethod
    def get_error_classification(error: ProviderError) -> Dict[str, Any]:
        """
        Get error classification for logging.

        Args:
            error: The ProviderError to classify

        Returns:
            Dict with error classification details
        """
        return {
            "provider": error.provider,
            "status_code": error.status_code,
            "is_retryable": error.is_retryable,
            "retry_after": error.retry_after,
            "error_type": type(error.original_error).__name__ if error.original_error else None,
            "category": ErrorMapper._categorize_error(error),
        }

    @staticmethod
    def _categorize_error(error: ProviderError) -> str:
        if error.status_code:
            if error.status_code in (401, 403):
                return "authentication"
            elif error.status_code == 429:
                return "rate_limit"
            elif error.status_code >= 500:
                return "server_error"
            elif error.status_code >= 400:
                return "client_error"

        if isinstance(error.original_error, httpx.TimeoutException):
            return "timeout"
        elif isinstance(error.original_error, httpx.TransportError):
            return "network"

        return "unknown"
