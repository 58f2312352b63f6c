"""
Provider error type.

Transport and API failures for a provider request surface as ProviderError,
which the run reports as an error part before finishing with
finish_reason "error".
"""

from typing import Optional

from ..errors import HarnessAIError


class ProviderError(HarnessAIError):
    """
    Base exception for provider-related errors.

    This is raised for:
    - Non-2xx responses from the provider
    - Transport failures (connect, read, timeout)
    - Error events sent inside an otherwise successful stream

    Attributes:
        message: Error message
        provider: Provider name
        status_code: HTTP status code if applicable
        retry_after: Seconds to wait before retry if applicable
        is_retryable: Whether a caller could reasonably retry
        original_error: The original exception if wrapped
        response_body: Body text of a failed HTTP response
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.retry_after = retry_after
        self.response_body = response_body
        self.is_retryable = False  # Set by ErrorMapper
        self.original_error: Optional[BaseException] = None
