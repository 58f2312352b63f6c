"""
Structured logging utility for provider requests and runs.

Every line is prefixed with ``[provider=... model=... request_id=...]`` so
steps of one run can be correlated in plain-text logs.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from ..models.generation import LanguageModelUsage


class ProviderLogger:
    """Structured logger for one provider."""

    def __init__(self, provider_name: str):
        """
        Initialize logger for a specific provider.

        Args:
            provider_name: Name of the provider (e.g., "anthropic")
        """
        self.provider = provider_name
        self.logger = logging.getLogger(f"harness_ai.providers.{provider_name}")

    def _format_message(self, message: str, **kwargs) -> str:
        fields = [f"provider={self.provider}"]
        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")
        return f"[{' '.join(fields)}] {message}"

    def debug(self, message: str, model: Optional[str] = None,
              request_id: Optional[str] = None, **kwargs):
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                self._format_message(message, model=model, request_id=request_id, **kwargs)
            )

    def info(self, message: str, model: Optional[str] = None,
             request_id: Optional[str] = None, **kwargs):
        self.logger.info(
            self._format_message(message, model=model, request_id=request_id, **kwargs)
        )

    def warning(self, message: str, model: Optional[str] = None,
                request_id: Optional[str] = None, **kwargs):
        self.logger.warning(
            self._format_message(message, model=model, request_id=request_id, **kwargs)
        )

    def error(self, message: str, model: Optional[str] = None,
              request_id: Optional[str] = None, error: Optional[BaseException] = None, **kwargs):
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_msg'] = str(error)
        self.logger.error(
            self._format_message(message, model=model, request_id=request_id, **kwargs)
        )

    @contextmanager
    def track_request(self, method: str, model: str,
                      request_id: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        """
        Context manager to track request timing and log start/finish.

        Args:
            method: What is being done (e.g., "stream-step")
            model: The model being used
            request_id: Optional request ID (generated if not provided)

        Yields:
            Dict with request metadata including request_id and start_time
        """
        if request_id is None:
            request_id = str(uuid.uuid4())[:8]

        start_time = time.time()
        self.debug(f"Starting {method} request", model=model, request_id=request_id)

        metadata = {
            'request_id': request_id,
            'model': model,
            'method': method,
            'start_time': start_time,
        }

        try:
            yield metadata
            duration = time.time() - start_time
            self.info(
                f"Completed {method} request",
                model=model,
                request_id=request_id,
                duration_ms=int(duration * 1000),
            )
        except Exception as e:
            duration = time.time() - start_time
            self.error(
                f"Failed {method} request",
                model=model,
                request_id=request_id,
                duration_ms=int(duration * 1000),
                error=e,
            )
            raise

    def log_usage(self, usage: LanguageModelUsage, model: str, request_id: Optional[str] = None):
        """Log token usage for a step or a run."""
        self.info(
            "Token usage",
            model=model,
            request_id=request_id,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            total_tokens=usage.total_tokens,
            cached_input_tokens=usage.cached_input_tokens or None,
        )

    def log_streaming_metrics(self, frames: int, parts: int, duration: float,
                              model: str, request_id: Optional[str] = None):
        """Log per-step streaming metrics."""
        self.debug(
            "Streaming metrics",
            model=model,
            request_id=request_id,
            frames=frames,
            parts=parts,
            duration_ms=int(duration * 1000),
        )
