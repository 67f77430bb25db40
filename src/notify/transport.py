# src/notify/transport.py — v1
"""httpx transport with a fixed-delay retry policy.

Retries live in the transport so every request made through the client
gets the same policy, the way curl's --retry/--retry-delay applies to a
whole invocation.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """Fixed-delay retry configuration."""

    max_retries: int = 2
    delay_s: float = 5.0
    retry_statuses: frozenset[int] = field(
        default_factory=lambda: frozenset({408, 429, 500, 502, 503, 504})
    )


class RetryTransport(httpx.BaseTransport):
    """Wrap another transport and retry transient failures.

    A transport error or a retryable status triggers another attempt after
    ``delay_s`` seconds, up to ``max_retries`` extra attempts. The last
    response is returned, or the last transport error re-raised.
    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        config: RetryConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport or httpx.HTTPTransport()
        self._config = config or RetryConfig()
        self._sleep = sleep

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        attempts = 0
        while True:
            attempts += 1
            try:
                response = self._transport.handle_request(request)
            except httpx.TransportError as e:
                if attempts > self._config.max_retries:
                    raise
                logger.warning(
                    "Webhook transport error (attempt %d/%d): %s, retrying in %.1fs",
                    attempts, self._config.max_retries + 1, e, self._config.delay_s,
                )
            else:
                if (
                    response.status_code not in self._config.retry_statuses
                    or attempts > self._config.max_retries
                ):
                    return response
                response.close()
                logger.warning(
                    "Webhook returned HTTP %d (attempt %d/%d), retrying in %.1fs",
                    response.status_code, attempts, self._config.max_retries + 1,
                    self._config.delay_s,
                )
            self._sleep(self._config.delay_s)

    def close(self) -> None:
        self._transport.close()
