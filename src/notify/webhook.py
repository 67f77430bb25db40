# src/notify/webhook.py — v1
"""Webhook notifier: delivers run outcomes to Slack or a generic endpoint.

Notification failures are logged and reported as False; they never raise
and never influence the process exit status.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import httpx

from pgbackup.notify.payloads import WebhookFormat, build_payload, classify_webhook
from pgbackup.notify.transport import RetryConfig, RetryTransport

logger = logging.getLogger(__name__)

FAILURE_STATUS = "Failure"
FALLBACK_SUBJECT_PREFIX = "Failed Delivery"


class WebhookNotifier:
    """POST JSON notifications to an optional webhook URL.

    Args:
        url: Webhook URL; empty disables notifications.
        timeout_s: Request timeout.
        retries: Automatic retries per send on transient failures.
        retry_delay_s: Fixed delay between retries.
        transport: Underlying httpx transport (tests inject MockTransport).
        sleep: Sleep function used between retries.
    """

    def __init__(
        self,
        url: str = "",
        timeout_s: float = 30.0,
        retries: int = 2,
        retry_delay_s: float = 5.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._url = url
        self._format = classify_webhook(url)
        self._timeout = httpx.Timeout(timeout_s)
        self._inner_transport = transport
        self._retry = RetryConfig(max_retries=retries, delay_s=retry_delay_s)
        self._sleep = sleep

    @property
    def enabled(self) -> bool:
        return self._format is not None

    @property
    def format(self) -> WebhookFormat | None:
        return self._format

    def send(self, title: str, status: str, description: str = "") -> bool:
        """Send one notification. Returns True if it was delivered."""
        if self._format is None:
            logger.info("No webhook URL configured, skipping notification")
            return False

        logger.info("Sending %s webhook notification: %s (%s)", self._format.value, title, status)
        payload = build_payload(self._format, title, status, description)

        # Fresh transport per send: the client closes it on exit.
        transport = RetryTransport(self._inner_transport, self._retry, sleep=self._sleep)
        try:
            with httpx.Client(transport=transport, timeout=self._timeout) as client:
                response = client.post(self._url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Failed to send webhook: %s", e)
            return False

        if not response.is_success:
            logger.error("Failed to send webhook: HTTP %d", response.status_code)
            return False

        logger.info("Webhook sent successfully")
        return True

    def send_failure(self, title: str, description: str = "") -> bool:
        """Send a failure notification, with one fallback attempt.

        The fallback carries a subject prefix saying the first delivery
        failed, so a receiver that only sees the second message still knows.
        """
        logger.info("Attempting to send failure notification")
        if self.send(title, FAILURE_STATUS, description):
            return True

        logger.warning("Primary failure webhook failed, attempting fallback")
        if self.send(f"{FALLBACK_SUBJECT_PREFIX} {title}", FAILURE_STATUS, description):
            return True

        logger.error("Fallback webhook also failed, giving up")
        return False
