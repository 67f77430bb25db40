# src/notify/payloads.py — v1
"""Webhook payload classification and formatting.

Pure functions: no I/O. The URL sniffing heuristic lives in
classify_webhook() alone so it can be swapped without touching delivery.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

SLACK_URL_MARKERS = ("hooks.slack.com", "slack.com/api/webhook")

SLACK_LABEL = "Database Backup Notification"

GLYPH_SUCCESS = ":white_check_mark:"
GLYPH_FAILURE = ":x:"
GLYPH_INFO = ":information_source:"


class WebhookFormat(str, Enum):
    SLACK = "slack"
    GENERIC = "generic"


def classify_webhook(url: str) -> WebhookFormat | None:
    """Return the payload shape for a webhook URL, or None if no URL is set."""
    if not url:
        return None
    if any(marker in url for marker in SLACK_URL_MARKERS):
        return WebhookFormat.SLACK
    return WebhookFormat.GENERIC


def status_glyph(status: str) -> str:
    """Pick the Slack emoji for a status string by prefix."""
    if status.startswith("Success"):
        return GLYPH_SUCCESS
    if status.startswith(("Failure", "Failed")):
        return GLYPH_FAILURE
    return GLYPH_INFO


def build_payload(
    fmt: WebhookFormat, title: str, status: str, description: str = ""
) -> dict[str, Any]:
    """Build the JSON body for a notification.

    Slack gets a section block; everything else gets a flat
    ``{title, description, status}`` object.
    """
    if fmt is WebhookFormat.SLACK:
        glyph = status_glyph(status)
        return {
            "text": f"{glyph} {SLACK_LABEL}",
            "blocks": [
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": f"*{glyph} {title}*"},
                }
            ],
        }
    return {"title": title, "description": description, "status": status}
