"""
Shared pieces of the notification backends: the Notifier interface, recording
title formatting and HTTP retry.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

import requests

logger = logging.getLogger(__name__)

RETRY_ATTEMPTS = 2
RETRY_BACKOFF = 1.0  # seconds, doubled after every attempt
DEFAULT_TITLE = "Loss prevention: {product_id}"
TRANSIENT_ERRORS = (requests.Timeout, requests.ConnectionError)


def with_retry(
    send: Callable[[], requests.Response],
    max_retries: int = RETRY_ATTEMPTS,
    base_delay: float = RETRY_BACKOFF,
) -> requests.Response:
    """
    Call send, retrying 5xx answers and dropped connections with backoff.

    4xx answers are returned immediately. After the last attempt the final
    response is returned, or the network error is raised.
    """
    attempt = 0
    while True:
        delay = base_delay * (2**attempt)
        try:
            response = send()
        except TRANSIENT_ERRORS as e:
            if attempt >= max_retries:
                raise
            logger.warning(
                f"Notification request failed ({e}), retrying in {delay}s "
                f"[{attempt + 1}/{max_retries}]"
            )
        else:
            if response.status_code < 500 or attempt >= max_retries:
                return response
            logger.warning(
                f"Notification endpoint answered {response.status_code}, retrying in {delay}s "
                f"[{attempt + 1}/{max_retries}]"
            )
        time.sleep(delay)
        attempt += 1


def format_title(template: str | None, context: dict[str, Any]) -> str:
    """
    Build a notification title for a recording.

    Placeholders: {product_id}, {epc}, {timestamp} (ms since epoch) and
    {folder}. A template with an unknown placeholder is used as-is.
    """
    template = template or DEFAULT_TITLE
    fields = {key: context.get(key, "") for key in ("product_id", "epc", "timestamp", "folder")}
    try:
        return template.format(**fields)
    except (KeyError, IndexError) as e:
        logger.warning(f"Unknown placeholder {e} in title template: {template}")
        return template


class Notifier(ABC):
    """A destination for completed-recording notifications."""

    @abstractmethod
    def send(
        self,
        message: str,
        image_path: str | None,
        context: dict[str, Any],
    ) -> bool:
        """
        Deliver message, with the thumbnail at image_path when given.

        context carries product_id, epc, timestamp and folder of the
        recording. Returns True when the backend accepted everything.
        """

    @property
    @abstractmethod
    def id(self) -> str:
        """Identifier from the notifier's config entry."""
