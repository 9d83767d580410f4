"""
ntfy notifier.

The thumbnail goes out first as an attachment, then the message text, so the
phone shows the picture above the details. See https://ntfy.sh/
"""

import logging
from typing import Any

import requests

from .base import Notifier, format_title, with_retry

logger = logging.getLogger(__name__)

NTFY_BASE_URL = "https://ntfy.sh"
REQUEST_TIMEOUT = 10  # seconds


class NtfyNotifier(Notifier):
    """
    Options:
        id, type ("ntfy"), topic (required),
        server (default https://ntfy.sh), priority (default high),
        title_template ({product_id}, {epc}, {timestamp}, {folder})
    """

    def __init__(self, config: dict[str, Any]):
        self._id = config["id"]
        self._topic = config["topic"]
        self._priority = config.get("priority", "high")
        self._title_template = config.get("title_template")
        self._url = f"{config.get('server', NTFY_BASE_URL).rstrip('/')}/{self._topic}"
        logger.debug(f"ntfy notifier {self._id} publishes to {self._url}")

    @property
    def id(self) -> str:
        return self._id

    def _publish(self, what: str, body: bytes, headers: dict[str, str]) -> bool:
        try:
            response = with_retry(
                lambda: requests.post(
                    self._url, data=body, headers=headers, timeout=REQUEST_TIMEOUT
                )
            )
        except requests.RequestException as e:
            logger.error(f"ntfy {what} to {self._topic} failed: {e}")
            return False

        if not response.ok:
            logger.warning(
                f"ntfy {what} to {self._topic} rejected: {response.status_code} {response.text}"
            )
            return False

        logger.debug(f"ntfy {what} published to {self._topic}")
        return True

    def send(
        self,
        message: str,
        image_path: str | None,
        context: dict[str, Any],
    ) -> bool:
        headers = {
            "Title": format_title(self._title_template, context),
            "Priority": self._priority,
        }
        delivered = True

        if image_path:
            try:
                with open(image_path, "rb") as f:
                    thumbnail = f.read()
            except OSError as e:
                logger.warning(f"Thumbnail not attached ({image_path}): {e}")
            else:
                filename = f"{context.get('timestamp', 'recording')}_thumb.jpg"
                delivered = self._publish(
                    "thumbnail", thumbnail, {**headers, "Filename": filename}
                )

        return self._publish("message", message.encode("utf-8"), headers) and delivered
