"""
Webhook notifier - POSTs each completed recording as JSON.
"""

import base64
import logging
from typing import Any

import requests

from .base import Notifier, format_title, with_retry

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds


class WebhookNotifier(Notifier):
    """
    Options:
        id, type ("webhook"), url (required), priority (default "default"),
        title_template, include_image (embed thumbnail as base64, default off)
    """

    def __init__(self, config: dict[str, Any]):
        self._id = config["id"]
        self._url = config["url"]
        self._priority = config.get("priority", "default")
        self._title_template = config.get("title_template")
        self._embed_thumbnail = bool(config.get("include_image", False))
        logger.debug(f"webhook notifier {self._id} posts to {self._url}")

    @property
    def id(self) -> str:
        return self._id

    def build_payload(
        self, message: str, image_path: str | None, context: dict[str, Any]
    ) -> dict[str, Any]:
        payload = {
            "title": format_title(self._title_template, context),
            "message": message,
            "priority": self._priority,
            "recording": {
                key: context.get(key) for key in ("product_id", "epc", "timestamp", "folder")
            },
        }

        if self._embed_thumbnail and image_path:
            try:
                with open(image_path, "rb") as f:
                    payload["image_base64"] = base64.b64encode(f.read()).decode("ascii")
            except OSError as e:
                logger.warning(f"Thumbnail not embedded ({image_path}): {e}")

        return payload

    def send(
        self,
        message: str,
        image_path: str | None,
        context: dict[str, Any],
    ) -> bool:
        payload = self.build_payload(message, image_path, context)

        try:
            response = with_retry(
                lambda: requests.post(self._url, json=payload, timeout=REQUEST_TIMEOUT)
            )
        except requests.RequestException as e:
            logger.error(f"Webhook {self._id} unreachable: {e}")
            return False

        if not response.ok:
            logger.warning(
                f"Webhook {self._id} rejected recording: {response.status_code} {response.text[:100]}"
            )
            return False

        logger.debug(f"Webhook {self._id} notified")
        return True
