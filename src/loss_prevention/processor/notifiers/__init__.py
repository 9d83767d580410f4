"""
Notifiers - where completed recordings are announced.

Backends, selected by the `type` of each notifications.notifiers entry:
- ntfy: push message (and thumbnail) to an ntfy topic
- webhook: JSON POST to any HTTP endpoint
"""

import logging
from typing import Any

from .base import Notifier, format_title, with_retry
from .ntfy import NtfyNotifier
from .webhook import WebhookNotifier

logger = logging.getLogger(__name__)

NOTIFIER_TYPES: dict[str, type[Notifier]] = {
    "ntfy": NtfyNotifier,
    "webhook": WebhookNotifier,
}


def create_notifier(config: dict[str, Any]) -> Notifier:
    """
    Build the backend named by config["type"].

    Raises:
        ValueError: For an unknown type
        KeyError: When a required option of the backend is missing
    """
    backend = NOTIFIER_TYPES.get(config.get("type"))
    if backend is None:
        raise ValueError(
            f"Unknown notifier type {config.get('type')!r} "
            f"(expected one of: {', '.join(NOTIFIER_TYPES)})"
        )
    return backend(config)


def create_notifiers(configs: list[dict[str, Any]]) -> dict[str, Notifier]:
    """Build every configured notifier, keyed by id. Broken entries are logged and skipped."""
    notifiers: dict[str, Notifier] = {}
    for config in configs:
        try:
            notifier = create_notifier(config)
        except (KeyError, ValueError) as e:
            logger.error(f"Skipping notifier {config.get('id')}: {e}")
            continue
        notifiers[notifier.id] = notifier
        logger.info(f"Notifier ready: {notifier.id} ({config['type']})")

    return notifiers


__all__ = [
    "NOTIFIER_TYPES",
    "Notifier",
    "NtfyNotifier",
    "WebhookNotifier",
    "create_notifier",
    "create_notifiers",
    "format_title",
    "with_retry",
]
