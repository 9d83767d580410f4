"""
Event ingestion - routes inventory messages to the registry and classifier.

Messages are JSON objects, one per line:
    {"sensors": [...]}                          full sensor snapshot
    {"params": {"device_id": ..., ...}}         single sensor configuration
    {"data": [...]} or [...]                    batch of tag events
"""

import json
import logging
from collections.abc import Iterable
from typing import Any

from ..core.classifier import MovementTriggerClassifier
from ..core.registry import SensorRegistry
from ..models import RecordingTrigger, Sensor, TagMovementEvent

logger = logging.getLogger(__name__)


def parse_data_payload(payload: dict[str, Any] | list[Any]) -> list[TagMovementEvent]:
    """Decode tag events, keeping the order they were sent in."""
    entries = payload.get("data") if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        raise ValueError("tag event payload must contain a 'data' list")
    return [TagMovementEvent.from_dict(entry) for entry in entries]


def parse_sensor_snapshot(payload: dict[str, Any]) -> list[Sensor]:
    """Decode a sensor snapshot message or a single sensor notification."""
    if "sensors" in payload:
        return [Sensor.from_config_notification(s) for s in payload["sensors"]]
    return [Sensor.from_config_notification(payload)]


class EventIngestor:
    """Feeds decoded messages to the sensor registry and the classifier."""

    def __init__(self, registry: SensorRegistry, classifier: MovementTriggerClassifier):
        self.registry = registry
        self.classifier = classifier
        self.batches = 0
        self.triggers = 0

    def handle_message(self, message: dict[str, Any] | list[Any]) -> RecordingTrigger | None:
        """
        Route one decoded message.

        Returns:
            The trigger fired for a tag batch, if any
        """
        if isinstance(message, dict) and "sensors" in message:
            sensors = parse_sensor_snapshot(message)
            self.registry.replace(sensors)
            logger.info(f"Sensor snapshot replaced: {len(sensors)} sensor(s)")
            return None

        if isinstance(message, dict) and "device_id" in (message.get("params") or {}):
            self._update_sensor(parse_sensor_snapshot(message)[0])
            return None

        events = parse_data_payload(message)
        self.batches += 1
        trigger = self.classifier.handle_batch(events)
        if trigger is not None:
            self.triggers += 1
        return trigger

    def _update_sensor(self, updated: Sensor) -> None:
        sensors = [s for s in self.registry.sensors if s.device_id != updated.device_id]
        sensors.append(updated)
        self.registry.replace(sensors)
        logger.info(
            f"Sensor updated: {updated.device_id} ({updated.personality.value})"
        )

    def run(self, stream: Iterable[str]) -> int:
        """
        Consume newline-delimited JSON until the stream ends.

        Returns:
            Number of messages handled
        """
        handled = 0
        for line_no, line in enumerate(stream, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
                self.handle_message(message)
                handled += 1
            except (json.JSONDecodeError, ValueError, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed message on line {line_no}: {e}")

        logger.info(
            f"Event stream ended: {handled} message(s), {self.batches} batch(es), "
            f"{self.triggers} trigger(s)"
        )
        return handled
