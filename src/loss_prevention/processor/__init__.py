"""
Processor - what happens around a recording.

ingest    - Routes inventory messages to the registry and classifier
trigger   - Records triggered clips and sends notifications
notifiers - Notification backends (ntfy, webhook)
"""

from .ingest import EventIngestor, parse_data_payload, parse_sensor_snapshot
from .trigger import TriggerHandler, format_notification, recording_folder

__all__ = [
    "EventIngestor",
    "TriggerHandler",
    "format_notification",
    "parse_data_payload",
    "parse_sensor_snapshot",
    "recording_folder",
]
