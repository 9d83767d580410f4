"""
Loss Prevention Recorder

Records a short video clip whenever an RFID-tagged item moves from the shop
floor to an exit reader, detects faces and bodies in the footage with Haar
cascades and saves stills and crops next to the clip.

Package structure:
  models/     - Sensors, tag events, detectors and regions
  core/       - Registry, classifier, detector set and recording orchestrator
  processor/  - Event ingestion, trigger handling and notifiers
  config/     - Configuration loading and validation
  utils/      - Constants
"""

__version__ = "1.0.0"

from .config import Config, ConfigValidationError, load_config
from .core import (
    DetectorSet,
    MovementTriggerClassifier,
    RecordingOrchestrator,
    SensorRegistry,
)
from .processor import EventIngestor, TriggerHandler

__all__ = [
    "Config",
    "ConfigValidationError",
    "DetectorSet",
    "EventIngestor",
    "MovementTriggerClassifier",
    "RecordingOrchestrator",
    "SensorRegistry",
    "TriggerHandler",
    "load_config",
]
