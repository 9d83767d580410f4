"""
Core components.

registry    - Sensor registry (antenna alias -> sensor)
classifier  - Movement trigger classifier
detectors   - Detector set manager (cascade engines, per-frame detection)
recorder    - Recording orchestrator (single exclusive capture session)
"""

from .artifacts import ArtifactWriter
from .capture import CaptureOpenError, CaptureReadError, fourcc_code
from .classifier import MovementTriggerClassifier
from .detectors import DEFAULT_DETECTORS, DetectorSet
from .providers import HaarCascadeEngine
from .recorder import RecordingOrchestrator, frame_budget
from .registry import SensorRegistry
from .session import (
    DEFAULT_COORDINATOR,
    RecordingResult,
    RecordingSession,
    SessionCoordinator,
    SessionState,
)
from .stats import DebugStats

__all__ = [
    "DEFAULT_COORDINATOR",
    "DEFAULT_DETECTORS",
    "ArtifactWriter",
    "CaptureOpenError",
    "CaptureReadError",
    "DebugStats",
    "DetectorSet",
    "HaarCascadeEngine",
    "MovementTriggerClassifier",
    "RecordingOrchestrator",
    "RecordingResult",
    "RecordingSession",
    "SensorRegistry",
    "SessionCoordinator",
    "SessionState",
    "fourcc_code",
    "frame_budget",
]
