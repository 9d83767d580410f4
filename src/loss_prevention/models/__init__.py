"""
Consolidated data models for the loss prevention recorder.

This package contains all core data structures used across the application.
"""

from .detection import (
    DetectionParams,
    Detector,
    DrawStyle,
    FrameOverlay,
    Rect,
    color_from_rgb,
)
from .events import LocationEntry, RecordingTrigger, TagMovementEvent
from .sensor import DEFAULT_FACILITY, Personality, Sensor

__all__ = [
    "DEFAULT_FACILITY",
    # Detection models
    "DetectionParams",
    "Detector",
    "DrawStyle",
    "FrameOverlay",
    # Event models
    "LocationEntry",
    # Sensor models
    "Personality",
    "Rect",
    "RecordingTrigger",
    "Sensor",
    "TagMovementEvent",
    "color_from_rgb",
]
