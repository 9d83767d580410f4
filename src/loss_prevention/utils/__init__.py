"""
Utility modules for constants.
"""

from .constants import (
    DEFAULT_CASCADE_DIR,
    ENV_LOG_LEVEL,
    ENV_VIDEO_DEVICE,
    EVENT_MOVED,
    RECORDING_FOLDER_NAME,
)

__all__ = [
    "DEFAULT_CASCADE_DIR",
    "ENV_LOG_LEVEL",
    "ENV_VIDEO_DEVICE",
    "EVENT_MOVED",
    "RECORDING_FOLDER_NAME",
]
