"""
Recording session state and the process-wide single-flight coordinator.

Lifecycle of the coordinator:
    - DEFAULT_COORDINATOR is created at import and shared by every
      orchestrator that is not given its own.
    - try_acquire() never blocks. A caller that gets False must drop its
      recording; queueing it would record at the wrong time.
    - release() is called exactly once by whoever acquired, when the
      session is back to IDLE (or FAILED).
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np

from ..models import Detector, FrameOverlay
from .artifacts import ArtifactWriter

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    OPENING = "opening"
    RECORDING = "recording"
    CLOSING = "closing"
    FAILED = "failed"


class SessionCoordinator:
    """At most one recording session may be opening or recording at a time."""

    def __init__(self):
        self._lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._state = SessionState.IDLE

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self.set_state(SessionState.IDLE)
        self._lock.release()

    @property
    def active(self) -> bool:
        return self._lock.locked()

    @property
    def state(self) -> SessionState:
        with self._state_lock:
            return self._state

    def set_state(self, state: SessionState) -> None:
        with self._state_lock:
            if state != self._state:
                logger.debug(f"Session state: {self._state.value} -> {state.value}")
            self._state = state


DEFAULT_COORDINATOR = SessionCoordinator()


@dataclass
class RecordingResult:
    """
    Outcome reported to whoever asked for the recording.

    artifacts is the background image writer of the session that produced
    this result; wait() on it before reading its stills.
    """

    recorded: bool
    error: Exception | None = None
    artifacts: ArtifactWriter | None = None


@dataclass
class RecordingSession:
    """
    Resources of one triggered recording. Owned by the orchestrator for the
    lifetime of the session and released when it closes.

    Attributes:
        video_device: Capture device index, path or URL
        output_folder: Session folder for the video and artifacts
        output_filename: Full path of the video file
        width, height, fps, codec: Capture and output parameters
        frame_count: Number of read iterations for the session
        live_view: Whether the preview window is (still) shown
        capture: Opened capture device
        writer: Opened video writer
        frame: Raw frame buffer, reused across reads
        process_frame: Downscaled working buffer for detection
        detectors: Detectors with loaded engines
        overlays: Regions to draw for the current frame
        artifacts: Background writer for stills and crops
        window: Preview window name once created
    """

    video_device: Any
    output_folder: str
    output_filename: str
    width: int
    height: int
    fps: float
    codec: str
    frame_count: int = 0
    live_view: bool = False
    capture: Any = None
    writer: Any = None
    frame: np.ndarray | None = None
    process_frame: np.ndarray | None = None
    detectors: list[Detector] = field(default_factory=list)
    overlays: list[FrameOverlay] = field(default_factory=list)
    artifacts: ArtifactWriter | None = None
    window: str | None = None
