"""
Recording Orchestrator

Owns the one exclusive capture session: opens the camera, records a fixed
number of frames to disk, runs region detection on each frame, hands stills
and crops to background writers and finally releases everything.

State machine (tracked on the SessionCoordinator):
    IDLE -> OPENING -> RECORDING -> CLOSING -> IDLE
    OPENING -> FAILED -> IDLE   (device, writer, folder or window setup failed)
"""

import logging
import math
import os
import tempfile
import time
from collections.abc import Callable
from typing import Any

import cv2
import numpy as np

from ..config.schemas import CameraConfig, RecordingConfig
from ..models import FrameOverlay
from ..utils.constants import (
    CANCEL_KEYS,
    FRAME_FIRST,
    FRAME_LAST,
    FRAME_MIDDLE,
    LIVE_VIEW_WINDOW,
    OUTPUT_FOLDER_MODE,
    REGION_PATTERN,
    SANITY_CHECK_FOLDER,
    SANITY_CHECK_FRAMES,
    THUMBNAIL,
    VIDEO_BASENAME,
)
from .artifacts import ArtifactWriter
from .capture import CaptureReadError, discard_frames, open_capture, open_video_writer
from .detectors import DetectorSet
from .overlay import debug_columns, draw_debug_stats, draw_overlays
from .providers import (
    CaptureFactory,
    EngineFactory,
    HaarCascadeEngine,
    ImageWriter,
    WriterFactory,
    open_cv_writer,
    open_video_capture,
    write_image,
)
from .session import (
    DEFAULT_COORDINATOR,
    RecordingResult,
    RecordingSession,
    SessionCoordinator,
    SessionState,
)
from .stats import DebugStats

logger = logging.getLogger(__name__)


def _millis() -> float:
    return time.monotonic() * 1000.0


def frame_budget(fps: float, seconds: float) -> int:
    """Number of read iterations for a recording, rounded half away from zero."""
    return int(math.floor(fps * seconds + 0.5))


def safe_release(name: str, release: Callable[[], Any]) -> None:
    """Run one release step; failures are logged and never propagate."""
    try:
        logger.debug(f"closing {name}")
        release()
    except Exception as e:
        logger.error(f"error while attempting to close {name}: {e}")


class RecordingOrchestrator:
    """
    Records triggered video sessions, one at a time.

    Capture, writer, detection engine and image writer backends are
    injectable; the defaults are the OpenCV implementations.
    """

    def __init__(
        self,
        camera: CameraConfig,
        recording: RecordingConfig,
        detector_set: DetectorSet,
        coordinator: SessionCoordinator | None = None,
        capture_factory: CaptureFactory = open_video_capture,
        writer_factory: WriterFactory = open_cv_writer,
        engine_factory: EngineFactory = HaarCascadeEngine,
        image_writer: ImageWriter = write_image,
        clock: Callable[[], float] = _millis,
    ):
        self.camera = camera
        self.recording = recording
        self.detector_set = detector_set
        self.coordinator = coordinator or DEFAULT_COORDINATOR
        self.capture_factory = capture_factory
        self.writer_factory = writer_factory
        self.engine_factory = engine_factory
        self.image_writer = image_writer
        self.clock = clock
        self.last_session: RecordingSession | None = None

    def record(
        self,
        video_device: Any,
        seconds: float,
        output_folder: str,
        live_view: bool = False,
    ) -> RecordingResult:
        """
        Record seconds of video from video_device into output_folder.

        Never blocks on another recording: if one is already active this
        returns RecordingResult(False, None) straight away.

        Returns:
            RecordingResult with recorded=True when the frame loop completed,
            or the error that stopped the session
        """
        # only allow one recording at a time, and never queue one up:
        # it would be recording at the wrong time anyway
        if not self.coordinator.try_acquire():
            logger.warning(
                "unable to acquire camera lock, we must already be recording. skipping."
            )
            return RecordingResult(recorded=False)

        try:
            return self._record(video_device, seconds, output_folder, live_view)
        except Exception as e:
            logger.error(f"Unexpected error during recording: {e}", exc_info=True)
            return RecordingResult(recorded=False, error=e)
        finally:
            self.coordinator.release()

    def sanity_check(self) -> RecordingResult:
        """Record a few frames without live view to prove the pipeline works."""
        logger.debug("SanityCheck()")
        folder = os.path.join(tempfile.gettempdir(), SANITY_CHECK_FOLDER)
        seconds = SANITY_CHECK_FRAMES / self.camera.fps
        result = self.record(self.camera.device, seconds, folder, live_view=False)
        logger.debug(
            f"SanityCheck() complete. Returned: {result.recorded}, {result.error}"
        )
        return result

    def _record(
        self, video_device: Any, seconds: float, output_folder: str, live_view: bool
    ) -> RecordingResult:
        session = RecordingSession(
            video_device=video_device,
            output_folder=output_folder,
            output_filename=os.path.join(
                output_folder, VIDEO_BASENAME + self.recording.extension
            ),
            width=self.camera.width,
            height=self.camera.height,
            fps=self.camera.fps,
            codec=self.recording.codec,
            frame_count=frame_budget(self.camera.fps, seconds),
            live_view=live_view,
        )
        self.last_session = session
        logger.debug(f"recording filename: {session.output_filename}")

        self.coordinator.set_state(SessionState.OPENING)
        try:
            self._open(session)
        except Exception as e:
            logger.error(f"error: {e}")
            self.coordinator.set_state(SessionState.FAILED)
            self._close(session)
            return RecordingResult(recorded=False, error=e)

        self.coordinator.set_state(SessionState.RECORDING)
        try:
            result = self._run(session)
        finally:
            self.coordinator.set_state(SessionState.CLOSING)
            self._close(session)

        result.artifacts = session.artifacts
        return result

    def _open(self, session: RecordingSession) -> None:
        logger.debug("Open()")

        session.capture = open_capture(
            session.video_device,
            self.capture_factory,
            fourcc=self.camera.capture_fourcc,
            width=session.width,
            height=session.height,
            fps=session.fps,
            buffer_size=self.camera.buffer_size,
        )

        # the first buffered frames are often slow to arrive and stale
        discard_frames(session.capture, self.camera.buffer_size)

        os.makedirs(session.output_folder, mode=OUTPUT_FOLDER_MODE, exist_ok=True)

        session.detectors = self.detector_set.open_session(self.engine_factory)

        session.writer = open_video_writer(
            session.output_filename,
            self.writer_factory,
            session.codec,
            session.fps,
            session.width,
            session.height,
        )
        session.artifacts = ArtifactWriter(session.output_folder, self.image_writer)

        if session.live_view:
            self._open_window(session)

        logger.debug("Open() completed")

    def _open_window(self, session: RecordingSession) -> None:
        cv2.namedWindow(LIVE_VIEW_WINDOW, cv2.WINDOW_NORMAL)
        session.window = LIVE_VIEW_WINDOW
        cv2.resizeWindow(LIVE_VIEW_WINDOW, session.width, session.height)
        if self.recording.fullscreen_view:
            cv2.setWindowProperty(
                LIVE_VIEW_WINDOW, cv2.WND_PROP_FULLSCREEN, cv2.WINDOW_FULLSCREEN
            )

    def _run(self, session: RecordingSession) -> RecordingResult:
        begin = time.monotonic()

        read_stats, process_stats, total_stats = DebugStats(), DebugStats(), DebugStats()
        prev_millis = None
        columns = debug_columns() if session.live_view else None

        for i in range(session.frame_count):
            start_ts = self.clock()
            ok, frame = session.capture.read(session.frame)
            read_ts = self.clock()

            if frame is not None:
                session.frame = frame

            if not ok or frame is None or frame.size == 0:
                if not session.capture.isOpened():
                    return RecordingResult(
                        recorded=False,
                        error=CaptureReadError(
                            f"unable to read from webcam. device closed: {session.video_device}"
                        ),
                    )
                logger.debug("skipping empty frame from webcam")
                continue

            try:
                session.writer.write(frame)
            except (cv2.error, OSError) as e:
                logger.error(f"error occurred while writing video to disk: {e}")

            self._write_snapshots(session, i, frame)

            if session.detectors:
                self._detect(session, frame)

            processed_ts = self.clock()

            if session.live_view:
                if self.recording.show_debug_stats:
                    read_stats.add_value(read_ts - start_ts)
                    process_stats.add_value(processed_ts - read_ts)
                    current_millis = self.clock()
                    if prev_millis is not None:
                        total_stats.add_value(current_millis - prev_millis)
                    prev_millis = current_millis
                self._render_live_view(
                    session, frame, read_stats, process_stats, total_stats, columns
                )

        logger.debug(f"recording took {time.monotonic() - begin:.2f}s")
        return RecordingResult(recorded=True)

    def _thumbnail_size(self, session: RecordingSession) -> tuple[int, int]:
        height = self.recording.thumbnail_height
        width = int(height * (session.width / session.height))
        return (width, height)

    def _write_snapshots(
        self, session: RecordingSession, index: int, frame: np.ndarray
    ) -> None:
        if index == 0:
            session.artifacts.write_frame(FRAME_FIRST, frame)
            session.artifacts.write_thumbnail(
                THUMBNAIL, frame, self._thumbnail_size(session)
            )
        elif index == session.frame_count // 2:
            session.artifacts.write_frame(FRAME_MIDDLE, frame)
        elif index == session.frame_count - 1:
            session.artifacts.write_frame(FRAME_LAST, frame)

    def _detect(self, session: RecordingSession, frame: np.ndarray) -> None:
        detectors = self.detector_set
        session.process_frame = detectors.downscale(frame, session.process_frame)
        frame_size = (frame.shape[1], frame.shape[0])

        session.overlays = []
        for detector in session.detectors:
            rects = detectors.detect(detector, session.process_frame, frame_size)
            if not rects:
                continue

            if detector.observe(len(rects)):
                logger.debug(f"Detected {len(rects)} {detector.name}(s)")
                if detectors.save_detections:
                    # continue numbering so a later, larger group never
                    # overwrites crops that were already written
                    indices = detector.reserve_indices(len(rects))
                    for index, rect in zip(indices, rects):
                        session.artifacts.write_region(
                            REGION_PATTERN.format(name=detector.name, index=index),
                            frame,
                            detectors.to_full_resolution(rect),
                        )

            if session.live_view:
                session.overlays.extend(
                    FrameOverlay(detectors.to_full_resolution(rect), detector.draw_style)
                    for rect in rects
                )

    def _render_live_view(
        self,
        session: RecordingSession,
        frame: np.ndarray,
        read_stats: DebugStats,
        process_stats: DebugStats,
        total_stats: DebugStats,
        columns: tuple[int, int, int] | None,
    ) -> None:
        view = frame.copy()
        if self.recording.show_debug_stats:
            draw_debug_stats(view, read_stats, process_stats, total_stats, columns)
        draw_overlays(view, session.overlays)

        cv2.imshow(session.window, view)
        key = cv2.waitKey(1) & 0xFF

        if key in CANCEL_KEYS:
            # only the preview stops; the recording runs to its frame budget
            logger.debug("stopping video live view")
            session.live_view = False
            safe_release("preview window", lambda: self._destroy_window(session))

    def _destroy_window(self, session: RecordingSession) -> None:
        if session.window is not None:
            window, session.window = session.window, None
            cv2.destroyWindow(window)

    def _close(self, session: RecordingSession) -> None:
        logger.debug("Close()")

        def drop_buffers():
            session.frame = None
            session.process_frame = None
            session.overlays = []

        safe_release("frame buffers", drop_buffers)
        if session.capture is not None:
            safe_release("capture device", session.capture.release)
        if session.writer is not None:
            safe_release("video writer", session.writer.release)
        safe_release(
            "detectors", lambda: self.detector_set.release(session.detectors)
        )
        if session.window is not None:
            safe_release("preview window", lambda: self._destroy_window(session))

        logger.debug("Close() completed")
