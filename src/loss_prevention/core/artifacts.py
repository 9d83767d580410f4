"""
Artifact persistence - still frames, thumbnails and region crops.

Every write clones the image on the calling thread and hands the clone to a
background thread. The background thread never sees the live frame buffer, so
the capture loop can overwrite it immediately.
"""

import logging
import os
import threading
import time

import cv2
import numpy as np

from ..models import Rect
from .providers import ImageWriter, write_image

logger = logging.getLogger(__name__)


class ArtifactWriter:
    """Fire-and-forget image writer for one recording folder."""

    def __init__(self, output_folder: str, image_writer: ImageWriter = write_image):
        self.output_folder = output_folder
        self.image_writer = image_writer
        self._pending: set[threading.Thread] = set()
        self._lock = threading.Lock()

    def write_frame(self, filename: str, frame: np.ndarray) -> None:
        logger.debug(f"writing image: {filename}")
        self._detach(filename, frame.copy())

    def write_thumbnail(
        self, filename: str, frame: np.ndarray, size: tuple[int, int]
    ) -> None:
        """Resize frame to size (width, height) and write it."""
        logger.debug(f"writing thumbnail image: {filename}")
        thumb = cv2.resize(frame, size, interpolation=cv2.INTER_LINEAR)
        self._detach(filename, thumb)

    def write_region(self, filename: str, frame: np.ndarray, rect: Rect) -> None:
        """Crop rect (clipped to the frame) out of frame and write it."""
        logger.debug(f"writing image region: {filename} ({rect})")
        height, width = frame.shape[:2]
        x1, y1 = max(rect.x, 0), max(rect.y, 0)
        x2 = min(rect.x + rect.width, width)
        y2 = min(rect.y + rect.height, height)
        if x2 <= x1 or y2 <= y1:
            logger.warning(f"Skipping region outside of frame: {filename} ({rect})")
            return
        self._detach(filename, frame[y1:y2, x1:x2].copy())

    def _detach(self, filename: str, image: np.ndarray) -> None:
        path = os.path.join(self.output_folder, filename)
        thread = threading.Thread(
            target=self._write,
            args=(path, image),
            name=f"artifact:{filename}",
            daemon=True,
        )
        with self._lock:
            self._pending.add(thread)
        thread.start()

    def _write(self, path: str, image: np.ndarray) -> None:
        """Background write. Owns image; drops it whatever the outcome."""
        try:
            if not self.image_writer(path, image):
                logger.warning(f"Failed to write image: {path}")
        except Exception as e:
            logger.error(f"Error writing image {path}: {e}")
        finally:
            del image
            with self._lock:
                self._pending.discard(threading.current_thread())

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def wait(self, timeout: float | None = None) -> bool:
        """
        Wait for outstanding writes.

        Returns:
            True if every write finished within timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._lock:
            threads = list(self._pending)

        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)

        return self.pending == 0
