"""
Capture collaborator protocols - the interfaces the recorder calls into.

The default implementations are OpenCV's own objects. Tests and alternative
backends can supply anything that satisfies these protocols.
"""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import cv2
import numpy as np

from ..models import Rect


@runtime_checkable
class CaptureDevice(Protocol):
    """Subset of cv2.VideoCapture used by the recorder."""

    def isOpened(self) -> bool: ...

    def set(self, prop_id: int, value: float) -> bool: ...

    def grab(self) -> bool: ...

    def read(self, image: np.ndarray | None = None) -> tuple[bool, np.ndarray | None]: ...

    def release(self) -> None: ...


@runtime_checkable
class VideoWriter(Protocol):
    """Subset of cv2.VideoWriter used by the recorder."""

    def isOpened(self) -> bool: ...

    def write(self, image: np.ndarray) -> None: ...

    def release(self) -> None: ...


@runtime_checkable
class DetectionEngine(Protocol):
    """A loadable multi-scale region detector."""

    def load(self, path: str) -> bool: ...

    def detect(
        self,
        frame: np.ndarray,
        scale_factor: float | None = None,
        min_neighbors: int | None = None,
        flags: int | None = None,
        min_size: tuple[int, int] | None = None,
        max_size: tuple[int, int] | None = None,
    ) -> list[Rect]: ...

    def release(self) -> None: ...


CaptureFactory = Callable[[Any], CaptureDevice]
WriterFactory = Callable[[str, int, float, tuple[int, int]], VideoWriter]
EngineFactory = Callable[[], DetectionEngine]
ImageWriter = Callable[[str, np.ndarray], bool]


class HaarCascadeEngine:
    """DetectionEngine backed by cv2.CascadeClassifier."""

    def __init__(self):
        self._classifier: cv2.CascadeClassifier | None = cv2.CascadeClassifier()

    def load(self, path: str) -> bool:
        return bool(self._classifier.load(path))

    def detect(
        self,
        frame: np.ndarray,
        scale_factor: float | None = None,
        min_neighbors: int | None = None,
        flags: int | None = None,
        min_size: tuple[int, int] | None = None,
        max_size: tuple[int, int] | None = None,
    ) -> list[Rect]:
        if self._classifier is None:
            raise RuntimeError("Cascade classifier already released")

        if scale_factor is None:
            found = self._classifier.detectMultiScale(frame)
        else:
            found = self._classifier.detectMultiScale(
                frame,
                scaleFactor=scale_factor,
                minNeighbors=min_neighbors,
                flags=flags,
                minSize=min_size,
                maxSize=max_size,
            )
        return [Rect.from_xywh(row) for row in found]

    def release(self) -> None:
        self._classifier = None


def open_video_capture(device: Any) -> cv2.VideoCapture:
    return cv2.VideoCapture(device)


def open_cv_writer(
    path: str, fourcc: int, fps: float, size: tuple[int, int]
) -> cv2.VideoWriter:
    return cv2.VideoWriter(path, fourcc, fps, size, True)


def write_image(path: str, image: np.ndarray) -> bool:
    return bool(cv2.imwrite(path, image))
