"""
Camera initialization and video writer management.
"""

import logging
from typing import Any

import cv2

from .providers import CaptureDevice, CaptureFactory, VideoWriter, WriterFactory

logger = logging.getLogger(__name__)


class CaptureOpenError(RuntimeError):
    """Raised when the capture device or the video writer cannot be opened."""


class CaptureReadError(RuntimeError):
    """Raised when the capture device closes in the middle of a recording."""


def fourcc_code(codec: str) -> int:
    """
    Convert a four character codec name (e.g. "MJPG") into its FourCC code.

    Returns -1 when the codec is not exactly four characters.
    """
    if not codec or len(codec) != 4:
        return -1
    return cv2.VideoWriter_fourcc(*codec)


def parse_device(device: Any) -> Any:
    """Numeric device strings ("0", "2") select a camera index."""
    if isinstance(device, str) and device.isdigit():
        return int(device)
    return device


def open_capture(
    device: Any,
    factory: CaptureFactory,
    fourcc: str = "",
    width: int = 0,
    height: int = 0,
    fps: float = 0,
    buffer_size: int = 0,
) -> CaptureDevice:
    """
    Open and configure a capture device.

    The FourCC is applied before any size or fps setting; some devices reject
    or slow down when the codec is changed after the resolution. Zero values
    leave the device default in place.

    Raises:
        CaptureOpenError: If the device cannot be opened
    """
    logger.info(f"Opening video capture device: {device}")
    cap = factory(parse_device(device))

    if not cap.isOpened():
        cap.release()
        raise CaptureOpenError(f"Error opening video capture device: {device}")

    if fourcc:
        cap.set(cv2.CAP_PROP_FOURCC, fourcc_code(fourcc))
    if width:
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    if height:
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    if fps:
        cap.set(cv2.CAP_PROP_FPS, fps)
    if buffer_size:
        cap.set(cv2.CAP_PROP_BUFFERSIZE, buffer_size)

    return cap


def discard_frames(cap: CaptureDevice, count: int) -> None:
    """Grab and drop buffered frames so the first recorded frame is fresh."""
    for _ in range(count):
        if not cap.grab():
            logger.debug("No more buffered frames to discard")
            break


def open_video_writer(
    path: str,
    factory: WriterFactory,
    codec: str,
    fps: float,
    width: int,
    height: int,
) -> VideoWriter:
    """
    Open a color video writer.

    Raises:
        CaptureOpenError: If the writer cannot be opened
    """
    writer = factory(path, fourcc_code(codec), fps, (width, height))
    if not writer.isOpened():
        writer.release()
        raise CaptureOpenError(f"Error opening video writer: {path}")

    logger.debug(f"Video writer opened: {path} ({codec} {width}x{height}@{fps})")
    return writer
