"""
Live view annotations - detection overlays and debug statistics text.
"""

import cv2
import numpy as np

from ..models import FrameOverlay
from ..utils.constants import (
    DEBUG_COLUMN_GAP,
    DEBUG_FONT_SCALE,
    DEBUG_FONT_THICKNESS,
    DEBUG_LINE_HEIGHT,
    DEBUG_STATS_COLOR,
    DEBUG_TEXT_PADDING,
    OVERLAY_LABEL_OFFSET,
)
from .stats import DebugStats

FONT = cv2.FONT_HERSHEY_SIMPLEX


def draw_overlays(frame: np.ndarray, overlays: list[FrameOverlay]) -> np.ndarray:
    """
    Draw detected regions onto frame (modified in place).

    Regions are drawn as rectangles, or as the circle inscribed at the
    bottom-right of the region for circle styles, with the annotation above.
    """
    for overlay in overlays:
        rect = overlay.rect
        style = overlay.draw_style

        if style.render_as_circle:
            radius = rect.width // 2
            right, bottom = rect.bottom_right
            center = (right - radius, bottom - radius)
            cv2.circle(frame, center, radius, style.color, style.thickness)
        else:
            cv2.rectangle(
                frame, rect.top_left, rect.bottom_right, style.color, style.thickness
            )

        if style.annotation:
            cv2.putText(
                frame,
                style.annotation,
                (rect.x, rect.y - OVERLAY_LABEL_OFFSET),
                FONT,
                1,
                style.color,
                DEBUG_FONT_THICKNESS,
            )

    return frame


def _text_width(text: str) -> int:
    (width, _), _ = cv2.getTextSize(text, FONT, DEBUG_FONT_SCALE, DEBUG_FONT_THICKNESS)
    return width


def debug_columns() -> tuple[int, int, int]:
    """X positions of the instant, min/max and average columns."""
    x2 = _text_width("Avg Process: 99.9")
    x3 = _text_width("Min Process: 99") + x2 + DEBUG_COLUMN_GAP
    return DEBUG_TEXT_PADDING, x2, x3


def draw_debug_stats(
    frame: np.ndarray,
    read: DebugStats,
    process: DebugStats,
    total: DebugStats,
    columns: tuple[int, int, int] | None = None,
) -> np.ndarray:
    """Write read/process latency and fps statistics onto frame (in place)."""
    x1, x2, x3 = columns or debug_columns()

    lines = [
        # Instant
        (x1, 1, f"   Read: {int(read.current)}"),
        (x1, 2, f"Process: {int(process.current)}"),
        (x1, 3, f"    FPS: {total.fps():.1f}"),
        # Min / Max
        (x2, 1, f"   Min Read: {int(read.min)}"),
        (x2, 2, f"   Max Read: {int(read.max)}"),
        (x2, 3, f"Min Process: {int(process.min)}"),
        (x2, 4, f"Max Process: {int(process.max)}"),
        # Average
        (x3, 1, f"   Avg Read: {read.average():.1f}"),
        (x3, 2, f"Avg Process: {process.average():.1f}"),
        (x3, 3, f"    Avg FPS: {total.average_fps():.1f}"),
    ]

    for x, row, text in lines:
        cv2.putText(
            frame,
            text,
            (x, DEBUG_LINE_HEIGHT * row),
            FONT,
            DEBUG_FONT_SCALE,
            DEBUG_STATS_COLOR,
            DEBUG_FONT_THICKNESS,
        )

    return frame
