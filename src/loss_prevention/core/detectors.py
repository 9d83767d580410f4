"""
Detector Set Manager

Holds the configured region detectors, loads their cascade engines for a
recording session and runs them against a downscaled working copy of each
frame. Regions come back in working-buffer coordinates and are scaled back
up with to_full_resolution() before they are cropped or drawn.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass

import cv2
import numpy as np

from ..config.schemas import DetectionConfig, DetectorConfig
from ..models import DetectionParams, Detector, DrawStyle, Rect, color_from_rgb
from .providers import EngineFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectorDefaults:
    """Built-in settings for a detection category."""

    file: str
    annotation: str
    color: int
    thickness: int
    render_as_circle: bool
    params: DetectionParams


# Ordered: overlays are drawn and crops written in this order
DEFAULT_DETECTORS: dict[str, DetectorDefaults] = {
    "face": DetectorDefaults(
        file="haarcascade_frontalface_alt.xml",
        annotation="Face",
        color=0x00FF00,
        thickness=2,
        render_as_circle=False,
        params=DetectionParams(1.4, 4, 0, 0.05, 0.05, 0.8, 0.8),
    ),
    "profile_face": DetectorDefaults(
        file="haarcascade_profileface.xml",
        annotation="Profile",
        color=0x0000FF,
        thickness=2,
        render_as_circle=False,
        params=DetectionParams(1.4, 4, 0, 0.1, 0.1, 0.8, 0.8),
    ),
    "upper_body": DetectorDefaults(
        file="haarcascade_upperbody.xml",
        annotation="Upper Body",
        color=0xFF00FF,
        thickness=2,
        render_as_circle=False,
        params=DetectionParams(1.5, 3, 0, 0.1, 0.1, 0.75, 0.75),
    ),
    "full_body": DetectorDefaults(
        file="haarcascade_fullbody.xml",
        annotation="Body",
        color=0xFFFF00,
        thickness=2,
        render_as_circle=False,
        params=DetectionParams(1.4, 2, 0, 0.1, 0.1, 0.6, 0.8),
    ),
    "eye": DetectorDefaults(
        file="haarcascade_eye.xml",
        annotation="",
        color=0xFFFFFF,
        thickness=1,
        render_as_circle=True,
        params=DetectionParams(1.5, 5, 0, 0.01, 0.01, 0.025, 0.025),
    ),
}


def build_detector(name: str, settings: DetectorConfig) -> Detector:
    """Merge a detector's configured settings over its built-in defaults."""
    defaults = DEFAULT_DETECTORS[name]

    params = defaults.params
    if settings.params is not None:
        params = DetectionParams(**settings.params.model_dump())

    def pick(value, fallback):
        return fallback if value is None else value

    return Detector(
        name=name,
        source_file=pick(settings.file, defaults.file),
        draw_style=DrawStyle(
            annotation=pick(settings.annotation, defaults.annotation),
            color=color_from_rgb(pick(settings.color, defaults.color)),
            thickness=pick(settings.thickness, defaults.thickness),
            render_as_circle=pick(settings.render_as_circle, defaults.render_as_circle),
        ),
        params=params,
    )


class DetectorSet:
    """
    The configured detectors for this process.

    Built once from configuration. Each recording session gets its own
    copies with fresh counters and freshly loaded engines.
    """

    def __init__(
        self,
        detectors: list[Detector],
        cascade_dir: str = "",
        scale: int = 1,
        save_detections: bool = True,
    ):
        if scale < 1:
            raise ValueError(f"Image process scale must be >= 1, got {scale}")
        self.detectors = detectors
        self.cascade_dir = cascade_dir
        self.scale = scale
        self.save_detections = save_detections

    @classmethod
    def from_config(cls, config: DetectionConfig) -> "DetectorSet":
        """Create one detector per enabled category. Disabled ones are omitted."""
        detectors = [
            build_detector(name, config.detectors[name])
            for name in DEFAULT_DETECTORS
            if name in config.detectors and config.detectors[name].enabled
        ]
        logger.info(
            f"Enabled detections: {', '.join(d.name for d in detectors) or 'none'}"
        )
        return cls(
            detectors,
            cascade_dir=config.cascade_dir,
            scale=config.image_process_scale,
            save_detections=config.save_detections,
        )

    @property
    def names(self) -> list[str]:
        return [d.name for d in self.detectors]

    def source_path(self, detector: Detector) -> str:
        if os.path.isabs(detector.source_file) or not self.cascade_dir:
            return detector.source_file
        return os.path.join(self.cascade_dir, detector.source_file)

    def open_session(self, engine_factory: EngineFactory) -> list[Detector]:
        """
        Load an engine for every detector.

        A detector whose cascade fails to load is logged and left out of the
        session; the others still run.
        """
        active = []
        for template in self.detectors:
            detector = dataclasses.replace(
                template, highest_count_seen=0, artifacts_written=0, engine=None
            )
            path = self.source_path(detector)
            try:
                engine = engine_factory()
                loaded = engine.load(path)
            except Exception as e:
                logger.error(f"Error loading cascade file {path}: {e}")
                continue

            if not loaded:
                logger.error(f"Error reading cascade file: {path}")
                _release_engine(detector.name, engine)
                continue

            detector.engine = engine
            active.append(detector)

        return active

    def release(self, detectors: list[Detector]) -> None:
        """Release every loaded engine. One failure does not stop the rest."""
        for detector in detectors:
            if detector.engine is None:
                continue
            _release_engine(detector.name, detector.engine)
            detector.engine = None

    def downscale(self, frame: np.ndarray, dst: np.ndarray | None = None) -> np.ndarray:
        """Shrink a frame by the process scale into the working buffer."""
        if self.scale == 1:
            if dst is not None and dst.shape == frame.shape:
                np.copyto(dst, frame)
                return dst
            return frame.copy()
        factor = 1.0 / self.scale
        return cv2.resize(
            frame, (0, 0), dst=dst, fx=factor, fy=factor, interpolation=cv2.INTER_LINEAR
        )

    def detect(
        self, detector: Detector, work_frame: np.ndarray, frame_size: tuple[int, int]
    ) -> list[Rect]:
        """
        Run one detector against the working buffer.

        Args:
            detector: Session detector with a loaded engine
            work_frame: Downscaled frame
            frame_size: (width, height) of the full resolution frame; window
                size fractions are taken of these dimensions

        Returns:
            Regions in working-buffer coordinates
        """
        params = detector.params
        if params.is_default():
            return detector.engine.detect(work_frame)

        width, height = frame_size
        return detector.engine.detect(
            work_frame,
            scale_factor=params.scale_factor,
            min_neighbors=params.min_neighbors,
            flags=params.flags,
            min_size=params.min_size(width, height),
            max_size=params.max_size(width, height),
        )

    def to_full_resolution(self, rect: Rect) -> Rect:
        return rect.scaled(self.scale)


def _release_engine(name: str, engine) -> None:
    try:
        engine.release()
    except Exception as e:
        logger.error(f"Error while releasing {name} detector: {e}")
