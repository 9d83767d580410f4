"""
Pydantic schemas for configuration validation.

Provides type-safe, declarative validation with clear error messages.
"""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import DEFAULT_FACILITY
from ..utils.constants import DEFAULT_CASCADE_DIR

DetectorName = Literal["face", "profile_face", "upper_body", "full_body", "eye"]


class StrictModel(BaseModel):
    """Base model that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


class CameraConfig(StrictModel):
    """Capture device settings."""

    device: str = Field(default="0", min_length=1, description="Index, path or URL")
    capture_fourcc: str = Field(
        default="", description="FourCC requested from the device (e.g. MJPG)"
    )
    width: int = Field(default=1280, gt=0)
    height: int = Field(default=720, gt=0)
    fps: float = Field(default=15.0, gt=0)
    buffer_size: int = Field(
        default=0, ge=0, description="Device buffer size, also frames discarded on open"
    )

    @field_validator("device", mode="before")
    @classmethod
    def coerce_device(cls, v: Any) -> str:
        return str(v)

    @field_validator("capture_fourcc")
    @classmethod
    def validate_fourcc(cls, v: str) -> str:
        if v and len(v) != 4:
            raise ValueError("capture_fourcc must be exactly 4 characters")
        return v


class RecordingConfig(StrictModel):
    """Recording output settings."""

    duration_seconds: float = Field(default=15.0, gt=0)
    output_root: str = Field(default="/recordings", min_length=1)
    codec: str = Field(default="avc1", description="Output video FourCC")
    extension: str = Field(default=".mp4")
    thumbnail_height: int = Field(default=150, gt=0)
    live_view: bool = False
    fullscreen_view: bool = False
    show_debug_stats: bool = False
    sanity_check_on_startup: bool = True

    @field_validator("codec")
    @classmethod
    def validate_codec(cls, v: str) -> str:
        if len(v) != 4:
            raise ValueError("codec must be exactly 4 characters")
        return v

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        if not v.startswith("."):
            raise ValueError("extension must start with '.'")
        return v


class DetectionParamsConfig(StrictModel):
    """Cascade detection parameters. All zero means engine defaults."""

    scale_factor: float = Field(default=0.0, ge=0)
    min_neighbors: int = Field(default=0, ge=0)
    flags: int = Field(default=0, ge=0)
    min_width_fraction: float = Field(default=0.0, ge=0, le=1)
    min_height_fraction: float = Field(default=0.0, ge=0, le=1)
    max_width_fraction: float = Field(default=0.0, ge=0, le=1)
    max_height_fraction: float = Field(default=0.0, ge=0, le=1)

    @field_validator("scale_factor")
    @classmethod
    def validate_scale_factor(cls, v: float) -> float:
        if 0 < v <= 1:
            raise ValueError("scale_factor must be > 1 (or 0 for engine defaults)")
        return v


class DetectorConfig(StrictModel):
    """Per-category detector settings. Unset fields use built-in defaults."""

    enabled: bool = False
    file: str | None = None
    annotation: str | None = None
    color: int | None = Field(default=None, ge=0, le=0xFFFFFF, description="0xRRGGBB")
    thickness: int | None = Field(default=None, gt=0)
    render_as_circle: bool | None = None
    params: DetectionParamsConfig | None = None


class DetectionConfig(StrictModel):
    """Region detection settings."""

    cascade_dir: str = DEFAULT_CASCADE_DIR
    image_process_scale: int = Field(
        default=4, ge=1, description="Frames are shrunk by this factor for detection"
    )
    save_detections: bool = True
    detectors: dict[DetectorName, DetectorConfig] = Field(default_factory=dict)


class FiltersConfig(StrictModel):
    """Regular expressions a tag must match to trigger a recording."""

    sku: str = ".*"
    epc: str = ".*"

    @field_validator("sku", "epc")
    @classmethod
    def validate_regex(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid regular expression {v!r}: {e}") from e
        return v

    def compiled(self) -> tuple[re.Pattern, re.Pattern]:
        return re.compile(self.sku), re.compile(self.epc)


class SensorConfig(StrictModel):
    """Static sensor definition."""

    device_id: str = Field(..., min_length=1)
    facility_id: str = DEFAULT_FACILITY
    personality: Literal["NONE", "EXIT", "POS", "FITTING_ROOM"] = "NONE"
    aliases: list[str] = Field(default_factory=list)

    @field_validator("personality", mode="before")
    @classmethod
    def upper_personality(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class NotificationsConfig(StrictModel):
    """Notifications sent after each completed recording."""

    enabled: bool = False
    attach_thumbnail: bool = True
    notifiers: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("notifiers")
    @classmethod
    def validate_notifiers(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for entry in v:
            if "id" not in entry or "type" not in entry:
                raise ValueError("each notifier needs an 'id' and a 'type'")
        return v


class LoggingConfig(StrictModel):
    """Logging settings."""

    level: str = "info"


class Config(StrictModel):
    """Complete configuration schema."""

    camera: CameraConfig = Field(default_factory=CameraConfig)
    recording: RecordingConfig = Field(default_factory=RecordingConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    filters: FiltersConfig = Field(default_factory=FiltersConfig)
    sensors: list[SensorConfig] = Field(default_factory=list)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def validate_config_pydantic(config: dict) -> Config:
    """
    Validate configuration using Pydantic.

    Args:
        config: Raw configuration dictionary

    Returns:
        Validated Config object

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return Config(**config)
