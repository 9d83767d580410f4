"""
Configuration loading and validation.

- load_config: Find, read and validate the YAML configuration
- load_config_with_env: Apply environment variable overrides
- Config: Complete Pydantic configuration schema
"""

from .loader import (
    ConfigValidationError,
    find_config_file,
    format_validation_errors,
    load_config,
    load_config_with_env,
    parse_config,
)
from .schemas import (
    CameraConfig,
    Config,
    DetectionConfig,
    DetectionParamsConfig,
    DetectorConfig,
    FiltersConfig,
    NotificationsConfig,
    RecordingConfig,
    SensorConfig,
    validate_config_pydantic,
)

__all__ = [
    "CameraConfig",
    "Config",
    "ConfigValidationError",
    "DetectionConfig",
    "DetectionParamsConfig",
    "DetectorConfig",
    "FiltersConfig",
    "NotificationsConfig",
    "RecordingConfig",
    "SensorConfig",
    "find_config_file",
    "format_validation_errors",
    "load_config",
    "load_config_with_env",
    "parse_config",
    "validate_config_pydantic",
]
