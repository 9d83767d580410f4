"""
Configuration loading - YAML file, environment overrides and validation.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..utils.constants import ENV_LOG_LEVEL, ENV_VIDEO_DEVICE
from .schemas import Config, validate_config_pydantic

logger = logging.getLogger(__name__)

USER_CONFIG_PATH = Path.home() / ".config" / "loss-prevention" / "config.yaml"


class ConfigValidationError(Exception):
    """Raised when config validation fails."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


def find_config_file(config_path: str | None) -> Path:
    """
    Find config file in standard locations.

    Search order:
    1. Specified path (if provided)
    2. Current directory (config.yaml)
    3. ~/.config/loss-prevention/config.yaml

    Raises:
        ConfigValidationError: If no config file exists
    """
    candidates = []
    if config_path:
        candidates.append(Path(config_path).expanduser())
    candidates.append(Path.cwd() / "config.yaml")
    candidates.append(USER_CONFIG_PATH)

    for candidate in candidates:
        if candidate.is_file():
            return candidate

    searched = ", ".join(str(c) for c in candidates)
    raise ConfigValidationError(f"No config file found (searched: {searched})")


def load_config_with_env(config: dict) -> dict:
    """
    Apply environment variable overrides to config.

    Args:
        config: Base configuration dictionary

    Returns:
        Configuration with environment variables applied
    """
    if ENV_VIDEO_DEVICE in os.environ:
        logger.info(f"Using video device from environment: {ENV_VIDEO_DEVICE}")
        config.setdefault("camera", {})["device"] = os.environ[ENV_VIDEO_DEVICE]

    if ENV_LOG_LEVEL in os.environ:
        config.setdefault("logging", {})["level"] = os.environ[ENV_LOG_LEVEL]

    return config


def format_validation_errors(error: ValidationError) -> list[str]:
    """Flatten pydantic errors into "section.field: message" strings."""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        messages.append(f"{location}: {item['msg']}")
    return messages


def parse_config(raw: dict | None) -> Config:
    """
    Apply environment overrides and validate a raw configuration dict.

    Raises:
        ConfigValidationError: If the configuration is invalid
    """
    config = load_config_with_env(dict(raw or {}))
    try:
        return validate_config_pydantic(config)
    except ValidationError as e:
        errors = format_validation_errors(e)
        raise ConfigValidationError(
            f"Invalid configuration ({len(errors)} error(s))", errors
        ) from e


def load_config(config_path: str | None = None) -> Config:
    """
    Load, override and validate the configuration file.

    Raises:
        ConfigValidationError: If the file is missing, not YAML or invalid
    """
    path = find_config_file(config_path)

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in {path}: {e}") from e

    if raw is not None and not isinstance(raw, dict):
        raise ConfigValidationError(f"Config root must be a mapping: {path}")

    config = parse_config(raw)
    logger.info(f"Configuration loaded from {path}")
    return config
