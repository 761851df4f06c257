"""
Application configuration.

Loads the YAML config file and splits it into the per-component dataclass
configs. Every field has a default, so a missing file or section still
yields a runnable configuration.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml

from handpose.capture.frame_sampler import SamplerConfig
from handpose.capture.session import CaptureConfig
from handpose.detection.hand_detector import HandDetectorConfig
from handpose.visualization.camera_view import ViewConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 3

    @classmethod
    def from_dict(cls, config: dict) -> "LoggingConfig":
        return cls(
            level=config.get("level", "INFO"),
            file=config.get("file"),
            max_size_mb=config.get("max_size_mb", 10),
            backup_count=config.get("backup_count", 3),
        )


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CaptureConfig = field(default_factory=CaptureConfig)
    analysis: SamplerConfig = field(default_factory=SamplerConfig)
    mediapipe: HandDetectorConfig = field(default_factory=HandDetectorConfig)
    overlay: ViewConfig = field(default_factory=ViewConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Union[str, Path, None] = None) -> dict:
    """Load the YAML file. A missing file gives an empty dict."""
    config_path = Path(config_path or DEFAULT_CONFIG_PATH)
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", config_path)
        return {}

    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping, got {}".format(type(data).__name__))
    logger.info("Loaded config from %s", config_path)
    return data


def _section(config_dict: dict, name: str) -> dict:
    section = config_dict.get(name) or {}
    if not isinstance(section, dict):
        logger.warning("Config section '%s' should be a mapping, got %s; ignoring it",
                       name, type(section).__name__)
        return {}
    return section


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from configuration dictionary."""
    return AppConfig(
        camera=CaptureConfig.from_dict(_section(config_dict, "camera")),
        analysis=SamplerConfig.from_dict(_section(config_dict, "analysis")),
        mediapipe=HandDetectorConfig.from_dict(_section(config_dict, "mediapipe")),
        overlay=ViewConfig.from_dict(_section(config_dict, "overlay")),
        logging=LoggingConfig.from_dict(_section(config_dict, "logging")),
    )
