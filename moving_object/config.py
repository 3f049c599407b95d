# moving_object/config.py

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml

from moving_object.errors import ConfigError

logger = logging.getLogger(__name__)

# Older deployments spelled the threshold with a single 's'
LEGACY_KEYS = {
    'posibility_threshold': 'possibility_threshold',
}

MATCH_MODES = ('exact', 'iou')


@dataclass
class FusionConfig:
    """
    Runtime configuration of the fusion engine.

    Attributes:
        social_msg_enabled: Emit the social-object subset
        moving_object_msg_enabled: Emit the full moving-object list
        possibility_threshold: Minimum detection confidence to merge
        social_filter: Class labels treated as social objects
        frame_retention: Maximum number of live frames in the registry
        roi_match_mode: 'exact' ROI equality or 'iou' overlap matching
        roi_iou_threshold: Minimum IoU when roi_match_mode is 'iou'
        late_arrival_memory: Number of retired frame keys remembered to
            detect late arrivals
        log_level: Logging level name used by the CLI
    """

    social_msg_enabled: bool = True
    moving_object_msg_enabled: bool = True
    possibility_threshold: float = 0.0
    social_filter: List[str] = field(default_factory=lambda: ['person', 'robot'])
    frame_retention: int = 10
    roi_match_mode: str = 'exact'
    roi_iou_threshold: float = 0.5
    late_arrival_memory: int = 100
    log_level: str = 'INFO'

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check value ranges and types.

        Raises:
            ConfigError: if any value is out of range or of the wrong type
        """
        for name in ('social_msg_enabled', 'moving_object_msg_enabled'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be a boolean, got {getattr(self, name)!r}")

        threshold = self.possibility_threshold
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or not 0.0 <= threshold <= 1.0:
            raise ConfigError(f"possibility_threshold must be a number in [0, 1], got {threshold!r}")

        if isinstance(self.social_filter, str) or not isinstance(self.social_filter, (list, tuple)):
            raise ConfigError(f"social_filter must be a list of strings, got {self.social_filter!r}")
        if not all(isinstance(label, str) for label in self.social_filter):
            raise ConfigError(f"social_filter entries must be strings, got {self.social_filter!r}")

        if isinstance(self.frame_retention, bool) or not isinstance(self.frame_retention, int) \
                or self.frame_retention < 1:
            raise ConfigError(f"frame_retention must be an integer >= 1, got {self.frame_retention!r}")

        if self.roi_match_mode not in MATCH_MODES:
            raise ConfigError(f"roi_match_mode must be one of {MATCH_MODES}, got {self.roi_match_mode!r}")

        iou = self.roi_iou_threshold
        if isinstance(iou, bool) or not isinstance(iou, (int, float)) or not 0.0 < iou <= 1.0:
            raise ConfigError(f"roi_iou_threshold must be a number in (0, 1], got {iou!r}")

        if isinstance(self.late_arrival_memory, bool) or not isinstance(self.late_arrival_memory, int) \
                or self.late_arrival_memory < 0:
            raise ConfigError(f"late_arrival_memory must be an integer >= 0, got {self.late_arrival_memory!r}")

        if not isinstance(self.log_level, str) or not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"log_level must be a logging level name, got {self.log_level!r}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FusionConfig":
        """
        Build a config from a plain mapping.

        Keys may sit at the top level or under a ``moving_object`` section.
        Unknown keys are ignored with a warning.

        Args:
            data: Mapping loaded from YAML (None means all defaults)

        Returns:
            Validated FusionConfig
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")

        section = data.get('moving_object', data)
        if not isinstance(section, dict):
            raise ConfigError("'moving_object' section must be a mapping")

        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in section.items():
            key = LEGACY_KEYS.get(key, key)
            if key in known:
                values[key] = value
            else:
                logger.warning(f"Ignoring unknown configuration key: {key}")

        if 'social_filter' in values and isinstance(values['social_filter'], tuple):
            values['social_filter'] = list(values['social_filter'])

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(config_path: str) -> FusionConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Validated FusionConfig

    Raises:
        ConfigError: if the file is missing, unreadable or invalid
    """
    if not os.path.isfile(config_path):
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read configuration {config_path}: {e}") from e

    config = FusionConfig.from_dict(data)
    logger.info(f"Loaded configuration from {config_path}")
    return config
