"""
Configuration Utilities

Loads and manages configuration from config/settings.yaml and holds the
MotionConfig snapshot shared by the analyzer, FOV controller and vignette.

MotionConfig is frozen. Components never edit it in place: a settings
change builds a new snapshot with merged() and swaps it in with a single
assignment, so a frame reads either the old values or the new ones.
"""

import copy
import math
import os
import logging
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration is unknown or outside documented ranges."""


@dataclass(frozen=True)
class MotionConfig:
    """Tunables for motion sickness mitigation."""

    linear_threshold: float = 10.0       # units/s, adjust to world scale
    angular_threshold: float = 2.0       # rad/s, ~114 deg/s
    weight_linear: float = 0.4
    weight_angular: float = 0.6          # rotation usually causes more sickness
    min_fov: float = 60.0                # degrees at full motion
    max_fov: float = 75.0                # degrees when static
    vignette_max_intensity: float = 0.7  # 70% darkness at edges
    transition_speed: float = 5.0        # 1/s, shared by intensity and FOV

    def merged(self, changes: Optional[Dict[str, Any]] = None, **kwargs) -> 'MotionConfig':
        """
        Return a new snapshot with the given fields replaced.

        Args:
            changes: Partial mapping of field name -> value
            **kwargs: Same, as keyword arguments

        Raises:
            ConfigError: If a field name is not part of MotionConfig
        """
        updates = dict(changes or {})
        updates.update(kwargs)

        unknown = set(updates) - _FIELD_NAMES
        if unknown:
            raise ConfigError(f"Unknown motion config field(s): {sorted(unknown)}")

        return replace(self, **updates)


_FIELD_NAMES = frozenset(f.name for f in fields(MotionConfig))

DEFAULT_MOTION_CONFIG = MotionConfig()

# Default configuration
DEFAULT_CONFIG = {
    "motion": asdict(DEFAULT_MOTION_CONFIG),
    "vignette": {
        "feather": 0.4,
        "base_radius": 0.8,
        "radius_shrink": 0.3
    },
    "pipeline": {
        "max_delta_time": 0.1,
        "fov_tolerance": 0.01,
        "aspect": 16.0 / 9.0,
        "near": 0.1,
        "far": 1000.0
    }
}


def validate_config(config: MotionConfig) -> MotionConfig:
    """
    Check a MotionConfig against its documented ranges.

    Meant for the configuration boundary (file loader, settings panel),
    never for the per-frame path.

    Returns:
        The same config, for chaining

    Raises:
        ConfigError: On the first violated constraint
    """
    for name, value in asdict(config).items():
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ConfigError(f"{name} must be a number, got {value!r}")
        if not math.isfinite(value):
            raise ConfigError(f"{name} must be finite, got {value}")

    for name in ("linear_threshold", "angular_threshold", "transition_speed"):
        if getattr(config, name) <= 0:
            raise ConfigError(f"{name} must be > 0, got {getattr(config, name)}")

    for name in ("weight_linear", "weight_angular", "vignette_max_intensity"):
        value = getattr(config, name)
        if not 0.0 <= value <= 1.0:
            raise ConfigError(f"{name} must be within [0, 1], got {value}")

    if config.min_fov >= config.max_fov:
        raise ConfigError(
            f"min_fov ({config.min_fov}) must be lower than max_fov ({config.max_fov})"
        )

    return config


def config_from_dict(data: Optional[Dict[str, Any]]) -> MotionConfig:
    """Build a MotionConfig from a (possibly partial) motion section."""
    return DEFAULT_MOTION_CONFIG.merged(data or {})


def config_to_dict(config: MotionConfig) -> Dict[str, Any]:
    return asdict(config)


def _default_config_path() -> str:
    # look for config file relative to project root
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
    return os.path.join(project_root, "config", "settings.yaml")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in override.items():
        if value is None and isinstance(result.get(key), dict):
            # empty section header, keep the defaults
            continue
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Values from the file are merged over DEFAULT_CONFIG, so a settings
    file only needs the keys it changes.

    Args:
        config_path: Path to config file. If None, looks in config/settings.yaml

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = _default_config_path()

    if os.path.exists(config_path):
        logger.info(f"Loading config from {config_path}")
        try:
            with open(config_path, 'r') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config: {e}. Using defaults.")
            return copy.deepcopy(DEFAULT_CONFIG)

        if not isinstance(loaded, dict):
            logger.warning(f"Config file {config_path} is not a mapping. Using defaults.")
            return copy.deepcopy(DEFAULT_CONFIG)

        return _deep_merge(DEFAULT_CONFIG, loaded)

    logger.info("No config file found. Using defaults.")
    return copy.deepcopy(DEFAULT_CONFIG)


def load_motion_config(config_path: str = None) -> MotionConfig:
    """
    Load the motion section of the settings file as a validated snapshot.

    Raises:
        ConfigError: If the file contains unknown or out-of-range values
    """
    config = load_config(config_path)
    return validate_config(config_from_dict(config.get("motion")))


def save_config(config: Dict[str, Any], config_path: str = None):
    """
    Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save to
    """
    if config_path is None:
        config_path = _default_config_path()

    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(config_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False)

    logger.info(f"Config saved to {config_path}")
