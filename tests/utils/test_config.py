"""
Unit Tests for Configuration Utilities

Test Design Techniques Used:
    - Boundary value analysis (range limits of each field)
    - Decision table testing (file present / missing / malformed)

Run: pytest tests/utils/test_config.py -v
"""

import pytest
import yaml

from motion_comfort.utils.config import (
    DEFAULT_CONFIG,
    DEFAULT_MOTION_CONFIG,
    ConfigError,
    MotionConfig,
    config_from_dict,
    config_to_dict,
    load_config,
    load_motion_config,
    save_config,
    validate_config,
)


# =============================================================================
# MOTION CONFIG SNAPSHOT TESTS
# =============================================================================

class TestMotionConfig:

    def test_defaults(self, motion_config):
        assert motion_config.linear_threshold == 10.0
        assert motion_config.angular_threshold == 2.0
        assert motion_config.weight_linear == 0.4
        assert motion_config.weight_angular == 0.6
        assert motion_config.min_fov == 60.0
        assert motion_config.max_fov == 75.0
        assert motion_config.vignette_max_intensity == 0.7
        assert motion_config.transition_speed == 5.0

    def test_frozen(self, motion_config):
        with pytest.raises(AttributeError):
            motion_config.min_fov = 10.0

    def test_merged_returns_new_snapshot(self, motion_config):
        updated = motion_config.merged({"min_fov": 50.0}, transition_speed=2.0)

        assert updated is not motion_config
        assert updated.min_fov == 50.0
        assert updated.transition_speed == 2.0
        assert motion_config.min_fov == 60.0
        assert updated.max_fov == motion_config.max_fov

    def test_merged_empty_is_equal(self, motion_config):
        assert motion_config.merged() == motion_config

    def test_merged_unknown_field(self, motion_config):
        with pytest.raises(ConfigError, match="fov_min"):
            motion_config.merged(fov_min=50.0)

    def test_dict_conversion(self):
        data = config_to_dict(DEFAULT_MOTION_CONFIG)
        assert data["weight_angular"] == 0.6
        assert config_from_dict(data) == DEFAULT_MOTION_CONFIG

    def test_from_partial_dict(self):
        config = config_from_dict({"max_fov": 90})
        assert config.max_fov == 90
        assert config.min_fov == 60.0

    def test_from_none(self):
        assert config_from_dict(None) == DEFAULT_MOTION_CONFIG


# =============================================================================
# VALIDATION TESTS
# =============================================================================

class TestValidateConfig:

    def test_defaults_valid(self, motion_config):
        assert validate_config(motion_config) is motion_config

    @pytest.mark.parametrize("changes", [
        {"linear_threshold": 0.0},
        {"angular_threshold": -1.0},
        {"transition_speed": 0.0},
        {"weight_linear": 1.5},
        {"weight_angular": -0.1},
        {"vignette_max_intensity": 1.01},
        {"min_fov": 75.0},
        {"min_fov": 80.0, "max_fov": 70.0},
        {"linear_threshold": float('nan')},
        {"max_fov": float('inf')},
        {"weight_linear": "0.4"},
        {"weight_linear": True},
    ])
    def test_invalid_rejected(self, motion_config, changes):
        with pytest.raises(ConfigError):
            validate_config(motion_config.merged(changes))

    @pytest.mark.parametrize("changes", [
        {"weight_linear": 0.0, "weight_angular": 1.0},
        {"weight_linear": 1.0, "weight_angular": 1.0},
        {"vignette_max_intensity": 0.0},
        {"vignette_max_intensity": 1.0},
        {"min_fov": 74.9},
        {"linear_threshold": 1e-6},
    ])
    def test_edges_accepted(self, motion_config, changes):
        validate_config(motion_config.merged(changes))


# =============================================================================
# FILE LOADING TESTS
# =============================================================================

class TestLoadSaveConfig:

    def test_missing_file_returns_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"))
        assert config == DEFAULT_CONFIG

    def test_defaults_are_copied(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"))
        config["motion"]["min_fov"] = 1.0

        assert DEFAULT_CONFIG["motion"]["min_fov"] == 60.0

    def test_partial_file_merged_over_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("motion:\n  min_fov: 50\nvignette:\n  feather: 0.2\n")

        config = load_config(str(path))

        assert config["motion"]["min_fov"] == 50
        assert config["motion"]["max_fov"] == 75.0
        assert config["vignette"]["feather"] == 0.2
        assert config["vignette"]["base_radius"] == 0.8
        assert config["pipeline"]["max_delta_time"] == 0.1

    def test_empty_sections_keep_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("motion:\n  transition_speed: 4.0\nvignette:\npipeline:\n")

        config = load_config(str(path))

        assert config["motion"]["transition_speed"] == 4.0
        assert config["vignette"] == DEFAULT_CONFIG["vignette"]
        assert config["pipeline"] == DEFAULT_CONFIG["pipeline"]

    def test_malformed_yaml_returns_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("motion: [unclosed\n")

        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_non_mapping_returns_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n")

        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_save_then_load(self, tmp_path, full_config):
        path = tmp_path / "nested" / "settings.yaml"
        full_config["motion"]["transition_speed"] = 8.0

        save_config(full_config, str(path))

        assert path.exists()
        assert yaml.safe_load(path.read_text())["motion"]["transition_speed"] == 8.0
        assert load_config(str(path)) == full_config

    def test_load_motion_config_validates(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("motion:\n  min_fov: 90\n")

        with pytest.raises(ConfigError):
            load_motion_config(str(path))

    def test_load_motion_config_unknown_key(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("motion:\n  minFov: 50\n")

        with pytest.raises(ConfigError):
            load_motion_config(str(path))

    def test_load_motion_config(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("motion:\n  angular_threshold: 3.0\n")

        config = load_motion_config(str(path))

        assert isinstance(config, MotionConfig)
        assert config.angular_threshold == 3.0

    def test_repo_settings_file_is_valid(self):
        """The shipped config/settings.yaml loads and validates."""
        assert load_motion_config() == DEFAULT_MOTION_CONFIG
