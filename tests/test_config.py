# tests/test_config.py

import os

import pytest

from moving_object.config import FusionConfig, load_config
from moving_object.errors import ConfigError

PROJECT_CONFIG = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'config', 'moving_object.yaml'))


class TestFusionConfig:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        config = FusionConfig()

        assert config.social_msg_enabled
        assert config.moving_object_msg_enabled
        assert config.possibility_threshold == 0.0
        assert config.social_filter == ['person', 'robot']
        assert config.frame_retention == 10
        assert config.roi_match_mode == 'exact'

    def test_from_dict_nested_section(self):
        config = FusionConfig.from_dict({'moving_object': {'possibility_threshold': 0.4, 'frame_retention': 3}})

        assert config.possibility_threshold == 0.4
        assert config.frame_retention == 3

    def test_from_dict_top_level(self):
        config = FusionConfig.from_dict({'social_filter': ['person']})

        assert config.social_filter == ['person']

    def test_legacy_threshold_key(self):
        config = FusionConfig.from_dict({'posibility_threshold': 0.7})

        assert config.possibility_threshold == 0.7

    def test_unknown_keys_ignored(self):
        config = FusionConfig.from_dict({'unused_option': 1})

        assert config == FusionConfig()

    def test_none_gives_defaults(self):
        assert FusionConfig.from_dict(None) == FusionConfig()

    @pytest.mark.parametrize("values", [
        {'possibility_threshold': 1.5},
        {'possibility_threshold': 'high'},
        {'social_filter': 'person'},
        {'social_filter': ['person', 3]},
        {'frame_retention': 0},
        {'frame_retention': 2.5},
        {'social_msg_enabled': 'yes'},
        {'roi_match_mode': 'fuzzy'},
        {'roi_iou_threshold': 0.0},
        {'late_arrival_memory': -1},
        {'log_level': 'LOUD'},
    ])
    def test_invalid_values(self, values):
        with pytest.raises(ConfigError):
            FusionConfig.from_dict(values)

    def test_non_mapping(self):
        with pytest.raises(ConfigError):
            FusionConfig.from_dict(['person'])


class TestLoadConfig:
    """Test loading configuration files."""

    def test_load_project_config(self):
        config = load_config(PROJECT_CONFIG)

        assert config == FusionConfig()

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "fusion.yaml"
        path.write_text("moving_object:\n  possibility_threshold: 0.25\n  social_filter: [person]\n")

        config = load_config(str(path))

        assert config.possibility_threshold == 0.25
        assert config.social_filter == ['person']

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("moving_object: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(str(path)) == FusionConfig()
