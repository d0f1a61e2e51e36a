"""
Configuration Tests

Tests cover:
- Loading the bundled trafficguard.yaml
- Dot-notation access and defaults
- Missing or broken config files
"""

import pytest

from trafficguard.config import ConfigManager


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "trafficguard.yaml").write_text(
        "capture:\n"
        "  maxFrames: 8\n"
        "analysis:\n"
        "  models:\n"
        "    ocr: test-ocr\n"
        "storage: not-a-mapping\n"
    )
    (tmp_path / "extra.json").write_text('{"flag": true}')
    return tmp_path


class TestConfigManager:
    """Test configuration loading"""

    def test_bundled_config(self):
        config = ConfigManager()
        assert config.get('trafficguard.capture.maxDuration') == 5.0
        assert config.get_analysis_config()['maxVideoFrames'] == 10
        assert config.get_storage_config()['historySlot'] == "traffic_guard_history"

    def test_dot_notation(self, config_dir):
        config = ConfigManager(str(config_dir))
        assert config.get('trafficguard.capture.maxFrames') == 8
        assert config.get('trafficguard.analysis.models.ocr') == "test-ocr"
        assert config.get('extra.flag') is True

    def test_missing_key_default(self, config_dir):
        config = ConfigManager(str(config_dir))
        assert config.get('trafficguard.capture.nothing', 3) == 3
        assert config.get('trafficguard.capture.maxFrames.deeper') is None

    def test_sections(self, config_dir):
        config = ConfigManager(str(config_dir))
        assert config.get_capture_config() == {'maxFrames': 8}
        assert config.get_registry_config() == {}
        assert config.get_storage_config() == {}

    def test_missing_directory(self, tmp_path):
        config = ConfigManager(str(tmp_path / "absent"))
        assert config.configs == {}
        assert config.get_notification_config() == {}

    def test_broken_yaml_skipped(self, tmp_path):
        (tmp_path / "trafficguard.yaml").write_text("capture: [unclosed\n")
        config = ConfigManager(str(tmp_path))
        assert config.get_capture_config() == {}
