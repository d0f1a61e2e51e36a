"""
Configuration for the enforcement backend

YAML (and JSON) files in backend/config are loaded once into a nested
dict keyed by file stem; ``trafficguard.yaml`` holds the capture,
analysis, registry, notification and storage sections. Secrets stay in
the environment (GEMINI_API_KEY, DATABASE_URL).
"""

import yaml
import json
from pathlib import Path
from typing import Dict, Any, Optional


class ConfigManager:
    """
    Configuration files with dot-notation access

    Usage:
        config = ConfigManager()
        config.get('trafficguard.capture.maxFrames', 10)
        capture = config.get_capture_config()

    Missing files or keys fall back to defaults; every component has
    built-in defaults for its own section.
    """

    def __init__(self, config_dir: str = None):
        """
        Args:
            config_dir: Path to config directory (default: backend/config)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent.parent / "config"

        self.configs: Dict[str, Any] = {}
        self._load_all_configs()

    def _load_all_configs(self):
        if not self.config_dir.exists():
            print(f"   [WARN] Config directory not found: {self.config_dir}")
            return

        for yaml_file in sorted(self.config_dir.glob("*.yaml")):
            try:
                with open(yaml_file, 'r') as f:
                    self.configs[yaml_file.stem] = yaml.safe_load(f) or {}
                    print(f"   [CONFIG] Loaded: {yaml_file.name}")
            except (OSError, yaml.YAMLError) as e:
                print(f"   [WARN] Failed to load {yaml_file.name}: {e}")

        for json_file in sorted(self.config_dir.glob("*.json")):
            try:
                with open(json_file, 'r') as f:
                    self.configs[json_file.stem] = json.load(f)
                    print(f"   [CONFIG] Loaded: {json_file.name}")
            except (OSError, json.JSONDecodeError) as e:
                print(f"   [WARN] Failed to load {json_file.name}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Value at a dot-separated path

        Examples:
            config.get('trafficguard.capture.overlayInterval')
            config.get('trafficguard.analysis.models.ocr')
        """
        value = self.configs
        for k in key.split('.'):
            if not isinstance(value, dict) or k not in value:
                return default
            value = value[k]
        return value

    def section(self, name: str) -> Dict[str, Any]:
        """One section of trafficguard.yaml; {} when missing or not a mapping"""
        value = self.get(f'trafficguard.{name}', {})
        return value if isinstance(value, dict) else {}

    def get_capture_config(self) -> Dict[str, Any]:
        return self.section('capture')

    def get_analysis_config(self) -> Dict[str, Any]:
        return self.section('analysis')

    def get_registry_config(self) -> Dict[str, Any]:
        return self.section('registry')

    def get_notification_config(self) -> Dict[str, Any]:
        return self.section('notifications')

    def get_storage_config(self) -> Dict[str, Any]:
        return self.section('storage')


_config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = ConfigManager()
    return _config
