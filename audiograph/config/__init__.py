"""Simple YAML configuration loader for AudioGraph."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

# Capture format and analysis constants
SAMPLE_RATE = 44100
CHUNK_BYTES = 4096
FILE_SECONDS = 5
SILENCE_THRESHOLD = 0.02
PEAK_THRESHOLD = 0.7
MIN_PEAK_DISTANCE = 100
STOP_TIMEOUT_SECONDS = 2.0

DEFAULT_CONFIG: Dict[str, Any] = {
    'audio': {
        'sample_rate': SAMPLE_RATE,
        'chunk_bytes': CHUNK_BYTES,
        'file_seconds': FILE_SECONDS,
        'device_index': None,
    },
    'analysis': {
        'silence_threshold': SILENCE_THRESHOLD,
        'peak_threshold': PEAK_THRESHOLD,
        'min_peak_distance': MIN_PEAK_DISTANCE,
        'retain_previous_bpm': False,
    },
    'capture': {
        'stop_timeout_seconds': STOP_TIMEOUT_SECONDS,
    },
    'logging': {
        'level': 'INFO',
        'file_path': 'data/logs/audiograph.log',
        'console_output': True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class AudioGraphConfig:
    """AudioGraph configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            return

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _merge(DEFAULT_CONFIG, loaded)
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        log_path = config['logging'].get('file_path')
        if log_path and not os.path.isabs(log_path):
            config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'analysis.peak_threshold').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'audio.device_index')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_file_capacity(self) -> int:
        """Number of samples held by the file waveform buffer."""
        return int(self.get('audio.sample_rate') * self.get('audio.file_seconds'))
