"""Simple YAML configuration loader for Whisperer."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "whisperer.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "audio": {
        "sample_rate": 44100,
        "chunk_size": 1024,
        "channels": 1,
    },
    "transcription": {
        "endpoint": "https://api.openai.com/v1/audio/transcriptions",
        "model": "gpt-4o-transcribe",
        "timeout_seconds": 60,
        "upload_filename": "recording.m4a",
    },
    "storage": {
        "group_directory": str(Path.home() / ".whisperer" / "group"),
        "secrets_path": str(Path.home() / ".whisperer" / "secrets.json"),
    },
    "logging": {
        "level": "INFO",
        "file_path": str(Path.home() / ".whisperer" / "logs" / "whisperer.log"),
        "console_output": True,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class WhispererConfig:
    """Whisperer configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, uses whisperer.yaml
                        from the current directory when present, built-in defaults otherwise.
        """
        if config_path is None:
            candidate = Path.cwd() / DEFAULT_CONFIG_NAME
            self.config_file = candidate if candidate.exists() else None
        else:
            self.config_file = Path(config_path)
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        if self.config_file is None:
            logger.info("No configuration file found, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
        else:
            logger.info(f"Loading configuration from: {self.config_file}")
            self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        # Resolve relative paths before defaults fill in absolute ones
        self._resolve_paths(loaded)
        config = _merge(DEFAULT_CONFIG, loaded)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for section, key in (
            ('storage', 'group_directory'),
            ('storage', 'secrets_path'),
            ('logging', 'file_path'),
        ):
            if section in config and key in config[section]:
                value = os.path.expanduser(str(config[section][key]))
                if not os.path.isabs(value):
                    value = str(config_dir / value)
                config[section][key] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'transcription.model').

        Args:
            key_path: Dot-separated key path (e.g., 'storage.group_directory')
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
            key_path: Dot-separated path to config value (e.g., 'transcription.model')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_group_directory(self) -> Path:
        """Get the directory shared by the host and keyboard processes."""
        return Path(self.get('storage.group_directory')).expanduser().absolute()

    def get_secrets_path(self) -> Path:
        """Get the private credential file path."""
        return Path(self.get('storage.secrets_path')).expanduser().absolute()

    def get_transcription_timeout(self) -> Optional[float]:
        """Get the request timeout in seconds, None to leave it to aiohttp."""
        timeout = self.get('transcription.timeout_seconds')
        if timeout is None:
            return None
        timeout = float(timeout)
        if timeout <= 0:
            raise ValueError(f"transcription.timeout_seconds must be positive, got {timeout}")
        return timeout
