"""Configuration management"""

import copy
import json
from pathlib import Path
from typing import Dict, Any, Optional

import yaml


DEFAULT_CONFIG: Dict[str, Any] = {
    "analysis": {
        "window": 5.0,
        "epsilon": 5.0,
    },
    "pcap": {
        "filter": None,
        "display_filter": None,
        "tcpdump_path": "tcpdump",
        "tshark_path": "tshark",
    },
    "pipeline": {
        "threaded": False,
        "queue_size": 1024,
    },
    "report": {
        "format": "text",
        "json": {
            "indent": 2
        },
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


class Config:
    """Configuration holder with dotted-key access"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration

        Args:
            config_path: Optional YAML or JSON file merged over the defaults
        """
        self.config = copy.deepcopy(DEFAULT_CONFIG)
        if config_path:
            loaded = self._load_from_file(config_path)
            if loaded is None:
                loaded = {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file must contain a mapping: {config_path}")
            _merge(self.config, loaded)

    def _load_from_file(self, filepath: str) -> Any:
        """Load configuration from file"""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        with open(filepath, 'r', encoding='utf-8') as f:
            if path.suffix.lower() in ['.yaml', '.yml']:
                return yaml.safe_load(f)
            elif path.suffix.lower() == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config format: {path.suffix}")

    def get(self, key: str, default=None) -> Any:
        """
        Get a configuration value

        Args:
            key: Dotted key, e.g. 'analysis.window'
            default: Value returned when the key is missing

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any):
        """
        Set a configuration value

        Args:
            key: Dotted key
            value: New value
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge override into base in place"""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
