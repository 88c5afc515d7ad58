"""Configuration management."""

import yaml
from pathlib import Path
from typing import Any, Dict

_config: Dict[str, Any] = {}
_config_path: Path = None


def load_config(config_path: str = None) -> Dict[str, Any]:
    """Load the application configuration from a YAML file."""
    global _config, _config_path

    if config_path is None:
        # Try to find config in common locations
        possible_paths = [
            Path("config/app.yaml"),
            Path("app.yaml"),
            Path.home() / ".config" / "appi" / "app.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break
        else:
            raise FileNotFoundError(
                "No app.yaml found. Copy config/app.example.yaml to config/app.yaml "
                "and describe your module tree in it."
            )

    _config_path = Path(config_path)

    with open(_config_path) as f:
        _config = yaml.safe_load(f) or {}

    return _config


def get_config() -> Dict[str, Any]:
    """Get the loaded configuration."""
    if not _config:
        load_config()
    return _config


def get(key: str, default: Any = None) -> Any:
    """Get a config value by dot-notation key (e.g., 'modules.backend.priority')."""
    if not _config:
        load_config()

    keys = key.split(".")
    value = _config
    for k in keys:
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default
    return value
