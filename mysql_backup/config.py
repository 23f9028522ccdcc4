"""
Configuration loading for MySQL Backup.

Settings come from three layers, lowest priority first:

1. ``DEFAULT_CONFIG`` below
2. an optional YAML file
3. environment variables, referenced as ``${VAR}`` or ``${VAR:-default}``
   anywhere in the first two layers
"""

import copy
import os
import re
from typing import Any, Optional

import yaml

from .models import ConnectionSettings, DumpSettings


DEFAULT_CONFIG: dict[str, Any] = {
    'connection': {
        'host': '${DB_HOST:-mysql}',
        'port': '${DB_PORT:-3306}',
        'database': '${DB_DATABASE:-laravel}',
        'user': '${DB_USERNAME:-laravel}',
        'password': '${DB_PASSWORD:-secret}',
    },
    'output': {
        'directory': '${BACKUP_DIR:-/var/www/backups}',
    },
    'dump': {
        'chunk_size': 1000,
        'order_by_primary_key': True,
        'consistent_snapshot': True,
        'exclude_tables': [],
    },
    'logging': {
        'level': 'INFO',
        'file': None,
    },
}


class ConfigLoader:
    """Loads configuration from the defaults table and an optional YAML file."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}:]+)(?::-([^}]*))?\}')

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Merge the YAML file (if any) over the defaults and resolve env vars."""
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path:
            with open(self.config_path, 'r') as f:
                file_config = yaml.safe_load(f) or {}
            if not isinstance(file_config, dict):
                raise ValueError(
                    f"Configuration file '{self.config_path}' must contain a mapping"
                )
            config = self._deep_merge(config, file_config)

        return self._resolve_env_vars(config)

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        merged = dict(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _resolve_env_vars(self, obj: Any) -> Any:
        """Recursively resolve environment variables in config."""
        if isinstance(obj, str):
            return self.ENV_VAR_PATTERN.sub(self._env_value, obj)
        elif isinstance(obj, dict):
            return {k: self._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_env_vars(item) for item in obj]
        return obj

    @staticmethod
    def _env_value(match: re.Match) -> str:
        name, default = match.group(1), match.group(2)
        value = os.environ.get(name, '')
        if default is not None and not value:
            return default
        return value

    def get_connection_settings(self) -> ConnectionSettings:
        """Get database connection settings."""
        return ConnectionSettings.from_config(self.config.get('connection', {}))

    def get_dump_settings(self) -> DumpSettings:
        """Get dump settings."""
        return DumpSettings.from_config(self.config.get('dump', {}))

    def get_output_settings(self) -> dict[str, Any]:
        """Get output settings."""
        return self.config.get('output', {})

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        return self.config.get('logging', {})
