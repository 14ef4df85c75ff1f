"""
Configuration loading and validation for Exasol Backup.
"""

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from .models import BackupConfig, ObjectKind


class ConfigLoader:
    """Loads and validates configuration from YAML file."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.config = self._load_config() if config_path else {}

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        return self._resolve_env_vars(config)

    def _resolve_env_vars(self, obj: Any) -> Any:
        """Recursively resolve environment variables in config."""
        if isinstance(obj, str):
            matches = self.ENV_VAR_PATTERN.findall(obj)
            for match in matches:
                env_value = os.environ.get(match, '')
                obj = obj.replace(f'${{{match}}}', env_value)
            return obj
        elif isinstance(obj, dict):
            return {k: self._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_env_vars(item) for item in obj]
        return obj

    def get_source_settings(self) -> dict[str, Any]:
        """Get Exasol connection settings."""
        return self.config.get('source', {})

    def get_backup_settings(self) -> dict[str, Any]:
        """Get backup settings."""
        return self.config.get('backup', {})

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        return self.config.get('logging', {})


TRUE_VALUES = ('true', 'yes', 'on', '1')
FALSE_VALUES = ('false', 'no', 'off', '0')


def parse_bool(value: Any, name: str, default: bool = False) -> bool:
    """
    Convert a setting to a boolean.

    Values expanded from environment variables are always strings, so
    'false' and 'no' are matched by name. None and '' give the default.
    """
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
    elif isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def parse_int(value: Any, name: str, default: int) -> int:
    """Convert a setting to an integer. None and '' give the default."""
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _objects(value: Any) -> list[str]:
    if value is None:
        return ['all']
    if isinstance(value, str):
        return [name for name in value.split(',') if name.strip()]
    return [str(name) for name in value]


def build_backup_config(
    loader: ConfigLoader,
    source: Any,
    overrides: Optional[dict[str, Any]] = None
) -> BackupConfig:
    """
    Merge file settings with overrides into a BackupConfig.

    Overrides with a value of None are ignored, so unset command line
    options keep the file value.
    """
    settings = dict(loader.get_backup_settings())
    for key, value in (overrides or {}).items():
        if value is not None:
            settings[key] = value

    destination = settings.get('destination')
    if not destination:
        raise ValueError("A backup destination is required")

    kinds = ObjectKind.parse(_objects(settings.get('objects')))
    if not kinds:
        raise ValueError("No object kinds requested")

    return BackupConfig(
        source=source,
        destination=Path(destination),
        kinds=kinds,
        max_table_rows=parse_int(settings.get('max_table_rows'), 'max_table_rows', 0),
        max_view_rows=parse_int(settings.get('max_view_rows'), 'max_view_rows', 0),
        drop_extras=parse_bool(settings.get('drop_extras'), 'drop_extras'),
        log_level=str(loader.get_logging_settings().get('level', 'INFO')),
        workers=parse_int(settings.get('workers'), 'workers', 1),
    )
