"""
Utility functions for Exasol Backup.
"""

import logging
import sys
from pathlib import Path
from typing import Any

from .models import BackupConfig
from .registry import KindSpec, get_kind_spec


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, log_settings.get('level', 'INFO').upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def print_dry_run_info(config: BackupConfig) -> None:
    """Print information about what would be backed up in dry-run mode."""
    logging.info(f"Would back up to: {config.destination}")
    for kind in config.kinds:
        spec = get_kind_spec(kind)
        settings_parts = format_kind_settings(config, spec)
        if settings_parts:
            logging.info(f"  - {kind.value} ({', '.join(settings_parts)})")
        else:
            logging.info(f"  - {kind.value}")


def format_kind_settings(config: BackupConfig, spec: KindSpec) -> list[str]:
    """Format the settings that apply to one kind for display in dry-run mode."""
    parts = []
    if spec.exports_data:
        row_cap = config.row_cap(spec.row_cap_attr)
        parts.append(f"max_rows={row_cap}" if row_cap else "no data")
    if config.drop_extras:
        scopes = ', '.join(
            f"{directory}/{pattern}" for directory, pattern in spec.reconcile_scopes
        )
        parts.append(f"drop extras in {scopes}")
    return parts
