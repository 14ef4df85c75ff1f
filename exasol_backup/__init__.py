"""
Exasol Backup
=============
Dump the object inventory of an Exasol database into a deterministic,
re-applicable file tree with support for:
- Parameters, schemas, tables, views, functions and scripts
- Users, roles, connections, priority groups and privileges
- Row-capped CSV snapshots of tables and views
- Secret redaction
- Dropping entries of objects that no longer exist
"""

from .backup_runner import BackupRunner
from .config import ConfigLoader, build_backup_config
from .connection import ExasolConnection
from .data_exporter import DataExporter
from .exceptions import (
    BackupError,
    ExtractionError,
    ReconcileError,
    SerializationError,
    WriteError,
)
from .main import main
from .models import (
    BackupConfig,
    BackupStats,
    Fragment,
    KindStats,
    ObjectKind,
    ObjectRecord,
    Terminator,
)
from .reconciler import Reconciler
from .registry import KIND_REGISTRY, KindSpec, extract, get_kind_spec
from .serializer import redact, serialize
from .utils import format_kind_settings, print_dry_run_info, setup_logging
from .writer import TreeWriter

__version__ = "1.0.0"

__all__ = [
    # Main entry point
    "main",
    # Core classes
    "BackupRunner",
    "ConfigLoader",
    "DataExporter",
    "ExasolConnection",
    "Reconciler",
    "TreeWriter",
    # Registry and serialization
    "KIND_REGISTRY",
    "KindSpec",
    "extract",
    "get_kind_spec",
    "redact",
    "serialize",
    # Models
    "BackupConfig",
    "BackupStats",
    "Fragment",
    "KindStats",
    "ObjectKind",
    "ObjectRecord",
    "Terminator",
    # Errors
    "BackupError",
    "ExtractionError",
    "ReconcileError",
    "SerializationError",
    "WriteError",
    # Utilities
    "build_backup_config",
    "format_kind_settings",
    "print_dry_run_info",
    "setup_logging",
]
