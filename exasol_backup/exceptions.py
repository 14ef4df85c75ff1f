"""
Exception hierarchy for Exasol Backup.
"""

from pathlib import Path
from typing import Optional

from .models import ObjectKind


class BackupError(Exception):
    """Base class for failures collected during a backup run."""


class ExtractionError(BackupError):
    """A catalog query failed or returned rows of an unexpected shape."""

    def __init__(self, kind: ObjectKind, message: str, schema: Optional[str] = None):
        self.kind = kind
        self.schema = schema
        where = f"{kind.value}/{schema}" if schema else kind.value
        super().__init__(f"{where}: {message}")


class SerializationError(BackupError):
    """An object record could not be turned into text."""

    def __init__(self, label: str, message: str):
        self.label = label
        super().__init__(f"{label}: {message}")


class WriteError(BackupError):
    """A file could not be written to the backup tree."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class ReconcileError(BackupError):
    """A stale entry could not be listed or removed."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")
