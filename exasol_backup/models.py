"""
Data models and enums for Exasol Backup.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class ObjectKind(Enum):
    """Supported object kinds, in default backup order."""
    PARAMETERS = "parameters"
    SCHEMAS = "schemas"
    TABLES = "tables"
    VIEWS = "views"
    FUNCTIONS = "functions"
    SCRIPTS = "scripts"
    USERS = "users"
    ROLES = "roles"
    CONNECTIONS = "connections"
    PRIORITY_GROUPS = "priority_groups"
    PRIVILEGES = "privileges"

    @classmethod
    def parse(cls, names: list[str]) -> tuple["ObjectKind", ...]:
        """
        Parse kind names into an ordered tuple of kinds.

        'all' expands to every kind. Duplicates keep their first position.
        """
        kinds: list[ObjectKind] = []
        for name in names:
            name = name.strip().lower()
            if name == 'all':
                candidates = list(cls)
            else:
                try:
                    candidates = [cls(name)]
                except ValueError:
                    raise ValueError(f"Unknown object kind '{name}'") from None
            for kind in candidates:
                if kind not in kinds:
                    kinds.append(kind)
        return tuple(kinds)


class Terminator(Enum):
    """How a fragment is terminated in the serialized script."""
    STATEMENT = "statement"  # trailing ';'
    BLOCK = "block"          # wrapped in --/ ... /


@dataclass(frozen=True)
class Fragment:
    """One ordered unit of SQL text belonging to an object record."""
    text: str
    terminator: Terminator = Terminator.STATEMENT


@dataclass
class ObjectRecord:
    """A single catalog entity and the fragments that rebuild it."""
    kind: ObjectKind
    name: str
    schema: Optional[str] = None
    fragments: list[Fragment] = field(default_factory=list)
    open_schema: Optional[str] = None

    def add(self, text: str, terminator: Terminator = Terminator.STATEMENT) -> None:
        self.fragments.append(Fragment(text, terminator))

    @property
    def label(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.name}"
        return self.name


@dataclass(frozen=True)
class BackupConfig:
    """Settings for one backup run."""
    source: Any
    destination: Path
    kinds: tuple[ObjectKind, ...]
    max_table_rows: int = 0
    max_view_rows: int = 0
    drop_extras: bool = False
    log_level: str = "INFO"
    workers: int = 1

    def __post_init__(self):
        for attr in ('max_table_rows', 'max_view_rows'):
            value = getattr(self, attr)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"{attr} must be a non-negative integer, got {value!r}")
        if not isinstance(self.workers, int) or self.workers < 1:
            raise ValueError(f"workers must be a positive integer, got {self.workers!r}")

    def row_cap(self, attr: Optional[str]) -> int:
        """Row cap for a registry row-cap attribute, 0 when the kind has no data."""
        if attr is None:
            return 0
        return getattr(self, attr)


@dataclass
class KindStats:
    """Statistics for a single object kind."""
    kind: ObjectKind
    objects: int = 0
    files_written: int = 0
    rows_exported: int = 0
    errors: list[Exception] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class BackupStats:
    """Overall backup statistics."""
    kinds: list[KindStats] = field(default_factory=list)
    total_objects: int = 0
    total_files: int = 0
    total_rows: int = 0
    deleted: list[Path] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    cancelled: bool = False
