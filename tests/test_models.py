"""
Unit tests for models.py
"""

from pathlib import Path

import pytest

from exasol_backup.models import (
    BackupConfig,
    BackupStats,
    Fragment,
    KindStats,
    ObjectKind,
    ObjectRecord,
    Terminator,
)


class TestObjectKind:
    """Tests for ObjectKind enum."""

    def test_kind_values(self):
        """Test kind values used on the command line."""
        assert ObjectKind.PARAMETERS.value == "parameters"
        assert ObjectKind.PRIORITY_GROUPS.value == "priority_groups"
        assert ObjectKind.PRIVILEGES.value == "privileges"

    def test_parse_all(self):
        """Test 'all' expands to every kind in declaration order."""
        assert ObjectKind.parse(["all"]) == tuple(ObjectKind)

    def test_parse_preserves_order(self):
        """Test parsed kinds keep the requested order."""
        kinds = ObjectKind.parse(["views", "tables"])
        assert kinds == (ObjectKind.VIEWS, ObjectKind.TABLES)

    def test_parse_deduplicates(self):
        """Test duplicate names keep their first position."""
        kinds = ObjectKind.parse(["tables", " TABLES ", "all"])
        assert kinds[0] == ObjectKind.TABLES
        assert len(kinds) == len(ObjectKind)

    def test_parse_unknown(self):
        """Test unknown names are rejected."""
        with pytest.raises(ValueError) as exc_info:
            ObjectKind.parse(["tables", "indexes"])
        assert "Unknown object kind 'indexes'" in str(exc_info.value)

    def test_parse_empty(self):
        """Test an empty request yields no kinds."""
        assert ObjectKind.parse([]) == ()


class TestObjectRecord:
    """Tests for ObjectRecord dataclass."""

    def test_defaults(self):
        """Test record defaults."""
        record = ObjectRecord(ObjectKind.USERS, "JOE")
        assert record.schema is None
        assert record.fragments == []
        assert record.open_schema is None

    def test_add(self):
        """Test fragments are appended in order."""
        record = ObjectRecord(ObjectKind.FUNCTIONS, "F1", "test")
        record.add("CREATE FUNCTION ...", Terminator.BLOCK)
        record.add("COMMENT ON FUNCTION ...")
        assert record.fragments == [
            Fragment("CREATE FUNCTION ...", Terminator.BLOCK),
            Fragment("COMMENT ON FUNCTION ...", Terminator.STATEMENT),
        ]

    def test_label(self):
        """Test record labels."""
        assert ObjectRecord(ObjectKind.TABLES, "T1", "test").label == "test.T1"
        assert ObjectRecord(ObjectKind.ROLES, "DBA").label == "DBA"

    def test_fragment_is_frozen(self):
        """Test fragments cannot be modified."""
        fragment = Fragment("SELECT 1")
        with pytest.raises(AttributeError):
            fragment.text = "SELECT 2"


class TestBackupConfig:
    """Tests for BackupConfig dataclass."""

    def test_defaults(self):
        """Test default values."""
        config = BackupConfig(source=None, destination=Path("/tmp/x"), kinds=(ObjectKind.TABLES,))
        assert config.max_table_rows == 0
        assert config.max_view_rows == 0
        assert config.drop_extras is False
        assert config.log_level == "INFO"
        assert config.workers == 1

    @pytest.mark.parametrize("value", [-1, 1.5, True, "10"])
    def test_invalid_row_cap(self, value):
        """Test row caps must be non-negative integers."""
        with pytest.raises(ValueError):
            BackupConfig(source=None, destination=Path("."), kinds=(), max_table_rows=value)

    def test_invalid_workers(self):
        """Test at least one worker is required."""
        with pytest.raises(ValueError):
            BackupConfig(source=None, destination=Path("."), kinds=(), workers=0)

    def test_row_cap(self):
        """Test row cap lookup by attribute."""
        config = BackupConfig(
            source=None, destination=Path("."), kinds=(),
            max_table_rows=10, max_view_rows=20
        )
        assert config.row_cap("max_table_rows") == 10
        assert config.row_cap("max_view_rows") == 20
        assert config.row_cap(None) == 0


class TestStats:
    """Tests for statistics dataclasses."""

    def test_kind_stats_success(self):
        """Test a kind without errors is successful."""
        stats = KindStats(kind=ObjectKind.VIEWS)
        assert stats.success is True
        stats.errors.append(RuntimeError("boom"))
        assert stats.success is False

    def test_backup_stats_defaults(self):
        """Test default values."""
        stats = BackupStats()
        assert stats.kinds == []
        assert stats.total_objects == 0
        assert stats.total_files == 0
        assert stats.total_rows == 0
        assert stats.deleted == []
        assert stats.errors == []
        assert stats.cancelled is False
