"""Unit tests for migration data models."""

from datetime import datetime

import pytest

from schemaledger.migrations.migration import (
    ApplyResult,
    LedgerEntry,
    MigrationScript,
    StatusReport,
)


class TestMigrationScript:
    """Test MigrationScript model."""

    def test_sorts_by_filename(self):
        """Sorting uses the full filename, not the identifier."""
        a = MigrationScript('010', '010_c.sql', '')
        b = MigrationScript('002', '002_b.sql', '')
        c = MigrationScript('001', '001_a.sql', '')

        assert sorted([a, b, c]) == [c, b, a]

    def test_empty_identifier_rejected(self):
        """Identifier is required."""
        with pytest.raises(ValueError, match="empty identifier"):
            MigrationScript('', '_x.sql', 'SELECT 1;')

    def test_repr(self):
        script = MigrationScript('0001', '0001_initial_migration.sql', '')
        assert repr(script) == '<MigrationScript(0001, 0001_initial_migration.sql)>'


class TestApplyResult:
    """Test ApplyResult model."""

    def test_defaults(self):
        result = ApplyResult()

        assert result.applied == []
        assert result.skipped == []
        assert not result.dry_run
        assert not result.changed

    def test_changed_only_when_committed(self):
        assert ApplyResult(applied=['001']).changed
        assert not ApplyResult(applied=['001'], dry_run=True).changed


class TestStatusReport:
    """Test StatusReport serialization."""

    def test_to_dict(self):
        report = StatusReport(
            directory='/srv/app/migrations',
            directory_exists=True,
            ledger_exists=True,
            applied=[
                LedgerEntry(2, '0001', datetime(2025, 5, 17, 10, 30, 0)),
                LedgerEntry(1, '0000', None),
            ],
            pending=[MigrationScript('0002', '0002_add_approval_system.sql', '')],
        )

        assert report.to_dict() == {
            'directory': '/srv/app/migrations',
            'directory_exists': True,
            'ledger_exists': True,
            'applied': [
                {'id': 2, 'identifier': '0001', 'applied_at': '2025-05-17T10:30:00'},
                {'id': 1, 'identifier': '0000', 'applied_at': None},
            ],
            'pending': ['0002_add_approval_system.sql'],
        }
