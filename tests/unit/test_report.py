"""Unit tests for status and apply output formatting."""

from datetime import datetime

from schemaledger.migrations.migration import (
    ApplyResult,
    LedgerEntry,
    MigrationScript,
    StatusReport,
)
from schemaledger.report import format_apply_result, format_history, format_status

FILENAMES = {
    '0000': '0000_skinny_maestro.sql',
    '0001': '0001_initial_migration.sql',
}


def entry(sequence_id, identifier):
    return LedgerEntry(sequence_id, identifier, datetime(2025, 5, 17, 10, sequence_id))


class TestFormatHistory:

    def test_one_line_per_entry(self):
        lines = format_history([entry(2, '0001'), entry(1, '0000')])

        assert lines == [
            '- 0001 (applied on 2025-05-17T10:02:00)',
            '- 0000 (applied on 2025-05-17T10:01:00)',
        ]

    def test_missing_timestamp(self):
        assert format_history([LedgerEntry(1, '0000', None)]) == [
            '- 0000 (applied on unknown)'
        ]


class TestFormatStatus:

    def test_fresh_database(self):
        report = StatusReport(
            directory='/srv/app/migrations',
            directory_exists=True,
            ledger_exists=False,
            pending=[MigrationScript('0000', '0000_skinny_maestro.sql', '')],
        )

        assert format_status(report) == [
            'Migrations table: absent',
            'No migrations have been applied yet',
            '',
            'Pending migrations:',
            '- 0000_skinny_maestro.sql',
        ]

    def test_up_to_date(self):
        report = StatusReport(
            directory='/srv/app/migrations',
            directory_exists=True,
            ledger_exists=True,
            applied=[entry(1, '0000')],
        )

        lines = format_status(report)

        assert lines[0] == 'Migrations table: present'
        assert lines[1] == 'Applied migrations:'
        assert lines[-1] == 'No pending migrations'

    def test_missing_directory(self):
        report = StatusReport(
            directory='/srv/app/migrations',
            directory_exists=False,
            ledger_exists=False,
        )

        assert format_status(report)[-1] == (
            'No migrations directory found (/srv/app/migrations)'
        )


class TestFormatApplyResult:

    def test_applied(self):
        lines = format_apply_result(ApplyResult(applied=['0000', '0001']), FILENAMES)

        assert lines == [
            'Migration 0000_skinny_maestro.sql applied successfully',
            'Migration 0001_initial_migration.sql applied successfully',
            'All migrations applied successfully',
        ]

    def test_skipped_then_nothing_applied(self):
        lines = format_apply_result(ApplyResult(skipped=['0000']), FILENAMES)

        assert lines == [
            'Migration 0000_skinny_maestro.sql already applied, skipping',
            'No pending migrations',
        ]

    def test_dry_run(self):
        lines = format_apply_result(
            ApplyResult(applied=['0001'], dry_run=True), FILENAMES
        )

        assert lines == [
            'Would apply: 0001_initial_migration.sql',
            'Dry run: 1 migration(s) executed and rolled back',
        ]

    def test_unknown_identifier_printed_as_is(self):
        lines = format_apply_result(ApplyResult(applied=['0009']), {})

        assert lines[0] == 'Migration 0009 applied successfully'
