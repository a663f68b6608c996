"""Human-readable summaries of migration state and batch results."""

from typing import Dict, List

from schemaledger.migrations.migration import ApplyResult, LedgerEntry, StatusReport


def _timestamp(entry: LedgerEntry) -> str:
    return entry.applied_at.isoformat() if entry.applied_at else 'unknown'


def format_history(entries: List[LedgerEntry]) -> List[str]:
    """Applied entries, most recent first, one line each."""
    return [
        f'- {entry.identifier} (applied on {_timestamp(entry)})'
        for entry in entries
    ]


def format_status(report: StatusReport) -> List[str]:
    """Lines printed by the status command."""
    lines = [
        f"Migrations table: {'present' if report.ledger_exists else 'absent'}",
    ]

    if report.applied:
        lines.append('Applied migrations:')
        lines.extend(format_history(report.applied))
    else:
        lines.append('No migrations have been applied yet')

    if not report.directory_exists:
        lines.append(f'No migrations directory found ({report.directory})')
    elif report.pending:
        lines.append('')
        lines.append('Pending migrations:')
        lines.extend(f'- {script.filename}' for script in report.pending)
    else:
        lines.append('No pending migrations')

    return lines


def format_apply_result(result: ApplyResult, filenames: Dict[str, str]) -> List[str]:
    """
    Lines printed after an apply batch.

    Args:
        result: Batch outcome
        filenames: identifier -> filename, for friendlier output
    """
    lines = [
        f'Migration {filenames.get(identifier, identifier)} already applied, skipping'
        for identifier in result.skipped
    ]

    if result.dry_run:
        lines.extend(
            f'Would apply: {filenames.get(identifier, identifier)}'
            for identifier in result.applied
        )
        lines.append(
            f'Dry run: {len(result.applied)} migration(s) executed and rolled back'
        )
    elif result.changed:
        lines.extend(
            f'Migration {filenames.get(identifier, identifier)} applied successfully'
            for identifier in result.applied
        )
        lines.append('All migrations applied successfully')
    else:
        lines.append('No pending migrations')

    return lines
