"""
Migration data models for schema evolution.

This module defines the core data structures for managing database migrations:
- ScriptName: Parsed parts of a migration filename
- MigrationScript: Represents a migration file from the filesystem
- LedgerEntry: Represents a migration recorded in the ledger table
- ApplyResult: Outcome of one apply batch
- StatusReport: Snapshot of applied and pending migrations

These models are passed between the script store, ledger, planner and
executor. None of them perform I/O.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional


class ScriptName(NamedTuple):
    """Identifier and free-form description parsed from a filename."""

    identifier: str
    description: str


@dataclass(frozen=True)
class MigrationScript:
    """
    Represents a single migration file.

    Attributes:
        identifier: Token before the first separator (e.g., '0001')
        filename: Full filename (e.g., '0001_initial_migration.sql')
        body: Raw SQL text, executed verbatim
        description: Remainder of the filename stem (may be empty)

    Example:
        >>> script = MigrationScript(
        ...     identifier='0001',
        ...     filename='0001_initial_migration.sql',
        ...     body='CREATE TABLE t (id int);',
        ... )
        >>> print(script)
        <MigrationScript(0001, 0001_initial_migration.sql)>
    """

    identifier: str
    filename: str
    body: str
    description: str = ''

    def __post_init__(self):
        if not self.identifier:
            raise ValueError(
                f"Migration {self.filename} has an empty identifier"
            )

    def __lt__(self, other: 'MigrationScript') -> bool:
        """Sort by filename; this is the application order."""
        if not isinstance(other, MigrationScript):
            return NotImplemented
        return self.filename < other.filename

    def __repr__(self) -> str:
        return f"<MigrationScript({self.identifier}, {self.filename})>"


@dataclass(frozen=True)
class LedgerEntry:
    """
    One row of the ledger table.

    Attributes:
        sequence_id: Auto-increment id assigned by the database
        identifier: Identifier of the applied script
        applied_at: When the batch containing it committed
    """

    sequence_id: int
    identifier: str
    applied_at: Optional[datetime]

    def __repr__(self) -> str:
        return f"<LedgerEntry(#{self.sequence_id}, {self.identifier})>"


@dataclass
class ApplyResult:
    """
    Result of one apply batch.

    Attributes:
        applied: Identifiers executed and recorded, in application order
        skipped: Identifiers found already applied inside the transaction
        dry_run: True when the batch was rolled back on purpose
        execution_time_ms: Wall time of the whole batch
    """

    applied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    dry_run: bool = False
    execution_time_ms: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.applied) and not self.dry_run


@dataclass
class StatusReport:
    """Snapshot of the ledger and the script directory."""

    directory: str
    directory_exists: bool
    ledger_exists: bool
    applied: List[LedgerEntry] = field(default_factory=list)
    pending: List[MigrationScript] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'directory': self.directory,
            'directory_exists': self.directory_exists,
            'ledger_exists': self.ledger_exists,
            'applied': [
                {
                    'id': entry.sequence_id,
                    'identifier': entry.identifier,
                    'applied_at': (
                        entry.applied_at.isoformat()
                        if entry.applied_at else None
                    ),
                }
                for entry in self.applied
            ],
            'pending': [script.filename for script in self.pending],
        }
