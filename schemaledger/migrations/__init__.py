"""
Database migrations package for schema evolution.

This package provides:
- MigrationScript: Data model for migration files
- LedgerEntry: Data model for applied migrations
- ScriptStore: Discovery of migration files
- Ledger: Table of applied migration identifiers
- plan: Pending-migration calculation
- MigrationExecutor: Execution of a plan with transaction safety
- Migrator: Composition of the above
- DryRunRollback: Exception for dry-run mode
"""

from .migration import (
    ApplyResult,
    LedgerEntry,
    MigrationScript,
    ScriptName,
    StatusReport,
)
from .script_store import ScriptStore, parse_script_name
from .statements import split_statements
from .ledger import DEFAULT_LEDGER_TABLE, Ledger
from .planner import plan
from .migration_executor import DryRunRollback, MigrationExecutor
from .migrator import Migrator

__all__ = [
    'ApplyResult',
    'LedgerEntry',
    'MigrationScript',
    'ScriptName',
    'StatusReport',
    'ScriptStore',
    'parse_script_name',
    'split_statements',
    'DEFAULT_LEDGER_TABLE',
    'Ledger',
    'plan',
    'DryRunRollback',
    'MigrationExecutor',
    'Migrator',
]
