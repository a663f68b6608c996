"""
Migrator: composes the script store, ledger, planner and executor.

Used by the CLI and by programmatic callers that want status data or
need to apply pending migrations at startup.
"""

import logging
from typing import List, Optional

from schemaledger.database import MigrationDatabase
from schemaledger.errors import MigrationsDirectoryNotFoundError
from schemaledger.migrations.ledger import Ledger
from schemaledger.migrations.migration import (
    ApplyResult,
    MigrationScript,
    StatusReport,
)
from schemaledger.migrations.migration_executor import MigrationExecutor
from schemaledger.migrations.planner import plan
from schemaledger.migrations.script_store import ScriptStore

logger = logging.getLogger(__name__)


class Migrator:
    """
    Entry point for status and apply.

    Example:
        migrator = Migrator(database, ScriptStore('migrations'), Ledger())
        report = await migrator.status()
        result = await migrator.apply()
    """

    def __init__(
        self,
        database: MigrationDatabase,
        store: ScriptStore,
        ledger: Ledger,
    ):
        self.database = database
        self.store = store
        self.ledger = ledger
        self.executor = MigrationExecutor(database, ledger)

    def load_scripts(self, required: bool = False) -> List[MigrationScript]:
        """
        Read scripts from the store. No database I/O.

        Args:
            required: Raise instead of returning [] when the directory is absent

        Raises:
            MigrationsDirectoryNotFoundError: required and directory absent
            ScriptNameError, DuplicateIdentifierError: bad script files
        """
        if required and not self.store.exists():
            raise MigrationsDirectoryNotFoundError(self.store.directory)
        return self.store.list_scripts()

    async def status(
        self,
        scripts: Optional[List[MigrationScript]] = None
    ) -> StatusReport:
        """
        Read the ledger and compute the pending plan. Never writes.

        Args:
            scripts: Already loaded scripts (loaded from the store if None)
        """
        if scripts is None:
            scripts = self.load_scripts()

        async with self.database.reader() as session:
            ledger_exists = await self.ledger.exists(session)
            applied = (
                await self.ledger.list_applied(session) if ledger_exists else []
            )

        return StatusReport(
            directory=str(self.store.directory),
            directory_exists=self.store.exists(),
            ledger_exists=ledger_exists,
            applied=applied,
            pending=plan(scripts, {entry.identifier for entry in applied}),
        )

    async def pending(
        self,
        scripts: Optional[List[MigrationScript]] = None
    ) -> List[MigrationScript]:
        """The current plan."""
        return (await self.status(scripts)).pending

    async def apply(
        self,
        scripts: Optional[List[MigrationScript]] = None,
        dry_run: bool = False
    ) -> ApplyResult:
        """
        Apply all pending migrations as one batch.

        Args:
            scripts: Already loaded scripts (loaded from the store if None)
            dry_run: Execute and roll back

        Raises:
            MigrationsDirectoryNotFoundError: Script directory absent
            ScriptExecutionError: A script failed; nothing was committed
        """
        if scripts is None:
            scripts = self.load_scripts(required=True)

        if not scripts:
            logger.info('No migration files found in %s', self.store.directory)
            return ApplyResult(dry_run=dry_run)

        return await self.executor.apply(await self.pending(scripts), dry_run=dry_run)
