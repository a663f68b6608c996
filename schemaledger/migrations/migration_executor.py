#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Migration executor with transaction management and tracking.

Applies a plan of migration scripts as one batch inside a single database
transaction, recording each identifier in the ledger right after its
statements run. Either the whole batch commits or none of it does.
Supports dry-run mode for previewing changes without committing.
"""
import asyncio
import logging
import time
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from schemaledger.database import BatchTransaction, MigrationDatabase
from schemaledger.errors import MigrationError, ScriptExecutionError
from schemaledger.migrations.ledger import Ledger
from schemaledger.migrations.migration import ApplyResult, MigrationScript
from schemaledger.migrations.statements import split_statements


class DryRunRollback(Exception):
    """Exception raised to trigger rollback during dry-run mode."""
    pass


def _database_error(error: Exception) -> BaseException:
    """The driver's own exception, or a readable client-side timeout."""
    if isinstance(error, asyncio.TimeoutError):
        return asyncio.TimeoutError('timed out waiting for the database')
    return getattr(error, 'orig', None) or error


class MigrationExecutor:
    """
    Executes a migration plan with transaction safety.

    Steps, all inside one transaction:
    1. take the batch lock
    2. create the ledger table if absent
    3. re-read applied identifiers
    4. for each script: skip if applied, else run it and record it

    Any error rolls back everything done in steps 2-4 and propagates.

    Example:
        executor = MigrationExecutor(database, ledger)
        result = await executor.apply(pending)
        print(result.applied)
    """

    def __init__(self, database: MigrationDatabase, ledger: Ledger):
        """
        Initialize migration executor.

        Args:
            database: Connected MigrationDatabase
            ledger: Ledger the batch records into
        """
        self.database = database
        self.ledger = ledger
        self.logger = logging.getLogger(__name__)

    async def apply(
        self,
        plan: List[MigrationScript],
        dry_run: bool = False
    ) -> ApplyResult:
        """
        Apply the plan as one atomic batch.

        Args:
            plan: Scripts in application order
            dry_run: If True, execute everything then roll back

        Returns:
            ApplyResult with applied and skipped identifiers

        Raises:
            ScriptExecutionError: A script failed (batch rolled back)
            MigrationError: Ledger setup failed (batch rolled back)
            DatabaseConnectionError: Transaction could not be started
        """
        result = ApplyResult(dry_run=dry_run)

        if not plan:
            self.logger.info('No pending migrations')
            return result

        start_time = time.time()
        self.logger.info(
            'Applying %d migration(s)%s',
            len(plan),
            ' (DRY RUN)' if dry_run else ''
        )

        try:
            async with self.database.transaction() as tx:
                applied = await self._prepare(tx)

                for script in plan:
                    if script.identifier in applied:
                        self.logger.info(
                            'Migration %s already applied, skipping',
                            script.filename
                        )
                        result.skipped.append(script.identifier)
                        continue

                    await self._apply_script(tx, script)
                    applied.add(script.identifier)
                    result.applied.append(script.identifier)

                if dry_run:
                    raise DryRunRollback('Dry-run mode: rolling back transaction')

        except DryRunRollback:
            self.logger.info(
                'Dry-run complete for %d migration(s) - rolled back',
                len(result.applied)
            )

        except ScriptExecutionError as e:
            self.logger.error(
                'Batch rolled back: migration %s failed: %s',
                e.identifier,
                e.cause
            )
            raise

        result.execution_time_ms = int((time.time() - start_time) * 1000)

        if not dry_run:
            self.logger.info(
                'Applied %d migration(s), skipped %d (%dms)',
                len(result.applied),
                len(result.skipped),
                result.execution_time_ms
            )

        return result

    async def _prepare(self, tx: BatchTransaction) -> set:
        """Lock, create the ledger, and read applied identifiers in-transaction."""
        try:
            await tx.acquire_lock(self.ledger.lock_key)
            await self.ledger.ensure_created(tx.session)
            return await self.ledger.applied_identifiers(tx.session)
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            raise MigrationError(
                f'Cannot prepare ledger {self.ledger.qualified_name}: '
                f'{_database_error(e)}'
            ) from e

    async def _apply_script(
        self,
        tx: BatchTransaction,
        script: MigrationScript
    ) -> None:
        """
        Run one script's statements, then record it.

        Raises:
            ScriptExecutionError: On any statement or ledger insert failure
        """
        start_time = time.time()
        self.logger.info('Applying migration: %s', script.filename)

        statements = split_statements(script.body)
        if not statements:
            self.logger.warning('Migration %s has no statements', script.filename)

        for index, statement in enumerate(statements):
            try:
                await tx.execute_raw(statement)
            except (SQLAlchemyError, asyncio.TimeoutError) as e:
                raise ScriptExecutionError(
                    script.identifier,
                    script.filename,
                    _database_error(e),
                    statement_index=index
                ) from e

        try:
            await self.ledger.record(tx.session, script.identifier)
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            raise ScriptExecutionError(
                script.identifier,
                script.filename,
                _database_error(e)
            ) from e

        self.logger.info(
            'Migration %s applied successfully (%dms)',
            script.filename,
            int((time.time() - start_time) * 1000)
        )
