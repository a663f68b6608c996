"""
Applied-state ledger.

One table records which migration identifiers have been committed. The
column layout matches ledgers written by earlier drizzle-based tooling
(id, hash, created_at), so an existing database is picked up as-is:

    id          auto-increment primary key   (sequence id)
    hash        text, not null               (migration identifier)
    created_at  timestamp, defaults to now   (applied at)

The table is only created and written inside the apply batch
transaction. Reads work with any session.
"""

import hashlib
import logging
from typing import List, Optional, Set

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    Table,
    Text,
    func,
    inspect,
    insert,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession

from schemaledger.errors import LedgerSchemaError
from schemaledger.migrations.migration import LedgerEntry

logger = logging.getLogger(__name__)

DEFAULT_LEDGER_TABLE = '__drizzle_migrations'
LEDGER_COLUMNS = frozenset({'id', 'hash', 'created_at'})


class Ledger:
    """
    Durable record of applied migration identifiers.

    Attributes:
        table: SQLAlchemy Table describing the ledger
        lock_key: Advisory lock key derived from the qualified table name

    Example:
        ledger = Ledger()
        async with db.reader() as session:
            if await ledger.exists(session):
                entries = await ledger.list_applied(session)
    """

    def __init__(
        self,
        table_name: str = DEFAULT_LEDGER_TABLE,
        schema: Optional[str] = None,
    ):
        self.metadata = MetaData()
        self.table = Table(
            table_name,
            self.metadata,
            Column('id', Integer, primary_key=True, autoincrement=True),
            Column('hash', Text, nullable=False, unique=True),
            Column(
                'created_at',
                DateTime(timezone=True),
                server_default=func.now(),
            ),
            schema=schema,
        )

    @property
    def qualified_name(self) -> str:
        if self.table.schema:
            return f'{self.table.schema}.{self.table.name}'
        return self.table.name

    @property
    def lock_key(self) -> int:
        """Signed 64-bit key, stable for a given ledger table."""
        digest = hashlib.sha256(
            f'schemaledger:{self.qualified_name}'.encode('utf-8')
        ).digest()
        return int.from_bytes(digest[:8], 'big', signed=True)

    def _has_table(self, sync_session) -> bool:
        return inspect(sync_session.connection()).has_table(
            self.table.name, schema=self.table.schema
        )

    def _missing_columns(self, sync_session) -> Set[str]:
        columns = inspect(sync_session.connection()).get_columns(
            self.table.name, schema=self.table.schema
        )
        return set(LEDGER_COLUMNS) - {column['name'] for column in columns}

    def _create(self, sync_session) -> None:
        self.table.create(sync_session.connection(), checkfirst=True)

    async def exists(self, session: AsyncSession) -> bool:
        """Check the ledger table is present in its schema."""
        return await session.run_sync(self._has_table)

    async def verify(self, session: AsyncSession) -> None:
        """
        Check an existing ledger has the expected columns.

        Raises:
            LedgerSchemaError: If any expected column is missing
        """
        missing = await session.run_sync(self._missing_columns)
        if missing:
            raise LedgerSchemaError(self.qualified_name, missing)

    async def ensure_created(self, session: AsyncSession) -> None:
        """
        Create the ledger table if absent.

        Must be given the batch transaction's session so creation commits
        or rolls back together with the first batch.

        Raises:
            LedgerSchemaError: If a pre-existing table has drifted
        """
        if await self.exists(session):
            await self.verify(session)
            return

        logger.info('Creating ledger table %s', self.qualified_name)
        await session.run_sync(self._create)

    async def list_applied(self, session: AsyncSession) -> List[LedgerEntry]:
        """Return applied entries, most recent first."""
        await self.verify(session)

        query = select(
            self.table.c.id,
            self.table.c.hash,
            self.table.c.created_at,
        ).order_by(self.table.c.created_at.desc(), self.table.c.id.desc())

        result = await session.execute(query)
        return [
            LedgerEntry(
                sequence_id=row.id,
                identifier=row.hash,
                applied_at=row.created_at,
            )
            for row in result
        ]

    async def applied_identifiers(self, session: AsyncSession) -> Set[str]:
        """Return the set of applied identifiers (for planning)."""
        result = await session.execute(select(self.table.c.hash))
        return set(result.scalars())

    async def record(self, session: AsyncSession, identifier: str) -> None:
        """
        Record one identifier as applied.

        Call only inside the batch transaction, right after the script's
        statements executed in that same transaction.
        """
        await session.execute(insert(self.table).values(hash=identifier))
        logger.debug('Recorded %s in %s', identifier, self.qualified_name)
