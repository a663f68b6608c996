"""
Global pytest configuration and fixtures for schemaledger tests

Provides:
- Temporary migration script directory and script writer
- Temporary SQLite database (aiosqlite) per test
- Ledger / Migrator wired to them
- Query helper for assertions
"""

import pytest
from sqlalchemy import text

from schemaledger.database import MigrationDatabase
from schemaledger.migrations import Ledger, Migrator, ScriptStore


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


# ============================================================================
# Script Directory
# ============================================================================

@pytest.fixture
def migrations_dir(tmp_path):
    """Empty migration script directory."""
    directory = tmp_path / "migrations"
    directory.mkdir()
    return directory


@pytest.fixture
def write_script(migrations_dir):
    """Write a migration script file and return its path."""

    def _write(filename: str, body: str):
        path = migrations_dir / filename
        path.write_text(body, encoding="utf-8")
        return path

    return _write


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def database_path(tmp_path):
    """Path of the temporary SQLite database file."""
    return tmp_path / "schemaledger_test.db"


@pytest.fixture
async def database(database_path):
    """Connected MigrationDatabase on a temporary SQLite file."""
    db = MigrationDatabase(str(database_path), lock_timeout=5)
    await db.connect()

    yield db

    await db.close()


@pytest.fixture
def ledger():
    """Ledger with the default table name."""
    return Ledger()


@pytest.fixture
def migrator(database, migrations_dir, ledger):
    """Migrator over the temporary database and script directory."""
    return Migrator(database, ScriptStore(migrations_dir), ledger)


@pytest.fixture
def query(database):
    """Run a SELECT through a read-only session and return tuples."""

    async def _query(sql: str):
        async with database.reader() as session:
            result = await session.execute(text(sql))
            return [tuple(row) for row in result]

    return _query
