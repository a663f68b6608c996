"""
Schema ledger exceptions.

This module defines the exception hierarchy for migration operations,
enabling precise error handling at different layers of the application.
The CLI treats every SchemaLedgerError as a reported failure (exit 1).
"""

from typing import Optional


class SchemaLedgerError(Exception):
    """
    Base exception for schema ledger errors.

    All migration-related exceptions inherit from this base class,
    allowing catch-all error handling when needed.
    """
    pass


class ConfigurationError(SchemaLedgerError):
    """
    Configuration is missing or invalid.

    Raised when:
    - DATABASE_URL is not set
    - Configuration file cannot be read or has unknown keys
    - A configured value is out of range
    """
    pass


class MigrationsDirectoryNotFoundError(ConfigurationError):
    """Script directory is required but does not exist."""

    def __init__(self, directory):
        self.directory = directory
        super().__init__(
            f"Migrations directory does not exist: {directory}. "
            f"Run generate first."
        )


class ScriptNameError(ConfigurationError):
    """Script filename does not yield a usable identifier."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Invalid migration filename '{filename}': {reason}")


class ScriptReadError(ConfigurationError):
    """Script file cannot be read or is not valid UTF-8 text."""

    def __init__(self, filename: str, reason):
        self.filename = filename
        self.reason = reason
        super().__init__(f"Cannot read migration file '{filename}': {reason}")


class DuplicateIdentifierError(ConfigurationError):
    """
    Two script files share the same identifier.

    Both files would map to one ledger row, so the second would be
    silently treated as applied. Rejected at load time instead.
    """

    def __init__(self, identifier: str, filenames):
        self.identifier = identifier
        self.filenames = list(filenames)
        super().__init__(
            f"Duplicate migration identifier '{identifier}' in "
            f"{', '.join(self.filenames)}"
        )


class LedgerSchemaError(ConfigurationError):
    """Ledger table exists but is missing expected columns."""

    def __init__(self, table: str, missing):
        self.table = table
        self.missing = sorted(missing)
        super().__init__(
            f"Ledger table '{table}' is missing columns: "
            f"{', '.join(self.missing)}"
        )


class DatabaseConnectionError(SchemaLedgerError):
    """
    Database connection failed.

    Raised when:
    - Unable to establish database connection
    - Authentication fails
    - A transaction cannot be started
    """
    pass


class MigrationError(SchemaLedgerError):
    """
    Migration batch failed.

    The batch transaction has been rolled back when this propagates.
    """
    pass


class ScriptExecutionError(MigrationError):
    """A statement of a migration script failed to execute."""

    def __init__(
        self,
        identifier: str,
        filename: str,
        cause: BaseException,
        statement_index: Optional[int] = None,
    ):
        self.identifier = identifier
        self.filename = filename
        self.cause = cause
        self.statement_index = statement_index
        location = ''
        if statement_index is not None:
            location = f' (statement {statement_index + 1})'
        super().__init__(
            f"Migration {identifier} ({filename}) failed{location}: {cause}"
        )


class GenerationError(SchemaLedgerError):
    """External script generator failed or could not be started."""
    pass
