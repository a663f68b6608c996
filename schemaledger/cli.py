#!/usr/bin/env python3
"""
Database migration utility.

Usage:
    schemaledger generate   - Generate migration files from schema changes
    schemaledger apply      - Apply pending migrations
    schemaledger status     - Show migration status
    schemaledger help       - Show this help message

Exit status is 0 on success and 1 on any reported failure.
"""
import argparse
import asyncio
import json
import logging
import signal
import sys

from schemaledger.config import configure_logging, load_config
from schemaledger.database import MigrationDatabase
from schemaledger.errors import ConfigurationError, SchemaLedgerError
from schemaledger.generator import generate_scripts
from schemaledger.migrations import Ledger, Migrator, ScriptStore
from schemaledger.report import format_apply_result, format_history, format_status

logger = logging.getLogger(__name__)

USAGE = """
Schema Ledger Migration Utility

Usage:
  schemaledger generate   - Generate migration files from schema changes
  schemaledger apply      - Apply pending migrations
  schemaledger status     - Show migration status
  schemaledger help       - Show this help message

Options:
  --config PATH           JSON or YAML configuration file
  --migrations-dir DIR    Migration script directory (default: ./migrations)
  --log-level LEVEL       debug, info, warning or error
  --dry-run               apply: run the batch, then roll it back
  --json                  status: print the report as JSON

Environment:
  DATABASE_URL            Connection string for the target database (required)
"""

COMMANDS = ('generate', 'apply', 'status')


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on bad arguments."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f'{self.prog}: error: {message}', file=sys.stderr)
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog='schemaledger', add_help=False)
    parser.add_argument('command', nargs='?', default='help')
    parser.add_argument('-h', '--help', action='store_const', const='help',
                        dest='help')
    parser.add_argument('--config', default=None)
    parser.add_argument('--migrations-dir', default=None)
    parser.add_argument('--log-level', default=None)
    parser.add_argument('--dry-run', action='store_true')
    parser.add_argument('--json', action='store_true')
    return parser


def show_help():
    print(USAGE)


def _print_lines(lines):
    for line in lines:
        print(line)


def _cancel_on_sigterm():
    """Turn SIGTERM into task cancellation so open transactions roll back."""
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except NotImplementedError:
        logger.debug('SIGTERM handler not supported on this platform')


async def cmd_generate(config, options) -> int:
    store = ScriptStore(config.migrations_dir)

    print('Generating migrations...')
    result = await generate_scripts(store, config.generator_command)

    print('Migration files generated successfully:')
    if result.output.strip():
        print(result.output.rstrip())

    if not result.files:
        print('No migration files found. This likely means no schema changes were detected.')
    else:
        print('Migration files:')
        _print_lines(f'- {name}' for name in result.files)
    return 0


async def cmd_apply(migrator: Migrator, options) -> int:
    # Directory and script files are checked before any database I/O
    scripts = migrator.load_scripts(required=True)
    if not scripts:
        print('No migration files found.')
        return 0

    await migrator.database.connect()
    report = await migrator.status(scripts)

    if not report.ledger_exists:
        print('Migrations table does not exist, will be created during migration')
    else:
        print('Migrations table already exists')
        if report.applied:
            print('Migration history:')
            _print_lines(format_history(report.applied))

    print(f'Found {len(scripts)} migration files')
    print('Applying migrations...')

    result = await migrator.executor.apply(report.pending, dry_run=options.dry_run)

    filenames = {script.identifier: script.filename for script in scripts}
    _print_lines(format_apply_result(result, filenames))
    return 0


async def cmd_status(migrator: Migrator, options) -> int:
    print('Checking migration status...')
    scripts = migrator.load_scripts()

    await migrator.database.connect()
    report = await migrator.status(scripts)

    if options.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        _print_lines(format_status(report))
    return 0


async def run_command(command: str, config, options) -> int:
    """Run one database command; returns the exit status."""
    _cancel_on_sigterm()

    if command == 'generate':
        try:
            return await cmd_generate(config, options)
        except SchemaLedgerError as e:
            logger.error('Error generating migrations: %s', e)
            return 1

    database = None
    try:
        database = MigrationDatabase(
            config.database_url,
            statement_timeout=config.statement_timeout,
            lock_timeout=config.lock_timeout,
        )
        migrator = Migrator(
            database,
            ScriptStore(config.migrations_dir),
            Ledger(config.ledger_table, config.ledger_schema),
        )
        if command == 'apply':
            return await cmd_apply(migrator, options)
        return await cmd_status(migrator, options)

    except SchemaLedgerError as e:
        logger.error('Error during %s: %s', command, e)
        return 1

    finally:
        if database is not None:
            await database.close()


def main(argv=None) -> int:
    """CLI entry point; returns the exit status."""
    options = build_parser().parse_args(argv)
    command = options.help or options.command

    if command not in COMMANDS:
        show_help()
        return 0

    try:
        configure_logging(options.log_level or 'info')
        config = load_config(
            options.config,
            migrations_dir=options.migrations_dir,
            log_level=options.log_level,
        )
        configure_logging(config.log_level)
    except ConfigurationError as e:
        print(f'ERROR: {e}', file=sys.stderr)
        return 1

    try:
        return asyncio.run(run_command(command, config, options))
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.error('Interrupted during %s; open transaction rolled back', command)
        return 1
    except Exception:
        logger.exception('Unexpected error during %s', command)
        return 1


def run():
    sys.exit(main())


if __name__ == '__main__':
    run()
