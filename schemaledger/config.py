#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from schemaledger.errors import ConfigurationError
from schemaledger.migrations.ledger import DEFAULT_LEDGER_TABLE

LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'

DEFAULT_MIGRATIONS_DIR = 'migrations'
DEFAULT_GENERATOR_COMMAND = 'npx drizzle-kit generate:pg'


@dataclass
class MigratorConfig:
    """Settings for one invocation

    Attributes:
        database_url: Connection string (DATABASE_URL)
        migrations_dir: Script directory, resolved against the working directory
        ledger_table: Name of the ledger table
        ledger_schema: Schema of the ledger table (None: database default)
        statement_timeout: Seconds before a statement is aborted
        lock_timeout: Seconds to wait for the batch lock
        generator_command: Command run by 'generate'
        log_level: Logging level name
    """
    database_url: Optional[str] = None
    migrations_dir: Path = Path(DEFAULT_MIGRATIONS_DIR)
    ledger_table: str = DEFAULT_LEDGER_TABLE
    ledger_schema: Optional[str] = None
    statement_timeout: float = 60
    lock_timeout: float = 30
    generator_command: str = DEFAULT_GENERATOR_COMMAND
    log_level: str = 'info'


# Keys accepted in a configuration file
FILE_KEYS = frozenset(f.name for f in fields(MigratorConfig)) - {'database_url'}

# Keys whose values must be strings (paths also accepted); None allowed for OPTIONAL_KEYS
STRING_KEYS = ('migrations_dir', 'ledger_table', 'ledger_schema',
               'generator_command', 'log_level')
OPTIONAL_KEYS = frozenset({'ledger_schema'})

# Handler installed by configure_logging, replaced on reconfiguration
_handler = None


def configure_logging(log_level='info', stream=None):
    """Configure the root logger with a stream handler

    Args:
        log_level: Level name ('debug', 'info', ...) or logging constant
        stream: File-like object (None for stderr)

    Returns:
        Configured root logger
    """
    if isinstance(log_level, str):
        level = getattr(logging, log_level.upper(), None)
        if not isinstance(level, int):
            raise ConfigurationError(f'Unknown log level: {log_level}')
    else:
        level = log_level

    global _handler

    logger = logging.getLogger()
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler(stream)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(level)

    return logger


def read_config_file(config_file) -> Dict[str, Any]:
    """Load a JSON or YAML configuration file

    Format is chosen by extension: .yaml/.yml is YAML, anything else JSON.

    Raises:
        ConfigurationError: If the file is missing, unparseable or has unknown keys
    """
    path = Path(config_file)
    try:
        with open(path, 'r', encoding='utf-8') as fp:
            if path.suffix in ('.yaml', '.yml'):
                conf = yaml.safe_load(fp) or {}
            else:
                conf = json.load(fp)
    except OSError as e:
        raise ConfigurationError(f'Cannot read config file {path}: {e}') from e
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f'Cannot parse config file {path}: {e}') from e

    if not isinstance(conf, dict):
        raise ConfigurationError(f'Config file {path} must contain a mapping')

    unknown = set(conf) - FILE_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unknown config keys in {path}: {', '.join(sorted(unknown))}"
        )
    return conf


def load_config(config_file=None,
                environ: Optional[Mapping[str, str]] = None,
                require_database: bool = True,
                **overrides) -> MigratorConfig:
    """Build the configuration for one invocation

    Precedence (lowest to highest): defaults, config file, environment,
    keyword overrides (CLI flags). None-valued overrides are ignored.

    Args:
        config_file: Optional JSON/YAML file path
        environ: Environment mapping (defaults to os.environ)
        require_database: Fail when DATABASE_URL is missing

    Returns:
        MigratorConfig

    Raises:
        ConfigurationError: If DATABASE_URL is required but unset, or a
            value is invalid
    """
    if environ is None:
        environ = os.environ

    values: Dict[str, Any] = {}
    if config_file:
        values.update(read_config_file(config_file))

    if environ.get('MIGRATIONS_DIR'):
        values['migrations_dir'] = environ['MIGRATIONS_DIR']
    if environ.get('SCHEMALEDGER_LOG_LEVEL'):
        values['log_level'] = environ['SCHEMALEDGER_LOG_LEVEL']

    values.update({k: v for k, v in overrides.items() if v is not None})
    values['database_url'] = environ.get('DATABASE_URL') or None

    if require_database and not values['database_url']:
        raise ConfigurationError('DATABASE_URL environment variable is not set')

    for name in STRING_KEYS:
        value = values.get(name)
        if value is None and name in OPTIONAL_KEYS:
            continue
        if name in values and not isinstance(value, (str, Path)):
            raise ConfigurationError(f'{name} must be a string, got {value!r}')

    config = replace(MigratorConfig(), **values)
    config.migrations_dir = Path(config.migrations_dir).expanduser()
    if not config.migrations_dir.is_absolute():
        config.migrations_dir = Path.cwd() / config.migrations_dir

    for name in ('statement_timeout', 'lock_timeout'):
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigurationError(f'{name} must be a positive number, got {value!r}')

    if not config.ledger_table:
        raise ConfigurationError('ledger_table must not be empty')

    return config
