"""
Script store for migration file discovery.

This module provides the ScriptStore class which handles:
- Discovery of migration files in the script directory
- Identifier extraction from filenames
- Rejection of duplicate identifiers

Migration files follow the naming convention: <identifier>_<description>.sql
Example: 0000_skinny_maestro.sql, 0001_initial_migration.sql

The identifier is everything before the first separator. Lexicographic
order of the full filename is the application order.
"""

import logging
from pathlib import Path
from typing import Dict, List, Union

from schemaledger.errors import (
    DuplicateIdentifierError,
    ScriptNameError,
    ScriptReadError,
)
from schemaledger.migrations.migration import MigrationScript, ScriptName

logger = logging.getLogger(__name__)

SCRIPT_EXTENSION = '.sql'
IDENTIFIER_SEPARATOR = '_'


def parse_script_name(
    filename: str,
    separator: str = IDENTIFIER_SEPARATOR,
    extension: str = SCRIPT_EXTENSION,
) -> ScriptName:
    """
    Split a migration filename into identifier and description.

    Args:
        filename: Bare filename (no directory part)
        separator: Character separating identifier from description
        extension: Expected script extension

    Returns:
        ScriptName(identifier, description)

    Raises:
        ScriptNameError: If the extension is wrong or the identifier is empty

    Example:
        >>> parse_script_name('0002_add_approval_system.sql')
        ScriptName(identifier='0002', description='add_approval_system')
        >>> parse_script_name('20250517.sql')
        ScriptName(identifier='20250517', description='')
    """
    if not filename.endswith(extension):
        raise ScriptNameError(filename, f"expected '{extension}' extension")

    stem = filename[:-len(extension)]
    identifier, _, description = stem.partition(separator)
    identifier = identifier.strip()

    if not identifier:
        raise ScriptNameError(
            filename, f"no identifier before '{separator}'"
        )

    return ScriptName(identifier, description)


class ScriptStore:
    """
    Reads migration scripts from a directory in deterministic order.

    Pure read: never writes to the directory.

    Example:
        >>> store = ScriptStore(Path('migrations'))
        >>> store.list_scripts()
        [<MigrationScript(0000, 0000_skinny_maestro.sql)>, ...]
    """

    def __init__(
        self,
        directory: Union[str, Path],
        extension: str = SCRIPT_EXTENSION,
        separator: str = IDENTIFIER_SEPARATOR,
    ):
        self.directory = Path(directory)
        self.extension = extension
        self.separator = separator

    def exists(self) -> bool:
        """Whether the script directory exists."""
        return self.directory.is_dir()

    def list_filenames(self) -> List[str]:
        """
        Return sorted script filenames without reading their bodies.

        Returns an empty list if the directory is absent.
        """
        if not self.exists():
            return []

        return sorted(
            path.name for path in self.directory.iterdir()
            if path.is_file() and path.name.endswith(self.extension)
        )

    def list_scripts(self) -> List[MigrationScript]:
        """
        Discover all migration scripts.

        Returns:
            MigrationScript objects sorted by filename ascending.
            Empty if the directory is absent or has no script files.

        Raises:
            ScriptNameError: If a filename has no identifier
            DuplicateIdentifierError: If two files share an identifier
            ScriptReadError: If a script file is unreadable or not UTF-8
        """
        if not self.exists():
            logger.debug('No migrations directory at %s', self.directory)
            return []

        scripts = []
        seen: Dict[str, str] = {}

        for filename in self.list_filenames():
            name = parse_script_name(filename, self.separator, self.extension)

            if name.identifier in seen:
                raise DuplicateIdentifierError(
                    name.identifier, [seen[name.identifier], filename]
                )
            seen[name.identifier] = filename

            try:
                body = (self.directory / filename).read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                raise ScriptReadError(filename, e) from e

            script = MigrationScript(
                identifier=name.identifier,
                filename=filename,
                body=body,
                description=name.description,
            )
            scripts.append(script)
            logger.debug('Discovered migration: %r', script)

        return sorted(scripts)

    def list_directory(self) -> List[str]:
        """All entries in the directory, sorted (used after generate)."""
        if not self.exists():
            return []
        return sorted(path.name for path in self.directory.iterdir())
