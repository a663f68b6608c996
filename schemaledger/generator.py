"""
Pass-through to the external migration script generator.

The generator (drizzle-kit by default) diffs the application schema and
writes new script files. This module only runs it and reports what is in
the script directory afterwards. It never touches the database.
"""

import asyncio
import logging
import shlex
from dataclasses import dataclass, field
from typing import List, Sequence, Union

from schemaledger.errors import GenerationError
from schemaledger.migrations.script_store import ScriptStore

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Generator output and the directory listing afterwards."""

    output: str = ''
    files: List[str] = field(default_factory=list)


async def generate_scripts(
    store: ScriptStore,
    command: Union[str, Sequence[str]],
) -> GenerationResult:
    """
    Run the generator command and list the script directory.

    Args:
        store: Script store whose directory receives the files
        command: Shell-style command string or argv list

    Returns:
        GenerationResult with the generator's stdout and directory entries

    Raises:
        GenerationError: If the command cannot start or exits non-zero
    """
    if not store.exists():
        logger.info('Creating migrations directory %s', store.directory)
        store.directory.mkdir(parents=True, exist_ok=True)

    argv = shlex.split(command) if isinstance(command, str) else list(command)
    if not argv:
        raise GenerationError('Generator command is empty')

    logger.info('Running generator: %s', ' '.join(argv))

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise GenerationError(f"Cannot start generator '{argv[0]}': {e}") from e

    stdout, stderr = await process.communicate()
    output = stdout.decode('utf-8', errors='replace')
    errors = stderr.decode('utf-8', errors='replace').strip()

    if process.returncode != 0:
        raise GenerationError(
            f'Generator exited with status {process.returncode}: '
            f'{errors or output.strip()}'
        )

    if errors:
        logger.warning('Generator reported: %s', errors)

    return GenerationResult(output=output, files=store.list_directory())
