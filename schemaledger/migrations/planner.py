"""Compute the ordered list of pending migrations."""

from typing import Iterable, List

from schemaledger.migrations.migration import MigrationScript


def plan(
    scripts: Iterable[MigrationScript],
    applied_ids: Iterable[str],
) -> List[MigrationScript]:
    """
    Scripts not yet applied, in filename order.

    Pure: no I/O, same inputs always give the same plan.

    Example:
        >>> [s.identifier for s in plan(scripts, {'0000', '0001'})]
        ['0002', '0003']
    """
    applied = frozenset(applied_ids)
    return [script for script in sorted(scripts) if script.identifier not in applied]
