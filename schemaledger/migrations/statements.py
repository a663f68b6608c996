"""
Split migration script bodies into executable statements.

Drivers behind SQLAlchemy (asyncpg prepared statements, sqlite3) run one
statement per call, so a script body is split before execution. Generated
scripts separate statements with a breakpoint marker; hand-written ones
rely on semicolons. sqlparse keeps quoted and dollar-quoted strings
(``DO $$ ... $$``) intact while splitting.
"""

from typing import List

import sqlparse
from sqlparse.tokens import Comment, Punctuation

STATEMENT_BREAKPOINT = '--> statement-breakpoint'


def _is_executable(statement: str) -> bool:
    """False for fragments that contain only comments, whitespace or ';'."""
    for parsed in sqlparse.parse(statement):
        for token in parsed.flatten():
            if token.is_whitespace or token.ttype in Comment:
                continue
            if token.ttype is Punctuation and token.value == ';':
                continue
            return True
    return False


def split_statements(body: str) -> List[str]:
    """
    Split SQL text into individual statements.

    Args:
        body: Raw script body with one or more statements

    Returns:
        Statements in source order, stripped, comment-only fragments removed.
        Statement text itself is not rewritten.

    Example:
        >>> split_statements("CREATE TABLE a (id int);--> statement-breakpoint\\n"
        ...                  "CREATE TABLE b (id int);")
        ['CREATE TABLE a (id int);', 'CREATE TABLE b (id int);']
    """
    statements = []
    for chunk in body.split(STATEMENT_BREAKPOINT):
        for statement in sqlparse.split(chunk):
            statement = statement.strip()
            if statement and _is_executable(statement):
                statements.append(statement)
    return statements
