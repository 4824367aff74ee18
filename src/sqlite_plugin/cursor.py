"""
Statement execution and row materialization on sqlite3 cursors.
"""
import logging
import sqlite3
import time
from collections.abc import Iterator
from functools import wraps
from typing import Any

from sqlite_plugin.cancellation import CancellationToken, raise_if_cancelled
from sqlite_plugin.statement import Statement

__all__ = [
    'execute_statement',
    'column_names',
    'materialize',
    'IterChunk',
]

logger = logging.getLogger(__name__)


def dumpsql(func):
    """Decorator for logging SQL statements and bound parameter names."""
    @wraps(func)
    def wrapper(cn, statement: Statement, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{statement.sql}\nparams: {list(statement.parameters)}')
        try:
            return func(cn, statement, *args, **kwargs)
        except Exception:
            logger.debug(f'Error with statement:\nSQL:\n{statement.sql}\nparams: {list(statement.parameters)}')
            raise
        finally:
            elapsed = time.time() - start
            cn.addcall(elapsed)
            logger.debug(f'Statement time: {elapsed:.4f}s')
    return wrapper


@dumpsql
def execute_statement(cn, statement: Statement) -> sqlite3.Cursor:
    """Execute a bound statement and return its open cursor.

    The caller owns the cursor and must close it. The SQL text must hold a
    single statement; sqlite3 rejects text with more than one.
    """
    cursor = cn.cursor()
    try:
        cursor.execute(statement.sql, statement.bindings())
    except Exception:
        cursor.close()
        raise
    return cursor


def IterChunk(cursor: Any, size: int = 5000,
              cancellation: CancellationToken | None = None) -> Iterator[tuple]:
    """Iterate through cursor results in chunks, checking for cancellation per row."""
    while True:
        raise_if_cancelled(cancellation)
        chunked = cursor.fetchmany(size)
        if not chunked:
            break
        for row in chunked:
            raise_if_cancelled(cancellation)
            yield row


def column_names(cursor: Any) -> list[str]:
    """Column names in result order, duplicates included."""
    if cursor.description is None:
        return []
    return [desc[0] for desc in cursor.description]


def materialize(cursor: Any, cancellation: CancellationToken | None = None) -> list[dict[str, Any]]:
    """Drain the cursor into one record per row.

    Values are passed through exactly as the driver returned them. When a
    column name repeats, the value of the later column wins.
    """
    names = column_names(cursor)
    if not names:
        return []

    records = []
    for row in IterChunk(cursor, cancellation=cancellation):
        record = {}
        for i, name in enumerate(names):
            record[name] = row[i]
        records.append(record)
    return records
