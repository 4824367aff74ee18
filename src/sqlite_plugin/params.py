"""
Parameter binding for SQLite statements.

Callers hand over a loosely typed mapping of values. Each value is classified
by inspection and bound to the statement in an engine-native form:

    None                      -> NULL
    uuid.UUID                 -> canonical text
    str                       -> canonical text if it parses as a UUID, else verbatim
    int, float, Decimal       -> unchanged (NumPy scalars unwrapped, ints within 64 bits)
    bool                      -> 1 / 0
    datetime.datetime         -> 'YYYY-MM-DD HH:MM:SS' (NaT -> NULL)
    bytes-like                -> BLOB

The order of the checks matters: `bool` is an `int` subclass but is bound as
0/1 only because the numeric rule excludes it explicitly.
"""
import datetime
import decimal
import logging
import re
import uuid
from collections.abc import Mapping
from typing import Any

import numpy as np
import pandas as pd
from sqlite_plugin.exceptions import UnsupportedTypeError
from sqlite_plugin.statement import PARAMETER_PREFIX, Statement

__all__ = [
    'DATETIME_FORMAT',
    'bind',
    'convert_value',
    'format_datetime',
    'parameter_name',
    'parse_uuid',
]

logger = logging.getLogger(__name__)

# fixed for compatibility with rows already stored by earlier versions
DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'

NUMERIC_TYPES = (int, float, decimal.Decimal, np.integer, np.floating)
BINARY_TYPES = (bytes, bytearray, memoryview)

# SQLite INTEGER is a signed 64-bit value
INTEGER_MIN = -2**63
INTEGER_MAX = 2**63 - 1

_HYPHENATED = r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}'
UUID_PATTERN = re.compile(
    rf'[0-9a-f]{{32}}|{_HYPHENATED}|\{{{_HYPHENATED}\}}|\({_HYPHENATED}\)',
    re.IGNORECASE)


def parameter_name(key: str) -> str:
    """Prefix a parameter key with `@` unless it already carries it.
    """
    return key if key.startswith(PARAMETER_PREFIX) else PARAMETER_PREFIX + key


def parse_uuid(value: str) -> uuid.UUID | None:
    """Parse text as a UUID, returning None when it is not one.

    Accepts any casing in the 32-digit compact layout or the 8-4-4-4-12
    hyphenated layout, bare or wrapped in braces or parentheses.
    """
    if UUID_PATTERN.fullmatch(value) is None:
        return None
    return uuid.UUID(value.strip('{}()'))


def format_datetime(value: datetime.datetime) -> str:
    """Render as DATETIME_FORMAT, dropping timezone and fractional seconds.

    Years are padded explicitly; strftime leaves years before 1000 unpadded
    on some platforms.
    """
    return (f'{value.year:04d}-{value.month:02d}-{value.day:02d} '
            f'{value.hour:02d}:{value.minute:02d}:{value.second:02d}')


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool | np.bool_):
        return False
    return isinstance(value, NUMERIC_TYPES)


def _convert_numeric(value: Any) -> int | float | decimal.Decimal:
    if isinstance(value, np.generic):
        return value.item()
    return value


def convert_value(name: str, value: Any) -> Any:
    """Convert a single value to the form bound to the statement.

    Raises UnsupportedTypeError naming `name` when no rule applies.
    """
    if value is None:
        return None

    if isinstance(value, uuid.UUID):
        return str(value)

    if isinstance(value, str):
        parsed = parse_uuid(value)
        if parsed is not None:
            return str(parsed)
        return value

    if _is_numeric(value):
        converted = _convert_numeric(value)
        if isinstance(converted, int) and not INTEGER_MIN <= converted <= INTEGER_MAX:
            raise UnsupportedTypeError(name, type(value))
        return converted

    if isinstance(value, bool | np.bool_):
        return 1 if value else 0

    if isinstance(value, datetime.datetime):
        if value is pd.NaT:
            return None
        return format_datetime(value)

    if isinstance(value, BINARY_TYPES):
        return bytes(value)

    raise UnsupportedTypeError(name, type(value))


def bind(statement: Statement, params: Mapping[str, Any] | None) -> None:
    """Bind every entry of `params` to `statement`.

    Keys `x` and `@x` name the same parameter; the later entry wins. A failure
    leaves the parameters bound so far in place, so the statement must not be
    executed after an error.
    """
    if not params:
        return

    for key, value in params.items():
        name = parameter_name(key)
        if name in statement.parameters:
            logger.debug(f'Parameter {name} supplied more than once, keeping the later value')
        statement.add_with_value(name, convert_value(name, value))

    logger.debug(f'Bound {len(statement)} parameters: {list(statement.parameters)}')
