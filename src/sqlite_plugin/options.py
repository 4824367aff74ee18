"""
Plugin configuration.

Options can be given field by field or as an ADO.NET-style connection string
of the kind hosts already store for SQLite data files:

    Data Source=orders.db;Mode=ReadOnly;Default Timeout=5

Values from the connection string override individual fields.
"""
import logging
from dataclasses import dataclass

from libb import ConfigOptions

__all__ = [
    'PluginOptions',
    'parse_connection_string',
    'MEMORY_DATABASE',
]

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ':memory:'

MODES = {
    'readwritecreate': 'ReadWriteCreate',
    'readwrite': 'ReadWrite',
    'readonly': 'ReadOnly',
    'memory': 'Memory',
    }

CACHES = {
    'default': 'Default',
    'shared': 'Shared',
    'private': 'Private',
    }

# connection string keyword -> PluginOptions field
_KEYWORDS = {
    'datasource': 'database',
    'filename': 'database',
    'mode': 'mode',
    'cache': 'cache',
    'defaulttimeout': 'timeout',
    'commandtimeout': 'timeout',
    'foreignkeys': 'foreign_keys',
    }

# accepted for compatibility, no effect since every call opens its own connection
_IGNORED_KEYWORDS = {'pooling'}

_TRUE = {'true', 'yes', '1', 'on'}
_FALSE = {'false', 'no', '0', 'off'}


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def _parse_bool(keyword: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Invalid value for '{keyword}': {value}")


def parse_connection_string(connection_string: str) -> dict:
    """Split a `key=value;` connection string into PluginOptions fields.

    A string without any `=` is taken to be the data source itself.
    """
    connection_string = (connection_string or '').strip()
    if not connection_string:
        return {}
    if '=' not in connection_string:
        return {'database': _unquote(connection_string)}

    parsed = {}
    for part in connection_string.split(';'):
        if not part.strip():
            continue
        if '=' not in part:
            raise ValueError(f'Malformed connection string segment: {part!r}')
        keyword, value = part.split('=', 1)
        normalized = keyword.replace(' ', '').lower()
        value = _unquote(value)
        if normalized in _IGNORED_KEYWORDS:
            logger.debug(f'Ignoring connection string keyword {keyword.strip()!r}')
            continue
        if normalized not in _KEYWORDS:
            raise ValueError(f'Unsupported connection string keyword: {keyword.strip()!r}')
        field = _KEYWORDS[normalized]
        if field == 'timeout':
            parsed[field] = int(value)
        elif field == 'foreign_keys':
            parsed[field] = _parse_bool(keyword.strip(), value)
        else:
            parsed[field] = value
    return parsed


@dataclass
class PluginOptions(ConfigOptions):
    """Options

    modes: `ReadWriteCreate` (default), `ReadWrite`, `ReadOnly`, `Memory`
    caches: `Default`, `Shared`, `Private`

    - timeout: seconds SQLite waits on a locked data file before failing
    - foreign_keys: enable foreign key enforcement on every connection
    """
    connection_string: str = None
    database: str = None
    mode: str = 'ReadWriteCreate'
    cache: str = 'Default'
    timeout: int = 30
    foreign_keys: bool = True

    def __post_init__(self):
        for field, value in parse_connection_string(self.connection_string).items():
            setattr(self, field, value)

        mode = MODES.get(str(self.mode).replace(' ', '').lower())
        if mode is None:
            raise ValueError(f'mode must be one of: {list(MODES.values())}')
        self.mode = mode

        cache = CACHES.get(str(self.cache).replace(' ', '').lower())
        if cache is None:
            raise ValueError(f'cache must be one of: {list(CACHES.values())}')
        self.cache = cache

        if self.database == MEMORY_DATABASE:
            self.mode = 'Memory'
        if not self.database and self.mode != 'Memory':
            raise ValueError('A data source is required unless mode is Memory')
        if self.timeout is None or int(self.timeout) < 0:
            raise ValueError('timeout must be a non-negative number of seconds')
        self.timeout = int(self.timeout)

    @property
    def is_memory(self) -> bool:
        return self.mode == 'Memory'

    @property
    def uses_uri(self) -> bool:
        """Whether the data source needs SQLite URI filename handling.
        """
        if self.is_memory:
            return self.cache == 'Shared' and bool(self.database) and self.database != MEMORY_DATABASE
        return self.mode != 'ReadWriteCreate' or self.cache != 'Default'
