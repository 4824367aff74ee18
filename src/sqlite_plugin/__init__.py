"""
SQLite plugin: parameterized query and execute against an embedded data file.

Operations can be called either as:
- Plugin dispatch: plugin.execute({'operation': 'query', 'sql': ..., 'params': ...})
- Module functions: sqlite_plugin.query(options, sql, params)

The module functions are facades that build, initialize and call a plugin.
"""
__version__ = '1.1.0'

from collections.abc import Mapping
from typing import Any

from sqlite_plugin.cancellation import CancellationToken
from sqlite_plugin.connection import ConnectionWrapper, connect
from sqlite_plugin.exceptions import CancellationError, EngineError
from sqlite_plugin.exceptions import IntegrityError, OperationalError
from sqlite_plugin.exceptions import PluginError, PluginStateError
from sqlite_plugin.exceptions import UnsupportedOperationError
from sqlite_plugin.exceptions import UnsupportedTypeError, ValidationError
from sqlite_plugin.options import PluginOptions
from sqlite_plugin.plugin import Operation, PluginMetadata, SqlitePlugin
from sqlite_plugin.request import OperationRequest
from sqlite_plugin.result import ResultSet


def _plugin(options: PluginOptions | dict[str, Any] | str,
            config: Any | None = None) -> SqlitePlugin:
    plugin = SqlitePlugin(options, config=config)
    plugin.initialize()
    return plugin


def query(options: PluginOptions | dict[str, Any] | str, sql: str,
          params: Mapping[str, Any] | None = None,
          cancellation: CancellationToken | None = None,
          config: Any | None = None) -> ResultSet:
    """Run a query and return its rows as a ResultSet.
    """
    request = OperationRequest(Operation.QUERY.value, sql, params)
    return _plugin(options, config).execute(request, cancellation)


def execute(options: PluginOptions | dict[str, Any] | str, sql: str,
            params: Mapping[str, Any] | None = None,
            cancellation: CancellationToken | None = None,
            config: Any | None = None) -> None:
    """Run a statement for its side effects.
    """
    request = OperationRequest(Operation.EXECUTE.value, sql, params)
    _plugin(options, config).execute(request, cancellation)


__all__ = [
    'SqlitePlugin',
    'PluginMetadata',
    'PluginOptions',
    'Operation',
    'OperationRequest',
    'ResultSet',
    'CancellationToken',
    'ConnectionWrapper',
    'connect',
    'query',
    'execute',
    'PluginError',
    'ValidationError',
    'UnsupportedTypeError',
    'UnsupportedOperationError',
    'PluginStateError',
    'CancellationError',
    'EngineError',
    'IntegrityError',
    'OperationalError',
]
