"""
Command dispatch for the SQLite plugin.

The host constructs a `SqlitePlugin` with its options and logger, calls
`initialize()` once, then sends requests of the form

    {'operation': 'query' | 'execute', 'sql': ..., 'params': {...}}

to `execute()`. A query returns a `ResultSet`; an execute returns None and
reports the affected row count to the logger only.
"""
import contextlib
import enum
import logging
import uuid
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlite_plugin.cancellation import CancellationToken, raise_if_cancelled
from sqlite_plugin.connection import ConnectionWrapper, connect
from sqlite_plugin.cursor import column_names, execute_statement, materialize
from sqlite_plugin.exceptions import CancellationError, EngineError
from sqlite_plugin.exceptions import PluginStateError, UnsupportedOperationError
from sqlite_plugin.exceptions import UnsupportedTypeError
from sqlite_plugin.options import PluginOptions
from sqlite_plugin.params import bind
from sqlite_plugin.request import OperationRequest, normalize
from sqlite_plugin.result import ResultSet
from sqlite_plugin.statement import Statement

from libb import load_options

__all__ = [
    'Operation',
    'PluginMetadata',
    'SqlitePlugin',
]


class Operation(enum.Enum):
    """Operations the plugin accepts.
    """
    QUERY = 'query'
    EXECUTE = 'execute'

    @classmethod
    def parse(cls, name: str) -> 'Operation':
        """Case-insensitive lookup by operation name.
        """
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise UnsupportedOperationError(name) from None


@dataclass(frozen=True)
class PluginMetadata:
    id: uuid.UUID
    name: str
    version: str
    description: str
    category: str = 'Data'
    authors: tuple[str, ...] = ()
    tags: tuple[str, ...] = field(default_factory=tuple)


METADATA = PluginMetadata(
    id=uuid.UUID('6457ab5d-0487-4c06-a313-1ebf789f2b52'),
    name='Sqlite',
    version='1.1.0',
    description='Runs parameterized queries and statements against a SQLite data file.',
    authors=('FlowSynx',),
    tags=('flowSynx', 'sql', 'database', 'data', 'sqlite'),
)


class SqlitePlugin:
    """Query/execute adapter over a single SQLite data file.

    Holds no state between invocations beyond its options and logger: every
    call opens its own connection and closes it before returning.
    """

    def __init__(self, options: PluginOptions | dict[str, Any] | str | None = None,
                 config: Any | None = None, logger: logging.Logger | None = None) -> None:
        self._options_source = options
        self._config = config
        self.logger = logger or logging.getLogger(__name__)
        self.options: PluginOptions | None = None
        self._initialized = False

    @property
    def metadata(self) -> PluginMetadata:
        return METADATA

    @property
    def supported_operations(self) -> tuple[str, ...]:
        return tuple(op.value for op in Operation)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Resolve options. Must be called once before `execute`.
        """
        if self._options_source is None:
            raise ValueError('Plugin options are required')
        options_func = load_options(cls=PluginOptions)(lambda o, c: o)
        self.options = options_func(self._options_source, self._config)
        self._initialized = True
        self.logger.debug(f'Plugin {METADATA.name} v{METADATA.version} initialized for {self.options.database}')

    def execute(self, request: OperationRequest | Mapping[str, Any],
                cancellation: CancellationToken | None = None) -> ResultSet | None:
        """Dispatch one request.

        Raises UnsupportedOperationError for unknown operation names,
        ValidationError for missing SQL, UnsupportedTypeError for parameters
        without a binding rule and CancellationError when `cancellation` is
        triggered. Engine errors propagate unchanged.
        """
        raise_if_cancelled(cancellation)

        if not self._initialized:
            raise PluginStateError(f"Plugin '{METADATA.name}' v{METADATA.version} is not initialized.")

        if not isinstance(request, OperationRequest):
            request = OperationRequest.from_mapping(request)

        operation = Operation.parse(request.operation)
        if operation is Operation.QUERY:
            return self.query(request, cancellation)
        if operation is Operation.EXECUTE:
            self.execute_non_query(request, cancellation)
            return None
        raise UnsupportedOperationError(request.operation)

    def query(self, request: OperationRequest,
              cancellation: CancellationToken | None = None) -> ResultSet:
        """Run a statement that returns rows and materialize them.

        Commits once the rows are drained, so writes made by statements such
        as `INSERT ... RETURNING` persist.
        """
        sql, params = normalize(request)

        with self._open_cursor(sql, params, cancellation) as (cn, cursor):
            payload = materialize(cursor, cancellation)
            columns = column_names(cursor)
            cn.commit()

        self.logger.info(f'Query executed successfully. Rows returned: {len(payload)}.')
        return ResultSet.create(payload, columns)

    def execute_non_query(self, request: OperationRequest,
                          cancellation: CancellationToken | None = None) -> int:
        """Run a statement for its side effects and commit it.

        Returns the affected row count; `execute` does not pass it on.
        """
        sql, params = normalize(request)

        with self._open_cursor(sql, params, cancellation) as (cn, cursor):
            affected = cursor.rowcount
            cn.commit()

        self.logger.info(f'Non-query executed successfully. Rows affected: {affected}.')
        return affected

    @contextlib.contextmanager
    def _open_cursor(self, sql: str, params: Mapping[str, Any],
                     cancellation: CancellationToken | None) -> Iterator[tuple[ConnectionWrapper, Any]]:
        """Bind, connect and execute, yielding the connection and open cursor.

        Cursor and connection are closed on every exit path; uncommitted work
        is rolled back when the connection closes.
        """
        statement = Statement(sql)
        try:
            bind(statement, params)
            raise_if_cancelled(cancellation)
            with connect(self.options) as cn, cn.interruptible(cancellation):
                raise_if_cancelled(cancellation)
                cursor = execute_statement(cn, statement)
                try:
                    yield cn, cursor
                finally:
                    cursor.close()
        except CancellationError:
            self.logger.info('Sqlite operation cancelled by caller.')
            raise
        except UnsupportedTypeError as err:
            self.logger.error(f'Error executing Sqlite sql statement. Error: {err}')
            raise
        except EngineError as err:
            if cancellation is not None and cancellation.cancelled:
                self.logger.info('Sqlite operation cancelled by caller.')
                raise CancellationError('Operation was cancelled.') from err
            self.logger.error(f'Error executing Sqlite sql statement. Error: {err}')
            raise
