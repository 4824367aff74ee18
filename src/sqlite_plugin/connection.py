"""
SQLite connection handling with SQLAlchemy.

This module provides:
1. The `connect()` function for opening a connection to the data file
2. The `ConnectionWrapper` class that scopes one connection to one invocation
3. Engine creation and management through a thread-safe registry

Engines never pool: every invocation opens its own connection and closes it
on the way out, so SQLite's file locks are released as soon as a call ends.
"""
import atexit
import contextlib
import decimal
import logging
import sqlite3
import threading
from collections.abc import Callable, Iterator
from typing import Any, Self

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlite_plugin.cancellation import CancellationToken
from sqlite_plugin.options import MEMORY_DATABASE, PluginOptions

from libb import load_options

__all__ = [
    'ConnectionWrapper',
    'connect',
    'configure_connection',
    'create_url_from_options',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()

_URI_MODES = {
    'ReadWriteCreate': 'rwc',
    'ReadWrite': 'rw',
    'ReadOnly': 'ro',
    'Memory': 'memory',
    }

# sqlite virtual machine instructions between cancellation checks
PROGRESS_INTERVAL = 1000


def create_url_from_options(options: PluginOptions,
                            url_creator: Callable[..., sa.URL] = sa.URL.create) -> sa.URL:
    """Convert PluginOptions to SQLAlchemy URL.
    """
    if not options.uses_uri:
        if options.is_memory:
            return url_creator(drivername='sqlite', database=MEMORY_DATABASE)
        return url_creator(drivername='sqlite', database=options.database)

    query = {'mode': _URI_MODES[options.mode], 'uri': 'true'}
    if options.cache != 'Default':
        query['cache'] = options.cache.lower()

    return url_creator(
        drivername='sqlite',
        database=f'file:{options.database}',
        query=query
    )


def get_engine_for_options(options: PluginOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = str(options)

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.database}')
            return _engine_registry[key]

        url = create_url_from_options(options)

        engine_kwargs: dict[str, Any] = {
            'echo': False,
            'poolclass': NullPool,
            'connect_args': {'timeout': options.timeout},
        }
        engine_kwargs.update(kwargs)

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {url}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


class ConnectionWrapper:
    """Wraps a SQLAlchemy connection for the length of one invocation

    This class provides a thin wrapper around SQLAlchemy connection objects that:
    1. Tracks statement execution counts and timing
    2. Closes the connection when the invocation leaves the context manager
    3. Exposes the driver-level sqlite3 connection for cursors and progress handlers
    """

    def __init__(self, sa_connection: sa.engine.Connection | None = None,
                 options: PluginOptions | None = None) -> None:
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine if sa_connection else None
        self.options = options
        self.dbapi_connection = sa_connection.connection if sa_connection else None
        self.calls = 0
        self.time = 0

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()
        logger.debug('Closed connection via context manager')

    @property
    def driver_connection(self) -> sqlite3.Connection:
        """The underlying sqlite3 connection.
        """
        return self.dbapi_connection.driver_connection

    @property
    def closed(self) -> bool:
        return self.sa_connection is None or self.sa_connection.closed

    def cursor(self) -> sqlite3.Cursor:
        """Plain tuple cursor; column names come from `description`.
        """
        return self.dbapi_connection.cursor()

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def commit(self) -> None:
        self.dbapi_connection.commit()

    def close(self) -> None:
        """Close the connection. Uncommitted work is rolled back.
        """
        if self.closed:
            return
        self.sa_connection.close()
        logger.debug(f'Connection closed: {self.calls} statements in {self.time:.2f}s')

    @contextlib.contextmanager
    def interruptible(self, cancellation: CancellationToken | None) -> Iterator[None]:
        """Let a cancellation token interrupt statements running on this connection.

        SQLite calls the progress handler while stepping a statement; a truthy
        return aborts the step with `sqlite3.OperationalError('interrupted')`.
        """
        if cancellation is None:
            yield
            return

        self.driver_connection.set_progress_handler(lambda: cancellation.cancelled, PROGRESS_INTERVAL)
        try:
            yield
        finally:
            self.driver_connection.set_progress_handler(None, PROGRESS_INTERVAL)


def register_type_adapters() -> None:
    """Register Python -> SQLite adapters.

    SQLite has no fixed-point type; decimals are stored as their text form.
    """
    sqlite3.register_adapter(decimal.Decimal, str)


def configure_connection(sa_connection: sa.engine.Connection, options: PluginOptions) -> None:
    """Configure a SQLAlchemy connection with plugin settings.
    """
    register_type_adapters()
    driver_connection = sa_connection.connection.driver_connection
    flag = 'ON' if options.foreign_keys else 'OFF'
    driver_connection.execute(f'PRAGMA foreign_keys = {flag}')


@load_options(cls=PluginOptions)
def connect(options: PluginOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> ConnectionWrapper:
    """Open a connection to the configured data file

    Args:
        options: Can be:
                - PluginOptions object
                - String name of a setting in `config`
                - Dictionary of options
        config: Configuration module (for loading named settings)
        **kw: Additional keyword arguments to override options

    Returns
        ConnectionWrapper owning a freshly opened connection
    """
    engine = get_engine_for_options(options)

    sa_connection = engine.connect()
    try:
        configure_connection(sa_connection, options)
    except Exception:
        sa_connection.close()
        raise

    return ConnectionWrapper(sa_connection, options)
