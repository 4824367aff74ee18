"""
Plugin-specific exception classes.
"""
import sqlite3

import sqlalchemy.exc


class PluginError(Exception):
    """Base class for all plugin errors.
    """


class ValidationError(PluginError):
    """Error in request validation.
    """


class UnsupportedTypeError(PluginError, TypeError):
    """Parameter value has no binding rule.
    """

    def __init__(self, name: str, value_type: type) -> None:
        self.name = name
        self.value_type = value_type
        super().__init__(f"Unsupported parameter type for '{name}': {value_type.__name__}")


class UnsupportedOperationError(PluginError):
    """Operation name is not one of the supported operations.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Sqlite plugin: Operation '{operation}' is not supported.")


class PluginStateError(PluginError):
    """Plugin used before it was initialized.
    """


class CancellationError(PluginError):
    """Operation withdrawn by the caller.
    """


EngineError = (
    sqlite3.Error,
    sqlite3.Warning,
    sqlalchemy.exc.SQLAlchemyError,
    )

IntegrityError = (
    sqlite3.IntegrityError,
    sqlalchemy.exc.IntegrityError,
    )

OperationalError = (
    sqlite3.OperationalError,
    sqlalchemy.exc.OperationalError,
    )
