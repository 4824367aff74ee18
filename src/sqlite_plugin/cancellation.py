"""
Cooperative cancellation for plugin invocations.

A `CancellationToken` is shared between the caller and a running invocation.
The caller calls `cancel()` from any thread; the invocation checks the token
before opening its connection, before executing, while SQLite is stepping
the statement (through a progress handler) and on every row advance.
"""
import threading

from sqlite_plugin.exceptions import CancellationError

__all__ = [
    'CancellationToken',
    'raise_if_cancelled',
]


class CancellationToken:
    """Thread-safe cancellation flag.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise CancellationError if the caller withdrew the operation.
        """
        if self._event.is_set():
            raise CancellationError('Operation was cancelled.')

    def __repr__(self) -> str:
        return f'CancellationToken(cancelled={self.cancelled})'


def raise_if_cancelled(token: CancellationToken | None) -> None:
    """Check an optional token.
    """
    if token is not None:
        token.raise_if_cancelled()
