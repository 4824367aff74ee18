"""
Inbound request parsing and validation.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Self

from sqlite_plugin.exceptions import ValidationError

__all__ = [
    'OperationRequest',
    'normalize',
]


@dataclass(frozen=True)
class OperationRequest:
    """One invocation's input as sent by the host.
    """
    operation: str = ''
    sql: str | None = None
    params: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        """Build a request from host input, matching keys case-insensitively.

        Unknown keys are ignored.
        """
        lowered = {str(k).lower(): v for k, v in data.items()}
        return cls(
            operation=lowered.get('operation') or '',
            sql=lowered.get('sql'),
            params=lowered.get('params'),
        )


def normalize(request: OperationRequest) -> tuple[str, Mapping[str, Any]]:
    """Extract the SQL text and parameter map from a request.

    Raises ValidationError when the SQL text is missing or empty. Parameters
    that are absent or not a mapping are treated as an empty set.
    """
    sql = request.sql
    if not isinstance(sql, str) or not sql:
        raise ValidationError("Missing 'sql' parameter.")

    params = request.params
    if not isinstance(params, Mapping):
        params = {}

    return sql, MappingProxyType(dict(params))
