"""
Structured-data result handed back to the host for query operations.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Self

import pandas as pd

__all__ = [
    'ResultSet',
    'RESULT_KIND',
    'RESULT_FORMAT',
]

RESULT_KIND = 'Data'
RESULT_FORMAT = 'Database'


@dataclass(frozen=True)
class ResultSet:
    """Rows returned by a query, tagged for the host.

    `id` is an opaque content handle, generated fresh for every result.
    """
    id: str
    payload: list[dict[str, Any]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    kind: str = RESULT_KIND
    format: str = RESULT_FORMAT

    @classmethod
    def create(cls, payload: list[dict[str, Any]], columns: list[str] | None = None) -> Self:
        if columns is None:
            columns = list(payload[0]) if payload else []
        return cls(id=str(uuid.uuid4()), payload=payload, columns=list(dict.fromkeys(columns)))

    def __len__(self) -> int:
        return len(self.payload)

    def to_dict(self) -> dict[str, Any]:
        """Host wire shape.
        """
        return {
            'id': self.id,
            'kind': self.kind,
            'format': self.format,
            'payload': self.payload,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Payload as a DataFrame, one column per result column.

        Always returns a DataFrame, never None, with columns preserved for
        empty results.
        """
        if not self.payload:
            return pd.DataFrame(columns=self.columns)
        return pd.DataFrame.from_records(self.payload, columns=self.columns)
