"""
Prepared statement and its named parameter collection.
"""
from dataclasses import dataclass, field
from typing import Any

__all__ = [
    'PARAMETER_PREFIX',
    'BoundParameter',
    'Statement',
]

PARAMETER_PREFIX = '@'


@dataclass(frozen=True)
class BoundParameter:
    """A named placeholder resolved to an engine-native value.
    """
    name: str
    value: Any


@dataclass
class Statement:
    """SQL text plus the parameters bound to it, keyed by prefixed name.

    Adding a parameter under a name already present replaces the earlier one.
    """
    sql: str
    parameters: dict[str, BoundParameter] = field(default_factory=dict)

    def add_with_value(self, name: str, value: Any) -> BoundParameter:
        parameter = BoundParameter(name, value)
        self.parameters[name] = parameter
        return parameter

    def bindings(self) -> dict[str, Any]:
        """Parameters in the shape sqlite3 expects for named placeholders.

        sqlite3 looks named parameters up without their leading `@`, `:` or `$`.
        """
        return {name[1:]: p.value for name, p in self.parameters.items()}

    def __len__(self) -> int:
        return len(self.parameters)
