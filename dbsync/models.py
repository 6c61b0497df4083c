"""
Data models for dbsync.
"""

from dataclasses import dataclass, field
from typing import Optional


class ConfigurationError(ValueError):
    """Invalid or unsupported deploy/database configuration."""


def _table_list(fetch, key: str) -> list[str]:
    """A single table name or a list of them; null means none."""
    value = fetch(key, []) or []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"{key} must be a table name or a list of table names")
    return [str(table) for table in value]


@dataclass
class DumpOptions:
    """Table and schema selection applied to a dump/restore."""
    exclude_tables: list[str] = field(default_factory=list)
    exclude_data_tables: list[str] = field(default_factory=list)
    schemas: list[str] = field(default_factory=list)

    @classmethod
    def from_settings(cls, fetch) -> "DumpOptions":
        """Build options from the deploy settings lookup."""
        return cls(
            exclude_tables=_table_list(fetch, 'db_ignore_tables'),
            exclude_data_tables=_table_list(fetch, 'db_ignore_data_tables'),
        )


@dataclass
class CommandResult:
    """Outcome of a local shell command."""
    command: str
    returncode: int
    output: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def __bool__(self) -> bool:
        return self.success
