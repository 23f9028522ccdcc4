"""
Data models for MySQL Backup.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


# Column types the driver turns into None when they hold a zero date
TEMPORAL_TYPES = ('date', 'datetime', 'timestamp')


@dataclass
class ConnectionSettings:
    """Where and how to connect to the source database."""
    host: str
    port: int
    database: str
    user: str
    password: str

    @classmethod
    def from_config(cls, section: dict[str, Any]) -> "ConnectionSettings":
        """Build settings from the resolved 'connection' config section."""
        port = section.get('port') or 3306
        return cls(
            host=section.get('host', ''),
            port=int(port),
            database=section.get('database', ''),
            user=section.get('user', ''),
            password=section.get('password', ''),
        )


@dataclass
class DumpSettings:
    """Settings that shape the generated dump."""
    chunk_size: int = 1000
    order_by_primary_key: bool = True
    consistent_snapshot: bool = True
    exclude_tables: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    @classmethod
    def from_config(cls, section: dict[str, Any]) -> "DumpSettings":
        settings = {}
        for key in ['chunk_size', 'order_by_primary_key', 'consistent_snapshot', 'exclude_tables']:
            if section.get(key) is not None:
                settings[key] = section[key]
        if 'chunk_size' in settings:
            settings['chunk_size'] = int(settings['chunk_size'])
        # Values resolved from ${VAR} references arrive as strings
        for key in ['order_by_primary_key', 'consistent_snapshot']:
            if isinstance(settings.get(key), str):
                settings[key] = settings[key].strip().lower() in ('1', 'true', 'yes', 'on')
        return cls(**settings)


@dataclass
class ColumnInfo:
    """Database column metadata, as reported by SHOW COLUMNS."""
    name: str
    type: str
    nullable: str
    key: str
    default: Any
    extra: str

    @property
    def is_primary_key(self) -> bool:
        return self.key == 'PRI'

    @property
    def is_temporal(self) -> bool:
        """DATE, DATETIME or TIMESTAMP, which may hold zero dates."""
        return self.type.split('(')[0].strip().lower() in TEMPORAL_TYPES


@dataclass
class TableStats:
    """Statistics for a single table dump."""
    table: str
    row_count: int = 0
    rows_dumped: int = 0
    insert_statements: int = 0


@dataclass
class BackupResult:
    """Outcome of a completed backup run."""
    path: Path
    size_bytes: int = 0
    tables: list[TableStats] = field(default_factory=list)
    excluded_tables: list[str] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return sum(t.rows_dumped for t in self.tables)

    def get_table(self, name: str) -> Optional[TableStats]:
        for stats in self.tables:
            if stats.table == name:
                return stats
        return None
