"""
MySQL Backup
============
Dump a MySQL database's schema and data to a portable SQL script:
- Server-generated CREATE TABLE statements
- Chunked multi-row INSERTs to bound memory
- Streaming (unbuffered) reads
- Optional consistent snapshot and primary-key ordering
- YAML configuration with environment variable defaults
"""

from .config import DEFAULT_CONFIG, ConfigLoader
from .connection import DatabaseConnection
from .database_dumper import DatabaseDumper
from .errors import DumpConnectionError, DumpError, OutputFileError, QueryError
from .models import (
    BackupResult,
    ColumnInfo,
    ConnectionSettings,
    DumpSettings,
    TableStats,
)
from .table_dumper import TableDumper
from .utils import format_file_size, quote_identifier, setup_logging

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "ConfigLoader",
    "DEFAULT_CONFIG",
    "DatabaseConnection",
    "DatabaseDumper",
    "TableDumper",
    # Errors
    "DumpError",
    "DumpConnectionError",
    "OutputFileError",
    "QueryError",
    # Models
    "BackupResult",
    "ColumnInfo",
    "ConnectionSettings",
    "DumpSettings",
    "TableStats",
    # Utilities
    "format_file_size",
    "quote_identifier",
    "setup_logging",
]
