"""
Exception types for MySQL Backup.
"""

from typing import Optional


class DumpError(Exception):
    """Base class for every failure that aborts a backup run."""


class DumpConnectionError(DumpError):
    def __init__(self, host: str, port: int, database: Optional[str], cause: Exception):
        self.cause = cause
        super().__init__(
            f"Cannot connect to {host}:{port}/{database or 'N/A'}: {cause}"
        )


class OutputFileError(DumpError):
    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot write output file '{path}': {cause}")


class QueryError(DumpError):
    def __init__(self, query: str, cause: Exception):
        self.query = query
        self.cause = cause
        super().__init__(f"Query failed ({query[:200]}): {cause}")
