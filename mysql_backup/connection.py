"""
Database connection management for MySQL Backup.
"""

import logging
from typing import Any, Optional

import mysql.connector
from mysql.connector import Error as MySQLError
from mysql.connector.conversion import MySQLConverter

from .errors import DumpConnectionError, QueryError
from .models import ColumnInfo, ConnectionSettings
from .utils import quote_identifier


class DatabaseConnection:
    """Manages the MySQL connection used by a backup run.

    Every query issued here is read-only. Result sets are never buffered by
    the client, so row data streams from the server one chunk at a time.
    """

    DEFAULT_PORT = 3306
    DEFAULT_CHARSET = 'utf8mb4'

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        database: Optional[str] = None
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connection = None
        self.converter = MySQLConverter(self.DEFAULT_CHARSET, True)
        self._in_snapshot = False

    @classmethod
    def from_settings(cls, settings: ConnectionSettings) -> "DatabaseConnection":
        return cls(
            host=settings.host,
            port=settings.port,
            user=settings.user,
            password=settings.password,
            database=settings.database
        )

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.disconnect()

    def connect(self) -> None:
        """Establish database connection."""
        try:
            self.connection = mysql.connector.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.database,
                charset=self.DEFAULT_CHARSET,
                use_unicode=True,
                buffered=False
            )
            logging.info(f"Connected to {self.host}:{self.port}/{self.database or 'N/A'}")
        except MySQLError as e:
            raise DumpConnectionError(self.host, self.port, self.database, e) from e

    def disconnect(self) -> None:
        """End any open snapshot and close the connection."""
        if self.connection and self.connection.is_connected():
            if self._in_snapshot:
                self.end_snapshot()
            self.connection.close()
            logging.debug("Database connection closed")

    def start_snapshot(self) -> None:
        """Open a read-only transaction with a consistent snapshot.

        All later reads on this connection see the database as it was at
        this point, which makes the dump consistent across tables.
        """
        try:
            self.connection.start_transaction(consistent_snapshot=True, readonly=True)
        except MySQLError as e:
            raise QueryError("START TRANSACTION WITH CONSISTENT SNAPSHOT", e) from e
        self._in_snapshot = True
        logging.debug("Started consistent snapshot transaction")

    def end_snapshot(self) -> None:
        """Release the snapshot transaction. Nothing was written, so roll back."""
        self._in_snapshot = False
        try:
            self.connection.rollback()
        except MySQLError as e:
            logging.warning(f"Failed to release snapshot transaction: {e}")
            return
        logging.debug("Released consistent snapshot transaction")

    def execute_query(self, query: str, params: Optional[tuple] = None) -> list[tuple]:
        """Execute a query and return all of its rows."""
        cursor = self.get_cursor()
        try:
            cursor.execute(query, params)
            return cursor.fetchall()
        except MySQLError as e:
            raise QueryError(query, e) from e
        finally:
            try:
                cursor.close()
            except MySQLError as e:
                logging.debug(f"Ignoring error while closing cursor: {e}")

    def get_cursor(self, buffered: bool = False):
        """Get a cursor for streaming large results.

        Args:
            buffered: If False (default), rows are read from the server as they
                     are fetched instead of being loaded into memory up front.
        """
        return self.connection.cursor(buffered=buffered)

    def get_tables(self) -> list[str]:
        """Get list of all tables in the current database, in server order."""
        results = self.execute_query("SHOW TABLES")
        return [row[0] for row in results]

    def get_table_columns(self, table: str) -> list[ColumnInfo]:
        """Get column information for a table, in table order."""
        results = self.execute_query(f"SHOW COLUMNS FROM {quote_identifier(table)}")
        return [
            ColumnInfo(
                name=row[0],
                type=_as_text(row[1]),
                nullable=row[2],
                key=row[3],
                default=row[4],
                extra=row[5]
            )
            for row in results
        ]

    def get_create_table(self, table: str) -> str:
        """Get the server's own CREATE TABLE statement."""
        results = self.execute_query(f"SHOW CREATE TABLE {quote_identifier(table)}")
        return results[0][1]

    def get_row_count(self, table: str) -> int:
        """Get row count for a table."""
        results = self.execute_query(f"SELECT COUNT(*) FROM {quote_identifier(table)}")
        return results[0][0]

    def fetch_chunk(
        self,
        table: str,
        columns: list[ColumnInfo],
        limit: int,
        offset: int,
        order_by: Optional[list[str]] = None
    ) -> list[tuple]:
        """Fetch one window of rows with LIMIT/OFFSET.

        DATE, DATETIME and TIMESTAMP columns are selected as the server's own
        text so zero dates such as '0000-00-00' survive; the driver would
        otherwise hand them back as None.
        """
        quoted_columns = ', '.join(_select_expression(col) for col in columns)
        query = f"SELECT {quoted_columns} FROM {quote_identifier(table)}"
        if order_by:
            query += f" ORDER BY {', '.join(quote_identifier(col) for col in order_by)}"
        query += f" LIMIT {int(limit)} OFFSET {int(offset)}"
        return self.execute_query(query)

    def quote_value(self, value: Any) -> str:
        """Render a Python value as a MySQL literal using the driver's converter."""
        if value is None:
            return 'NULL'
        if isinstance(value, (bytes, bytearray)):
            return f"X'{bytes(value).hex()}'"
        if isinstance(value, (set, frozenset)):
            # SET columns come back as a Python set
            value = ','.join(sorted(value))

        converter = self.converter
        raw = value if isinstance(value, str) else converter.to_mysql(value)
        if isinstance(raw, str):
            raw = raw.encode('utf-8')
        escaped = converter.escape(raw)
        if isinstance(escaped, (bytes, bytearray)):
            escaped = bytes(escaped).replace(b'\x00', b'\\0')
        quoted = converter.quote(escaped)
        if isinstance(quoted, (bytes, bytearray)):
            return bytes(quoted).decode('utf-8')
        return str(quoted)


def _as_text(value: Any) -> str:
    # Some driver versions return SHOW COLUMNS types as bytes
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8')
    return value


def _select_expression(column: ColumnInfo) -> str:
    quoted = quote_identifier(column.name)
    if column.is_temporal:
        return f"CAST({quoted} AS CHAR) AS {quoted}"
    return quoted
