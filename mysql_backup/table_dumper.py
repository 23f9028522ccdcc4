"""
Table dumping functionality for MySQL Backup.
"""

import logging
from typing import Optional, TextIO

from .connection import DatabaseConnection
from .models import ColumnInfo, DumpSettings, TableStats
from .utils import quote_identifier


class TableDumper:
    """Writes the DROP/CREATE pair and chunked INSERTs for one table at a time."""

    def __init__(self, connection: DatabaseConnection, settings: DumpSettings):
        self.connection = connection
        self.settings = settings
        self.chunk_size = settings.chunk_size

    def dump_table(self, table: str, file_handle: TextIO) -> TableStats:
        """
        Dump one table's schema and rows to an open file.

        Rows are read with LIMIT/OFFSET windows of ``chunk_size`` rows and
        each window becomes a single multi-row INSERT statement. The row
        count is read once up front; an empty window ends pagination early.

        Args:
            table: Name of the table to dump.
            file_handle: Output file, already open for writing.

        Returns:
            TableStats with dump statistics.
        """
        stats = TableStats(table=table)
        quoted_table = quote_identifier(table)

        file_handle.write(f"DROP TABLE IF EXISTS {quoted_table};\n")
        create_statement = self.connection.get_create_table(table)
        file_handle.write(f"{create_statement};\n\n")

        stats.row_count = self.connection.get_row_count(table)
        if stats.row_count == 0:
            logging.debug(f"Table '{table}' is empty, skipping data")
            return stats

        columns = self.connection.get_table_columns(table)
        order_by = self._pagination_order(table, columns)
        quoted_columns = ', '.join(quote_identifier(col.name) for col in columns)

        offset = 0
        while offset < stats.row_count:
            rows = self.connection.fetch_chunk(
                table, columns, self.chunk_size, offset, order_by
            )
            if not rows:
                logging.debug(f"Table '{table}': no rows at offset {offset}, stopping early")
                break

            self._write_insert_chunk(file_handle, quoted_table, quoted_columns, rows)
            stats.rows_dumped += len(rows)
            stats.insert_statements += 1
            logging.debug(f"Table '{table}': wrote {len(rows)} rows at offset {offset}")

            offset += self.chunk_size

        return stats

    def _pagination_order(self, table: str, columns: list[ColumnInfo]) -> Optional[list[str]]:
        """Primary key columns to order windows by, or None for engine order."""
        if not self.settings.order_by_primary_key:
            return None

        primary_key = [col.name for col in columns if col.is_primary_key]
        if not primary_key:
            logging.warning(
                f"Table '{table}' has no primary key; rows are paginated in engine order"
            )
            return None
        return primary_key

    def _write_insert_chunk(
        self,
        file_handle: TextIO,
        quoted_table: str,
        quoted_columns: str,
        rows: list[tuple]
    ) -> None:
        """Write a chunk of rows as one INSERT statement."""
        value_lines = [
            f"({', '.join(self.connection.quote_value(val) for val in row)})"
            for row in rows
        ]

        file_handle.write(f"INSERT INTO {quoted_table} ({quoted_columns}) VALUES\n")
        file_handle.write(',\n'.join(value_lines))
        file_handle.write(';\n\n')
