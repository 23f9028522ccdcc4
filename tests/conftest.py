"""
Shared fixtures for MySQL Backup tests.
"""

from unittest import mock

import pytest

from mysql_backup.connection import DatabaseConnection
from mysql_backup.models import ColumnInfo


@pytest.fixture
def make_connection():
    """Factory for a mocked DatabaseConnection backed by in-memory tables.

    ``tables`` maps table name to ``(columns, rows)``. Row windows honour
    LIMIT/OFFSET and values are quoted with the real driver converter.
    """
    quoting = DatabaseConnection("localhost", 3306, "root", "secret")

    def factory(tables, primary_keys=None, row_counts=None):
        primary_keys = primary_keys or {}
        row_counts = row_counts or {}

        conn = mock.MagicMock()
        conn.__enter__.return_value = conn
        conn.__exit__.return_value = False
        conn.get_tables.return_value = list(tables)
        conn.get_create_table.side_effect = (
            lambda t: f"CREATE TABLE `{t}` (\n  `id` int NOT NULL\n)"
        )
        conn.get_row_count.side_effect = lambda t: row_counts.get(t, len(tables[t][1]))
        conn.get_table_columns.side_effect = lambda t: [
            ColumnInfo(
                col, "varchar(255)", "YES",
                "PRI" if col in primary_keys.get(t, ()) else "", None, ""
            )
            for col in tables[t][0]
        ]
        conn.fetch_chunk.side_effect = (
            lambda t, cols, limit, offset, order_by=None: tables[t][1][offset:offset + limit]
        )
        conn.quote_value.side_effect = quoting.quote_value
        return conn

    return factory


def tuples_per_insert(output: str) -> list[int]:
    """Number of value tuples in each INSERT statement, in output order."""
    blocks = output.split("INSERT INTO ")[1:]
    counts = []
    for block in blocks:
        statement = block.split(";\n", 1)[0]
        counts.append(sum(1 for line in statement.splitlines() if line.startswith("(")))
    return counts
