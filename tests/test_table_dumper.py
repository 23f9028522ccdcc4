"""
Unit tests for table_dumper.py
"""

import io
import logging
import math
from unittest import mock

import pytest

from conftest import tuples_per_insert
from mysql_backup.errors import QueryError
from mysql_backup.models import DumpSettings, TableStats
from mysql_backup.table_dumper import TableDumper


def user_rows(count):
    return [(i, f"user{i}") for i in range(1, count + 1)]


class TestTableDumper:
    """Tests for TableDumper class."""

    def test_init(self):
        """Test TableDumper initialization."""
        conn = mock.MagicMock()
        settings = DumpSettings(chunk_size=250)
        dumper = TableDumper(conn, settings)
        assert dumper.connection == conn
        assert dumper.settings == settings
        assert dumper.chunk_size == 250

    def test_default_chunk_size(self):
        dumper = TableDumper(mock.MagicMock(), DumpSettings())
        assert dumper.chunk_size == 1000


class TestDumpTable:
    """Tests for dump_table method."""

    def test_users_2500_rows_in_three_inserts(self, make_connection):
        """2500 rows with chunk size 1000 give inserts of 1000, 1000 and 500 rows."""
        conn = make_connection({"users": (["id", "name"], user_rows(2500))})
        out = io.StringIO()

        stats = TableDumper(conn, DumpSettings(chunk_size=1000)).dump_table("users", out)

        assert tuples_per_insert(out.getvalue()) == [1000, 1000, 500]
        assert stats.insert_statements == 3
        assert stats.rows_dumped == 2500
        assert stats.row_count == 2500

    @pytest.mark.parametrize("row_count,chunk_size", [(1, 1000), (999, 1000), (1000, 1000), (1001, 1000), (7, 3)])
    def test_insert_count_is_ceiling(self, make_connection, row_count, chunk_size):
        conn = make_connection({"t": (["id", "name"], user_rows(row_count))})
        out = io.StringIO()

        TableDumper(conn, DumpSettings(chunk_size=chunk_size)).dump_table("t", out)

        counts = tuples_per_insert(out.getvalue())
        assert len(counts) == math.ceil(row_count / chunk_size)
        assert sum(counts) == row_count

    def test_empty_table_has_schema_but_no_inserts(self, make_connection):
        conn = make_connection({"empty": (["id"], [])})
        out = io.StringIO()

        stats = TableDumper(conn, DumpSettings()).dump_table("empty", out)

        output = out.getvalue()
        assert "DROP TABLE IF EXISTS `empty`;\n" in output
        assert "CREATE TABLE `empty`" in output
        assert "INSERT INTO" not in output
        assert stats.rows_dumped == 0
        conn.get_table_columns.assert_not_called()
        conn.fetch_chunk.assert_not_called()

    def test_schema_written_before_data(self, make_connection):
        conn = make_connection({"users": (["id", "name"], user_rows(2))})
        out = io.StringIO()

        TableDumper(conn, DumpSettings()).dump_table("users", out)

        assert out.getvalue() == (
            "DROP TABLE IF EXISTS `users`;\n"
            "CREATE TABLE `users` (\n  `id` int NOT NULL\n);\n\n"
            "INSERT INTO `users` (`id`, `name`) VALUES\n"
            "(1, 'user1'),\n"
            "(2, 'user2');\n\n"
        )

    def test_stale_row_count_stops_on_empty_chunk(self, make_connection):
        """Pagination ends early when a window comes back empty."""
        conn = make_connection(
            {"users": (["id", "name"], user_rows(1500))},
            row_counts={"users": 3000},
        )
        out = io.StringIO()

        stats = TableDumper(conn, DumpSettings(chunk_size=1000)).dump_table("users", out)

        assert tuples_per_insert(out.getvalue()) == [1000, 500]
        assert stats.rows_dumped == 1500
        assert conn.fetch_chunk.call_count == 3

    def test_row_count_read_once(self, make_connection):
        conn = make_connection({"users": (["id", "name"], user_rows(30))})
        TableDumper(conn, DumpSettings(chunk_size=10)).dump_table("users", io.StringIO())

        conn.get_row_count.assert_called_once_with("users")
        conn.get_table_columns.assert_called_once_with("users")

    def test_offsets_advance_by_chunk_size(self, make_connection):
        conn = make_connection({"users": (["id", "name"], user_rows(25))})
        TableDumper(
            conn, DumpSettings(chunk_size=10, order_by_primary_key=False)
        ).dump_table("users", io.StringIO())

        offsets = [c.args[3] for c in conn.fetch_chunk.call_args_list]
        limits = {c.args[2] for c in conn.fetch_chunk.call_args_list}
        assert offsets == [0, 10, 20]
        assert limits == {10}

    def test_null_renders_unquoted(self, make_connection):
        conn = make_connection({"t": (["id", "a", "b"], [(1, None, "NULL")])})
        out = io.StringIO()

        TableDumper(conn, DumpSettings()).dump_table("t", out)

        assert "(1, NULL, 'NULL')" in out.getvalue()

    def test_values_escaped_by_driver(self, make_connection):
        conn = make_connection({"t": (["id", "name"], [(1, "O'Brien\nJr")])})
        out = io.StringIO()

        TableDumper(conn, DumpSettings()).dump_table("t", out)

        assert "(1, 'O\\'Brien\\nJr')" in out.getvalue()

    def test_identifiers_always_quoted(self, make_connection):
        conn = make_connection({"order items": (["id", "we`ird"], [(1, "x")])})
        out = io.StringIO()

        TableDumper(conn, DumpSettings()).dump_table("order items", out)

        output = out.getvalue()
        assert "DROP TABLE IF EXISTS `order items`;" in output
        assert "INSERT INTO `order items` (`id`, `we``ird`) VALUES" in output

    def test_query_error_propagates(self, make_connection):
        conn = make_connection({"users": (["id", "name"], user_rows(5))})
        conn.fetch_chunk.side_effect = QueryError("SELECT ...", Exception("Table gone"))

        with pytest.raises(QueryError):
            TableDumper(conn, DumpSettings()).dump_table("users", io.StringIO())

    def test_returns_table_stats(self, make_connection):
        conn = make_connection({"users": (["id", "name"], user_rows(3))})
        stats = TableDumper(conn, DumpSettings()).dump_table("users", io.StringIO())

        assert isinstance(stats, TableStats)
        assert stats.table == "users"


class TestPaginationOrder:
    """Tests for ordering of paginated windows."""

    def test_orders_by_primary_key(self, make_connection):
        conn = make_connection(
            {"users": (["id", "name"], user_rows(3))},
            primary_keys={"users": ["id"]},
        )
        TableDumper(conn, DumpSettings()).dump_table("users", io.StringIO())

        assert conn.fetch_chunk.call_args.args[4] == ["id"]

    def test_composite_primary_key(self, make_connection):
        conn = make_connection(
            {"links": (["a", "b", "note"], [(1, 2, "x")])},
            primary_keys={"links": ["a", "b"]},
        )
        TableDumper(conn, DumpSettings()).dump_table("links", io.StringIO())

        assert conn.fetch_chunk.call_args.args[4] == ["a", "b"]

    def test_no_primary_key_warns(self, make_connection, caplog):
        conn = make_connection({"logs": (["msg"], [("hello",)])})

        with caplog.at_level(logging.WARNING):
            TableDumper(conn, DumpSettings()).dump_table("logs", io.StringIO())

        assert conn.fetch_chunk.call_args.args[4] is None
        assert "no primary key" in caplog.text

    def test_ordering_disabled(self, make_connection):
        conn = make_connection(
            {"users": (["id", "name"], user_rows(3))},
            primary_keys={"users": ["id"]},
        )
        TableDumper(
            conn, DumpSettings(order_by_primary_key=False)
        ).dump_table("users", io.StringIO())

        assert conn.fetch_chunk.call_args.args[4] is None
