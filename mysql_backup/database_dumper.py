"""
Main backup orchestration for MySQL Backup.
"""

import fnmatch
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from .config import ConfigLoader
from .connection import DatabaseConnection
from .errors import OutputFileError
from .models import BackupResult
from .table_dumper import TableDumper
from .utils import default_backup_path


TOOL_NAME = 'MySQL'

PREAMBLE = (
    "SET FOREIGN_KEY_CHECKS=0;\n"
    "SET SQL_MODE='NO_AUTO_VALUE_ON_ZERO';\n"
    "SET AUTOCOMMIT=0;\n"
    "START TRANSACTION;\n\n"
)

EPILOGUE = (
    "SET FOREIGN_KEY_CHECKS=1;\n"
    "COMMIT;\n"
)


class DatabaseDumper:
    """Dumps one database to a single SQL file."""

    def __init__(self, config: ConfigLoader):
        self.config = config
        self.connection_settings = config.get_connection_settings()
        self.dump_settings = config.get_dump_settings()
        self.output_settings = config.get_output_settings()
        self._exclude_patterns = [
            re.compile(fnmatch.translate(pattern))
            for pattern in self.dump_settings.exclude_tables
        ]

    def resolve_output_path(self, output_path: Optional[str] = None) -> Path:
        """Explicit path as given, or a timestamped file in the backup directory."""
        if output_path:
            return Path(output_path)
        return default_backup_path(self.output_settings.get('directory') or '.')

    def run(self, output_path: Optional[str] = None) -> BackupResult:
        """Run the backup and return its result.

        The connection is opened before the output file, so a connection
        failure leaves nothing on disk. Any later failure leaves the partial
        file in place without the closing COMMIT.

        Raises:
            DumpConnectionError: the database cannot be reached.
            OutputFileError: the output file cannot be opened or written.
            QueryError: any query fails during the dump.
        """
        path = self.resolve_output_path(output_path)
        result = BackupResult(path=path)
        settings = self.connection_settings

        with DatabaseConnection.from_settings(settings) as conn:
            if self.dump_settings.consistent_snapshot:
                conn.start_snapshot()

            if not output_path:
                self._ensure_directory(path.parent)
            file_handle = self._open_output_file(path)
            try:
                self._write_dump(conn, file_handle, result)
            except OSError as e:
                raise OutputFileError(str(path), e) from e
            finally:
                file_handle.close()

        result.size_bytes = path.stat().st_size
        logging.info(
            f"Dumped {len(result.tables)} table(s), {result.total_rows} rows "
            f"to {path} ({result.size_bytes} bytes)"
        )
        return result

    def _ensure_directory(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputFileError(str(directory), e) from e

    def _open_output_file(self, path: Path) -> TextIO:
        try:
            return open(path, 'w', encoding='utf-8')
        except OSError as e:
            raise OutputFileError(str(path), e) from e

    def _write_dump(
        self,
        conn: DatabaseConnection,
        file_handle: TextIO,
        result: BackupResult
    ) -> None:
        """Write header, envelope and every table to the open file."""
        self._write_header(file_handle)
        file_handle.write(PREAMBLE)

        tables = self._get_tables_to_dump(conn, result)
        logging.info(
            f"Dumping {len(tables)} table(s) from '{self.connection_settings.database}'"
        )

        dumper = TableDumper(conn, self.dump_settings)
        for table in tables:
            logging.info(f"Backing up table: {table}")
            table_stats = dumper.dump_table(table, file_handle)
            result.tables.append(table_stats)
            logging.info(
                f"  ✓ {table}: {table_stats.rows_dumped} rows "
                f"in {table_stats.insert_statements} insert(s)"
            )

        file_handle.write(EPILOGUE)

    def _write_header(self, file_handle: TextIO) -> None:
        generated = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        file_handle.write(f"-- {TOOL_NAME} Backup\n")
        file_handle.write(f"-- Generated: {generated}\n")
        file_handle.write(f"-- Database: {self.connection_settings.database}\n")
        file_handle.write("-- --------------------------------------------------------\n\n")

    def _get_tables_to_dump(self, conn: DatabaseConnection, result: BackupResult) -> list[str]:
        """All tables in server order, minus those matching exclusion patterns."""
        tables = []
        for table in conn.get_tables():
            if self._is_table_excluded(table):
                result.excluded_tables.append(table)
            else:
                tables.append(table)

        if result.excluded_tables:
            logging.info(
                f"Excluded {len(result.excluded_tables)} table(s) matching exclusion patterns"
            )
        return tables

    def _is_table_excluded(self, table_name: str) -> bool:
        """
        Check if a table matches any ``exclude_tables`` pattern.

        Supports exact names ('users_backup') and fnmatch wildcards
        ('*_old', 'tmp_*', '*_backup_*').
        """
        for pattern, compiled in zip(self.dump_settings.exclude_tables, self._exclude_patterns):
            if compiled.match(table_name):
                logging.debug(f"Table '{table_name}' excluded by pattern '{pattern}'")
                return True
        return False
