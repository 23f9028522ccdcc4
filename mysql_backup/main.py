#!/usr/bin/env python3
"""
MySQL Backup - CLI Entry Point
==============================
Dumps a MySQL database's schema and data to a single SQL file:
- DROP/CREATE statements taken from the server itself
- Rows exported in chunks of multi-row INSERT statements
- Foreign key checks disabled and the data wrapped in one transaction
  for the restore step
"""

import argparse
import logging
import sys

import yaml

from .config import ConfigLoader
from .database_dumper import DatabaseDumper
from .errors import DumpError
from .utils import format_file_size, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='MySQL Backup - dump a database to a single SQL file'
    )
    parser.add_argument(
        'output',
        nargs='?',
        help='Path of the SQL file to write '
             '(default: <backup dir>/backup_YYYYMMDD_HHMMSS.sql)'
    )
    parser.add_argument(
        '-c', '--config',
        help='Path to a YAML configuration file (optional)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--chunk-size',
        type=int,
        help='Rows per INSERT statement (default: 1000)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be dumped without connecting'
    )
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Load configuration
    try:
        config = ConfigLoader(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file '{args.config}' not found")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}")
        sys.exit(1)

    if args.chunk_size is not None:
        config.config.setdefault('dump', {})['chunk_size'] = args.chunk_size

    # Setup logging
    log_settings = config.get_logging_settings()
    if args.verbose:
        log_settings['level'] = 'DEBUG'
    setup_logging(log_settings)

    try:
        dumper = DatabaseDumper(config)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.dry_run:
        settings = dumper.connection_settings
        logging.info("DRY RUN MODE - No data will be dumped")
        logging.info(
            f"Would dump database: {settings.database} "
            f"from {settings.host}:{settings.port} as {settings.user}"
        )
        logging.info(f"Output file: {dumper.resolve_output_path(args.output)}")
        logging.info(f"Chunk size: {dumper.dump_settings.chunk_size}")
        if dumper.dump_settings.exclude_tables:
            logging.info(f"Excluding: {', '.join(dumper.dump_settings.exclude_tables)}")
        sys.exit(0)

    try:
        result = dumper.run(args.output)
    except DumpError as e:
        logging.debug("Backup failed", exc_info=True)
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Backup completed: {result.path} ({format_file_size(result.size_bytes)})")
    sys.exit(0)


if __name__ == '__main__':
    main()
