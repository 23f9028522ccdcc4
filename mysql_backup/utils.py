"""
Utility functions for MySQL Backup.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional


BACKUP_FILENAME_FORMAT = 'backup_%Y%m%d_%H%M%S.sql'


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, (log_settings.get('level') or 'INFO').upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def quote_identifier(name: str) -> str:
    """Quote a table or column name with backticks, doubling embedded ones."""
    return '`' + str(name).replace('`', '``') + '`'


def default_backup_path(directory: str, now: Optional[datetime] = None) -> Path:
    """Timestamped backup file path inside ``directory``."""
    now = now or datetime.now()
    return Path(directory) / now.strftime(BACKUP_FILENAME_FORMAT)


def format_file_size(size: int) -> str:
    """Human readable size: MB above one mebibyte, KB otherwise."""
    if size > 1024 * 1024:
        return f"{size / (1024 * 1024):.2f} MB"
    return f"{size / 1024:.2f} KB"
