"""
Utility functions for dbsync.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .models import DumpOptions


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, log_settings.get('level', 'INFO').upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def format_options_display(options: DumpOptions) -> list[str]:
    """Format dump options for display in dry-run mode."""
    parts = []
    if options.exclude_tables:
        parts.append(f"exclude={','.join(options.exclude_tables)}")
    if options.exclude_data_tables:
        parts.append(f"exclude-data={','.join(options.exclude_data_tables)}")
    if options.schemas:
        parts.append(f"schemas={','.join(options.schemas)}")
    return parts


def print_dry_run_info(command: str, settings, schemas: Optional[list[str]] = None) -> None:
    """Log what a sync would do without connecting anywhere."""
    remote = settings.get_remote_settings()
    target = f"{remote.get('user') + '@' if remote.get('user') else ''}{remote['host']}"

    if command == 'push':
        logging.info(f"Would replace the '{settings.fetch('rails_env')}' database on {target} "
                     f"with the local '{settings.fetch('local_rails_env')}' database")
    else:
        logging.info(f"Would replace the local '{settings.fetch('local_rails_env')}' database "
                     f"with the '{settings.fetch('rails_env')}' database on {target}")

    options = DumpOptions.from_settings(settings.fetch)
    options.schemas = list(schemas or [])
    parts = format_options_display(options)
    logging.info(f"  Dump options: {', '.join(parts) if parts else 'all tables'}")
    logging.info(f"  Compressor: {settings.compressor.name} (.{settings.compressor.file_extension})")
    logging.info(f"  Remote dump cleanup: {'yes' if settings.fetch('db_remote_clean') else 'no'}")
    logging.info(f"  Local file cleanup: {'yes' if settings.fetch('db_local_clean') else 'no'}")
