"""
dbsync
======
Copy application databases between a deployed release and a local checkout:
- MySQL and PostgreSQL (postgresql, pg, postgis) adapters
- Table exclusion and PostgreSQL data-only exclusion
- Selective PostgreSQL schema restore
- gzip and bzip2 compressed transfers over SSH
"""

from .compressors import COMPRESSORS, Bzip2, Compressor, Gzip, get_compressor
from .config import ConfigLoader, parse_database_config, resolve_env_vars
from .context import DeployContext, FabricContext
from .endpoints import Endpoint, LocalEndpoint, RemoteEndpoint
from .main import main
from .models import CommandResult, ConfigurationError, DumpOptions
from .orchestrator import DatabaseSync
from .profiles import (
    ConnectionProfile,
    MySQLProfile,
    PostgresProfile,
    create_profile,
    is_mysql_adapter,
    is_postgresql_adapter,
)
from .utils import format_options_display, print_dry_run_info, setup_logging

__version__ = "1.0.0"

__all__ = [
    # Main entry point
    "main",
    # Core classes
    "ConfigLoader",
    "DatabaseSync",
    "DeployContext",
    "FabricContext",
    "Endpoint",
    "LocalEndpoint",
    "RemoteEndpoint",
    # Profiles
    "ConnectionProfile",
    "MySQLProfile",
    "PostgresProfile",
    "create_profile",
    "is_mysql_adapter",
    "is_postgresql_adapter",
    # Compressors
    "COMPRESSORS",
    "Compressor",
    "Gzip",
    "Bzip2",
    "get_compressor",
    # Models
    "CommandResult",
    "ConfigurationError",
    "DumpOptions",
    # Utilities
    "format_options_display",
    "parse_database_config",
    "print_dry_run_info",
    "resolve_env_vars",
    "setup_logging",
]
