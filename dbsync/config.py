"""
Configuration loading and validation for dbsync.
"""

import os
import re
from typing import Any, Optional

import yaml

from .compressors import get_compressor
from .models import ConfigurationError

ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')


def resolve_env_vars(obj: Any) -> Any:
    """Recursively resolve ${VAR} environment references."""
    if isinstance(obj, str):
        matches = ENV_VAR_PATTERN.findall(obj)
        for match in matches:
            env_value = os.environ.get(match, '')
            obj = obj.replace(f'${{{match}}}', env_value)
        return obj
    elif isinstance(obj, dict):
        return {k: resolve_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [resolve_env_vars(item) for item in obj]
    return obj


def parse_database_config(text: str, environment: str, source: str = 'database.yml') -> dict[str, Any]:
    """
    Parse a database.yml document and return the section for `environment`.

    Environment references are substituted before the YAML is parsed, so a
    password may come from ``password: ${DB_PASSWORD}``.
    """
    try:
        document = yaml.safe_load(ENV_VAR_PATTERN.sub(
            lambda m: os.environ.get(m.group(1), ''), text or ''
        ))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {source}: {e}") from e

    if not isinstance(document, dict):
        raise ConfigurationError(f"{source} does not contain any environments")

    key = str(environment)
    if key not in document or not isinstance(document[key], dict):
        available = ', '.join(str(k) for k in document)
        raise ConfigurationError(
            f"Environment '{key}' not found in {source}. Available: {available}"
        )
    return document[key]


class ConfigLoader:
    """Loads and validates the deploy settings from a YAML file."""

    DEFAULTS: dict[str, Any] = {
        'rails_env': 'production',
        'local_rails_env': 'development',
        'compressor': 'gzip',
        'db_ignore_tables': [],
        'db_ignore_data_tables': [],
        'db_remote_clean': False,
        'db_local_clean': False,
        'database_config': 'config/database.yml',
        'sensitive_data_task': ['bundle', 'exec', 'rake', 'replace_emails_in_database[{schema}]'],
        'skip_data_sync_confirm': False,
    }

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.config = self._load_config()
        self.compressor = get_compressor(self.fetch('compressor'))

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ConfigurationError(f"{self.config_path} must contain a mapping of settings")

        return resolve_env_vars(config)

    def fetch(self, key: str, default: Optional[Any] = None) -> Any:
        """Look up a setting, falling back to the built-in defaults."""
        if key in self.config:
            return self.config[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def get_remote_settings(self) -> dict[str, Any]:
        """Get SSH settings for the deployment target."""
        remote = self.config.get('remote') or {}
        for required in ('host', 'current_path'):
            if not remote.get(required):
                raise ConfigurationError(f"Missing 'remote.{required}' in {self.config_path}")
        return remote

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        return self.config.get('logging', {})
