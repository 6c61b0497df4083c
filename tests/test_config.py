"""
Unit tests for config.py
"""

import os
import tempfile
from unittest import mock

import pytest
import yaml

from dbsync.compressors import Bzip2, Gzip
from dbsync.config import ConfigLoader, parse_database_config
from dbsync.models import ConfigurationError


def write_yaml(config):
    with tempfile.NamedTemporaryFile(
        mode='w', suffix='.yaml', delete=False
    ) as f:
        yaml.dump(config, f)
        f.flush()
        return f.name


class TestConfigLoader:
    """Tests for ConfigLoader class."""

    @pytest.fixture
    def sample_config(self):
        """Sample deploy settings."""
        return {
            "remote": {
                "host": "app.example.com",
                "user": "deploy",
                "port": 2222,
                "current_path": "/srv/app/current"
            },
            "rails_env": "staging",
            "compressor": "bzip2",
            "db_ignore_tables": ["sessions", "audits"],
            "db_remote_clean": True,
            "logging": {
                "level": "INFO",
                "file": "./log/dbsync.log"
            }
        }

    @pytest.fixture
    def config_file(self, sample_config):
        """Create a temporary config file."""
        path = write_yaml(sample_config)
        yield path
        os.unlink(path)

    def test_load_config(self, config_file):
        """Test loading a valid config file."""
        loader = ConfigLoader(config_file)
        assert loader.config is not None
        assert isinstance(loader.compressor, Bzip2)

    def test_file_not_found(self):
        """Test that FileNotFoundError is raised for missing file."""
        with pytest.raises(FileNotFoundError):
            ConfigLoader("/nonexistent/path/deploy.yaml")

    def test_fetch_configured_values(self, config_file):
        """Test fetching values present in the file."""
        loader = ConfigLoader(config_file)
        assert loader.fetch("rails_env") == "staging"
        assert loader.fetch("db_ignore_tables") == ["sessions", "audits"]
        assert loader.fetch("db_remote_clean") is True

    def test_fetch_defaults(self, config_file):
        """Test unset keys fall back to defaults."""
        loader = ConfigLoader(config_file)
        assert loader.fetch("local_rails_env") == "development"
        assert loader.fetch("db_local_clean") is False
        assert loader.fetch("db_ignore_data_tables") == []
        assert loader.fetch("database_config") == "config/database.yml"

    def test_fetch_explicit_default(self, config_file):
        """Test an explicit default wins over the built-in one."""
        loader = ConfigLoader(config_file)
        assert loader.fetch("database_config", "conf/db.yml") == "conf/db.yml"
        assert loader.fetch("unknown_key") is None

    def test_get_remote_settings(self, config_file):
        """Test getting the SSH settings."""
        loader = ConfigLoader(config_file)
        remote = loader.get_remote_settings()
        assert remote["host"] == "app.example.com"
        assert remote["port"] == 2222
        assert remote["current_path"] == "/srv/app/current"

    def test_get_remote_settings_missing_host(self):
        """Test a missing remote host is a configuration error."""
        path = write_yaml({"remote": {"current_path": "/srv/app/current"}})
        try:
            loader = ConfigLoader(path)
            with pytest.raises(ConfigurationError) as exc_info:
                loader.get_remote_settings()
            assert "remote.host" in str(exc_info.value)
        finally:
            os.unlink(path)

    def test_get_logging_settings(self, config_file):
        """Test getting logging settings."""
        loader = ConfigLoader(config_file)
        logging = loader.get_logging_settings()
        assert logging["level"] == "INFO"
        assert logging["file"] == "./log/dbsync.log"

    def test_default_compressor(self):
        """Test gzip is used when no compressor is configured."""
        path = write_yaml({"remote": {"host": "h", "current_path": "/srv"}})
        try:
            loader = ConfigLoader(path)
        finally:
            os.unlink(path)
        assert isinstance(loader.compressor, Gzip)
        assert loader.get_logging_settings() == {}

    def test_unknown_compressor_rejected_at_load(self):
        """Test an unknown compressor name fails when the file is loaded."""
        path = write_yaml({"compressor": "rar"})
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                ConfigLoader(path)
        finally:
            os.unlink(path)
        assert "rar" in str(exc_info.value)

    def test_empty_file(self):
        """Test an empty settings file uses defaults everywhere."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            path = f.name
        try:
            loader = ConfigLoader(path)
        finally:
            os.unlink(path)
        assert loader.config == {}
        assert loader.fetch("compressor") == "gzip"


class TestEnvironmentVariables:
    """Tests for environment variable resolution."""

    def test_resolve_env_vars(self):
        """Test environment variables are resolved in settings."""
        path = write_yaml({
            "remote": {"host": "${DEPLOY_HOST}", "current_path": "${APP_ROOT}/current"},
            "db_ignore_tables": ["${NOISY_TABLE}"]
        })
        try:
            with mock.patch.dict(os.environ, {
                "DEPLOY_HOST": "db.example.com",
                "APP_ROOT": "/var/www/app",
                "NOISY_TABLE": "events"
            }):
                loader = ConfigLoader(path)
        finally:
            os.unlink(path)

        remote = loader.get_remote_settings()
        assert remote["host"] == "db.example.com"
        assert remote["current_path"] == "/var/www/app/current"
        assert loader.fetch("db_ignore_tables") == ["events"]

    def test_missing_env_var_becomes_empty(self):
        """Test missing environment variables become empty strings."""
        path = write_yaml({"rails_env": "${DBSYNC_UNSET_ENV}"})
        try:
            with mock.patch.dict(os.environ, {}, clear=True):
                loader = ConfigLoader(path)
        finally:
            os.unlink(path)
        assert loader.fetch("rails_env") == ""


class TestParseDatabaseConfig:
    """Tests for parse_database_config."""

    DATABASE_YML = """
production:
  adapter: postgresql
  database: app_production
  username: app
  password: ${APP_DB_PASSWORD}
  port: ${APP_DB_PORT}
development:
  adapter: postgresql
  database: app_development
"""

    def test_returns_environment_section(self):
        """Test the requested environment is returned."""
        with mock.patch.dict(os.environ, {"APP_DB_PASSWORD": "s3cret", "APP_DB_PORT": "5433"}):
            config = parse_database_config(self.DATABASE_YML, "production")
        assert config["database"] == "app_production"
        assert config["password"] == "s3cret"
        assert config["port"] == 5433

    def test_templating_happens_before_parsing(self):
        """Test substituted values are typed by YAML."""
        with mock.patch.dict(os.environ, {"APP_DB_PORT": "6432"}):
            config = parse_database_config(self.DATABASE_YML, "production")
        assert isinstance(config["port"], int)

    def test_missing_environment(self):
        """Test an unknown environment is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_database_config(self.DATABASE_YML, "staging", source="config/database.yml")
        message = str(exc_info.value)
        assert "staging" in message
        assert "config/database.yml" in message
        assert "development" in message

    def test_empty_document(self):
        """Test an empty document is a configuration error."""
        with pytest.raises(ConfigurationError):
            parse_database_config("", "production")

    def test_invalid_yaml(self):
        """Test malformed YAML is reported as a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_database_config("production: [unclosed", "production")
        assert "Invalid YAML" in str(exc_info.value)

    def test_environment_key_is_stringified(self):
        """Test non-string environment names are looked up as strings."""
        config = parse_database_config("'1':\n  adapter: mysql2\n", 1)
        assert config["adapter"] == "mysql2"
