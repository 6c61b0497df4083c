"""
Connection profiles and dump/restore command construction.

All shell text for database client tools is assembled here. Values from
database.yml (database, schema and table names, host, user) are interpolated
verbatim and only the password is single-quoted, so anything that reaches
this module must come from trusted configuration.
"""

from typing import Any, Optional

from .models import ConfigurationError, DumpOptions

POSTGRESQL_ADAPTERS = ('postgresql', 'pg', 'postgis')


def is_mysql_adapter(adapter: Optional[str]) -> bool:
    """mysql, mysql2, mysql_spatial, ..."""
    return bool(adapter) and str(adapter).startswith('mysql')


def is_postgresql_adapter(adapter: Optional[str]) -> bool:
    """Exact match against POSTGRESQL_ADAPTERS."""
    return adapter in POSTGRESQL_ADAPTERS


class ConnectionProfile:
    """Connection parameters for one database.yml environment."""

    def __init__(
        self,
        adapter: str,
        database: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[Any] = None,
        socket: Optional[str] = None
    ):
        self.adapter = adapter
        self.database = database
        self.username = username
        self.password = password
        self.host = host
        self.port = port
        self.socket = socket

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ConnectionProfile":
        """Build from a database.yml environment section; `user` is accepted for `username`."""
        return cls(
            adapter=config.get('adapter'),
            database=config.get('database'),
            username=config.get('username') or config.get('user'),
            password=config.get('password'),
            host=config.get('host'),
            port=config.get('port'),
            socket=config.get('socket'),
        )

    def is_mysql(self) -> bool:
        """True for any mysql* adapter."""
        return is_mysql_adapter(self.adapter)

    def is_postgresql(self) -> bool:
        """True for postgresql, pg and postgis."""
        return is_postgresql_adapter(self.adapter)

    def credentials(self) -> str:
        """Connection flags shared by the dump and restore tools."""
        raise NotImplementedError

    def dump_options(self, options: DumpOptions) -> str:
        """Dump flags for excluded tables and selected schemas."""
        raise NotImplementedError

    def dump_command(self, options: DumpOptions) -> str:
        """Shell command writing the SQL dump to stdout."""
        raise NotImplementedError

    def restore_command(self, file: str, options: DumpOptions) -> str:
        """Shell command replacing the database contents with `file`."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(adapter={self.adapter!r}, "
            f"database={self.database!r}, host={self.host!r})"
        )


class MySQLProfile(ConnectionProfile):
    """mysql, mysql2 and other mysql* adapters."""

    def credentials(self) -> str:
        """Space-padded -u/-p/-h/-S/-P flags; only the password is quoted."""
        params = ''
        if self.username:
            params += f" -u {self.username} "
        if self.password:
            params += f" -p'{self.password}' "
        if self.host:
            params += f" -h {self.host} "
        if self.socket:
            params += f" -S {self.socket} "
        if self.port:
            params += f" -P {self.port} "
        return params

    def dump_options(self, options: DumpOptions) -> str:
        ignore_tables = ' '.join(
            f"--ignore-table={self.database}.{table}" for table in options.exclude_tables
        )
        # --exclude-table-data has no mysqldump counterpart
        return f"--lock-tables=false {ignore_tables} "

    def dump_command(self, options: DumpOptions) -> str:
        return f"mysqldump {self.credentials()} {self.database} {self.dump_options(options)}"

    def restore_command(self, file: str, options: DumpOptions) -> str:
        """Pipe `file` into mysql; the schema selection does not apply."""
        return f"mysql {self.credentials()} -D {self.database} < {file}"


class PostgresProfile(ConnectionProfile):
    """postgresql, pg and postgis adapters."""

    def credentials(self) -> str:
        """User, host and port flags; the password travels in PGPASSWORD."""
        params = ''
        if self.username:
            params += f" -U {self.username} "
        if self.host:
            params += f" -h {self.host} "
        if self.port:
            params += f" -p {self.port} "
        return params

    def pgpass(self) -> str:
        """PGPASSWORD prefix; psql and friends take no password flag."""
        return f"PGPASSWORD='{self.password}'" if self.password else ''

    def terminate_connections_sql(self) -> str:
        """Kick every other session off the database so it can be dropped."""
        return (
            "SELECT pg_terminate_backend(pg_stat_activity.pid) FROM pg_stat_activity "
            f"WHERE pg_stat_activity.datname = '{self.database}' AND pid <> pg_backend_pid();"
        )

    def dump_options(self, options: DumpOptions) -> str:
        exclude_tables = ' '.join(f"--exclude-table={t}" for t in options.exclude_tables)
        exclude_data = ' '.join(f"--exclude-table-data={t}" for t in options.exclude_data_tables)
        result = f"--no-acl --no-owner {exclude_tables} {exclude_data}"
        if options.schemas:
            result += ''.join(f" -n {schema}" for schema in options.schemas)
        return result

    def dump_command(self, options: DumpOptions) -> str:
        return (
            f"{self.pgpass()} pg_dump {self.credentials()} {self.database} "
            f"{self.dump_options(options)}"
        )

    def restore_command(self, file: str, options: DumpOptions) -> str:
        """Recreate the whole database, or only `options.schemas` when set, then load `file`."""
        pgpass = self.pgpass()
        credentials = self.credentials()
        terminate_sql = self.terminate_connections_sql()
        load = f"{pgpass} psql {credentials} -d {self.database} < {file}"

        if options.schemas:
            # Only the named schemas are reset; the database itself survives.
            reset_schemas = ' '.join(
                f"DROP SCHEMA IF EXISTS {s} CASCADE; CREATE SCHEMA {s};" for s in options.schemas
            )
            return (
                f"{pgpass} psql -v ON_ERROR_STOP=1 -d {self.database} {credentials} "
                f"-c \"{terminate_sql} {reset_schemas}\"; {load}"
            )

        return (
            f"{pgpass} psql -c \"{terminate_sql};\" {credentials}; "
            f"{pgpass} dropdb {credentials} {self.database}; "
            f"{pgpass} createdb {credentials} {self.database}; "
            f"{load}"
        )


def create_profile(config: dict[str, Any]) -> ConnectionProfile:
    """Build the profile matching the configured adapter."""
    adapter = config.get('adapter')
    if is_mysql_adapter(adapter):
        return MySQLProfile.from_config(config)
    if is_postgresql_adapter(adapter):
        return PostgresProfile.from_config(config)
    raise ConfigurationError(
        f"Unsupported database adapter '{adapter}'. "
        f"Expected mysql* or one of: {', '.join(POSTGRESQL_ADAPTERS)}"
    )
