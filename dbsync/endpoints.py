"""
The two sides of a sync: the deployed application and the local checkout.
"""

import logging
import os
import shlex
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from .compressors import get_compressor
from .config import parse_database_config
from .context import DeployContext
from .models import CommandResult, DumpOptions
from .profiles import ConnectionProfile, create_profile

TIMESTAMP_FORMAT = '%Y-%m-%d-%H%M%S'


class Endpoint:
    """Shared state of one side: profile, dump options and artifact name."""

    def __init__(self, context: DeployContext, now: Callable[[], datetime] = datetime.now):
        self.context = context
        self.config = self._load_config()
        self.profile: ConnectionProfile = create_profile(self.config)
        self.compressor = get_compressor(context.fetch('compressor'))
        self.options = DumpOptions.from_settings(context.fetch)
        # Fixed for the lifetime of the endpoint.
        self.output_file = (
            f"db/{self.database}_{now().strftime(TIMESTAMP_FORMAT)}"
            f".sql.{self.compressor.file_extension}"
        )

    def _load_config(self) -> dict:
        raise NotImplementedError

    @property
    def database(self) -> Optional[str]:
        return self.profile.database

    @property
    def schemas(self) -> list[str]:
        return self.options.schemas

    @schemas.setter
    def schemas(self, schemas) -> None:
        self.options.schemas = list(schemas or [])

    def is_mysql(self) -> bool:
        return self.profile.is_mysql()

    def is_postgresql(self) -> bool:
        return self.profile.is_postgresql()

    def dump_command(self) -> str:
        return self.profile.dump_command(self.options)

    def restore_command(self, file: str) -> str:
        return self.profile.restore_command(file, self.options)

    def unzipped_path(self, file: str) -> str:
        """Path of `file` once the compressor has unpacked it."""
        suffix = f".{self.compressor.file_extension}"
        name = os.path.basename(file)
        if name.endswith(suffix):
            name = name[:-len(suffix)]
        return os.path.join(os.path.dirname(file), name)


class RemoteEndpoint(Endpoint):
    """Database of the deployed release, reached through the deploy context."""

    def _load_config(self) -> dict:
        config_file = f"{self.context.current_path}/{self.context.fetch('database_config')}"
        content = self.context.capture(f"cat {config_file}")
        return parse_database_config(content, self.context.fetch('rails_env'), source=config_file)

    @property
    def dump_file_path(self) -> str:
        return f"{self.context.current_path}/{self.output_file}"

    def dump(self) -> "RemoteEndpoint":
        self.context.execute(
            f"cd {self.context.current_path} && {self.dump_command()} | "
            f"{self.compressor.compress('-', self.output_file)}"
        )
        return self

    def download(self, local_file: Optional[str] = None) -> None:
        self.context.download(self.dump_file_path, local_file or self.output_file)

    def clean_dump_if_needed(self) -> None:
        if self.context.fetch('db_remote_clean'):
            self.context.execute(f"rm -f {self.dump_file_path}")
        else:
            self.context.info(
                f"leaving {self.dump_file_path} on the server "
                "(set db_remote_clean: true in the deploy settings to remove)"
            )

    def load(self, file: str, cleanup: bool) -> None:
        """Unpack an uploaded dump and restore it; `cleanup` removes the unpacked SQL."""
        unzip_file = self.unzipped_path(file)
        self.context.execute(
            f"cd {self.context.current_path} && {self.compressor.decompress(file)} && "
            f"RAILS_ENV={self.context.fetch('rails_env')} && {self.restore_command(unzip_file)}"
        )
        if cleanup:
            self.context.execute(f"cd {self.context.current_path} && rm {unzip_file}")


class LocalEndpoint(Endpoint):
    """Database of the local checkout; commands run in a local shell."""

    dump_result: Optional[CommandResult] = None

    def _load_config(self) -> dict:
        config_file = self.context.fetch('database_config')
        content = Path(config_file).read_text()
        return parse_database_config(content, self.context.fetch('local_rails_env'), source=config_file)

    def dump(self) -> "LocalEndpoint":
        """Dump and compress locally; the outcome is kept in `dump_result`."""
        Path(self.output_file).parent.mkdir(parents=True, exist_ok=True)
        self.dump_result = self.execute(f"{self.dump_command()} | {self.compressor.compress('-', self.output_file)}")
        return self

    def upload(self) -> None:
        remote_file = f"{self.context.current_path}/{self.output_file}"
        self.context.upload(self.output_file, remote_file)

    def load(self, file: str, cleanup: bool) -> CommandResult:
        """
        Unpack a downloaded dump and restore it into the local database.

        Returns the result of the restore; the unpacked SQL file is only
        removed when the restore succeeded and `cleanup` is set.
        """
        unzip_file = self.unzipped_path(file)
        command = f"{self.compressor.decompress(file)} && {self.restore_command(unzip_file)}"
        self.context.info(f"executing local: {command}")

        result = self.execute(command)
        if not result.success:
            return result

        if cleanup:
            self.context.info(f"removing {unzip_file}")
            Path(unzip_file).unlink(missing_ok=True)
        else:
            self.context.info(f"leaving {unzip_file} (set db_local_clean: true to remove)")
        self.context.info("Completed database import")
        return result

    def remove_sensitive_data(self, schemas: Union[str, list[str]]) -> None:
        """Run the redaction task once per schema, e.g. ['nl', 'us']."""
        if not isinstance(schemas, (list, tuple)):
            schemas = [schemas]

        task = self.context.fetch('sensitive_data_task')
        task = shlex.split(task) if isinstance(task, str) else list(task)
        self.context.info("Local database: removing sensitive data, hold tight...")
        for schema in schemas:
            args = [part.format(schema=schema) for part in task]
            try:
                completed = subprocess.run(args, capture_output=True, text=True)
            except OSError as e:
                self.context.error(f"Could not start {' '.join(args)}: {e}")
                continue

            if completed.stdout:
                self.context.info(completed.stdout.rstrip())
            if completed.returncode != 0:
                self.context.error(
                    f"Removing sensitive data for schema '{schema}' failed "
                    f"(exit {completed.returncode}): {completed.stderr.strip()}"
                )

    def execute(self, command: str) -> CommandResult:
        logging.debug(f"local: {command}")
        completed = subprocess.run(command, shell=True)
        result = CommandResult(command=command, returncode=completed.returncode)
        if not result.success:
            self.context.error(f"Failed to execute the local command: {command}")
        return result
