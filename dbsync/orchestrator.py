"""
Dump -> transfer -> restore sequencing for dbsync.
"""

import logging
from pathlib import Path
from typing import Optional

from .context import DeployContext
from .endpoints import Endpoint, LocalEndpoint, RemoteEndpoint
from .models import CommandResult, ConfigurationError


class DatabaseSync:
    """Main class for database synchronisation operations."""

    local_endpoint_class = LocalEndpoint
    remote_endpoint_class = RemoteEndpoint

    def __init__(self, context: DeployContext):
        self.context = context

    @staticmethod
    def check(local_db: Endpoint, remote_db: Endpoint) -> None:
        """Both sides must belong to the same adapter family."""
        both_mysql = local_db.is_mysql() and remote_db.is_mysql()
        both_postgresql = local_db.is_postgresql() and remote_db.is_postgresql()
        if not (both_mysql or both_postgresql):
            raise ConfigurationError(
                "Only mysql or postgresql on remote and local server is supported"
            )

    def _endpoints(self, schemas: Optional[list[str]] = None) -> tuple[LocalEndpoint, RemoteEndpoint]:
        local_db = self.local_endpoint_class(self.context)
        remote_db = self.remote_endpoint_class(self.context)
        if schemas:
            local_db.schemas = schemas
            remote_db.schemas = schemas
        self.check(local_db, remote_db)
        return local_db, remote_db

    def _dump_and_download(self, remote_db: RemoteEndpoint) -> None:
        """Dump remotely and fetch the file; the remote dump is always cleaned up."""
        try:
            remote_db.dump().download()
        except Exception:
            try:
                remote_db.clean_dump_if_needed()
            except Exception as cleanup_error:
                logging.error(f"Failed to clean up remote dump {remote_db.dump_file_path}: {cleanup_error}")
            raise
        remote_db.clean_dump_if_needed()

    def remote_to_local(self) -> CommandResult:
        """Replace the local database with a copy of the remote one."""
        local_db, remote_db = self._endpoints()
        logging.info(f"Pulling remote database '{remote_db.database}' into local '{local_db.database}'")

        self._dump_and_download(remote_db)
        return local_db.load(remote_db.output_file, self.context.fetch('db_local_clean'))

    def selective_schemas_to_local(self, schemas: Optional[list[str]] = None) -> CommandResult:
        """Like remote_to_local, but only the given PostgreSQL schemas are dumped and reset."""
        local_db, remote_db = self._endpoints(schemas)
        logging.info(
            f"Pulling schemas {', '.join(remote_db.schemas) or '(all)'} of remote database "
            f"'{remote_db.database}' into local '{local_db.database}'"
        )

        self._dump_and_download(remote_db)
        return local_db.load(remote_db.output_file, self.context.fetch('db_local_clean'))

    def local_to_remote(self) -> CommandResult:
        """
        Replace the remote database with a copy of the local one.

        Nothing is uploaded or restored remotely when the local dump fails;
        the failed dump result is returned instead.
        """
        local_db, remote_db = self._endpoints()
        logging.info(f"Pushing local database '{local_db.database}' to remote '{remote_db.database}'")

        result = local_db.dump().dump_result
        if not result.success:
            logging.error(f"Local dump of '{local_db.database}' failed, remote database left untouched")
            return result

        local_db.upload()
        remote_db.load(local_db.output_file, self.context.fetch('db_local_clean'))
        if self.context.fetch('db_local_clean'):
            Path(local_db.output_file).unlink()
        return result
