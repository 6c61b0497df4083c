"""
Execution contexts: where remote commands run and how files move.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from fabric import Connection

from .config import ConfigLoader


class DeployContext:
    """
    Settings lookup, logging sinks and remote operations for one sync run.

    Subclasses provide the remote transport. `execute` must raise when the
    remote command fails.
    """

    def __init__(self, settings: ConfigLoader):
        self.settings = settings

    @property
    def current_path(self) -> str:
        return str(self.settings.get_remote_settings()['current_path']).rstrip('/')

    def fetch(self, key: str, default: Optional[Any] = None) -> Any:
        return self.settings.fetch(key, default)

    def execute(self, command: str) -> None:
        raise NotImplementedError

    def capture(self, command: str) -> str:
        raise NotImplementedError

    def upload(self, local_path: str, remote_path: str) -> None:
        raise NotImplementedError

    def download(self, remote_path: str, local_path: str) -> None:
        raise NotImplementedError

    def info(self, message: str) -> None:
        logging.info(message)

    def error(self, message: str) -> None:
        logging.error(message)


class FabricContext(DeployContext):
    """Runs remote commands over SSH with Fabric."""

    DEFAULT_PORT = 22

    def __init__(self, settings: ConfigLoader):
        super().__init__(settings)
        remote = settings.get_remote_settings()
        self.host = remote['host']
        self.user = remote.get('user')
        self.port = remote.get('port', self.DEFAULT_PORT)
        self.connect_kwargs = remote.get('connect_kwargs') or {}
        self.connection = None

    def __enter__(self) -> "FabricContext":
        """Context manager entry - open the SSH connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close the SSH connection."""
        self.disconnect()

    def connect(self) -> None:
        if self.connection is None:
            self.connection = Connection(
                host=self.host,
                user=self.user,
                port=self.port,
                connect_kwargs=self.connect_kwargs,
            )
            logging.debug(f"Opened SSH session to {self.user or ''}@{self.host}:{self.port}")

    def disconnect(self) -> None:
        if self.connection is not None:
            self.connection.close()
            self.connection = None
            logging.debug("SSH connection closed")

    def execute(self, command: str) -> None:
        self.connect()
        logging.debug(f"remote: {command}")
        self.connection.run(command, hide=True)

    def capture(self, command: str) -> str:
        self.connect()
        logging.debug(f"remote (capture): {command}")
        return self.connection.run(command, hide=True).stdout

    def upload(self, local_path: str, remote_path: str) -> None:
        self.connect()
        logging.info(f"Uploading {local_path} to {self.host}:{remote_path}")
        self.connection.put(local_path, remote=remote_path)

    def download(self, remote_path: str, local_path: str) -> None:
        self.connect()
        Path(local_path).parent.mkdir(parents=True, exist_ok=True)
        logging.info(f"Downloading {self.host}:{remote_path} to {local_path}")
        self.connection.get(remote_path, local=local_path)
