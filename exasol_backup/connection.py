"""
Database connection management for Exasol Backup.
"""

import logging
import threading
from typing import Any, Iterator, Optional

import pyexasol


class ExasolConnection:
    """
    Catalog source backed by pyexasol, with context manager support.

    pyexasol connections must not be shared between threads, so each
    worker thread lazily opens its own connection on first use.
    """

    DEFAULT_PORT = 8563
    DEFAULT_TIMEOUT = 10

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        encryption: bool = True,
        timeout: Optional[int] = None
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.encryption = encryption
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._local = threading.local()
        self._connections: list[Any] = []
        self._lock = threading.Lock()

    def __enter__(self) -> "ExasolConnection":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connections."""
        self.disconnect()

    @property
    def dsn(self) -> str:
        return f"{self.host}:{self.port}"

    def connect(self):
        """Return the calling thread's connection, opening it if needed."""
        connection = getattr(self._local, 'connection', None)
        if connection is not None:
            return connection

        try:
            connection = pyexasol.connect(
                dsn=self.dsn,
                user=self.user,
                password=self.password,
                encryption=self.encryption,
                socket_timeout=self.timeout,
                autocommit=False
            )
            logging.info(f"Connected to {self.dsn} as {self.user}")
        except pyexasol.ExaError as e:
            logging.error(f"Failed to connect to database: {e}")
            raise

        self._local.connection = connection
        with self._lock:
            self._connections.append(connection)
        return connection

    def disconnect(self) -> None:
        """Close every connection opened by any thread."""
        with self._lock:
            connections, self._connections = self._connections, []
        for connection in connections:
            if not connection.is_closed:
                connection.close()
        self._local = threading.local()
        if connections:
            logging.debug("Database connection(s) closed")

    def execute_query(self, query: str, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """Execute a query and return its rows keyed by column name."""
        statement = self.connect().execute(query, params)
        try:
            columns = statement.column_names()
            return [dict(zip(columns, row)) for row in statement]
        finally:
            statement.close()

    def iter_rows(self, query: str) -> Iterator[tuple]:
        """Execute a query and stream its rows as tuples."""
        statement = self.connect().execute(query)
        try:
            yield from statement
        finally:
            statement.close()
