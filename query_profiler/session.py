"""
session
=======

MySQL session helpers.

This module is responsible for opening connections with
``mysql-connector-python`` and exposing them through the two capabilities the
collectors need:

- :meth:`MySQLSession.query`: run a statement and return its rows as mappings
- :meth:`MySQLSession.execute`: run a statement and discard any result

Every profiled query gets its own session (see
:class:`~query_profiler.collectors.TraceCollector`), so sessions are cheap,
short-lived and never shared.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import mysql.connector

from .log import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 600  # 10 minutes, heavy queries included


class ProfilerConnectionError(RuntimeError):
    """Raised when a database session cannot be established."""


@dataclass(frozen=True)
class MySQLTarget:
    """MySQL server and credentials to profile against.

    Parameters
    ----------
    host, port:
        Server address.
    user, password:
        Credentials.
    database:
        Default schema for the session.
    charset:
        Connection character set.
    """

    host: str
    port: int
    user: str
    password: str
    database: str
    charset: str = "utf8mb4"

    def describe(self) -> str:
        """Return a human-readable description for logs/reports (no password)."""
        return f"{self.user}@{self.host}:{self.port}/{self.database} charset={self.charset}"


class MySQLSession:
    """A single connection used for exactly one profiled query."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection

    def query(self, statement: str) -> List[Dict[str, Any]]:
        """Run *statement* and return its rows as column -> value mappings."""
        cursor = self._connection.cursor(dictionary=True, buffered=True)
        try:
            cursor.execute(statement)
            if not cursor.with_rows:
                return []
            return list(cursor.fetchall())
        finally:
            cursor.close()

    def execute(self, statement: str) -> None:
        """Run *statement*, reading and discarding any result set."""
        cursor = self._connection.cursor(buffered=True)
        try:
            cursor.execute(statement)
        finally:
            cursor.close()

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "MySQLSession":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def open_session(target: MySQLTarget, timeout: int | None = None) -> MySQLSession:
    """Open a fresh session on *target*.

    Parameters
    ----------
    target:
        Server and credentials.
    timeout:
        Socket timeout in seconds, the execution time ceiling for every
        statement. Defaults to 600 seconds.

    Returns
    -------
    MySQLSession
        An autocommit session.

    Raises
    ------
    ProfilerConnectionError
        If the connection cannot be established.
    """
    if timeout is None:
        timeout = DEFAULT_TIMEOUT_SECONDS

    try:
        connection = mysql.connector.connect(
            host=target.host,
            port=target.port,
            user=target.user,
            password=target.password,
            database=target.database,
            charset=target.charset,
            connection_timeout=timeout,
            autocommit=True,
        )
    except mysql.connector.Error as e:
        raise ProfilerConnectionError(f"Cannot connect to {target.describe()}: {e}") from e

    logger.debug("Opened session on %s", target.describe())
    return MySQLSession(connection)


def connection_test(target: MySQLTarget, timeout: int | None = None) -> tuple[bool, str]:
    """Perform a lightweight connectivity test.

    Returns
    -------
    tuple[bool, str]
        ``(ok, message)`` where message is the server version/user/schema or
        the connection error.
    """
    try:
        with open_session(target, timeout) as session:
            rows = session.query("SELECT VERSION() AS version, CURRENT_USER() AS user, DATABASE() AS db")
    except ProfilerConnectionError as e:
        return False, str(e)
    except mysql.connector.Error as e:
        return False, f"Connected but test query failed: {e}"

    row = rows[0] if rows else {}
    return True, "\t".join(str(row.get(key, "")) for key in ("version", "user", "db"))
