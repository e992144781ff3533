"""Shared fixtures: a scripted stand-in for a database session."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import mysql.connector
import pytest


class FakeSession:
    """Records statements and returns scripted rows.

    ``rows`` maps a statement to the rows returned on every call, ``queued``
    maps a statement to a list of row sets returned one per call, and any
    statement in ``failures`` raises ``mysql.connector.Error``.
    """

    def __init__(
        self,
        rows: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        queued: Optional[Dict[str, List[List[Dict[str, Any]]]]] = None,
        failures: Iterable[str] = (),
    ) -> None:
        self.rows = rows or {}
        self.queued = queued or {}
        self.failures = set(failures)
        self.statements: List[str] = []
        self.closed = False

    def _run(self, statement: str) -> None:
        self.statements.append(statement)
        if statement in self.failures:
            raise mysql.connector.Error(f"statement failed: {statement}")

    def query(self, statement: str) -> List[Dict[str, Any]]:
        self._run(statement)
        if self.queued.get(statement):
            return self.queued[statement].pop(0)
        return list(self.rows.get(statement, []))

    def execute(self, statement: str) -> None:
        self._run(statement)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeSession":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def status_rows(values: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Build SHOW STATUS rows from a name -> value mapping."""
    return [{"Variable_name": name, "Value": value} for name, value in values.items()]


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()
